"""Small image processing library: an in-memory image, grayscale and box-blur filters, and pure-Python PNG, JPEG, BMP, TGA and HDR writers."""

__version__ = "0.1.0"
__all__ = ["deflate", "fileio", "filters", "image", "jpeg", "png", "rasterformats"]