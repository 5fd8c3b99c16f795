# litecv

A small image processing library in plain Python with no third-party
dependencies. Images are held as flat, interleaved 8-bit pixel buffers,
stored left to right and top to bottom, with channels in the order Y, YA,
RGB or RGBA for 1, 2, 3 or 4 channels.

## What it offers

- `litecv.image.Image`: a dataclass with `width`, `height`, `channels`,
  `max_val` and `pixels` (a `bytearray`). If `pixels` is not given, a
  zero-filled buffer of `width * height * channels` bytes is allocated.
  `copy()` returns an independent copy.
- `litecv.filters`:
  - `convert_to_grayscale(image)` converts an RGB or RGBA image to Y or YA
    in place, using `0.3 R + 0.59 G + 0.11 B`. It returns `False` and
    leaves the image alone if it already has one or two channels, and
    `True` after converting it.
  - `apply_box_blur(image, r)` returns a new image whose first three
    channels are box-blurred with radius `r`. Pixels closer than `r` to
    any edge, and any fourth channel, are copied unchanged. A negative
    radius raises `ValueError`; an image with fewer than three channels
    raises `FilterError`.
  - `FilterError` is raised when a filter cannot produce a consistent
    result.
- Encoders, each returning the file contents as `bytes`, with a `write_*`
  counterpart that takes a path first and writes those bytes to it:
  - `litecv.png`: `encode_png(pixels, width, height, channels, stride=0,
    force_filter=-1, compression_level=8, flip_vertically=False)`.
    `stride` 0 means tightly packed rows; `force_filter` 0–4 uses that
    filter on every row, anything else picks the cheapest filter per row.
  - `litecv.jpeg`: `encode_jpeg(pixels, width, height, channels,
    quality=90, flip_vertically=False)`. Baseline JPEG; quality is clamped
    to 1–100, 0 means 90, and qualities of 90 or less subsample chroma.
    Alpha is ignored.
  - `litecv.rasterformats`:
    - `encode_bmp(...)`: grey is expanded to 24-bit RGB; four-channel
      images are written as 32-bit BGRA with a version 4 header.
    - `encode_tga(..., rle=True, flip_vertically=False)`: run-length coded
      unless `rle` is false.
    - `encode_hdr(values, width, height, channels, flip_vertically=False)`:
      Radiance RGBE from linear float values; alpha is dropped and grey is
      replicated across the three colour channels.
  - `litecv.deflate.zlib_compress(data, quality=8)`: the zlib stream used
    inside PNG files, built from fixed-Huffman blocks, falling back to
    stored blocks when that would be smaller.
- `litecv.fileio.save_image(image, path)` writes an `Image` as a PNG file,
  printing a line before and after.

Invalid dimensions, channel counts or too little pixel data raise
`ValueError` rather than producing a broken file.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Example

```python
from litecv.image import Image
from litecv.filters import apply_box_blur, convert_to_grayscale
from litecv.fileio import save_image
from litecv.png import encode_png

image = Image(width=16, height=16, channels=3, pixels=bytes(range(256)) * 3)

blurred = apply_box_blur(image, 2)
save_image(blurred, "image_out.png")

gray = image.copy()
convert_to_grayscale(gray)
save_image(gray, "image_gray.png")

data = encode_png(bytes([255, 0, 0, 0, 255, 0]), width=2, height=1, channels=3)
```

## What it does not do

The package only writes images. It has no reader for PNG, JPEG or any
other file format, so images must be built in memory as `Image` objects
from pixel data you already have. There is no command-line tool.