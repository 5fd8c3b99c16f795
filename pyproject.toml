[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "litecv"
version = "0.1.0"
description = "A small image processing library: grayscale and box-blur filters with pure-Python PNG, BMP, TGA, HDR and JPEG writers."
requires-python = ">=3.10"
dependencies = []
keywords = ["image", "image-processing", "png", "jpeg", "bmp", "tga", "hdr", "blur", "grayscale"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["litecv"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
