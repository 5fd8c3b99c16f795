"""Pixel transforms: grayscale conversion and box blur."""

from __future__ import annotations

import struct

from .image import Image


class FilterError(Exception):
    """Raised when a filter cannot produce a consistent result."""


def _to_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _to_byte(value: float) -> int:
    return int(_to_float32(value)) & 0xFF


def convert_to_grayscale(image: Image) -> bool:
    """Convert an RGB or RGBA image to grayscale in place (luminosity method).

    Returns False if the image already has one or two channels and was left
    untouched, True if it was converted. Alpha is kept as a second channel.
    """
    if image.channels <= 2:
        return False

    has_alpha = image.channels == 4
    out_channels = 2 if has_alpha else 1
    expected_size = image.width * image.height * out_channels
    step = 4 if has_alpha else 3

    data = image.pixels
    if len(data) % step:
        raise FilterError("Error converting Image!")

    gray = bytearray()
    for start in range(0, len(data), step):
        red, green, blue = data[start], data[start + 1], data[start + 2]
        gray.append(_to_byte(0.3 * red + 0.59 * green + 0.11 * blue))
        if has_alpha:
            gray.append(data[start + 3])

    if len(gray) != expected_size:
        raise FilterError("Error converting Image!")

    image.channels = out_channels
    image.pixels = gray
    return True


def apply_box_blur(image: Image, r: int) -> Image:
    """Return a copy of ``image`` with its first three channels box-blurred.

    Only pixels at least ``r`` away from every edge are blurred; the border
    and any channels beyond the third are copied unchanged.
    """
    if r < 0:
        raise ValueError("blur radius must not be negative")
    if image.channels < 3:
        raise FilterError("box blur needs at least three channels")

    width, height, channels = image.width, image.height, image.channels
    source = image.pixels
    result = image.copy()
    area = (2 * r + 1) ** 2
    blurred = 0

    for y in range(r, height - r):
        for x in range(r, width - r):
            sums = [0, 0, 0]
            for row in range(y - r, y + r + 1):
                start = (row * width + x - r) * channels
                window = source[start : start + (2 * r + 1) * channels]
                for k in range(3):
                    sums[k] += sum(window[k::channels])
            idx = (y * width + x) * channels
            result.pixels[idx : idx + 3] = bytes(_to_byte(s / area) for s in sums)
            blurred += 1

    expected = (width - 2 * r) * (height - 2 * r)
    if blurred != expected:
        raise FilterError("Error Blurring Image")
    return result