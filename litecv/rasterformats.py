"""Encoders for uncompressed raster formats: BMP, TGA and Radiance HDR."""

from __future__ import annotations

import math
import os
import struct
from array import array
from collections.abc import Iterable, Sequence
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

_BMP_BACKGROUND = (255, 0, 255)
_HDR_HEADER = b"#?RADIANCE\n# Written by litecv\nFORMAT=32-bit_rle_rgbe\n"


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_HDR_TINY = _f32(1e-32)


def _check_geometry(width: int, height: int, channels: int) -> None:
    if width < 0 or height < 0:
        raise ValueError("image dimensions must not be negative")
    if channels not in (1, 2, 3, 4):
        raise ValueError("channels must be between 1 and 4")


def _pixel_data(pixels: Iterable[int], width: int, height: int, channels: int) -> bytes:
    data = bytes(pixels)
    if len(data) < width * height * channels:
        raise ValueError("not enough pixel data for the given dimensions")
    return data


def _rows(height: int, flip_vertically: bool) -> range:
    """Row order for formats stored bottom-up."""
    return range(height) if flip_vertically else range(height - 1, -1, -1)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


def _put_pixel(
    out: bytearray, d: bytes, channels: int, write_alpha: bool, expand_mono: bool
) -> None:
    """Append one pixel in BGR order, optionally expanding grey and adding alpha."""
    if channels in (1, 2):
        out.extend((d[0], d[0], d[0]) if expand_mono else (d[0],))
    elif channels == 4 and not write_alpha:
        alpha = d[3]
        px = [
            (bg + _trunc_div((d[k] - bg) * alpha, 255)) & 0xFF
            for k, bg in enumerate(_BMP_BACKGROUND)
        ]
        out.extend((px[2], px[1], px[0]))
    else:
        out.extend((d[2], d[1], d[0]))
    if write_alpha:
        out.append(d[channels - 1])


def _put_rows(
    out: bytearray,
    data: bytes,
    width: int,
    height: int,
    channels: int,
    write_alpha: bool,
    expand_mono: bool,
    pad: int,
    flip_vertically: bool,
) -> None:
    row_size = width * channels
    for j in _rows(height, flip_vertically):
        row = data[j * row_size : (j + 1) * row_size]
        for start in range(0, row_size, channels):
            _put_pixel(out, row[start : start + channels], channels, write_alpha, expand_mono)
        out.extend(bytes(pad))


def encode_bmp(
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    flip_vertically: bool = False,
) -> bytes:
    """Encode interleaved 8-bit pixels as a BMP file.

    Grey images are expanded to 24-bit RGB; four-channel images are written
    as 32-bit BGRA with a version 4 header.
    """
    _check_geometry(width, height, channels)
    data = _pixel_data(pixels, width, height, channels)
    out = bytearray()
    if channels != 4:
        pad = (-width * 3) & 3
        out += struct.pack(
            "<2sIHHIIIIHHIIIIII",
            b"BM",
            (14 + 40 + (width * 3 + pad) * height) & 0xFFFFFFFF,
            0,
            0,
            14 + 40,
            40,
            width,
            height,
            1,
            24,
            0, 0, 0, 0, 0, 0,
        )
        _put_rows(out, data, width, height, channels, False, True, pad, flip_vertically)
    else:
        out += struct.pack(
            "<2sIHHIIIIHHIIIIII" + "IIII" + "I" + "I" * 12,
            b"BM",
            (14 + 108 + width * height * 4) & 0xFFFFFFFF,
            0,
            0,
            14 + 108,
            108,
            width,
            height,
            1,
            32,
            3, 0, 0, 0, 0, 0,
            0xFF0000, 0xFF00, 0xFF, 0xFF000000,
            0,
            *([0] * 12),
        )
        _put_rows(out, data, width, height, channels, True, True, 0, flip_vertically)
    return bytes(out)


def write_bmp(
    path: PathLike,
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    flip_vertically: bool = False,
) -> None:
    """Encode pixels as BMP and write them to ``path``."""
    encoded = encode_bmp(pixels, width, height, channels, flip_vertically)
    with open(path, "wb") as handle:
        handle.write(encoded)


def _tga_run_length(row: Sequence[bytes], i: int) -> tuple[int, bool]:
    """Return (length, is_literal) of the packet starting at pixel ``i``."""
    count = len(row)
    length = 1
    literal = True
    if i < count - 1:
        length += 1
        literal = row[i] != row[i + 1]
        if literal:
            prev = i
            for k in range(i + 2, count):
                if length >= 128:
                    break
                if row[prev] != row[k]:
                    prev += 1
                    length += 1
                else:
                    length -= 1
                    break
        else:
            for k in range(i + 2, count):
                if length >= 128:
                    break
                if row[i] == row[k]:
                    length += 1
                else:
                    break
    return length, literal


def encode_tga(
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    rle: bool = True,
    flip_vertically: bool = False,
) -> bytes:
    """Encode interleaved 8-bit pixels as a TGA file, run-length coded by default."""
    _check_geometry(width, height, channels)
    data = _pixel_data(pixels, width, height, channels)
    has_alpha = channels in (2, 4)
    color_bytes = channels - 1 if has_alpha else channels
    image_type = 3 if color_bytes < 2 else 2
    bits = (color_bytes + int(has_alpha)) * 8
    alpha_bits = 8 if has_alpha else 0

    out = bytearray(
        struct.pack(
            "<BBBHHBHHHHBB",
            0,
            0,
            image_type + 8 if rle else image_type,
            0,
            0,
            0,
            0,
            0,
            width & 0xFFFF,
            height & 0xFFFF,
            bits,
            alpha_bits,
        )
    )

    if not rle:
        _put_rows(out, data, width, height, channels, has_alpha, False, 0, flip_vertically)
        return bytes(out)

    row_size = width * channels
    for j in _rows(height, flip_vertically):
        raw = data[j * row_size : (j + 1) * row_size]
        row = [raw[p : p + channels] for p in range(0, row_size, channels)]
        i = 0
        while i < width:
            length, literal = _tga_run_length(row, i)
            if literal:
                out.append((length - 1) & 0xFF)
                for pixel in row[i : i + length]:
                    _put_pixel(out, pixel, channels, has_alpha, False)
            else:
                out.append((length - 129) & 0xFF)
                _put_pixel(out, row[i], channels, has_alpha, False)
            i += length
    return bytes(out)


def write_tga(
    path: PathLike,
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    rle: bool = True,
    flip_vertically: bool = False,
) -> None:
    """Encode pixels as TGA and write them to ``path``."""
    encoded = encode_tga(pixels, width, height, channels, rle, flip_vertically)
    with open(path, "wb") as handle:
        handle.write(encoded)


def _linear_to_rgbe(red: float, green: float, blue: float) -> bytes:
    upper = green if green > blue else blue
    maxcomp = red if red > upper else upper
    if maxcomp < _HDR_TINY:
        return bytes(4)
    mantissa, exponent = math.frexp(maxcomp)
    normalize = _f32(_f32(mantissa) * 256.0 / maxcomp)
    return bytes(
        (
            int(_f32(red * normalize)) & 0xFF,
            int(_f32(green * normalize)) & 0xFF,
            int(_f32(blue * normalize)) & 0xFF,
            (exponent + 128) & 0xFF,
        )
    )


def _hdr_scanline(values: Sequence[float], width: int, channels: int) -> bytes:
    pixels = []
    for start in range(0, width * channels, channels):
        if channels >= 3:
            linear = values[start], values[start + 1], values[start + 2]
        else:
            linear = (values[start],) * 3
        pixels.append(_linear_to_rgbe(*linear))

    if width < 8 or width >= 32768:
        return b"".join(pixels)

    out = bytearray((2, 2, (width & 0xFF00) >> 8, width & 0x00FF))
    for c in range(4):
        comp = bytes(p[c] for p in pixels)
        x = 0
        while x < width:
            r = x
            while r + 2 < width:
                if comp[r] == comp[r + 1] == comp[r + 2]:
                    break
                r += 1
            if r + 2 >= width:
                r = width
            while x < r:
                length = min(r - x, 128)
                out.append(length)
                out += comp[x : x + length]
                x += length
            if r + 2 < width:
                while r < width and comp[r] == comp[x]:
                    r += 1
                while x < r:
                    length = min(r - x, 127)
                    out.append(length + 128)
                    out.append(comp[x])
                    x += length
    return bytes(out)


def encode_hdr(
    values: Iterable[float],
    width: int,
    height: int,
    channels: int,
    flip_vertically: bool = False,
) -> bytes:
    """Encode linear float pixels as a Radiance RGBE file.

    Alpha is dropped and grey is replicated across the three colour channels.
    """
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    if channels not in (1, 2, 3, 4):
        raise ValueError("channels must be between 1 and 4")
    data = array("f", values)
    row_size = width * channels
    if len(data) < row_size * height:
        raise ValueError("not enough pixel data for the given dimensions")

    out = bytearray(_HDR_HEADER)
    out += b"EXPOSURE=          1.0000000000000\n\n-Y %d +X %d\n" % (height, width)
    for i in range(height):
        row = height - 1 - i if flip_vertically else i
        out += _hdr_scanline(data[row * row_size : (row + 1) * row_size], width, channels)
    return bytes(out)


def write_hdr(
    path: PathLike,
    values: Iterable[float],
    width: int,
    height: int,
    channels: int,
    flip_vertically: bool = False,
) -> None:
    """Encode float pixels as Radiance HDR and write them to ``path``."""
    encoded = encode_hdr(values, width, height, channels, flip_vertically)
    with open(path, "wb") as handle:
        handle.write(encoded)