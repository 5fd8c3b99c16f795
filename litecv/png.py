"""PNG encoder with per-row filter selection."""

from __future__ import annotations

import os
import struct
import zlib
from collections.abc import Iterable
from typing import Optional, Union

from .deflate import zlib_compress

PathLike = Union[str, "os.PathLike[str]"]

_SIGNATURE = bytes((137, 80, 78, 71, 13, 10, 26, 10))
_COLOR_TYPES = {1: 0, 2: 4, 3: 2, 4: 6}

# Filter kinds used on rows after the first, and on the first row, where the
# "up", "average" and "Paeth" predictors have no row above to draw on.
_MAPPING = (0, 1, 2, 3, 4)
_FIRST_ROW_MAPPING = (0, 1, 0, 5, 6)


def _paeth(a: int, b: int, c: int) -> int:
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    if pb <= pc:
        return b
    return c


def _filter_row(cur: bytes, prev: Optional[bytes], n: int, kind: int) -> bytes:
    """Apply one predictor to a row; ``prev`` is the row above, if any."""
    if kind == 0:
        return bytes(cur)
    out = bytearray(len(cur))
    for i, z in enumerate(cur):
        a = cur[i - n] if i >= n else 0
        b = prev[i] if prev is not None else 0
        c = prev[i - n] if prev is not None and i >= n else 0
        if kind == 1:
            pred = a
        elif kind == 2:
            pred = b
        elif kind == 3:
            pred = (a + b) >> 1
        elif kind == 4:
            pred = _paeth(a, b, c)
        elif kind == 5:
            pred = a >> 1
        else:
            pred = _paeth(a, 0, 0)
        out[i] = (z - pred) & 0xFF
    return bytes(out)


def _cost(line: bytes) -> int:
    """Sum of absolute values of the bytes read as signed."""
    return sum(v if v < 128 else 256 - v for v in line)


def _chunk(tag: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(tag + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + tag + body + struct.pack(">I", crc)


def encode_png(
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    stride: int = 0,
    force_filter: int = -1,
    compression_level: int = 8,
    flip_vertically: bool = False,
) -> bytes:
    """Encode interleaved 8-bit pixels as a PNG file.

    ``stride`` is the distance in bytes between the starts of adjacent rows;
    0 means rows are packed. ``force_filter`` in 0..4 selects one filter for
    every row; any other value picks the cheapest filter per row.
    """
    if width < 0 or height < 0:
        raise ValueError("image dimensions must not be negative")
    if channels not in _COLOR_TYPES:
        raise ValueError("channels must be between 1 and 4")
    row_size = width * channels
    if stride == 0:
        stride = row_size
    if stride < row_size:
        raise ValueError("stride is smaller than a row of pixels")
    data = bytes(pixels)
    if height and len(data) < (height - 1) * stride + row_size:
        raise ValueError("not enough pixel data for the given dimensions")
    if force_filter >= 5:
        force_filter = -1

    def row_at(y: int) -> bytes:
        j = height - 1 - y if flip_vertically else y
        return data[j * stride : j * stride + row_size]

    filtered = bytearray()
    prev: Optional[bytes] = None
    for y in range(height):
        cur = row_at(y)
        mapping = _MAPPING if y else _FIRST_ROW_MAPPING
        if force_filter > -1:
            chosen = force_filter
            line = _filter_row(cur, prev, channels, mapping[chosen])
        else:
            chosen, line, best_cost = 0, b"", None
            for filter_type in range(5):
                candidate = _filter_row(cur, prev, channels, mapping[filter_type])
                cost = _cost(candidate)
                if best_cost is None or cost < best_cost:
                    chosen, line, best_cost = filter_type, candidate, cost
        filtered.append(chosen)
        filtered += line
        prev = cur

    compressed = zlib_compress(filtered, compression_level)
    header = struct.pack(
        ">IIBBBBB",
        width & 0xFFFFFFFF,
        height & 0xFFFFFFFF,
        8,
        _COLOR_TYPES[channels],
        0,
        0,
        0,
    )
    return (
        _SIGNATURE
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", compressed)
        + _chunk(b"IEND", b"")
    )


def write_png(
    path: PathLike,
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    stride: int = 0,
    force_filter: int = -1,
    compression_level: int = 8,
    flip_vertically: bool = False,
) -> None:
    """Encode pixels as PNG and write them to ``path``."""
    encoded = encode_png(
        pixels,
        width,
        height,
        channels,
        stride,
        force_filter,
        compression_level,
        flip_vertically,
    )
    with open(path, "wb") as handle:
        handle.write(encoded)