"""Baseline JPEG encoder with optional 2x2 chroma subsampling.

Quality runs from 1 to 100; 0 selects the default of 90. Qualities of 90
and below subsample the chroma channels. Alpha channels are ignored.
"""

from __future__ import annotations

import os
from array import array
from collections.abc import Iterable, Sequence
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

_ZIGZAG = (
    0, 1, 5, 6, 14, 15, 27, 28, 2, 4, 7, 13, 16, 26, 29, 42, 3, 8, 12, 17, 25, 30, 41, 43,
    9, 11, 18, 24, 31, 40, 44, 53, 10, 19, 23, 32, 39, 45, 52, 54, 20, 22, 33, 38, 46, 51,
    55, 60, 21, 34, 37, 47, 50, 56, 59, 61, 35, 36, 48, 49, 57, 58, 62, 63,
)

_DC_LUMINANCE_COUNTS = bytes((0, 0, 1, 5, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0))
_DC_LUMINANCE_VALUES = bytes(range(12))
_AC_LUMINANCE_COUNTS = bytes((0, 0, 2, 1, 3, 3, 2, 4, 3, 5, 5, 4, 4, 0, 0, 1, 0x7D))
_AC_LUMINANCE_VALUES = bytes((
    0x01, 0x02, 0x03, 0x00, 0x04, 0x11, 0x05, 0x12, 0x21, 0x31, 0x41, 0x06, 0x13, 0x51, 0x61, 0x07,
    0x22, 0x71, 0x14, 0x32, 0x81, 0x91, 0xA1, 0x08, 0x23, 0x42, 0xB1, 0xC1, 0x15, 0x52, 0xD1, 0xF0,
    0x24, 0x33, 0x62, 0x72, 0x82, 0x09, 0x0A, 0x16, 0x17, 0x18, 0x19, 0x1A, 0x25, 0x26, 0x27, 0x28,
    0x29, 0x2A, 0x34, 0x35, 0x36, 0x37, 0x38, 0x39, 0x3A, 0x43, 0x44, 0x45, 0x46, 0x47, 0x48, 0x49,
    0x4A, 0x53, 0x54, 0x55, 0x56, 0x57, 0x58, 0x59, 0x5A, 0x63, 0x64, 0x65, 0x66, 0x67, 0x68, 0x69,
    0x6A, 0x73, 0x74, 0x75, 0x76, 0x77, 0x78, 0x79, 0x7A, 0x83, 0x84, 0x85, 0x86, 0x87, 0x88, 0x89,
    0x8A, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97, 0x98, 0x99, 0x9A, 0xA2, 0xA3, 0xA4, 0xA5, 0xA6, 0xA7,
    0xA8, 0xA9, 0xAA, 0xB2, 0xB3, 0xB4, 0xB5, 0xB6, 0xB7, 0xB8, 0xB9, 0xBA, 0xC2, 0xC3, 0xC4, 0xC5,
    0xC6, 0xC7, 0xC8, 0xC9, 0xCA, 0xD2, 0xD3, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8, 0xD9, 0xDA, 0xE1, 0xE2,
    0xE3, 0xE4, 0xE5, 0xE6, 0xE7, 0xE8, 0xE9, 0xEA, 0xF1, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7, 0xF8,
    0xF9, 0xFA,
))
_DC_CHROMINANCE_COUNTS = bytes((0, 0, 3, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0))
_DC_CHROMINANCE_VALUES = bytes(range(12))
_AC_CHROMINANCE_COUNTS = bytes((0, 0, 2, 1, 2, 4, 4, 3, 4, 7, 5, 4, 4, 0, 1, 2, 0x77))
_AC_CHROMINANCE_VALUES = bytes((
    0x00, 0x01, 0x02, 0x03, 0x11, 0x04, 0x05, 0x21, 0x31, 0x06, 0x12, 0x41, 0x51, 0x07, 0x61, 0x71,
    0x13, 0x22, 0x32, 0x81, 0x08, 0x14, 0x42, 0x91, 0xA1, 0xB1, 0xC1, 0x09, 0x23, 0x33, 0x52, 0xF0,
    0x15, 0x62, 0x72, 0xD1, 0x0A, 0x16, 0x24, 0x34, 0xE1, 0x25, 0xF1, 0x17, 0x18, 0x19, 0x1A, 0x26,
    0x27, 0x28, 0x29, 0x2A, 0x35, 0x36, 0x37, 0x38, 0x39, 0x3A, 0x43, 0x44, 0x45, 0x46, 0x47, 0x48,
    0x49, 0x4A, 0x53, 0x54, 0x55, 0x56, 0x57, 0x58, 0x59, 0x5A, 0x63, 0x64, 0x65, 0x66, 0x67, 0x68,
    0x69, 0x6A, 0x73, 0x74, 0x75, 0x76, 0x77, 0x78, 0x79, 0x7A, 0x82, 0x83, 0x84, 0x85, 0x86, 0x87,
    0x88, 0x89, 0x8A, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97, 0x98, 0x99, 0x9A, 0xA2, 0xA3, 0xA4, 0xA5,
    0xA6, 0xA7, 0xA8, 0xA9, 0xAA, 0xB2, 0xB3, 0xB4, 0xB5, 0xB6, 0xB7, 0xB8, 0xB9, 0xBA, 0xC2, 0xC3,
    0xC4, 0xC5, 0xC6, 0xC7, 0xC8, 0xC9, 0xCA, 0xD2, 0xD3, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8, 0xD9, 0xDA,
    0xE2, 0xE3, 0xE4, 0xE5, 0xE6, 0xE7, 0xE8, 0xE9, 0xEA, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7, 0xF8,
    0xF9, 0xFA,
))

_Y_QUANT = (
    16, 11, 10, 16, 24, 40, 51, 61, 12, 12, 14, 19, 26, 58, 60, 55, 14, 13, 16, 24, 40, 57, 69, 56,
    14, 17, 22, 29, 51, 87, 80, 62, 18, 22, 37, 56, 68, 109, 103, 77, 24, 35, 55, 64, 81, 104, 113,
    92, 49, 64, 78, 87, 103, 121, 120, 101, 72, 92, 95, 98, 112, 100, 103, 99,
)
_UV_QUANT = (
    17, 18, 24, 47, 99, 99, 99, 99, 18, 21, 26, 66, 99, 99, 99, 99, 24, 26, 56, 99, 99, 99, 99, 99,
    47, 66, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99,
    99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99, 99,
)

_AASF = tuple(
    f * 2.828427125
    for f in (1.0, 1.387039845, 1.306562965, 1.175875602, 1.0, 0.785694958, 0.541196100, 0.275899379)
)

_HEAD0 = bytes(
    (0xFF, 0xD8, 0xFF, 0xE0, 0, 0x10)
    + tuple(b"JFIF")
    + (0, 1, 1, 0, 0, 1, 0, 1, 0, 0, 0xFF, 0xDB, 0, 0x84, 0)
)
_HEAD2 = bytes((0xFF, 0xDA, 0, 0xC, 3, 1, 0, 2, 0x11, 3, 0x11, 0, 0x3F, 0))
_FILL_BITS = (0x7F, 7)

HuffmanTable = Sequence[tuple[int, int]]


def _build_huffman(counts: bytes, values: bytes) -> list[tuple[int, int]]:
    """Canonical Huffman codes as (code, length) indexed by symbol."""
    table = [(0, 0)] * 256
    symbols = iter(values)
    code = 0
    for length in range(1, 17):
        for _ in range(counts[length]):
            table[next(symbols)] = (code, length)
            code += 1
        code <<= 1
    return table


_Y_DC = _build_huffman(_DC_LUMINANCE_COUNTS, _DC_LUMINANCE_VALUES)
_Y_AC = _build_huffman(_AC_LUMINANCE_COUNTS, _AC_LUMINANCE_VALUES)
_UV_DC = _build_huffman(_DC_CHROMINANCE_COUNTS, _DC_CHROMINANCE_VALUES)
_UV_AC = _build_huffman(_AC_CHROMINANCE_COUNTS, _AC_CHROMINANCE_VALUES)


def _round32(values: Iterable[float]) -> list[float]:
    return array("f", values).tolist()


class _EntropyWriter:
    """Writes MSB-first Huffman bits, stuffing a zero after every 0xFF byte."""

    def __init__(self, out: bytearray) -> None:
        self.out = out
        self.buffer = 0
        self.count = 0

    def write(self, code: int, length: int) -> None:
        self.count += length
        self.buffer |= code << (24 - self.count)
        while self.count >= 8:
            c = (self.buffer >> 16) & 0xFF
            self.out.append(c)
            if c == 0xFF:
                self.out.append(0)
            self.buffer = (self.buffer << 8) & 0xFFFFFF
            self.count -= 8


def _magnitude(val: int) -> tuple[int, int]:
    """Return the (bits, length) pair that encodes a coefficient value."""
    length = max(abs(val).bit_length(), 1)
    if val < 0:
        val -= 1
    return val & ((1 << length) - 1), length


def _dct(d: Sequence[float]) -> list[float]:
    d0, d1, d2, d3, d4, d5, d6, d7 = d
    tmp0, tmp7 = d0 + d7, d0 - d7
    tmp1, tmp6 = d1 + d6, d1 - d6
    tmp2, tmp5 = d2 + d5, d2 - d5
    tmp3, tmp4 = d3 + d4, d3 - d4

    tmp10, tmp13 = tmp0 + tmp3, tmp0 - tmp3
    tmp11, tmp12 = tmp1 + tmp2, tmp1 - tmp2
    out0, out4 = tmp10 + tmp11, tmp10 - tmp11
    z1 = (tmp12 + tmp13) * 0.707106781
    out2, out6 = tmp13 + z1, tmp13 - z1

    tmp10 = tmp4 + tmp5
    tmp11 = tmp5 + tmp6
    tmp12 = tmp6 + tmp7
    z5 = (tmp10 - tmp12) * 0.382683433
    z2 = tmp10 * 0.541196100 + z5
    z4 = tmp12 * 1.306562965 + z5
    z3 = tmp11 * 0.707106781
    z11, z13 = tmp7 + z3, tmp7 - z3
    return [out0, z11 + z4, out2, z13 - z2, out4, z13 + z2, out6, z11 - z4]


def _process_block(
    writer: _EntropyWriter,
    block: list[float],
    fdtbl: Sequence[float],
    dc: int,
    dc_table: HuffmanTable,
    ac_table: HuffmanTable,
) -> int:
    """Transform, quantise and entropy-code one 8x8 block; return its DC value."""
    for r in range(0, 64, 8):
        block[r : r + 8] = _round32(_dct(block[r : r + 8]))
    for c in range(8):
        block[c::8] = _round32(_dct(block[c::8]))

    du = [0] * 64
    for j, (value, scale) in enumerate(zip(block, fdtbl)):
        v = value * scale
        du[_ZIGZAG[j]] = int(v - 0.5 if v < 0 else v + 0.5)

    diff = du[0] - dc
    if diff == 0:
        writer.write(*dc_table[0])
    else:
        bits, length = _magnitude(diff)
        writer.write(*dc_table[length])
        writer.write(bits, length)

    end = 63
    while end > 0 and du[end] == 0:
        end -= 1
    if end == 0:
        writer.write(*ac_table[0x00])
        return du[0]

    i = 1
    while i <= end:
        start = i
        while du[i] == 0 and i <= end:
            i += 1
        zeros = i - start
        if zeros >= 16:
            for _ in range(zeros >> 4):
                writer.write(*ac_table[0xF0])
            zeros &= 15
        bits, length = _magnitude(du[i])
        writer.write(*ac_table[(zeros << 4) + length])
        writer.write(bits, length)
        i += 1
    if end != 63:
        writer.write(*ac_table[0x00])
    return du[0]


def _quant_tables(quality: int) -> tuple[bytes, bytes]:
    y_table = bytearray(64)
    uv_table = bytearray(64)
    for i, (yq, uvq) in enumerate(zip(_Y_QUANT, _UV_QUANT)):
        y_table[_ZIGZAG[i]] = min(max((yq * quality + 50) // 100, 1), 255)
        uv_table[_ZIGZAG[i]] = min(max((uvq * quality + 50) // 100, 1), 255)
    return bytes(y_table), bytes(uv_table)


def _scale_table(table: bytes) -> list[float]:
    return _round32(
        1 / (table[_ZIGZAG[row * 8 + col]] * _AASF[row] * _AASF[col])
        for row in range(8)
        for col in range(8)
    )


def encode_jpeg(
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    quality: int = 90,
    flip_vertically: bool = False,
) -> bytes:
    """Encode interleaved 8-bit pixels as a baseline JPEG file."""
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    if not 1 <= channels <= 4:
        raise ValueError("channels must be between 1 and 4")
    data = bytes(pixels)
    if not data or len(data) < width * height * channels:
        raise ValueError("not enough pixel data for the given dimensions")

    quality = quality or 90
    subsample = quality <= 90
    quality = min(max(quality, 1), 100)
    quality = 5000 // quality if quality < 50 else 200 - quality * 2

    y_table, uv_table = _quant_tables(quality)
    fdtbl_y = _scale_table(y_table)
    fdtbl_uv = _scale_table(uv_table)

    out = bytearray(_HEAD0)
    out += y_table
    out.append(1)
    out += uv_table
    out += bytes((
        0xFF, 0xC0, 0, 0x11, 8,
        (height >> 8) & 0xFF, height & 0xFF, (width >> 8) & 0xFF, width & 0xFF,
        3, 1, 0x22 if subsample else 0x11, 0, 2, 0x11, 1, 3, 0x11, 1,
        0xFF, 0xC4, 0x01, 0xA2, 0,
    ))
    out += _DC_LUMINANCE_COUNTS[1:] + _DC_LUMINANCE_VALUES
    out.append(0x10)
    out += _AC_LUMINANCE_COUNTS[1:] + _AC_LUMINANCE_VALUES
    out.append(1)
    out += _DC_CHROMINANCE_COUNTS[1:] + _DC_CHROMINANCE_VALUES
    out.append(0x11)
    out += _AC_CHROMINANCE_COUNTS[1:] + _AC_CHROMINANCE_VALUES
    out += _HEAD2

    writer = _EntropyWriter(out)
    ofs_g = 1 if channels > 2 else 0
    ofs_b = 2 if channels > 2 else 0
    size = 16 if subsample else 8

    def sample(y: int, x: int) -> tuple[list[float], list[float], list[float]]:
        lum: list[float] = []
        cb: list[float] = []
        cr: list[float] = []
        for row in range(y, y + size):
            clamped = min(row, height - 1)
            source_row = height - 1 - clamped if flip_vertically else clamped
            base = source_row * width * channels
            for col in range(x, x + size):
                p = base + min(col, width - 1) * channels
                r, g, b = data[p], data[p + ofs_g], data[p + ofs_b]
                lum.append(0.29900 * r + 0.58700 * g + 0.11400 * b - 128)
                cb.append(-0.16874 * r - 0.33126 * g + 0.50000 * b)
                cr.append(0.50000 * r - 0.41869 * g - 0.08131 * b)
        return _round32(lum), _round32(cb), _round32(cr)

    dc_y = dc_u = dc_v = 0
    for y in range(0, height, size):
        for x in range(0, width, size):
            lum, cb, cr = sample(y, x)
            if subsample:
                for offset in (0, 8, 128, 136):
                    block = [lum[offset + r * 16 + c] for r in range(8) for c in range(8)]
                    dc_y = _process_block(writer, block, fdtbl_y, dc_y, _Y_DC, _Y_AC)
                corners = [yy * 32 + xx * 2 for yy in range(8) for xx in range(8)]
                sub_u = _round32((cb[j] + cb[j + 1] + cb[j + 16] + cb[j + 17]) * 0.25 for j in corners)
                sub_v = _round32((cr[j] + cr[j + 1] + cr[j + 16] + cr[j + 17]) * 0.25 for j in corners)
                dc_u = _process_block(writer, sub_u, fdtbl_uv, dc_u, _UV_DC, _UV_AC)
                dc_v = _process_block(writer, sub_v, fdtbl_uv, dc_v, _UV_DC, _UV_AC)
            else:
                dc_y = _process_block(writer, lum, fdtbl_y, dc_y, _Y_DC, _Y_AC)
                dc_u = _process_block(writer, cb, fdtbl_uv, dc_u, _UV_DC, _UV_AC)
                dc_v = _process_block(writer, cr, fdtbl_uv, dc_v, _UV_DC, _UV_AC)

    writer.write(*_FILL_BITS)
    out += b"\xff\xd9"
    return bytes(out)


def write_jpeg(
    path: PathLike,
    pixels: Iterable[int],
    width: int,
    height: int,
    channels: int,
    quality: int = 90,
    flip_vertically: bool = False,
) -> None:
    """Encode pixels as JPEG and write them to ``path``."""
    encoded = encode_jpeg(pixels, width, height, channels, quality, flip_vertically)
    with open(path, "wb") as handle:
        handle.write(encoded)