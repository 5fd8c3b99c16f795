"""A small zlib-stream compressor using fixed-Huffman DEFLATE blocks.

Matches are found through a hash table of three-byte prefixes with lazy
matching. If the compressed stream would be larger than storing the data,
stored (uncompressed) blocks are written instead.
"""

from __future__ import annotations

import zlib
from bisect import bisect_right
from collections.abc import Iterable

_HASH_SIZE = 16384
_WINDOW = 32768
_MAX_MATCH = 258
_MAX_STORED_BLOCK = 32767

_LENGTH_BASE = (
    3, 4, 5, 6, 7, 8, 9, 10, 11, 13, 15, 17, 19, 23, 27, 31, 35, 43, 51, 59,
    67, 83, 99, 115, 131, 163, 195, 227, 258, 259,
)
_LENGTH_EXTRA = (
    0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 3, 4, 4, 4, 4,
    5, 5, 5, 5, 0,
)
_DIST_BASE = (
    1, 2, 3, 4, 5, 7, 9, 13, 17, 25, 33, 49, 65, 97, 129, 193, 257, 385, 513,
    769, 1025, 1537, 2049, 3073, 4097, 6145, 8193, 12289, 16385, 24577, 32768,
)
_DIST_EXTRA = (
    0, 0, 0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7, 8, 8, 9, 9, 10, 10,
    11, 11, 12, 12, 13, 13,
)

_MASK32 = 0xFFFFFFFF


def _bitrev(code: int, bits: int) -> int:
    result = 0
    for _ in range(bits):
        result = (result << 1) | (code & 1)
        code >>= 1
    return result


def _zhash(data: bytes, pos: int) -> int:
    h = data[pos] + (data[pos + 1] << 8) + (data[pos + 2] << 16)
    h ^= (h << 3) & _MASK32
    h = (h + (h >> 5)) & _MASK32
    h ^= (h << 4) & _MASK32
    h = (h + (h >> 17)) & _MASK32
    h ^= (h << 25) & _MASK32
    h = (h + (h >> 6)) & _MASK32
    return h & (_HASH_SIZE - 1)


def _match_length(data: bytes, a: int, b: int, limit: int) -> int:
    limit = min(limit, _MAX_MATCH)
    n = 0
    while n < limit and data[a + n] == data[b + n]:
        n += 1
    return n


class _BitWriter:
    """Collects LSB-first bits into whole bytes."""

    def __init__(self, out: bytearray) -> None:
        self.out = out
        self.buffer = 0
        self.count = 0

    def add(self, code: int, bits: int) -> None:
        self.buffer |= code << self.count
        self.count += bits
        while self.count >= 8:
            self.out.append(self.buffer & 0xFF)
            self.buffer >>= 8
            self.count -= 8

    def huffman(self, code: int, bits: int) -> None:
        self.add(_bitrev(code, bits), bits)

    def symbol(self, n: int) -> None:
        """Write a literal/length symbol with the fixed Huffman code."""
        if n <= 143:
            self.huffman(0x30 + n, 8)
        elif n <= 255:
            self.huffman(0x190 + n - 144, 9)
        elif n <= 279:
            self.huffman(n - 256, 7)
        else:
            self.huffman(0xC0 + n - 280, 8)

    def pad(self) -> None:
        while self.count:
            self.add(0, 1)


def zlib_compress(data: Iterable[int], quality: int = 8) -> bytes:
    """Compress ``data`` into a zlib stream.

    ``quality`` bounds how many candidate positions are kept per hash bucket;
    values below 5 are raised to 5.
    """
    data = bytes(data)
    data_len = len(data)
    quality = max(quality, 5)

    out = bytearray((0x78, 0x5E))
    bits = _BitWriter(out)
    bits.add(1, 1)  # BFINAL
    bits.add(1, 2)  # fixed Huffman

    table: dict[int, list[int]] = {}
    i = 0
    while i < data_len - 3:
        h = _zhash(data, i)
        best = 3
        best_pos: int | None = None
        bucket = table.get(h, [])
        for pos in bucket:
            if pos > i - _WINDOW:
                d = _match_length(data, pos, i, data_len - i)
                if d >= best:
                    best, best_pos = d, pos
        if len(bucket) == 2 * quality:
            del bucket[:quality]
        bucket.append(i)
        table[h] = bucket

        if best_pos is not None:
            for pos in table.get(_zhash(data, i + 1), ()):
                if pos > i - (_WINDOW - 1):
                    if _match_length(data, pos, i + 1, data_len - i - 1) > best:
                        best_pos = None
                        break

        if best_pos is not None:
            distance = i - best_pos
            j = bisect_right(_LENGTH_BASE, best) - 1
            bits.symbol(j + 257)
            if _LENGTH_EXTRA[j]:
                bits.add(best - _LENGTH_BASE[j], _LENGTH_EXTRA[j])
            j = bisect_right(_DIST_BASE, distance) - 1
            bits.add(_bitrev(j, 5), 5)
            if _DIST_EXTRA[j]:
                bits.add(distance - _DIST_BASE[j], _DIST_EXTRA[j])
            i += best
        else:
            bits.symbol(data[i])
            i += 1

    for byte in data[i:]:
        bits.symbol(byte)
    bits.symbol(256)
    bits.pad()

    stored_blocks = (data_len + _MAX_STORED_BLOCK - 1) // _MAX_STORED_BLOCK
    if len(out) > data_len + 2 + stored_blocks * 5:
        del out[2:]
        for start in range(0, data_len, _MAX_STORED_BLOCK):
            block = data[start : start + _MAX_STORED_BLOCK]
            size = len(block)
            out.append(1 if start + size == data_len else 0)
            out += size.to_bytes(2, "little")
            out += (~size & 0xFFFF).to_bytes(2, "little")
            out += block

    out += zlib.adler32(data).to_bytes(4, "big")
    return bytes(out)