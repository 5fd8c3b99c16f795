import struct
import zlib

import pytest

from litecv.png import encode_png, write_png

SIGNATURE = bytes((137, 80, 78, 71, 13, 10, 26, 10))


def _chunks(png):
    assert png[:8] == SIGNATURE
    pos = 8
    result = []
    while pos < len(png):
        (length,) = struct.unpack(">I", png[pos : pos + 4])
        tag = png[pos + 4 : pos + 8]
        body = png[pos + 8 : pos + 8 + length]
        (crc,) = struct.unpack(">I", png[pos + 8 + length : pos + 12 + length])
        assert crc == zlib.crc32(tag + body) & 0xFFFFFFFF
        result.append((tag, body))
        pos += 12 + length
    return result


def _paeth(a, b, c):
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    if pb <= pc:
        return b
    return c


def _decode(png):
    """Minimal PNG reader: returns (width, height, color_type, filters, pixels)."""
    chunks = dict(_chunks(png))
    width, height, depth, ctype, _, _, _ = struct.unpack(">IIBBBBB", chunks[b"IHDR"])
    assert depth == 8
    n = {0: 1, 4: 2, 2: 3, 6: 4}[ctype]
    raw = zlib.decompress(chunks[b"IDAT"])
    row_size = width * n
    prev = bytearray(row_size)
    out = bytearray()
    filters = []
    for y in range(height):
        start = y * (row_size + 1)
        ftype = raw[start]
        filters.append(ftype)
        line = bytearray(raw[start + 1 : start + 1 + row_size])
        for i in range(row_size):
            a = line[i - n] if i >= n else 0
            b = prev[i]
            c = prev[i - n] if i >= n else 0
            pred = {0: 0, 1: a, 2: b, 3: (a + b) >> 1, 4: _paeth(a, b, c)}[ftype]
            line[i] = (line[i] + pred) & 0xFF
        out += line
        prev = line
    return width, height, ctype, filters, bytes(out)


def _gradient(width, height, channels):
    return bytes(
        (x * 37 + y * 11 + c * 53 + (x * y) % 7) & 0xFF
        for y in range(height)
        for x in range(width)
        for c in range(channels)
    )


def test_signature_and_chunk_order():
    png = encode_png(_gradient(3, 2, 3), 3, 2, 3)
    assert png[:8] == SIGNATURE
    assert [tag for tag, _ in _chunks(png)] == [b"IHDR", b"IDAT", b"IEND"]


def test_iend_chunk_bytes():
    png = encode_png(_gradient(2, 2, 1), 2, 2, 1)
    assert png[-12:] == bytes.fromhex("0000000049454e44ae426082")


@pytest.mark.parametrize("channels,ctype", [(1, 0), (2, 4), (3, 2), (4, 6)])
def test_header_color_type(channels, ctype):
    png = encode_png(_gradient(5, 4, channels), 5, 4, channels)
    width, height, decoded_type, _, _ = _decode(png)
    assert (width, height, decoded_type) == (5, 4, ctype)


@pytest.mark.parametrize("channels", [1, 2, 3, 4])
@pytest.mark.parametrize("force_filter", [-1, 0, 1, 2, 3, 4])
def test_round_trip(channels, force_filter):
    pixels = _gradient(9, 7, channels)
    png = encode_png(pixels, 9, 7, channels, force_filter=force_filter)
    _, _, _, filters, decoded = _decode(png)
    assert decoded == pixels
    if force_filter >= 0:
        assert filters == [force_filter] * 7


def test_auto_filters_are_valid():
    pixels = _gradient(16, 16, 3)
    _, _, _, filters, decoded = _decode(encode_png(pixels, 16, 16, 3))
    assert all(0 <= f <= 4 for f in filters)
    assert decoded == pixels


def test_force_filter_five_means_auto():
    pixels = _gradient(8, 6, 3)
    assert encode_png(pixels, 8, 6, 3, force_filter=5) == encode_png(pixels, 8, 6, 3)


def test_flip_vertically_reverses_rows():
    pixels = _gradient(4, 5, 3)
    _, _, _, _, decoded = _decode(encode_png(pixels, 4, 5, 3, flip_vertically=True))
    row = 4 * 3
    rows = [pixels[i * row : (i + 1) * row] for i in range(5)]
    assert decoded == b"".join(reversed(rows))


def test_stride_skips_padding():
    width, height, channels = 3, 4, 3
    packed = _gradient(width, height, channels)
    row = width * channels
    padded = b"".join(packed[y * row : (y + 1) * row] + b"\xaa\xbb" for y in range(height))
    png = encode_png(padded, width, height, channels, stride=row + 2)
    assert _decode(png)[4] == packed
    assert png == encode_png(packed, width, height, channels)


def test_compression_level_keeps_content():
    pixels = bytes(range(256)) * 3
    png = encode_png(pixels, 16, 16, 3, compression_level=1)
    assert _decode(png)[4] == pixels


def test_invalid_channels():
    with pytest.raises(ValueError):
        encode_png(b"\x00" * 10, 2, 1, 5)


def test_negative_dimensions():
    with pytest.raises(ValueError):
        encode_png(b"", -1, 1, 3)


def test_not_enough_data():
    with pytest.raises(ValueError):
        encode_png(b"\x00" * 5, 2, 1, 3)


def test_stride_too_small():
    with pytest.raises(ValueError):
        encode_png(b"\x00" * 12, 2, 2, 3, stride=4)


def test_write_png_matches_encode(tmp_path):
    pixels = _gradient(6, 3, 4)
    target = tmp_path / "out.png"
    write_png(target, pixels, 6, 3, 4, force_filter=4)
    assert target.read_bytes() == encode_png(pixels, 6, 3, 4, force_filter=4)