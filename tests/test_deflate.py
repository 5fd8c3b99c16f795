import random
import zlib

import pytest

from litecv.deflate import zlib_compress


def _random_bytes(n, low=0, high=255, seed=1234):
    rng = random.Random(seed)
    return bytes(rng.randint(low, high) for _ in range(n))


@pytest.mark.parametrize(
    "data",
    [
        b"a",
        b"ab",
        b"abc",
        b"abcd",
        b"hello hello hello hello world",
        b"\x00" * 1000,
        b"abcabcabcabcabcabcabcabcabcabc" * 50,
        bytes(range(256)) * 8,
    ],
)
def test_round_trip(data):
    assert zlib.decompress(zlib_compress(data)) == data


def test_round_trip_random_data():
    data = _random_bytes(3000)
    assert zlib.decompress(zlib_compress(data)) == data


def test_round_trip_mixed_long_input():
    rng = random.Random(7)
    words = [b"pixel", b"image", b"blur", b"gray", b"\xff\x00\x10"]
    data = b"".join(rng.choice(words) for _ in range(8000))
    assert zlib.decompress(zlib_compress(data)) == data


def test_header_bytes():
    out = zlib_compress(b"aaaaaaaaaaaaaaaaaaaa")
    assert out[:2] == b"\x78\x5e"


def test_empty_input_has_no_blocks():
    assert zlib_compress(b"") == b"\x78\x5e\x00\x00\x00\x01"


def test_adler_trailer():
    data = b"The quick brown fox jumps over the lazy dog" * 3
    out = zlib_compress(data)
    assert int.from_bytes(out[-4:], "big") == zlib.adler32(data)


def test_repetitive_data_shrinks():
    data = b"\x10\x20\x30" * 2000
    out = zlib_compress(data)
    assert len(out) < len(data) // 10
    assert zlib.decompress(out) == data


def test_incompressible_data_is_stored():
    data = _random_bytes(100, low=144, high=255)
    out = zlib_compress(data)
    assert len(out) == 2 + 5 + len(data) + 4
    assert out[2] == 1
    assert int.from_bytes(out[3:5], "little") == len(data)
    assert int.from_bytes(out[5:7], "little") == (~len(data)) & 0xFFFF
    assert out[7 : 7 + len(data)] == data
    assert zlib.decompress(out) == data


def test_stored_output_spans_multiple_blocks():
    data = _random_bytes(40000, seed=99)
    out = zlib_compress(data)
    assert len(out) <= len(data) + 2 + 2 * 5 + 4
    assert zlib.decompress(out) == data


def test_low_quality_is_clamped():
    data = b"abracadabra " * 200
    assert zlib_compress(data, quality=1) == zlib_compress(data, quality=5)
    assert zlib_compress(data, quality=-3) == zlib_compress(data, quality=5)


@pytest.mark.parametrize("quality", [5, 8, 16, 64])
def test_quality_levels_round_trip(quality):
    rng = random.Random(quality)
    data = bytes(rng.choice(b"abcde") for _ in range(5000))
    assert zlib.decompress(zlib_compress(data, quality)) == data


def test_accepts_iterables_of_ints():
    values = [1, 2, 3, 1, 2, 3, 1, 2, 3, 1, 2, 3]
    assert zlib.decompress(zlib_compress(values)) == bytes(values)


def test_rejects_out_of_range_values():
    with pytest.raises(ValueError):
        zlib_compress([0, 256, 3])