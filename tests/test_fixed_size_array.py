import io

import pytest

from cfrcore.fixed_size_array import (
    FixedSizeElemArray,
    bit_read,
    bit_set,
    bits_read,
    bits_write,
    popcount,
    words_for_bits,
)


def test_words_for_bits():
    assert words_for_bits(0) == 0
    assert words_for_bits(64 * 5) == 5
    assert words_for_bits(64 * 5 + 1) == 6


def test_popcount_full_word():
    assert popcount(2**64 - 1) == 64
    assert popcount(0) == 0


def test_bits_roundtrip_across_word_boundary():
    words = [0, 0, 0]
    value = 0x5A5
    bits_write(words, 60, 71, value)
    assert bits_read(words, 60, 71) == value
    assert bits_read(words, 0, 59) == 0
    assert bits_read(words, 72, 191) == 0


def test_bits_write_preserves_neighbours():
    words = [2**64 - 1, 2**64 - 1]
    bits_write(words, 62, 65, 0)
    assert bits_read(words, 62, 65) == 0
    assert bits_read(words, 0, 61) == 2**62 - 1
    assert bits_read(words, 66, 127) == 2**62 - 1


def test_bit_set_and_read():
    words = [0, 0]
    bit_set(words, 100)
    assert bit_read(words, 100) == 1
    assert bit_read(words, 99) == 0
    assert popcount(words[0]) + popcount(words[1]) == 1


def test_from_values_roundtrip_and_width():
    values = [3, 0, 7, 1, 5, 6, 2, 4] * 20
    arr = FixedSizeElemArray.from_values(values)
    assert list(arr) == values
    assert len(arr) == len(values)
    assert max(values).bit_length() == arr.elem_bits


def test_from_values_explicit_width_masks():
    arr = FixedSizeElemArray.from_values([0], 4)
    arr[0] = (1 << 4) + 9
    assert arr[0] == 9


def test_negative_index_and_bounds():
    arr = FixedSizeElemArray.from_values([1, 2, 3], 5)
    assert arr[-1] == 3
    with pytest.raises(IndexError):
        arr.read(3)
    with pytest.raises(IndexError):
        arr[5] = 1


def test_pack_read_layouts():
    values = [(i * 7) % 16 for i in range(30)]
    arr = FixedSizeElemArray.from_values(values, 4)
    packed = arr.pack_read(3, 10)
    rev = arr.pack_read_rev(3, 10)
    for k in range(10):
        assert (packed >> (4 * k)) & 0xF == values[3 + k]
        assert (rev >> (4 * (9 - k))) & 0xF == values[3 + k]
    assert arr.pack_read_rev(5, 1) == arr.pack_read(5, 1) == values[5]


def test_pack_write_then_read():
    arr = FixedSizeElemArray(6, 40)
    packed = FixedSizeElemArray.from_values([11, 22, 33, 44, 55], 6).pack_read(0, 5)
    arr.pack_write(9, packed, 5)
    assert [arr[i] for i in range(9, 14)] == [11, 22, 33, 44, 55]
    assert arr[8] == 0 and arr[14] == 0


def test_prefix_match_len():
    a = FixedSizeElemArray.from_values([1, 2, 3, 0, 1, 2, 3, 0], 2)
    b = FixedSizeElemArray.from_values([1, 2, 3, 0, 1, 3, 3, 0], 2)
    assert a.prefix_match_len(0, 7, a, 0, 7) == 8
    assert a.prefix_match_len(0, 7, b, 0, 7) == 5
    assert a.prefix_match_len(0, 100, a, 4, 100) == 4


def test_subrange_compare():
    a = FixedSizeElemArray.from_values([1, 2, 3, 0], 2)
    b = FixedSizeElemArray.from_values([1, 3, 0, 0], 2)
    assert a.subrange_compare(0, 3, a, 0, 3) == 0
    assert a.subrange_compare(0, 3, b, 0, 3) == -1
    assert b.subrange_compare(0, 3, a, 0, 3) == 1
    assert a.subrange_compare(0, 1, a, 0, 3) == -1
    assert a.subrange_compare(0, 3, a, 0, 1) == 1
    c = FixedSizeElemArray.from_values([1, 2, 3, 0], 3)
    assert c.subrange_compare(0, 3, a, 0, 3) == -a.subrange_compare(0, 3, c, 0, 3)


def test_prefix_copy():
    values = list(range(20))
    arr = FixedSizeElemArray.from_values(values, 5)
    copy = arr.prefix_copy(13)
    assert list(copy) == values[:13]
    copy.resize(20)
    assert list(copy)[13:] == [0] * 7


def test_resize_and_reserve():
    values = [9, 8, 7, 6, 5]
    arr = FixedSizeElemArray.from_values(values, 4)
    arr.reserve(100)
    assert list(arr) == values
    arr.resize(3)
    assert list(arr) == values[:3]
    arr.resize(5)
    assert list(arr) == values[:3] + [0, 0]


def test_append_grows():
    arr = FixedSizeElemArray(7, 0)
    values = [(i * 37) % 128 for i in range(500)]
    for v in values:
        arr.append(v)
    assert list(arr) == values


def test_format():
    arr = FixedSizeElemArray.from_values([1, 2, 3], 2)
    assert arr.format() == "1 2 3 \n"
    assert arr.format(",") == "1,2,3,\n"


def test_save_load_roundtrip():
    values = [(i * 13) % 32 for i in range(77)]
    arr = FixedSizeElemArray.from_values(values, 5)
    buf = io.BytesIO()
    arr.save(buf)
    assert len(buf.getvalue()) == 20 + 8 * words_for_bits(77 * 5)
    buf.seek(0)
    loaded = FixedSizeElemArray.load(buf)
    assert list(loaded) == values
    assert loaded.elem_bits == 5


def test_load_truncated_raises():
    arr = FixedSizeElemArray.from_values([1, 2, 3], 4)
    buf = io.BytesIO()
    arr.save(buf)
    with pytest.raises(ValueError):
        FixedSizeElemArray.load(io.BytesIO(buf.getvalue()[:-1]))