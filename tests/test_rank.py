import io
import random
import struct

import pytest

from cfrcore.fixed_size_array import bit_set, words_for_bits
from cfrcore.rank import Rank9Index, RankIndex


def make_words(bits):
    words = [0] * words_for_bits(len(bits))
    for i, b in enumerate(bits):
        if b:
            bit_set(words, i)
    return words


def random_bits(n, p, seed):
    rng = random.Random(seed)
    return [1 if rng.random() < p else 0 for _ in range(n)]


SIZES = [1, 63, 64, 65, 1000, 5000]


@pytest.mark.parametrize("n", SIZES)
@pytest.mark.parametrize("block_size", [0, 1, 2, 4, 64])
def test_rank_index_matches_naive(n, block_size):
    bits = random_bits(n, 0.5, n + block_size)
    index = RankIndex(make_words(bits), n, block_size)
    running = 0
    for i, bit in enumerate(bits):
        assert index.query(i, False) == running
        running += bit
        assert index.query(i) == running


def test_rank_index_full_words_fit():
    n = 64 * 10
    index = RankIndex(make_words([1] * n), n, 2)
    assert all(index.query(i) == i + 1 for i in range(n))


def test_rank_index_clamps_past_end():
    n = 100
    bits = random_bits(n, 0.5, 7)
    index = RankIndex(make_words(bits), n, 4)
    assert index.query(n + 50) == index.query(n - 1) == sum(bits)


def test_rank_index_errors():
    with pytest.raises(ValueError):
        RankIndex([0, 0], 100, 3)
    with pytest.raises(ValueError):
        RankIndex([0], 100)
    with pytest.raises(IndexError):
        RankIndex([], 0).query(0)
    with pytest.raises(IndexError):
        RankIndex([1], 10).query(-1)


@pytest.mark.parametrize("n", SIZES + [64 * 8, 64 * 9, 64 * 17 + 3])
def test_rank9_matches_naive(n):
    bits = random_bits(n, 0.6, n)
    index = Rank9Index(make_words(bits), n)
    running = 0
    for i, bit in enumerate(bits):
        assert index.query(i, False) == running
        running += bit
        assert index.query(i) == running


@pytest.mark.parametrize("n", [64 * 8, 64 * 13, 64 * 20 + 5])
def test_rank9_r_value_counts_preceding_words(n):
    bits = random_bits(n, 0.4, n + 1)
    words = make_words(bits)
    index = Rank9Index(words, n)
    for wi in range(index.word_count):
        assert index.r_value(wi) == sum(bits[: wi * 64])


def test_rank9_decode_sub_r():
    n = 64 * 20
    bits = random_bits(n, 0.7, 42)
    index = Rank9Index(make_words(bits), n)
    for wi in range(index.word_count):
        bi, si = divmod(wi, 8)
        if si < 7:
            assert index.decode_sub_r(bi, si) == sum(bits[bi * 512:(wi + 1) * 64])


def test_rank9_all_ones_dense_block():
    n = 64 * 8
    index = Rank9Index(make_words([1] * n), n)
    assert index.decode_sub_r(0, 6) == 448
    assert index.query(n - 1) == n


def test_rank9_save_load_round_trip():
    n = 64 * 11 + 7
    bits = random_bits(n, 0.5, 9)
    words = make_words(bits)
    index = Rank9Index(words, n)
    buf = io.BytesIO()
    index.save(buf)
    raw = buf.getvalue()
    space, word_cnt = struct.unpack_from("<QQ", raw)
    assert word_cnt == index.word_count
    assert space == len(raw) - 16
    buf.seek(0)
    loaded = Rank9Index.load(buf, words)
    assert loaded.r == index.r
    for i in range(n):
        assert loaded.query(i) == index.query(i)
        assert loaded.query(i, False) == index.query(i, False)


def test_rank9_load_truncated():
    index = Rank9Index(make_words([1, 0, 1] * 100), 300)
    buf = io.BytesIO()
    index.save(buf)
    with pytest.raises(ValueError):
        Rank9Index.load(io.BytesIO(buf.getvalue()[:-3]), make_words([1, 0, 1] * 100))


def test_rank9_errors():
    with pytest.raises(ValueError):
        Rank9Index([0], 200)
    with pytest.raises(IndexError):
        Rank9Index([], 0).query(0)