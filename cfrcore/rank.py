"""Constant-time rank indexes over plain bit vectors."""

from __future__ import annotations

import struct
from typing import BinaryIO, List, Sequence, Tuple

from .fixed_size_array import WORD_BITS, FixedSizeElemArray, popcount, words_for_bits

_WORD_SHIFT = WORD_BITS.bit_length() - 1
_HEADER = struct.Struct("<QQ")
_WORD = struct.Struct("<Q")
_SUB_BITS = 9
_SUB_MASK = (1 << _SUB_BITS) - 1
_RANK9_BLOCK = 8


def _low_mask(i: int, inclusive: bool) -> int:
    return (1 << ((i & (WORD_BITS - 1)) + int(inclusive))) - 1


class RankIndex:
    """Rank over a bit vector with absolute counts per block and relative counts per word."""

    def __init__(self, words: Sequence[int], n: int, block_size: int = 0) -> None:
        b = block_size if block_size > 0 else WORD_BITS
        if b & (b - 1):
            raise ValueError("block size must be a power of two")
        word_cnt = words_for_bits(n)
        if len(words) < word_cnt:
            raise ValueError("not enough words for the requested length")
        self._n = n
        self._b = b
        self._shift = b.bit_length() - 1
        self._words: List[int] = list(words[:word_cnt])
        block_cnt = -(-word_cnt // b)
        self._r: List[int] = []
        self._sub = FixedSizeElemArray(((b - 1) * WORD_BITS).bit_length(), word_cnt - block_cnt)
        total = 0
        local = 0
        for i, w in enumerate(self._words):
            if i % b == 0:
                self._r.append(total)
                local = 0
            else:
                self._sub.write(i - i // b - 1, local)
            c = popcount(w)
            total += c
            local += c

    @property
    def block_size(self) -> int:
        """Block size in words."""
        return self._b

    def query(self, i: int, inclusive: bool = True) -> int:
        """Number of ones in ``[0..i]`` (or ``[0..i)``); positions past the end clamp to the last bit."""
        if self._n == 0:
            raise IndexError("rank query on an empty bit vector")
        if i < 0:
            raise IndexError("negative bit index")
        if i >= self._n:
            i = self._n - 1
        wi = i >> _WORD_SHIFT
        sub = self._sub.read(wi - (wi >> self._shift) - 1) if wi & (self._b - 1) else 0
        return self._r[wi >> self._shift] + sub + popcount(self._words[wi] & _low_mask(i, inclusive))


class Rank9Index:
    """Rank with one absolute count per 8 words and seven packed 9-bit relative counts."""

    def __init__(self, words: Sequence[int], n: int) -> None:
        word_cnt = words_for_bits(n)
        if len(words) < word_cnt:
            raise ValueError("not enough words for the requested length")
        self._n = n
        self._words: List[int] = list(words[:word_cnt])
        self._word_cnt = word_cnt
        block_cnt = -(-word_cnt // _RANK9_BLOCK)
        self._r: List[int] = [0] * (2 * block_cnt)
        total = 0
        local = 0
        for i, w in enumerate(self._words):
            bi = i // _RANK9_BLOCK * 2
            br = i % _RANK9_BLOCK
            if br == 0:
                self._r[bi] = total
                self._r[bi + 1] = 0
                local = 0
            else:
                self._r[bi + 1] |= local << ((br - 1) * _SUB_BITS)
            c = popcount(w)
            total += c
            local += c
        # Fill the unused relative counts of the last block with its total.
        i = word_cnt
        if word_cnt > 0 and (i - 1) % _RANK9_BLOCK > 0:
            bi = i // _RANK9_BLOCK * 2
            while i % _RANK9_BLOCK:
                self._r[bi + 1] |= local << ((i % _RANK9_BLOCK - 1) * _SUB_BITS)
                i += 1

    @property
    def block_size(self) -> int:
        """Block size in words."""
        return _RANK9_BLOCK

    @property
    def sub_block_size(self) -> int:
        """Sub-block size in bits."""
        return WORD_BITS

    @property
    def word_count(self) -> int:
        return self._word_cnt

    @property
    def r(self) -> Tuple[int, ...]:
        """The interleaved absolute and packed relative counts."""
        return tuple(self._r)

    def r_value(self, wi: int) -> int:
        """Number of ones in the words before word ``wi``."""
        ri = (wi >> 3) * 2
        t = wi & 7
        if t == 0:
            return self._r[ri]
        return self._r[ri] + ((self._r[ri + 1] >> ((t - 1) * _SUB_BITS)) & _SUB_MASK)

    def decode_sub_r(self, bi: int, si: int) -> int:
        """The ``si``-th relative count of block ``bi``."""
        return (self._r[2 * bi + 1] >> (si * _SUB_BITS)) & _SUB_MASK

    def query(self, i: int, inclusive: bool = True) -> int:
        """Number of ones in ``[0..i]`` (or ``[0..i)``); positions past the end clamp to the last bit."""
        if self._n == 0:
            raise IndexError("rank query on an empty bit vector")
        if i < 0:
            raise IndexError("negative bit index")
        if i >= self._n:
            i = self._n - 1
        wi = i >> _WORD_SHIFT
        return self.r_value(wi) + popcount(self._words[wi] & _low_mask(i, inclusive))

    def save(self, fp: BinaryIO) -> None:
        fp.write(_HEADER.pack(_WORD.size * len(self._r), self._word_cnt))
        for v in self._r:
            fp.write(_WORD.pack(v))

    @classmethod
    def load(cls, fp: BinaryIO, words: Sequence[int]) -> "Rank9Index":
        """Read a saved index; ``words`` is the bit vector it was built over."""
        header = fp.read(_HEADER.size)
        if len(header) != _HEADER.size:
            raise ValueError("truncated rank header")
        _, word_cnt = _HEADER.unpack(header)
        block_cnt = -(-word_cnt // _RANK9_BLOCK)
        data = fp.read(2 * block_cnt * _WORD.size)
        if len(data) != 2 * block_cnt * _WORD.size:
            raise ValueError("truncated rank data")
        if len(words) < word_cnt:
            raise ValueError("not enough words for the stored index")
        index = cls.__new__(cls)
        index._n = word_cnt * WORD_BITS
        index._words = list(words[:word_cnt])
        index._word_cnt = word_cnt
        index._r = [v for (v,) in _WORD.iter_unpack(data)]
        return index