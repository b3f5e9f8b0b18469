"""Bit vectors with rank and select, including a block-compressed (RRR style) variant."""

from __future__ import annotations

from abc import ABC, abstractmethod
from math import comb
from typing import List, Sequence, Tuple

from .fixed_size_array import (
    WORD_BITS,
    FixedSizeElemArray,
    bits_read,
    bits_write,
    popcount,
    words_for_bits,
)

DEFAULT_SELECT_SPEED = 3


def _log2_ceil(x: int) -> int:
    return (x - 1).bit_length() if x > 1 else 0


class Bitvector(ABC):
    """Common rank/select interface over a vector of bits."""

    @abstractmethod
    def access(self, i: int) -> int:
        """Return bit ``i`` (0-based)."""

    @abstractmethod
    def rank1(self, i: int, inclusive: bool = True) -> int:
        """Number of ones in ``[0..i]`` (or ``[0..i)`` when not inclusive)."""

    @abstractmethod
    def select(self, i: int) -> int:
        """Position of the ``i``-th one, counting from 1."""

    def pred(self, i: int) -> int:
        """Position of the rightmost one in ``[0..i]``."""
        return self.select(self.rank1(i))

    def succ(self, i: int) -> int:
        """Position of the leftmost one in ``[i..n-1]``."""
        return self.select(self.rank1(i, False) + 1)

    def rank0(self, i: int, inclusive: bool = True) -> int:
        """Number of zeros in ``[0..i]`` (or ``[0..i)`` when not inclusive)."""
        return i + int(inclusive) - self.rank1(i, inclusive)

    def rank(self, kind: int, i: int, inclusive: bool = True) -> int:
        """Rank of ones when ``kind`` is 1, of zeros otherwise."""
        if kind == 1:
            return self.rank1(i, inclusive)
        return self.rank0(i, inclusive)


class CompressedBitvector(Bitvector):
    """Bit vector stored as per-block one counts plus combinatorial offsets.

    Each block of ``block_size`` bits is replaced by its number of ones and the
    index of its bit pattern among all patterns with that many ones.
    """

    def __init__(
        self,
        words: Sequence[int],
        n: int,
        block_size: int = 0,
        psum_block_size: int = 0,
        select_block_size: int = 0,
        select_speed: int = DEFAULT_SELECT_SPEED,
    ) -> None:
        if n < 0:
            raise ValueError("length must be non-negative")
        b = block_size if block_size > 0 else WORD_BITS - 1
        if b > WORD_BITS:
            raise ValueError(f"block size must be at most {WORD_BITS}")
        pb = psum_block_size if psum_block_size > 0 else WORD_BITS
        sb = select_block_size if select_block_size > b else WORD_BITS * WORD_BITS
        word_list = list(words)
        if words_for_bits(n) > len(word_list):
            raise ValueError("not enough words for the requested length")

        self._n = n
        self._b = b
        self._pb = pb
        self._sb = sb
        self._select_speed = select_speed
        self._choose: List[List[int]] = [[comb(i, j) for j in range(i + 2)] for i in range(b + 1)]
        self._lens: List[int] = [_log2_ceil(self._choose[b][c]) for c in range(b + 1)]

        blocks = [
            (start, bits_read(word_list, start, min(start + b, n) - 1))
            for start in range(0, n, b)
        ]
        self._counts = FixedSizeElemArray(_log2_ceil(b + 1), len(blocks))
        total_bits = sum(self._lens[popcount(bits)] for _, bits in blocks)
        self._offsets: List[int] = [0] * words_for_bits(total_bits)
        self._psum: List[int] = []
        self._ranks: List[int] = []
        self._samples: List[int] = []

        pos = 0
        ones = 0
        for blocki, (start, bits) in enumerate(blocks):
            c, o = self._encode(bits)
            if blocki % pb == 0:
                self._psum.append(pos)
                self._ranks.append(ones)
            self._counts.write(blocki, c)
            width = self._lens[c]
            if width:
                bits_write(self._offsets, pos, pos + width - 1, o)
            pos += width
            if select_speed:
                target = -(-ones // sb) * sb
                if target < ones + c:
                    k = target - ones
                    for l in range(b):
                        if (bits >> l) & 1:
                            if k == 0:
                                self._samples.append(start + l)
                                break
                            k -= 1
            ones += c
        self._ones = ones

    def _encode(self, bits: int) -> Tuple[int, int]:
        masked = bits & ((1 << self._b) - 1)
        onecnt = popcount(masked)
        o = 0
        c = 0
        for i in range(self._b - 1, -1, -1):
            if (masked >> i) & 1:
                o += self._choose[i][onecnt - c]
                c += 1
        return c, o

    def _decode(self, c: int, o: int) -> int:
        ret = 0
        used = 0
        for i in range(self._b - 1, -1, -1):
            ret <<= 1
            threshold = self._choose[i][c - used]
            if o >= threshold:
                ret |= 1
                o -= threshold
                used += 1
        return ret

    def _read_block(self, c: int, pos: int) -> int:
        o = bits_read(self._offsets, pos, pos + self._lens[c] - 1)
        return self._decode(c, o)

    def _check(self, i: int) -> None:
        if not 0 <= i < self._n:
            raise IndexError(f"bit index {i} out of range for length {self._n}")

    @property
    def ones(self) -> int:
        """Total number of ones."""
        return self._ones

    def __len__(self) -> int:
        return self._n

    def access(self, i: int) -> int:
        self._check(i)
        bi = i // self._b
        c = self._counts.read(bi)
        if c == 0:
            return 0
        if c == self._b:
            return 1
        pi = bi // self._pb
        pos = self._psum[pi]
        for j in range(pi * self._pb, bi):
            pos += self._lens[self._counts.read(j)]
        return (self._read_block(c, pos) >> (i % self._b)) & 1

    def rank1(self, i: int, inclusive: bool = True) -> int:
        self._check(i)
        inc = int(inclusive)
        bi = i // self._b
        ri = bi // self._pb
        ret = self._ranks[ri]
        pos = self._psum[ri]
        for j in range(ri * self._pb, bi):
            c = self._counts.read(j)
            ret += c
            pos += self._lens[c]
        c = self._counts.read(bi)
        residual = i % self._b
        if c == 0:
            return ret
        if c == self._b:
            return ret + residual + inc
        bits = self._read_block(c, pos)
        return ret + popcount(bits & ((1 << (residual + inc)) - 1))

    def select(self, i: int) -> int:
        if not self._select_speed:
            raise ValueError("select support was disabled at construction")
        if not 1 <= i <= self._ones:
            raise IndexError(f"select index {i} out of range 1..{self._ones}")
        bi = self._samples[(i - 1) // self._sb] // self._b
        pi = bi // self._pb
        pos = self._psum[pi]
        count = self._ranks[pi]
        for j in range(pi * self._pb, len(self._counts)):
            c = self._counts.read(j)
            if count + c >= i:
                bits = self._read_block(c, pos)
                for l in range(self._b):
                    if (bits >> l) & 1:
                        count += 1
                        if count == i:
                            return j * self._b + l
                break
            pos += self._lens[c]
            count += c
        raise IndexError(f"select index {i} not found")