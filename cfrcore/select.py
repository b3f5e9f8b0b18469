"""Select queries (position of the i-th one or zero) over plain bit vectors."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from enum import IntEnum
from math import ceil, sqrt
from typing import List, Sequence, Tuple

from .fixed_size_array import (
    WORD_BITS,
    WORD_MASK,
    FixedSizeElemArray,
    bit_read,
    bit_set,
    popcount,
    words_for_bits,
)
from .rank import Rank9Index, RankIndex

_SUPERBLOCK_WORDS = 8
_BYTE_ONES: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(l for l in range(8) if (x >> l) & 1) for x in range(256)
)


class SelectSpeed(IntEnum):
    """How much auxiliary data is kept to speed up select."""

    NONE = 0
    SAMPLED = 1
    RANK_BINARY = 2
    DENSE_SAMPLE = 3
    CONSTANT = 4


def _log2_ceil(x: int) -> int:
    return (x - 1).bit_length() if x > 1 else 0


def _largest_divisor_at_most(b: int, limit: int) -> int:
    d = max(1, min(limit, b))
    while b % d:
        d -= 1
    return d


def _pack_flags(flags: Sequence[bool]) -> List[int]:
    words = [0] * words_for_bits(len(flags))
    for i, flag in enumerate(flags):
        if flag:
            bit_set(words, i)
    return words


def _nth_one_in_word(word: int, count: int) -> int:
    """Offset of the ``count``-th (1-based) set bit of a 64-bit word."""
    for shift in range(0, WORD_BITS, 8):
        ones = _BYTE_ONES[(word >> shift) & 0xFF]
        if len(ones) >= count:
            return shift + ones[count - 1]
        count -= len(ones)
    raise IndexError("word holds too few set bits")


@dataclass
class _KindIndex:
    """Select structures for one bit value."""

    count: int
    samples: List[int]
    long_rank: RankIndex
    long_positions: FixedSizeElemArray
    mini_offsets: FixedSizeElemArray
    mini_long_words: List[int] = field(default_factory=list)
    mini_long_rank: RankIndex = None  # type: ignore[assignment]
    mini_long_positions: FixedSizeElemArray = None  # type: ignore[assignment]


class SelectIndex:
    """Sampled select over a bit vector, refined with a :class:`Rank9Index` over the same bits.

    ``type_support`` is a bit mask: bit 0 enables :meth:`select0`, bit 1
    enables :meth:`select1`.
    """

    def __init__(
        self,
        words: Sequence[int],
        n: int,
        rank: Rank9Index,
        block_size: int = 0,
        speed: SelectSpeed = SelectSpeed.RANK_BINARY,
        type_support: int = 3,
    ) -> None:
        if n < 0:
            raise ValueError("length must be non-negative")
        word_cnt = words_for_bits(n)
        if len(words) < word_cnt:
            raise ValueError("not enough words for the requested length")
        if rank.word_count != word_cnt:
            raise ValueError("rank index was built over a different length")
        self._n = n
        self._words: List[int] = list(words[:word_cnt])
        self._rank = rank
        self._speed = SelectSpeed(speed)
        self._kinds: dict = {}

        log_n = max(1, _log2_ceil(n))
        b = block_size
        if b <= WORD_BITS:
            b = WORD_BITS * WORD_BITS
            if self._speed >= SelectSpeed.RANK_BINARY:
                b = WORD_BITS * log_n
        self._b = b
        self._long_block_length = b * log_n * log_n

        self._minib = 1
        self._long_mini_length = 0
        if self._speed == SelectSpeed.DENSE_SAMPLE:
            self._minib = _largest_divisor_at_most(b, ceil(sqrt(b)))
        elif self._speed == SelectSpeed.CONSTANT:
            self._minib = _largest_divisor_at_most(b, ceil(b ** 0.25))
            self._long_mini_length = -(-self._minib * self._minib // 2)
        self._per_block = b // self._minib

        if self._speed == SelectSpeed.NONE:
            return
        for kind in (0, 1):
            if type_support & (1 << kind):
                self._kinds[kind] = self._build(kind)

    @property
    def block_size(self) -> int:
        """Number of ones (or zeros) between two samples."""
        return self._b

    @property
    def speed(self) -> SelectSpeed:
        return self._speed

    def count(self, kind: int) -> int:
        """Number of bits equal to ``kind``."""
        ones = sum(popcount(w) for w in self._words)
        return ones if kind == 1 else self._n - ones

    def _build(self, kind: int) -> _KindIndex:
        b = self._b
        positions = [p for p in range(self._n) if bit_read(self._words, p) == kind]
        blocks = [positions[s:s + b] for s in range(0, len(positions), b)]
        samples = [blk[0] for blk in blocks] + [self._n]

        long_flags: List[bool] = []
        long_positions: List[int] = []
        mini_offsets: List[int] = []
        mini_long_flags: List[bool] = []
        mini_long_positions: List[int] = []
        use_long = self._speed >= SelectSpeed.RANK_BINARY
        use_mini = self._speed >= SelectSpeed.DENSE_SAMPLE
        minib = self._minib

        for si, blk in enumerate(blocks):
            start, end = samples[si], samples[si + 1]
            is_long = use_long and end - start >= self._long_block_length
            long_flags.append(is_long)
            if is_long:
                long_positions.extend(blk[1:])
                if use_mini:
                    mini_offsets.extend([0] * self._per_block)
                    mini_long_flags.extend([False] * self._per_block)
                continue
            if not use_mini:
                continue
            for m in range(self._per_block):
                idx = m * minib
                if idx >= len(blk):
                    mini_offsets.append(end - start)
                    mini_long_flags.append(False)
                    continue
                mini_offsets.append(blk[idx] - start)
                is_long_mini = False
                if self._speed >= SelectSpeed.CONSTANT:
                    nxt = blk[idx + minib] if idx + minib < len(blk) else end
                    if nxt - blk[idx] >= self._long_mini_length:
                        is_long_mini = True
                        mini_long_positions.extend(p - start for p in blk[idx + 1:idx + minib])
                mini_long_flags.append(is_long_mini)

        index = _KindIndex(
            count=len(positions),
            samples=samples,
            long_rank=RankIndex(_pack_flags(long_flags), len(long_flags)),
            long_positions=FixedSizeElemArray.from_values(long_positions),
            mini_offsets=FixedSizeElemArray.from_values(mini_offsets),
        )
        if self._speed >= SelectSpeed.CONSTANT:
            index.mini_long_words = _pack_flags(mini_long_flags)
            index.mini_long_rank = RankIndex(index.mini_long_words, len(mini_long_flags))
            index.mini_long_positions = FixedSizeElemArray.from_values(mini_long_positions)
        return index

    def _before(self, wi: int, kind: int) -> int:
        ones = self._rank.r_value(wi)
        return ones if kind == 1 else wi * WORD_BITS - ones

    def _oriented_word(self, wi: int, kind: int) -> int:
        w = self._words[wi]
        return w if kind == 1 else ~w & WORD_MASK

    def _rank_search(self, i: int, kind: int, l: int, r: int) -> int:
        """Position of the ``i``-th ``kind`` bit, known to lie in ``[l, r)``."""
        span = _SUPERBLOCK_WORDS * WORD_BITS
        lo = l // span
        hi = (r - 1) // span
        sb = lo + bisect_left(
            range(lo, hi + 1), i, key=lambda s: self._before(s * _SUPERBLOCK_WORDS, kind)
        ) - 1
        first = sb * _SUPERBLOCK_WORDS
        last = min(first + _SUPERBLOCK_WORDS, len(self._words))
        wi = first + bisect_left(
            range(first, last), i, key=lambda w: self._before(w, kind)
        ) - 1
        remaining = i - self._before(wi, kind)
        return wi * WORD_BITS + _nth_one_in_word(self._oriented_word(wi, kind), remaining)

    def _scan_from(self, pos: int, kind: int, count: int) -> int:
        """Position of the ``count``-th ``kind`` bit at or after ``pos``."""
        wi, off = divmod(pos, WORD_BITS)
        w = self._oriented_word(wi, kind) & ~((1 << off) - 1)
        while True:
            c = popcount(w)
            if c >= count:
                return wi * WORD_BITS + _nth_one_in_word(w, count)
            count -= c
            wi += 1
            w = self._oriented_word(wi, kind)

    def _select(self, i: int, kind: int) -> int:
        index = self._kinds.get(kind)
        if index is None:
            raise ValueError(f"select{kind} is not supported by this index")
        if not 1 <= i <= index.count:
            raise IndexError(f"select index {i} out of range 1..{index.count}")
        b = self._b
        si, j = divmod(i - 1, b)
        l = index.samples[si]
        r = index.samples[si + 1]
        if j == 0:
            return l

        if self._speed >= SelectSpeed.RANK_BINARY and r - l >= self._long_block_length:
            idx = (index.long_rank.query(si) - 1) * (b - 1) + j - 1
            return index.long_positions[idx]

        if self._speed == SelectSpeed.CONSTANT:
            m, jm = divmod(j, self._minib)
            g = si * self._per_block + m
            offset = l + index.mini_offsets[g]
            if jm == 0:
                return offset
            if bit_read(index.mini_long_words, g):
                long_idx = index.mini_long_rank.query(g, False)
                return l + index.mini_long_positions[long_idx * (self._minib - 1) + jm - 1]
            return self._scan_from(offset, kind, jm + 1)

        if self._speed == SelectSpeed.DENSE_SAMPLE:
            m = j // self._minib
            g = si * self._per_block + m
            base = l
            l = base + index.mini_offsets[g]
            if m + 1 < self._per_block:
                r = base + index.mini_offsets[g + 1]
        return self._rank_search(i, kind, l, r)

    def select1(self, i: int) -> int:
        """Position of the ``i``-th one, counting from 1."""
        return self._select(i, 1)

    def select0(self, i: int) -> int:
        """Position of the ``i``-th zero, counting from 1."""
        return self._select(i, 0)