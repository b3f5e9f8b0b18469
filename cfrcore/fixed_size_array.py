"""Bit-packed arrays whose elements all take the same number of bits."""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable, Iterator, List

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

_HEADER = struct.Struct("<QiQ")
_WORD = struct.Struct("<Q")


def words_for_bits(n: int) -> int:
    """Number of 64-bit words needed to hold ``n`` bits."""
    return -(-n // WORD_BITS)


def popcount(x: int) -> int:
    """Number of set bits in a non-negative integer."""
    return bin(x).count("1")


def _gather(words: List[int], first: int, last: int) -> int:
    chunk = 0
    for k, w in enumerate(words[first:last + 1]):
        chunk |= w << (WORD_BITS * k)
    return chunk


def bits_read(words: List[int], start: int, end: int) -> int:
    """Read bits ``start..end`` (inclusive); bit ``start`` becomes bit 0."""
    if end < start:
        return 0
    first, offset = divmod(start, WORD_BITS)
    last = end // WORD_BITS
    if last >= len(words):
        raise IndexError("bit range outside the word buffer")
    width = end - start + 1
    return (_gather(words, first, last) >> offset) & ((1 << width) - 1)


def bits_write(words: List[int], start: int, end: int, value: int) -> None:
    """Store the low bits of ``value`` into bits ``start..end`` (inclusive)."""
    if end < start:
        return
    first, offset = divmod(start, WORD_BITS)
    last = end // WORD_BITS
    if last >= len(words):
        raise IndexError("bit range outside the word buffer")
    width = end - start + 1
    mask = ((1 << width) - 1) << offset
    chunk = _gather(words, first, last)
    chunk = (chunk & ~mask) | ((value << offset) & mask)
    for k in range(last - first + 1):
        words[first + k] = (chunk >> (WORD_BITS * k)) & WORD_MASK


def bit_read(words: List[int], i: int) -> int:
    """Return bit ``i``."""
    wi, off = divmod(i, WORD_BITS)
    return (words[wi] >> off) & 1


def bit_set(words: List[int], i: int) -> None:
    """Set bit ``i`` to one."""
    wi, off = divmod(i, WORD_BITS)
    words[wi] |= 1 << off


class FixedSizeElemArray:
    """An array of ``size`` unsigned integers, each stored in ``elem_bits`` bits."""

    def __init__(self, elem_bits: int = 0, size: int = 0) -> None:
        if elem_bits < 0 or size < 0:
            raise ValueError("element width and size must be non-negative")
        self._l = elem_bits
        self._n = size
        self._words: List[int] = [0] * words_for_bits(elem_bits * size)

    @classmethod
    def from_values(cls, values: Iterable[int], elem_bits: int = 0) -> "FixedSizeElemArray":
        """Build an array from ``values``; a width of 0 or less picks the smallest that fits."""
        items = list(values)
        if elem_bits <= 0:
            elem_bits = max([1] + [v.bit_length() for v in items])
        arr = cls(elem_bits, len(items))
        for i, v in enumerate(items):
            arr.write(i, v)
        return arr

    @property
    def elem_bits(self) -> int:
        return self._l

    def _check(self, i: int) -> None:
        if not 0 <= i < self._n:
            raise IndexError(f"index {i} out of range for array of size {self._n}")

    def read(self, i: int) -> int:
        self._check(i)
        return bits_read(self._words, i * self._l, (i + 1) * self._l - 1)

    def write(self, i: int, x: int) -> None:
        self._check(i)
        bits_write(self._words, i * self._l, (i + 1) * self._l - 1, x)

    def _normalize(self, i: int) -> int:
        if i < 0:
            i += self._n
        self._check(i)
        return i

    def __getitem__(self, i: int) -> int:
        return self.read(self._normalize(i))

    def __setitem__(self, i: int, x: int) -> None:
        self.write(self._normalize(i), x)

    def __len__(self) -> int:
        return self._n

    def __iter__(self) -> Iterator[int]:
        for i in range(self._n):
            yield self.read(i)

    def __repr__(self) -> str:
        return f"FixedSizeElemArray(elem_bits={self._l}, values={list(self)!r})"

    def _check_span(self, i: int, num: int) -> None:
        if num < 0 or i < 0 or i + num > self._n:
            raise IndexError("element span out of range")

    def pack_read(self, i: int, num: int) -> int:
        """Elements ``i..i+num-1`` packed with element ``i`` in the low bits."""
        self._check_span(i, num)
        return bits_read(self._words, i * self._l, (i + num) * self._l - 1)

    def pack_read_rev(self, i: int, num: int) -> int:
        """Elements ``i..i+num-1`` packed with element ``i`` in the high bits."""
        self._check_span(i, num)
        ret = 0
        for j in range(num):
            ret = (ret << self._l) + self.read(i + j)
        return ret

    def pack_write(self, i: int, x: int, num: int) -> None:
        """Write ``num`` packed elements of ``x`` starting at element ``i``."""
        self._check_span(i, num)
        bits_write(self._words, i * self._l, (i + num) * self._l - 1, x)

    def prefix_match_len(self, s: int, e: int, other: "FixedSizeElemArray", sb: int, eb: int) -> int:
        """Length of the common prefix of ``self[s..e]`` and ``other[sb..eb]``."""
        e = min(e, self._n - 1)
        eb = min(eb, other._n - 1)
        length = max(0, min(e - s + 1, eb - sb + 1))
        for k in range(length):
            if self.read(s + k) != other.read(sb + k):
                return k
        return length

    def subrange_compare(self, s: int, e: int, other: "FixedSizeElemArray", sb: int, eb: int) -> int:
        """Sign of ``self[s..e] - other[sb..eb]`` in lexicographic order."""
        if self._l != other._l:
            return self._l - other._l
        e = min(e, self._n - 1)
        eb = min(eb, other._n - 1)
        len_a = e - s + 1
        len_b = eb - sb + 1
        match = self.prefix_match_len(s, e, other, sb, eb)
        if match == min(len_a, len_b):
            if len_a == len_b:
                return 0
            return -1 if len_a < len_b else 1
        return -1 if self.read(s + match) < other.read(sb + match) else 1

    def prefix_copy(self, p: int) -> "FixedSizeElemArray":
        """A new array holding the first ``p`` elements."""
        if not 0 <= p <= self._n:
            raise IndexError("prefix length out of range")
        copy = FixedSizeElemArray(self._l, p)
        nbits = p * self._l
        copy._words = self._words[:words_for_bits(nbits)]
        if nbits % WORD_BITS:
            copy._words[-1] &= (1 << (nbits % WORD_BITS)) - 1
        return copy

    def _fit_words(self, nbits: int) -> None:
        count = words_for_bits(nbits)
        if count <= len(self._words):
            del self._words[count:]
        else:
            self._words.extend([0] * (count - len(self._words)))

    def resize(self, n: int) -> None:
        """Change the element count; new elements read as zero."""
        if n < 0:
            raise ValueError("size must be non-negative")
        nbits = n * self._l
        self._n = n
        self._fit_words(nbits)
        if nbits % WORD_BITS:
            self._words[-1] &= (1 << (nbits % WORD_BITS)) - 1

    def reserve(self, m: int) -> None:
        """Make room for ``m`` elements without changing the contents."""
        if m <= self._n:
            return
        needed = words_for_bits(self._l * m)
        if needed > len(self._words):
            self._words.extend([0] * (needed - len(self._words)))

    def append(self, x: int) -> None:
        if words_for_bits(self._l * (self._n + 1)) > len(self._words):
            self.reserve(max(2 * self._n, 1))
        self._n += 1
        self.write(self._n - 1, x)

    def format(self, sep: str = " ") -> str:
        """Every element followed by ``sep``, then a newline."""
        return "".join(f"{v}{sep}" for v in self) + "\n"

    def save(self, fp: BinaryIO) -> None:
        fp.write(_HEADER.pack(len(self._words), self._l, self._n))
        for w in self._words[:words_for_bits(self._n * self._l)]:
            fp.write(_WORD.pack(w))

    @classmethod
    def load(cls, fp: BinaryIO) -> "FixedSizeElemArray":
        header = fp.read(_HEADER.size)
        if len(header) != _HEADER.size:
            raise ValueError("truncated array header")
        capacity, elem_bits, n = _HEADER.unpack(header)
        if elem_bits < 0:
            raise ValueError("negative element width in stored array")
        count = words_for_bits(n * elem_bits)
        data = fp.read(count * _WORD.size)
        if len(data) != count * _WORD.size:
            raise ValueError("truncated array data")
        arr = cls(elem_bits, 0)
        arr._n = n
        arr._words = [w for (w,) in _WORD.iter_unpack(data)]
        arr._words.extend([0] * max(0, capacity - count))
        return arr