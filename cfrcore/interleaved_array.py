"""Two-level arrays where each first-level element is followed by its second-level elements."""

from __future__ import annotations

from typing import List

from .fixed_size_array import WORD_BITS, WORD_MASK, bits_read, bits_write, words_for_bits


class InterleavedFixedSizeElemArray:
    """``n0`` elements of ``l0`` bits, each followed by ``f1`` elements of ``l1`` bits."""

    def __init__(self, l0: int, n0: int, l1: int, f1: int) -> None:
        if l0 < 0 or n0 < 0 or l1 < 0:
            raise ValueError("widths and sizes must be non-negative")
        if f1 <= 0:
            raise ValueError("f1 must be positive")
        self._l0 = l0
        self._l1 = l1
        self._f1 = f1
        self._n0 = n0
        self._words: List[int] = [0] * words_for_bits(self._stride * n0)

    @property
    def _stride(self) -> int:
        return self._l0 + self._f1 * self._l1

    def _offset(self, kind: int, i: int) -> tuple:
        if kind == 0:
            if not 0 <= i < self._n0:
                raise IndexError("level-0 index out of range")
            return i * self._stride, self._l0
        if kind == 1:
            if not 0 <= i < self._n0 * self._f1:
                raise IndexError("level-1 index out of range")
            group, within = divmod(i, self._f1)
            return group * self._stride + self._l0 + self._l1 * within, self._l1
        raise ValueError("kind must be 0 or 1")

    def read(self, kind: int, i: int) -> int:
        offset, width = self._offset(kind, i)
        return bits_read(self._words, offset, offset + width - 1)

    def write(self, kind: int, i: int, x: int) -> None:
        offset, width = self._offset(kind, i)
        bits_write(self._words, offset, offset + width - 1, x)

    def resize(self, n0: int) -> None:
        if n0 < 0:
            raise ValueError("size must be non-negative")
        self._n0 = n0
        count = words_for_bits(self._stride * n0)
        if count <= len(self._words):
            del self._words[count:]
        else:
            self._words.extend([0] * (count - len(self._words)))

    def size0(self) -> int:
        return self._n0

    def size1(self) -> int:
        return self._n0 * self._f1


class Interleaved64FixedSizeElemArray:
    """Like :class:`InterleavedFixedSizeElemArray` with 64-bit first-level elements.

    Each group starts on a word boundary and its second-level elements are
    padded to whole words.
    """

    def __init__(self, n0: int, l1: int, f1: int) -> None:
        if n0 < 0 or l1 < 0:
            raise ValueError("widths and sizes must be non-negative")
        if f1 <= 0:
            raise ValueError("f1 must be positive")
        self._n0 = n0
        self._l1 = l1
        self._f1 = f1
        self._b = 1 + words_for_bits(l1 * f1)
        self._words: List[int] = [0] * (n0 * self._b)

    def _check0(self, i: int) -> None:
        if not 0 <= i < self._n0:
            raise IndexError("level-0 index out of range")

    def _offset1(self, i: int) -> int:
        if not 0 <= i < self._n0 * self._f1:
            raise IndexError("level-1 index out of range")
        group, within = divmod(i, self._f1)
        return (group * self._b + 1) * WORD_BITS + within * self._l1

    def read0(self, i: int) -> int:
        self._check0(i)
        return self._words[i * self._b]

    def read1(self, i: int) -> int:
        offset = self._offset1(i)
        return bits_read(self._words, offset, offset + self._l1 - 1)

    def write0(self, i: int, x: int) -> None:
        self._check0(i)
        self._words[i * self._b] = x & WORD_MASK

    def write1(self, i: int, x: int) -> None:
        offset = self._offset1(i)
        bits_write(self._words, offset, offset + self._l1 - 1, x)

    def resize(self, n0: int) -> None:
        if n0 < 0:
            raise ValueError("size must be non-negative")
        self._n0 = n0
        count = n0 * self._b
        if count <= len(self._words):
            del self._words[count:]
        else:
            self._words.extend([0] * (count - len(self._words)))

    def size0(self) -> int:
        return self._n0

    def size1(self) -> int:
        return self._n0 * self._f1