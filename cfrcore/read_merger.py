"""Merging of overlapping mate pairs into a single fragment."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

_COMPLEMENT = {"A": "T", "C": "G", "G": "C", "T": "A"}
_MAX_MIN_OVERLAP = 31
_QUALITY_TOLERANCE = 14


def reverse_complement(seq: str) -> str:
    """Reverse complement of a DNA string; anything other than A, C, G, T becomes N."""
    return "".join(_COMPLEMENT.get(c, "N") for c in reversed(seq))


class MergeKind(IntEnum):
    """How a mate pair was merged."""

    NONE = 0
    MERGED = 1
    READ_THROUGH = 2


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging one mate pair, with the overlap statistics."""

    kind: MergeKind
    seq: Optional[str] = None
    qual: Optional[str] = None
    overlap_size: int = -1
    offset: int = -1
    best_match_count: int = -1

    @property
    def merged(self) -> bool:
        return self.kind != MergeKind.NONE


def _similarity_threshold(remaining: int) -> float:
    if remaining >= 100:
        return 0.85
    if remaining >= 50:
        return 0.85 + (remaining - 50) / 50.0 * 0.1
    return 0.95


def _is_tandem(sr: str, overlap: int) -> bool:
    for period in range(1, overlap // 2 + 1):
        if all(
            sr[k - j] == sr[k]
            for j in range(period, overlap - period + 1, period)
            for k in range(j, j + period)
        ):
            return True
    return False


def _mate_overlap(fr: str, sr: str, min_overlap: int, check_tandem: bool) -> Tuple[int, int, int]:
    """Find the unique offset at which the suffix of ``fr`` matches the prefix of ``sr``.

    Returns ``(overlap_size, offset, best_match_count)``; the overlap size is -1
    when there is no unique, unambiguous overlap.
    """
    flen, slen = len(fr), len(sr)
    best = -1
    offset = -1
    offset_cnt = 0
    overlap = -1
    for j in range(flen - min_overlap):
        remaining = flen - j
        needed = int(remaining * _similarity_threshold(remaining))
        span = min(remaining, slen)
        match = 0
        ok = True
        k = 0
        for k in range(span):
            if fr[j + k] == sr[k]:
                match += 1
            if match + (flen - (j + k) - 1) < needed:
                ok = False
                break
        else:
            k = span
        if ok:
            offset = j
            offset_cnt += 1
            overlap = k
            best = match

    if offset_cnt != 1:
        return -1, offset, best
    if check_tandem and overlap <= min_overlap * 2 and _is_tandem(sr, overlap):
        return -1, offset, best
    return overlap, offset, best


class ReadPairMerger:
    """Merge mate 1 with the reverse complement of mate 2 when they overlap."""

    def __init__(self, check_read_through: bool = True) -> None:
        self.check_read_through = check_read_through

    def merge(
        self,
        r1: str,
        q1: Optional[str] = None,
        r2: Optional[str] = None,
        q2: Optional[str] = None,
    ) -> MergeResult:
        """Merge the pair; read-through is tried before a plain overlap."""
        if r2 is None:
            return MergeResult(MergeKind.NONE)
        if (q1 is None) != (q2 is None):
            raise ValueError("either both mates or neither must carry qualities")
        if q1 is not None and len(q1) != len(r1):
            raise ValueError("quality of mate 1 does not match its sequence length")
        if q2 is not None and len(q2) != len(r2):
            raise ValueError("quality of mate 2 does not match its sequence length")

        len1, len2 = len(r1), len(r2)
        rcr2 = reverse_complement(r2)
        rcq2 = q2[::-1] if q2 is not None else None
        min_overlap = min((len1 + len2) // 10, _MAX_MIN_OVERLAP)

        offset = -1
        best = -1
        if self.check_read_through:
            overlap, offset, best = _mate_overlap(rcr2, r1, min_overlap, False)
            if overlap >= 0:
                seq = list(r1[:overlap])
                qual: Optional[List[str]] = None
                if q1 is not None and rcq2 is not None:
                    qual = list(q1[:overlap])
                    for i in range(overlap):
                        if rcq2[i + offset] > q1[i] or seq[i] == "N":
                            seq[i] = rcr2[i + offset]
                            qual[i] = rcq2[i + offset]
                return MergeResult(
                    MergeKind.READ_THROUGH,
                    "".join(seq),
                    "".join(qual) if qual is not None else None,
                    overlap,
                    offset,
                    best,
                )

        overlap, offset, best = _mate_overlap(r1, rcr2, min_overlap, True)
        if overlap < 0:
            return MergeResult(MergeKind.NONE, None, None, overlap, offset, best)

        total = offset + len2
        seq = [""] * total
        qual = [""] * total if rcq2 is not None else None
        seq[offset:] = rcr2
        if qual is not None and rcq2 is not None:
            qual[offset:] = rcq2
        for i in range(min(len1, total)):
            keep_r1 = (
                i < offset
                or (q1 is not None and qual is not None
                    and ord(q1[i]) >= ord(qual[i]) - _QUALITY_TOLERANCE)
                or seq[i] == "N"
            )
            if keep_r1:
                seq[i] = r1[i]
                if q1 is not None and qual is not None:
                    qual[i] = q1[i]
        return MergeResult(
            MergeKind.MERGED,
            "".join(seq),
            "".join(qual) if qual is not None else None,
            overlap,
            offset,
            best,
        )