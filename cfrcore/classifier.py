"""Scoring and strand selection for read classification against an FM index."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List

DEFAULT_SCORE_ADJUST = 15
_BASE_MIN_HIT_LEN = 23
_MAX_MIN_HIT_LEN = 32


@dataclass
class ClassifierParams:
    """Tunable parameters of the classifier."""

    max_result: int = 1
    min_hit_len: int = 0
    max_result_per_hit_factor: int = 40


@dataclass
class ClassifierResult:
    """Classification result for one read or read pair."""

    score: int = 0
    secondary_score: int = 0
    hit_length: int = 0
    query_length: int = 0
    seq_str_names: List[str] = field(default_factory=list)
    tax_ids: List[int] = field(default_factory=list)

    def clear(self) -> None:
        """Reset every field to its empty state."""
        self.score = 0
        self.secondary_score = 0
        self.hit_length = 0
        self.query_length = 0
        self.seq_str_names.clear()
        self.tax_ids.clear()


@dataclass
class BWTHit:
    """One exact match found by backward search.

    ``sp..ep`` is the inclusive range on the BWT, ``length`` the match length,
    ``offset`` the 0-based distance from the end of the searched read, and
    ``strand`` is -1 (minus), 0 (unknown) or 1 (plus).
    """

    sp: int
    ep: int
    length: int
    offset: int
    strand: int = 0


def hit_score(length: int, min_hit_len: int, adjust: int = DEFAULT_SCORE_ADJUST) -> int:
    """Score of a single hit of ``length`` bases; hits shorter than the minimum score zero."""
    if length < min_hit_len:
        return 0
    return (length - adjust) * (length - adjust)


def hits_score(hits: Iterable[BWTHit], min_hit_len: int, adjust: int = DEFAULT_SCORE_ADJUST) -> int:
    """Total score of a list of hits."""
    return sum(hit_score(h.length, min_hit_len, adjust) for h in hits)


def infer_min_hit_len(alphabet_size: int, n: int) -> int:
    """Smallest hit length whose k-mer space is at least 100 times the index size."""
    if alphabet_size <= 0:
        raise ValueError("alphabet size must be positive")
    if n < 0:
        raise ValueError("index size must be non-negative")
    mhl = _BASE_MIN_HIT_LEN
    kmer_space = alphabet_size ** mhl // 2
    while mhl <= _MAX_MIN_HIT_LEN:
        if kmer_space >= 100 * n:
            break
        kmer_space *= alphabet_size
        mhl += 1
    return mhl


def select_strand_hits(
    plus_hits: Iterable[BWTHit],
    minus_hits: Iterable[BWTHit],
    min_hit_len: int,
    adjust: int = DEFAULT_SCORE_ADJUST,
) -> List[BWTHit]:
    """Pick the strand with the better total score; on a tie keep both, plus strand first.

    The returned hits are copies with their strand set to 1 (plus) or -1 (minus).
    """
    plus = [replace(h, strand=1) for h in plus_hits]
    minus = [replace(h, strand=-1) for h in minus_hits]
    plus_score = hits_score(plus, min_hit_len, adjust)
    minus_score = hits_score(minus, min_hit_len, adjust)
    if plus_score > minus_score:
        return plus
    if minus_score > plus_score:
        return minus
    return plus + minus