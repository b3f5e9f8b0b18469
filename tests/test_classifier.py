import pytest

from cfrcore.classifier import (
    BWTHit,
    ClassifierResult,
    hit_score,
    hits_score,
    infer_min_hit_len,
    select_strand_hits,
)


def test_hit_score_below_minimum_is_zero():
    assert hit_score(22, 23) == 0
    assert hit_score(0, 1) == 0


def test_hit_score_pinned_value():
    assert hit_score(25, 23) == 100


def test_hit_score_grows_with_length():
    scores = [hit_score(length, 20) for length in range(20, 40)]
    assert scores == sorted(scores)
    assert scores[0] < scores[-1]


def test_hit_score_custom_adjust():
    assert hit_score(10, 0, adjust=10) == 0


def test_hits_score_is_sum_of_parts():
    hits = [BWTHit(0, 0, 30, 0), BWTHit(1, 4, 18, 31), BWTHit(2, 2, 40, 50)]
    assert hits_score(hits, 20) == sum(hit_score(h.length, 20) for h in hits)
    assert hits_score([], 20) == 0


def test_infer_min_hit_len_small_index():
    assert infer_min_hit_len(4, 1) == 23


def test_infer_min_hit_len_monotonic_and_bounded():
    values = [infer_min_hit_len(4, 10 ** k) for k in range(0, 30)]
    assert values == sorted(values)
    assert all(23 <= v <= 33 for v in values)
    assert values[-1] > values[0]


def test_infer_min_hit_len_rejects_bad_input():
    with pytest.raises(ValueError):
        infer_min_hit_len(0, 10)
    with pytest.raises(ValueError):
        infer_min_hit_len(4, -1)


def test_select_plus_strand_when_better():
    plus = [BWTHit(0, 0, 40, 0)]
    minus = [BWTHit(5, 6, 25, 3)]
    chosen = select_strand_hits(plus, minus, 20)
    assert len(chosen) == 1
    assert chosen[0].sp == 0
    assert chosen[0].strand == 1


def test_select_minus_strand_when_better():
    plus = [BWTHit(0, 0, 21, 0)]
    minus = [BWTHit(5, 6, 50, 3), BWTHit(7, 7, 30, 54)]
    chosen = select_strand_hits(plus, minus, 20)
    assert [h.sp for h in chosen] == [5, 7]
    assert all(h.strand == -1 for h in chosen)


def test_select_tie_keeps_both_plus_first():
    plus = [BWTHit(1, 1, 30, 0)]
    minus = [BWTHit(2, 2, 30, 0)]
    chosen = select_strand_hits(plus, minus, 20)
    assert [(h.sp, h.strand) for h in chosen] == [(1, 1), (2, -1)]


def test_select_does_not_mutate_inputs():
    plus = [BWTHit(1, 1, 30, 0)]
    minus = [BWTHit(2, 2, 10, 0)]
    select_strand_hits(plus, minus, 20)
    assert plus[0].strand == 0
    assert minus[0].strand == 0


def test_result_clear_resets_fields():
    result = ClassifierResult(
        score=5, secondary_score=3, hit_length=40, query_length=100,
        seq_str_names=["seqA"], tax_ids=[9606],
    )
    result.clear()
    assert result == ClassifierResult()
    assert result.seq_str_names == []
    assert result.tax_ids == []