import pytest

from processing.composite_score import (
    ScoreVectorError,
    compute_composite,
    round_half_up,
)


def test_reference_vector(sample_scores):
    result = compute_composite(sample_scores)
    assert round(result.w1_raw, 1) == 8.1
    assert result.w1 == 81.1
    assert result.weighted[2] == 11.25
    assert result.has_zero is False
    assert result.scores == sample_scores


def test_final_blends_w1_and_w2(sample_scores):
    result = compute_composite(sample_scores)
    expected = result.w1_raw * 10 * 0.7 + result.w2_raw * 10 * 0.3
    assert result.final == round_half_up(expected, 1)
    assert result.w2_raw == pytest.approx(
        sum(result.weighted) / 16.0, abs=0.01
    )


def test_perfect_and_zero_vectors_hit_bounds():
    assert compute_composite([10] * 14).final == 100.0
    zero = compute_composite([0] * 14)
    assert zero.final == 0.0
    assert zero.has_zero is True


def test_zero_anywhere_sets_has_zero(sample_scores):
    sample_scores[4] = 0
    assert compute_composite(sample_scores).has_zero is True


def test_deterministic(sample_scores):
    assert compute_composite(sample_scores) == compute_composite(list(sample_scores))


@pytest.mark.parametrize(
    "scores",
    [
        [8.0] * 13,
        [8.0] * 15,
        [],
        "8" * 14,
        [8.0] * 13 + ["abc"],
        [8.0] * 13 + [None],
        [8.0] * 13 + [float("inf")],
        [8.0] * 13 + [float("nan")],
        [1e308] * 14,
    ],
)
def test_invalid_vectors_raise(scores):
    with pytest.raises(ScoreVectorError):
        compute_composite(scores)


def test_score_vector_error_is_value_error():
    assert issubclass(ScoreVectorError, ValueError)


def test_round_half_up_matches_to_fixed_semantics():
    assert round_half_up(11.25, 1) == 11.3
    assert round_half_up(0.125, 2) == 0.13
    # 1.005 is stored just below 1.005, so it rounds down.
    assert round_half_up(1.005, 2) == 1.0


def test_round_half_up_handles_values_beyond_default_precision():
    assert round_half_up(1e27, 1) == 1e27
    assert round_half_up(1e300, 2) == 1e300
    with pytest.raises(ScoreVectorError):
        round_half_up(float("inf"), 1)


def test_large_finite_scores_still_combine():
    result = compute_composite([1e27] * 14)
    assert result.w1 == pytest.approx(1e28)
    assert result.final == pytest.approx(1e28)


@pytest.mark.parametrize("coefficients", [[1.0] * 13, [1.0] * 15, []])
def test_coefficient_table_must_cover_every_item(sample_scores, coefficients):
    with pytest.raises(ScoreVectorError, match="coefficients"):
        compute_composite(sample_scores, coefficients)


@pytest.mark.parametrize(
    "scores",
    [
        [i % 11 for i in range(14)],
        [0, 10] * 7,
        [10] + [0] * 13,
        [0] * 9 + [10] + [0] * 4,
        [10] * 9 + [0] + [10] * 4,
        [5.5] * 14,
        [9.9, 0.1] * 7,
        [round((i * 3.7) % 10, 1) for i in range(14)],
    ],
)
def test_in_range_vectors_stay_within_bounds(scores):
    result = compute_composite(scores)
    assert 0.0 <= result.w1 <= 100.0
    assert 0.0 <= result.w2 <= 100.0
    assert 0.0 <= result.final <= 100.0
