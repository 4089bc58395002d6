import pytest
from conftest import SAMPLE_SCORES, numbered_scoring_text

from processing.composite_score import ScoreVectorError
from processing.score_report import calculate_scores, recalculate
from rubric_constants import ESC_COEFFICIENTS, ITEM_NAMES, rubric_metadata


def test_calculate_scores_from_evaluator_text():
    report = calculate_scores(numbered_scoring_text(SAMPLE_SCORES))
    assert report.scores == SAMPLE_SCORES
    assert report.w1 == 81.1
    assert report.item_names == list(ITEM_NAMES)
    assert report.coefficients == list(ESC_COEFFICIENTS)
    assert report.has_zero is False


def test_calculate_scores_flags_missing_items():
    report = calculate_scores(numbered_scoring_text(SAMPLE_SCORES, skip={4}))
    assert report.scores[4] == 0.0
    assert report.has_zero is True


def test_recalculate_after_manual_correction():
    detected = calculate_scores(numbered_scoring_text(SAMPLE_SCORES, skip={4}))
    corrected = list(detected.scores)
    corrected[4] = 7.5
    report = recalculate(corrected)
    assert report.has_zero is False
    assert report.final > detected.final
    assert report == calculate_scores(numbered_scoring_text(SAMPLE_SCORES))


def test_rubric_metadata_tables():
    meta = rubric_metadata()
    assert meta["item_names"][0] == "オープニングイメージ"
    assert meta["item_names"][-1] == "結末"
    assert len(meta["esc_coefficients"]) == 14
    assert sum(meta["esc_coefficients"]) == pytest.approx(16.0)


def test_calculate_scores_rejects_overflowing_score():
    with pytest.raises(ScoreVectorError, match="finite"):
        calculate_scores("01. オープニングイメージ：" + "9" * 400)
