# processing/score_report.py
"""Score reports combining extraction, composite math and the rubric tables."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from models import ScoreReport
from parsing import parse_scores
from rubric_constants import ESC_COEFFICIENTS, ITEM_NAMES

from .composite_score import compute_composite

logger = structlog.get_logger(__name__)


def recalculate(scores: Sequence[float]) -> ScoreReport:
    """Build a report for a (possibly hand-corrected) score vector."""
    composite = compute_composite(scores)
    return ScoreReport(
        **composite.model_dump(),
        item_names=list(ITEM_NAMES),
        coefficients=list(ESC_COEFFICIENTS),
    )


def calculate_scores(scoring_text: str) -> ScoreReport:
    """Parse evaluator output and compute its composite score."""
    report = recalculate(parse_scores(scoring_text))
    if report.has_zero:
        logger.info(
            "Score report contains zero scores; manual review recommended.",
            zero_items=[
                name for name, score in zip(ITEM_NAMES, report.scores) if score == 0
            ],
        )
    return report
