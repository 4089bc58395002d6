# processing/composite_score.py
"""Weighted composite (W1, W2, Final) over a raw 14-item score vector."""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Context, Decimal

from models import CompositeScore
from rubric_constants import (
    ESC_COEFFICIENTS,
    ESC_TOTAL,
    RUBRIC_SIZE,
    SCORE_SCALE,
    W1_WEIGHT,
    W2_WEIGHT,
)


class ScoreVectorError(ValueError):
    """Raised when a score vector does not have one numeric value per item."""


def round_half_up(value: float, places: int) -> float:
    """Round ``value`` half-up on its exact binary value, for display."""
    exact = Decimal(value)
    if not exact.is_finite():
        raise ScoreVectorError(f"Cannot round non-finite value {value!r}.")
    quantum = Decimal(1).scaleb(-places)
    # Room for every integer digit plus the kept fraction digits.
    context = Context(prec=max(exact.adjusted(), 0) + places + 2)
    return float(exact.quantize(quantum, rounding=ROUND_HALF_UP, context=context))


def validate_scores(scores: Sequence[float]) -> list[float]:
    """Return ``scores`` as floats, or raise ``ScoreVectorError``."""
    if isinstance(scores, (str, bytes)):
        raise ScoreVectorError("Scores must be a sequence of numbers, not a string.")
    if len(scores) != RUBRIC_SIZE:
        raise ScoreVectorError(f"Expected {RUBRIC_SIZE} scores, got {len(scores)}.")
    try:
        values = [float(score) for score in scores]
    except (TypeError, ValueError) as exc:
        raise ScoreVectorError(f"Scores must be numeric: {exc}") from exc
    if not all(math.isfinite(value) for value in values):
        raise ScoreVectorError("Scores must be finite numbers.")
    return values


def compute_composite(
    scores: Sequence[float],
    coefficients: Sequence[float] = ESC_COEFFICIENTS,
) -> CompositeScore:
    """Compute W1, W2 and the final composite for ``scores``.

    W1 is the plain mean, W2 the coefficient-weighted sum over ``ESC_TOTAL``.
    Final blends them 0.7/0.3 on a 0-100 scale. Display values are rounded;
    the unrounded means are kept on the result.
    """
    values = validate_scores(scores)
    if len(coefficients) != RUBRIC_SIZE:
        raise ScoreVectorError(
            f"Expected {RUBRIC_SIZE} coefficients, got {len(coefficients)}."
        )

    w1_raw = sum(values) / len(values)
    weighted = [score * coef for score, coef in zip(values, coefficients)]
    w2_raw = sum(weighted) / ESC_TOTAL
    final = w1_raw * SCORE_SCALE * W1_WEIGHT + w2_raw * SCORE_SCALE * W2_WEIGHT
    if not all(math.isfinite(value) for value in (w1_raw, w2_raw, final, *weighted)):
        raise ScoreVectorError("Scores are too large to combine.")

    return CompositeScore(
        scores=values,
        w1_raw=w1_raw,
        w2_raw=w2_raw,
        w1=round_half_up(w1_raw * SCORE_SCALE, 1),
        w2=round_half_up(w2_raw * SCORE_SCALE, 1),
        final=round_half_up(final, 1),
        weighted=[round_half_up(value, 2) for value in weighted],
        has_zero=any(value == 0 for value in values),
    )
