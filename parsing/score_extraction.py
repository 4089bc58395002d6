# parsing/score_extraction.py
"""Recover the 14 rubric scores from free-text evaluator output.

Each rubric item gets an ordered list of extractor strategies. A strategy is a
pure ``text -> float | None`` function; the first one that finds a number wins.
Items with no match score ``0.0``, which is indistinguishable from a genuine
zero and is reported downstream through ``has_zero``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import partial

import structlog

from rubric_constants import ITEM_NAMES

logger = structlog.get_logger(__name__)

ExtractorStrategy = Callable[[str], float | None]

MISSING_SCORE = 0.0


def _first_number(pattern: re.Pattern[str], text: str) -> float | None:
    """Return the first capture of ``pattern`` in ``text`` as a float."""
    match = pattern.search(text)
    if match is None:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def numbered_line_pattern(index: int, name: str) -> re.Pattern[str]:
    """``01. name：8.5`` style lines (half- or full-width punctuation)."""
    return re.compile(
        rf"0?{index}[.．]\s*{re.escape(name)}[：:]\s*([0-9]+\.?[0-9]*)",
        re.IGNORECASE,
    )


def table_row_pattern(index: int) -> re.Pattern[str]:
    """``| 01 | name | 8.5 |`` style Markdown table rows."""
    return re.compile(rf"\|\s*0?{index}\s*\|[^|]*\|\s*([0-9]+\.?[0-9]*)\s*\|")


def proximity_pattern(name: str) -> re.Pattern[str]:
    """The item name followed, after any non-digits, by a decimal like ``7.5``."""
    return re.compile(rf"{re.escape(name)}[^0-9]*([0-9]+\.[0-9])")


@dataclass(frozen=True)
class ItemExtractor:
    """Ordered extraction strategies for a single rubric item."""

    index: int
    name: str
    strategies: tuple[ExtractorStrategy, ...]

    def extract(self, text: str) -> float | None:
        for strategy in self.strategies:
            value = strategy(text)
            if value is not None:
                return value
        return None


def build_item_extractor(index: int, name: str) -> ItemExtractor:
    """Compile the strategies for item ``index`` (1-based)."""
    patterns = (
        numbered_line_pattern(index, name),
        table_row_pattern(index),
        proximity_pattern(name),
    )
    return ItemExtractor(
        index=index,
        name=name,
        strategies=tuple(partial(_first_number, pattern) for pattern in patterns),
    )


class ScoreParser:
    """Parse evaluator prose into a positional score vector."""

    def __init__(self, item_names: Iterable[str] = ITEM_NAMES) -> None:
        self.extractors: tuple[ItemExtractor, ...] = tuple(
            build_item_extractor(i, name)
            for i, name in enumerate(item_names, start=1)
        )

    def extract_item(self, index: int, text: str) -> float | None:
        """Return the score for item ``index`` (1-based) or ``None`` if absent."""
        return self.extractors[index - 1].extract(text)

    def parse(self, scoring_text: str) -> list[float]:
        """Return one score per rubric item, ``0.0`` where nothing matched."""
        if not isinstance(scoring_text, str):
            scoring_text = ""

        scores: list[float] = []
        missing: list[str] = []
        for extractor in self.extractors:
            value = extractor.extract(scoring_text)
            if value is None:
                missing.append(extractor.name)
                value = MISSING_SCORE
            scores.append(value)

        if missing and scoring_text:
            logger.warning(
                "Some rubric scores could not be detected; defaulting to 0.",
                missing_items=missing,
            )
        return scores


default_parser = ScoreParser()


def parse_scores(scoring_text: str) -> list[float]:
    """Extract the 14 rubric scores from ``scoring_text`` using the default table."""
    return default_parser.parse(scoring_text)
