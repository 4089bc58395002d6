"""Parsing of evaluator output for SL Score."""

from .score_extraction import (
    ItemExtractor,
    ScoreParser,
    build_item_extractor,
    default_parser,
    numbered_line_pattern,
    parse_scores,
    proximity_pattern,
    table_row_pattern,
)

__all__ = [
    "ItemExtractor",
    "ScoreParser",
    "build_item_extractor",
    "default_parser",
    "numbered_line_pattern",
    "parse_scores",
    "proximity_pattern",
    "table_row_pattern",
]
