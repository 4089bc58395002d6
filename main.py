# main.py
"""CLI entry point for SL Score."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from config import settings
from orchestration.cli_runner import run
from rubric_constants import RUBRIC_SIZE


def _add_meta_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("story premise")
    group.add_argument("--meta", default=None, help="YAML file with the story premise")
    group.add_argument("--protagonist", default=None)
    group.add_argument("--genre", default=None)
    group.add_argument("--theme", default=None)
    group.add_argument("--symbols", default=None)
    group.add_argument("--key-characters", dest="key_characters", default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slscore", description="Story structure scoring against the SL rubric."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    chunks = sub.add_parser("chunks", help="Preview how a story is chunked")
    chunks.add_argument("story", help="Story text file ('-' for stdin)")
    chunks.add_argument("--group-size", type=int, default=settings.CHUNK_GROUP_SIZE)
    chunks.add_argument(
        "--preview-chars", type=int, default=settings.CHUNK_PREVIEW_CHARS
    )
    chunks.add_argument("--json", action="store_true")

    score = sub.add_parser("score", help="Extract scores from evaluator output")
    score.add_argument("scoring", help="Evaluator output file ('-' for stdin)")
    score.add_argument("--json", action="store_true")

    recalc = sub.add_parser("recalc", help="Recompute the composite from 14 scores")
    recalc.add_argument(
        "scores", type=float, nargs="+", help=f"{RUBRIC_SIZE} scores in rubric order"
    )
    recalc.add_argument("--json", action="store_true")

    prompt = sub.add_parser("prompt", help="Build a hybrid-mode prompt")
    prompt.add_argument("--phase", type=int, choices=(1, 2, 3, 4), required=True)
    prompt.add_argument("--story", default=None, help="Story text file (phase 1)")
    prompt.add_argument(
        "--previous", default=None, help="Pasted answer of the previous phase"
    )
    prompt.add_argument("--output", "-o", default=None)
    _add_meta_arguments(prompt)

    analyze = sub.add_parser("analyze", help="Run the full LLM pipeline")
    analyze.add_argument("story", help="Story text file ('-' for stdin)")
    analyze.add_argument("--skip-verification", action="store_true")
    analyze.add_argument("--model", default=None)
    analyze.add_argument("--run-name", default=None)
    analyze.add_argument("--no-save", action="store_true")
    _add_meta_arguments(analyze)

    sub.add_parser("meta", help="Print rubric item names and coefficients")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Parse command-line arguments and run the requested command."""
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
