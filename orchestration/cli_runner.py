# orchestration/cli_runner.py
"""Command implementations behind the ``slscore`` CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime

import structlog
from rich.console import Console

from core.llm_interface import LLMService
from models import AnalysisResults, PipelinePhase, StoryMeta
from orchestration.analysis_orchestrator import AnalysisOrchestrator
from orchestration.hybrid_session import HybridInputError, build_hybrid_prompt
from processing.composite_score import ScoreVectorError
from processing.score_report import calculate_scores, recalculate
from processing.story_chunker import preview_chunks
from rubric_constants import rubric_metadata
from storage.file_manager import FileManager
from ui.progress_display import ProgressDisplay, build_chunk_table, build_score_table
from utils.logging import setup_logging
from yaml_parser import load_story_meta

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

console = Console()


def _read_text(path: str) -> str:
    """Read ``path`` as UTF-8, or standard input when ``path`` is ``-``."""
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _resolve_meta(args: argparse.Namespace) -> StoryMeta | None:
    """Build the story premise from ``--meta`` or the individual flags."""
    if args.meta:
        meta = load_story_meta(args.meta)
        if meta is None:
            console.print(f"[red]Could not load story metadata from {args.meta}[/red]")
        return meta
    if not args.protagonist:
        console.print("[red]Either --meta or --protagonist is required.[/red]")
        return None
    return StoryMeta(
        protagonist=args.protagonist,
        genre=args.genre or "",
        theme=args.theme or "",
        symbols=args.symbols or "",
        key_characters=args.key_characters or "",
    )


def run_chunks(args: argparse.Namespace) -> int:
    preview = preview_chunks(
        _read_text(args.story),
        group_size=args.group_size,
        preview_chars=args.preview_chars,
    )
    if args.json:
        console.print_json(preview.model_dump_json())
    else:
        console.print(build_chunk_table(preview))
    return EXIT_OK


def run_score(args: argparse.Namespace) -> int:
    report = calculate_scores(_read_text(args.scoring))
    if args.json:
        console.print_json(report.model_dump_json())
    else:
        console.print(build_score_table(report))
        if report.has_zero:
            console.print("[yellow]警告: 一部スコアの抽出に失敗。手動確認推奨[/yellow]")
    return EXIT_OK


def run_recalc(args: argparse.Namespace) -> int:
    try:
        report = recalculate(args.scores)
    except ScoreVectorError as exc:
        console.print(str(exc), style="red", markup=False)
        return EXIT_USAGE
    if args.json:
        console.print_json(report.model_dump_json())
    else:
        console.print(build_score_table(report))
    return EXIT_OK


def run_prompt(args: argparse.Namespace) -> int:
    meta = _resolve_meta(args)
    if meta is None:
        return EXIT_USAGE
    try:
        hybrid = build_hybrid_prompt(
            args.phase,
            meta,
            story_text=_read_text(args.story) if args.story else None,
            previous_result=_read_text(args.previous) if args.previous else None,
        )
    except HybridInputError as exc:
        console.print(str(exc), style="red", markup=False)
        return EXIT_USAGE

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(hybrid.prompt)
        console.print(
            f"Phase {hybrid.phase} prompt ({hybrid.char_count:,} chars) written to {args.output}"
        )
    else:
        console.print(hybrid.prompt, markup=False, highlight=False)
    return EXIT_OK


def run_meta(args: argparse.Namespace) -> int:
    console.print_json(json.dumps(rubric_metadata(), ensure_ascii=False))
    return EXIT_OK


async def _analyze(
    args: argparse.Namespace, meta: StoryMeta, story_text: str
) -> AnalysisResults:
    async with LLMService() as llm:
        orchestrator = AnalysisOrchestrator(llm)
        with ProgressDisplay(console=console) as display:
            results = await orchestrator.run(
                meta,
                story_text,
                on_progress=display,
                skip_verification=args.skip_verification,
                model=args.model,
            )
    if not args.no_save:
        run_name = args.run_name or datetime.now().strftime("analysis_%Y%m%d_%H%M%S")
        target = await FileManager().save_analysis_results(results, run_name)
        console.print(f"Results saved to {target}")
    return results


def run_analyze(args: argparse.Namespace) -> int:
    meta = _resolve_meta(args)
    if meta is None:
        return EXIT_USAGE
    story_text = _read_text(args.story)
    setup_logging()
    try:
        results = asyncio.run(_analyze(args, meta, story_text))
    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user; shutting down.")
        return EXIT_FAILED

    if results.final_score is not None:
        console.print(build_score_table(results.final_score))
    for error in results.errors:
        console.print(error, style="red", markup=False, highlight=False)
    return EXIT_OK if results.state is PipelinePhase.DONE else EXIT_FAILED


COMMANDS = {
    "chunks": run_chunks,
    "score": run_score,
    "recalc": run_recalc,
    "prompt": run_prompt,
    "analyze": run_analyze,
    "meta": run_meta,
}


def run(args: argparse.Namespace) -> int:
    """Dispatch ``args.command`` and return the process exit code."""
    try:
        return COMMANDS[args.command](args)
    except (OSError, ValueError) as exc:
        console.print(str(exc), style="red", markup=False)
        return EXIT_USAGE
