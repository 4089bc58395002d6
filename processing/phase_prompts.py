# processing/phase_prompts.py
"""Prompt builders for the four analysis phases."""

from __future__ import annotations

from collections.abc import Iterable

from models import ChunkExtraction, StoryMeta
from prompt_renderer import render_prompt
from rubric_constants import ITEM_NAMES


def format_extractions(extractions: Iterable[ChunkExtraction]) -> str:
    """Join extraction results as ``=== label ===`` blocks separated by blank lines."""
    return "\n\n".join(
        f"=== {extraction.label} ===\n{extraction.result}" for extraction in extractions
    )


def build_extraction_prompt(
    meta: StoryMeta,
    chunk_label: str,
    chunk_text: str,
    chunk_index: int,
    total_chunks: int,
) -> str:
    """Prompt for reading one chunk (``chunk_index`` is 1-based)."""
    return render_prompt(
        "extraction.j2",
        {
            "meta": meta,
            "include_characters": True,
            "chunk_label": chunk_label,
            "chunk_text": chunk_text,
            "chunk_index": chunk_index,
            "total_chunks": total_chunks,
        },
    )


def build_mapping_prompt(meta: StoryMeta, all_extractions: str) -> str:
    return render_prompt(
        "mapping.j2",
        {"meta": meta, "item_names": ITEM_NAMES, "extractions": all_extractions},
    )


def build_scoring_prompt(meta: StoryMeta, mapping_result: str) -> str:
    """Prompt asking for one ``NN. 項目名：score`` line per rubric item."""
    return render_prompt(
        "scoring.j2",
        {"meta": meta, "item_names": ITEM_NAMES, "mapping_result": mapping_result},
    )


def build_verification_prompt(meta: StoryMeta, scoring_result: str) -> str:
    return render_prompt(
        "verification.j2", {"meta": meta, "scoring_result": scoring_result}
    )
