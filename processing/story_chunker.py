# processing/story_chunker.py
"""Split long story text into labelled chunks for per-chunk LLM analysis.

Stories that carry episode markers (``タブ 3``, ``＜第3話＞``, ``スピンオフ``)
are split before each marker and grouped into batches of consecutive episodes.
Unstructured text falls back to fixed-size slices.
"""

from __future__ import annotations

import re

import structlog

from models import ChunkPreview, ChunkPreviewItem, StoryChunk
from rubric_constants import (
    EPISODE_RANGE_LABEL,
    GENERIC_PART_LABEL,
    SPINOFF_LABEL,
    SPINOFF_MARKER,
    TAB_MARKER,
)

logger = structlog.get_logger(__name__)

DEFAULT_GROUP_SIZE = 8
FALLBACK_CHUNK_CHARS = 15000
DEFAULT_PREVIEW_CHARS = 200

# Zero-width split points placed immediately before each marker.
_BOUNDARY_RE = re.compile(rf"(?={TAB_MARKER}\s*[0-9]+|＜第[0-9]+話＞|{SPINOFF_MARKER})")
_EPISODE_NUMBER_RE = re.compile(rf"第([0-9]+)話|{TAB_MARKER}\s*([0-9]+)|{SPINOFF_MARKER}")


def split_at_boundaries(text: str) -> list[str]:
    """Return the non-blank segments of ``text`` split before each marker."""
    return [part for part in _BOUNDARY_RE.split(text) if part.strip()]


def slice_fixed_size(
    text: str, max_chunk_chars: int = FALLBACK_CHUNK_CHARS
) -> list[StoryChunk]:
    """Slice ``text`` into consecutive pieces of at most ``max_chunk_chars``."""
    if max_chunk_chars < 1:
        raise ValueError("max_chunk_chars must be at least 1")
    pieces = [
        text[start : start + max_chunk_chars]
        for start in range(0, len(text), max_chunk_chars)
    ]
    return [
        StoryChunk(label=GENERIC_PART_LABEL.format(index=i + 1), text=piece)
        for i, piece in enumerate(pieces)
    ]


def episode_marker(segment: str) -> str | None:
    """Return the episode number (or ``SP``) of the first marker in ``segment``."""
    match = _EPISODE_NUMBER_RE.search(segment)
    if not match:
        return None
    return match.group(1) or match.group(2) or SPINOFF_LABEL


def group_label(group: list[str], group_index: int) -> str:
    """Label a batch from its first and last segment.

    Falls back to ``パートK`` when either endpoint carries no marker.
    """
    first = episode_marker(group[0].strip())
    last = episode_marker(group[-1].strip())
    if first is not None and last is not None:
        return EPISODE_RANGE_LABEL.format(first=first, last=last)
    return GENERIC_PART_LABEL.format(index=group_index + 1)


def chunk_story(
    text: str,
    group_size: int = DEFAULT_GROUP_SIZE,
    max_chunk_chars: int = FALLBACK_CHUNK_CHARS,
) -> list[StoryChunk]:
    """Partition ``text`` into ordered, labelled chunks.

    Args:
        text: Raw story text.
        group_size: Number of consecutive episode segments per chunk.
        max_chunk_chars: Slice size used when no episode markers are found.

    Returns:
        Chunks in source order. Empty or blank text yields an empty list.
    """
    if group_size < 1:
        raise ValueError("group_size must be at least 1")
    if not text or not text.strip():
        return []

    segments = split_at_boundaries(text)
    if len(segments) <= 1:
        chunks = slice_fixed_size(text.strip(), max_chunk_chars)
        logger.debug(
            "No episode markers found; sliced story by size.",
            chunks=len(chunks),
            chars=len(text),
        )
        return chunks

    chunks: list[StoryChunk] = []
    for group_index, start in enumerate(range(0, len(segments), group_size)):
        group = segments[start : start + group_size]
        chunks.append(
            StoryChunk(
                label=group_label(group, group_index),
                text="\n".join(segment.strip() for segment in group),
            )
        )
    logger.debug(
        "Grouped episode segments into chunks.",
        segments=len(segments),
        chunks=len(chunks),
        group_size=group_size,
    )
    return chunks


def preview_chunks(
    text: str,
    group_size: int = DEFAULT_GROUP_SIZE,
    preview_chars: int = DEFAULT_PREVIEW_CHARS,
) -> ChunkPreview:
    """Describe how ``text`` would be chunked without running any analysis."""
    chunks = chunk_story(text, group_size=group_size)
    return ChunkPreview(
        count=len(chunks),
        chunks=[
            ChunkPreviewItem(
                label=chunk.label,
                char_count=len(chunk.text),
                preview=chunk.text[:preview_chars] + "...",
            )
            for chunk in chunks
        ],
    )
