# orchestration/hybrid_session.py
"""Prompt building for hybrid mode, where a person relays prompts to any LLM.

Each phase's prompt is built from the answer pasted back for the previous
phase. No LLM is called here.
"""

from __future__ import annotations

import structlog

from config import settings
from models import HybridPrompt, StoryMeta
from processing.phase_prompts import (
    build_extraction_prompt,
    build_mapping_prompt,
    build_scoring_prompt,
    build_verification_prompt,
)

logger = structlog.get_logger(__name__)

WHOLE_STORY_LABEL = "全文"


class HybridInputError(ValueError):
    """Raised when hybrid-mode input is missing or too short to use."""


def validate_pasted_response(
    response: str | None, min_chars: int = settings.HYBRID_MIN_RESPONSE_CHARS
) -> str:
    """Return the trimmed answer, or raise if it is empty or shorter than ``min_chars``."""
    text = (response or "").strip()
    if not text:
        raise HybridInputError("AIの回答を貼り付けてください")
    if len(text) < min_chars:
        raise HybridInputError("回答が短すぎます。AIの出力全文を貼り付けてください。")
    return text


def build_hybrid_prompt(
    phase: int,
    meta: StoryMeta,
    story_text: str | None = None,
    previous_result: str | None = None,
) -> HybridPrompt:
    """Build the prompt a person should paste into an LLM for ``phase`` (1-4)."""
    if phase == 1:
        if not story_text or not story_text.strip():
            raise HybridInputError("Phase 1 requires the story text.")
        prompt = build_extraction_prompt(
            meta, WHOLE_STORY_LABEL, story_text.strip(), 1, 1
        )
    elif phase in (2, 3, 4):
        previous = validate_pasted_response(previous_result)
        if phase == 2:
            prompt = build_mapping_prompt(meta, previous)
        elif phase == 3:
            prompt = build_scoring_prompt(meta, previous)
        else:
            prompt = build_verification_prompt(meta, previous)
    else:
        raise HybridInputError(f"Unknown phase: {phase}")

    logger.debug("Built hybrid prompt.", phase=phase, chars=len(prompt))
    return HybridPrompt(phase=phase, prompt=prompt, char_count=len(prompt))
