# models/analysis_models.py
"""Pydantic models exchanged between the chunker, scorer and orchestrator."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AnalysisBaseModel(BaseModel):
    """Base model for analysis payloads."""

    model_config = ConfigDict(from_attributes=True)


class StoryChunk(AnalysisBaseModel):
    """A labelled slice of the story sized for one evaluator call."""

    model_config = ConfigDict(frozen=True)

    label: str
    text: str


class ChunkPreviewItem(AnalysisBaseModel):
    label: str
    char_count: int
    preview: str


class ChunkPreview(AnalysisBaseModel):
    """Summary of how a story would be chunked."""

    count: int
    chunks: list[ChunkPreviewItem] = Field(default_factory=list)


class CompositeScore(AnalysisBaseModel):
    """Weighted composite derived from a raw 14-item score vector.

    ``w1``, ``w2`` and ``final`` are display values on a 0-100 scale.
    ``w1_raw`` and ``w2_raw`` keep the unrounded 0-10 means.
    """

    scores: list[float]
    w1_raw: float
    w2_raw: float
    w1: float
    w2: float
    final: float
    weighted: list[float]
    has_zero: bool


class ScoreReport(CompositeScore):
    """Composite score together with the rubric tables it was computed from."""

    item_names: list[str]
    coefficients: list[float]


class StoryMeta(AnalysisBaseModel):
    """Evaluation premise supplied by the analyst."""

    protagonist: str = Field(min_length=1)
    genre: str = ""
    theme: str = ""
    symbols: str = ""
    key_characters: str = ""


class ChunkExtraction(AnalysisBaseModel):
    """Phase 1 analysis of one chunk."""

    label: str
    result: str


ProgressStatus = Literal[
    "start", "progress", "info", "warning", "error", "complete", "done"
]


class ProgressEvent(AnalysisBaseModel):
    """Phase-by-phase progress notification."""

    phase: int = Field(ge=0, le=4)
    status: ProgressStatus
    message: str
    progress: float | None = Field(default=None, ge=0, le=100)


class PipelinePhase(str, Enum):
    """States of the analysis pipeline."""

    EXTRACTING = "extracting"
    MAPPING = "mapping"
    SCORING = "scoring"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelinePhase.DONE, PipelinePhase.FAILED)

    @property
    def number(self) -> int:
        """Phase number used in progress events (0 for terminal states)."""
        return _PHASE_NUMBERS.get(self, 0)


_PHASE_NUMBERS = {
    PipelinePhase.EXTRACTING: 1,
    PipelinePhase.MAPPING: 2,
    PipelinePhase.SCORING: 3,
    PipelinePhase.VERIFYING: 4,
}


class AnalysisPhases(AnalysisBaseModel):
    extraction: list[ChunkExtraction] | None = None
    mapping: str | None = None
    scoring: str | None = None
    verification: str | None = None


class AnalysisResults(AnalysisBaseModel):
    """Everything a pipeline run produced, including partial output on failure."""

    phases: AnalysisPhases = Field(default_factory=AnalysisPhases)
    final_score: CompositeScore | None = None
    errors: list[str] = Field(default_factory=list)
    state: PipelinePhase = PipelinePhase.EXTRACTING
    token_usage: dict[str, int] = Field(default_factory=dict)


class HybridPrompt(AnalysisBaseModel):
    """Prompt handed to a human operator in hybrid mode."""

    phase: int = Field(ge=1, le=4)
    prompt: str
    char_count: int
