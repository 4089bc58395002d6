"""Central package for SL Score data models."""

from .analysis_models import (
    AnalysisPhases,
    AnalysisResults,
    ChunkExtraction,
    ChunkPreview,
    ChunkPreviewItem,
    CompositeScore,
    HybridPrompt,
    PipelinePhase,
    ProgressEvent,
    ProgressStatus,
    ScoreReport,
    StoryChunk,
    StoryMeta,
)

__all__ = [
    "AnalysisPhases",
    "AnalysisResults",
    "ChunkExtraction",
    "ChunkPreview",
    "ChunkPreviewItem",
    "CompositeScore",
    "HybridPrompt",
    "PipelinePhase",
    "ProgressEvent",
    "ProgressStatus",
    "ScoreReport",
    "StoryChunk",
    "StoryMeta",
]
