# orchestration/pipeline_state.py
"""Phase state machine and the step types yielded by phase scripts."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog

from models import AnalysisResults, PipelinePhase, ProgressEvent

from .token_accountant import Stage

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ALLOWED_TRANSITIONS: dict[PipelinePhase, frozenset[PipelinePhase]] = {
    PipelinePhase.EXTRACTING: frozenset(
        {PipelinePhase.MAPPING, PipelinePhase.DONE, PipelinePhase.FAILED}
    ),
    PipelinePhase.MAPPING: frozenset({PipelinePhase.SCORING, PipelinePhase.FAILED}),
    PipelinePhase.SCORING: frozenset(
        {PipelinePhase.VERIFYING, PipelinePhase.DONE, PipelinePhase.FAILED}
    ),
    PipelinePhase.VERIFYING: frozenset({PipelinePhase.DONE, PipelinePhase.FAILED}),
    PipelinePhase.DONE: frozenset(),
    PipelinePhase.FAILED: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when the pipeline is asked to move to an unreachable phase."""

    def __init__(self, current: PipelinePhase, target: PipelinePhase):
        super().__init__(f"Cannot move from '{current.value}' to '{target.value}'.")
        self.current = current
        self.target = target


class AnalysisCancelledError(RuntimeError):
    """Raised inside the driver when the caller cancels a run."""


@dataclass(frozen=True)
class Notify:
    """Emit a progress event to the caller."""

    event: ProgressEvent


@dataclass(frozen=True)
class Wait:
    """Pause for ``seconds`` through the injected clock."""

    seconds: float


@dataclass(frozen=True)
class LLMCall:
    """Run one retried LLM call; the text (or the error) is sent back."""

    stage: Stage
    prompt: str
    label: str | None = None


Step = Notify | Wait | LLMCall
PhaseScript = Generator[Step, Any, T]


def notify(
    phase: int, status: str, message: str, progress: float | None = None
) -> Notify:
    return Notify(
        ProgressEvent(phase=phase, status=status, message=message, progress=progress)
    )


@dataclass
class PipelineState:
    """Current phase plus the results accumulated so far."""

    results: AnalysisResults = field(default_factory=AnalysisResults)

    @property
    def phase(self) -> PipelinePhase:
        return self.results.state

    def can_advance_to(self, target: PipelinePhase) -> bool:
        return target in ALLOWED_TRANSITIONS[self.phase]

    def advance_to(self, target: PipelinePhase) -> None:
        if not self.can_advance_to(target):
            raise InvalidTransitionError(self.phase, target)
        logger.debug(
            "Pipeline phase change.", source=self.phase.value, target=target.value
        )
        self.results.state = target

    def add_error(self, message: str) -> None:
        self.results.errors.append(message)

    def fail(self, message: str) -> None:
        """Record ``message`` and move to ``FAILED``."""
        self.add_error(message)
        self.advance_to(PipelinePhase.FAILED)
