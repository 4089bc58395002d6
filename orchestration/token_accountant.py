from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """LLM-calling phases for token accounting."""

    EXTRACTION = "extraction"
    MAPPING = "mapping"
    SCORING = "scoring"
    VERIFICATION = "verification"


class TokenAccountant:
    """Accumulate and log completion-token usage across phases."""

    def __init__(self) -> None:
        self.total: int = 0
        self.stage_totals: dict[str, int] = {}

    def record_usage(self, stage: Stage | str, usage: dict[str, int] | None) -> None:
        """Record token usage for a stage."""
        stage_name = stage.value if isinstance(stage, Stage) else stage
        usage_dict = usage or {}

        if isinstance(usage_dict.get("completion_tokens"), int):
            completed_tokens = usage_dict["completion_tokens"]
            self.total += completed_tokens
            self.stage_totals[stage_name] = (
                self.stage_totals.get(stage_name, 0) + completed_tokens
            )
            logger.info(
                "Tokens from '%s': %s. Total generated this run: %s",
                stage_name,
                completed_tokens,
                self.total,
            )
        elif isinstance(usage_dict.get("total_tokens"), int):
            logger.info(
                "Total tokens from '%s': %s. (Completion tokens not specifically available). Total generated this run: %s",
                stage_name,
                usage_dict["total_tokens"],
                self.total,
            )
        elif usage_dict:
            logger.warning(
                "'%s' - 'completion_tokens' missing or not int in usage data. Tokens not added. Usage: %s",
                stage_name,
                usage_dict,
            )

    def get_stage_total(self, stage: Stage | str) -> int:
        """Return accumulated tokens for a stage."""
        stage_name = stage.value if isinstance(stage, Stage) else stage
        return self.stage_totals.get(stage_name, 0)

    def summary(self) -> dict[str, int]:
        """Per-stage totals plus the overall ``total``."""
        return {**self.stage_totals, "total": self.total}
