# storage/file_manager.py
"""Utility class for asynchronous file operations."""

from __future__ import annotations

import asyncio
import os

from config import settings
from models import AnalysisResults
from processing.phase_prompts import format_extractions

PHASE_FILE_NAMES = {
    "extraction": "phase1_extraction.txt",
    "mapping": "phase2_mapping.txt",
    "scoring": "phase3_scoring.txt",
    "verification": "phase4_verification.txt",
}


def safe_run_name(run_name: str) -> str:
    """Reduce ``run_name`` to characters that are safe in a directory name."""
    cleaned = "".join(c if c.isalnum() or c in ["_", "-"] else "_" for c in run_name)
    return cleaned.strip("_") or "run"


class FileManager:
    """Handle reading and writing analysis artifacts."""

    def __init__(
        self,
        base_dir: str = settings.BASE_OUTPUT_DIR,
        results_file: str = settings.RESULTS_FILE,
    ) -> None:
        self.base_dir = base_dir
        self.results_file = results_file

    def run_dir(self, run_name: str) -> str:
        return os.path.join(self.base_dir, safe_run_name(run_name))

    async def save_analysis_results(
        self, results: AnalysisResults, run_name: str
    ) -> str:
        """Write ``results.json`` plus one text file per phase output.

        Returns the directory the files were written to.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._save_analysis_results_sync, results, run_name
        )

    def _save_analysis_results_sync(
        self, results: AnalysisResults, run_name: str
    ) -> str:
        target_dir = self.run_dir(run_name)
        os.makedirs(target_dir, exist_ok=True)

        with open(
            os.path.join(target_dir, self.results_file), "w", encoding="utf-8"
        ) as f:
            f.write(results.model_dump_json(indent=2))

        phases = results.phases
        outputs = {
            "extraction": (
                format_extractions(phases.extraction) if phases.extraction else None
            ),
            "mapping": phases.mapping,
            "scoring": phases.scoring,
            "verification": phases.verification,
        }
        for phase_name, content in outputs.items():
            if not content:
                continue
            with open(
                os.path.join(target_dir, PHASE_FILE_NAMES[phase_name]),
                "w",
                encoding="utf-8",
            ) as f:
                f.write(content)
        return target_dir
