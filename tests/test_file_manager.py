import json

import pytest

from models import AnalysisPhases, AnalysisResults, ChunkExtraction, PipelinePhase
from processing.composite_score import compute_composite
from storage.file_manager import FileManager, safe_run_name


@pytest.mark.asyncio
async def test_save_analysis_results(tmp_path, sample_scores):
    results = AnalysisResults(
        phases=AnalysisPhases(
            extraction=[ChunkExtraction(label="第1話〜第1話", result="抽出")],
            mapping="マッピング",
            scoring="採点",
        ),
        final_score=compute_composite(sample_scores),
        errors=["Phase 4: late"],
        state=PipelinePhase.DONE,
    )
    manager = FileManager(base_dir=str(tmp_path))

    target = await manager.save_analysis_results(results, "my run")

    run_dir = tmp_path / "my_run"
    assert target == str(run_dir)
    data = json.loads((run_dir / "results.json").read_text(encoding="utf-8"))
    assert data["state"] == "done"
    assert data["final_score"]["w1"] == 81.1
    assert data["errors"] == ["Phase 4: late"]
    assert (run_dir / "phase1_extraction.txt").read_text(
        encoding="utf-8"
    ) == "=== 第1話〜第1話 ===\n抽出"
    assert (run_dir / "phase2_mapping.txt").read_text(encoding="utf-8") == "マッピング"
    assert (run_dir / "phase3_scoring.txt").exists()
    assert not (run_dir / "phase4_verification.txt").exists()


def test_safe_run_name():
    assert safe_run_name("../etc/passwd") == "etc_passwd"
    assert safe_run_name("物語_01") == "物語_01"
    assert safe_run_name("///") == "run"
