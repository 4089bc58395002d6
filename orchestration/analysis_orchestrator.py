# orchestration/analysis_orchestrator.py
"""Four-phase LLM analysis of a story against the structure rubric.

Each phase is a generator script that yields ``Notify``, ``Wait`` and
``LLMCall`` steps. ``AnalysisOrchestrator`` drives the scripts: it performs
waits through the injected clock, runs retried LLM calls and sends the text
(or throws the error) back into the script. Cancellation is checked before
every step.
"""

from __future__ import annotations

import asyncio
import inspect
import math
from collections.abc import Awaitable, Callable, Sequence

import structlog

from config import SLScoreSettings, settings
from core.llm_interface import AsyncioClock, Clock, LLMClient, call_llm_with_retries
from models import (
    AnalysisResults,
    ChunkExtraction,
    PipelinePhase,
    ProgressEvent,
    StoryChunk,
    StoryMeta,
)
from parsing import parse_scores
from processing.composite_score import ScoreVectorError, compute_composite
from processing.phase_prompts import (
    build_extraction_prompt,
    build_mapping_prompt,
    build_scoring_prompt,
    build_verification_prompt,
    format_extractions,
)
from processing.story_chunker import chunk_story

from .pipeline_state import (
    AnalysisCancelledError,
    LLMCall,
    Notify,
    PhaseScript,
    PipelineState,
    Wait,
    notify,
)
from .token_accountant import Stage, TokenAccountant

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], Awaitable[None] | None]

RATE_LIMIT_WAIT_MESSAGE = "レート制限回避のため少し待機..."
PHASE_WAIT_MESSAGE = "トークン制限回避のため{seconds:.0f}秒待機..."


def combine_mapping_halves(first: str, second: str) -> str:
    return f"【前半分析】\n{first}\n\n【後半分析】\n{second}"


def split_extractions(
    extractions: Sequence[ChunkExtraction],
) -> tuple[list[ChunkExtraction], list[ChunkExtraction]]:
    """Split at ``ceil(n / 2)``; the first half gets the extra item."""
    half = math.ceil(len(extractions) / 2)
    return list(extractions[:half]), list(extractions[half:])


def extraction_script(
    state: PipelineState,
    meta: StoryMeta,
    chunks: Sequence[StoryChunk],
    chunk_delay: float,
) -> PhaseScript[list[ChunkExtraction]]:
    """Phase 1: one call per chunk. Chunk failures are recorded and skipped."""
    total = len(chunks)
    extractions: list[ChunkExtraction] = []
    for i, chunk in enumerate(chunks):
        yield notify(
            1,
            "progress",
            f"精読中: {chunk.label}（{i + 1}/{total}）",
            progress=i / total * 100,
        )
        prompt = build_extraction_prompt(meta, chunk.label, chunk.text, i + 1, total)
        try:
            result = yield LLMCall(Stage.EXTRACTION, prompt, label=chunk.label)
        except Exception as exc:
            state.add_error(f"Phase 1 ({chunk.label}): {exc}")
            yield notify(1, "error", f"エラー: {chunk.label} - {exc}")
            continue
        extractions.append(ChunkExtraction(label=chunk.label, result=result))
        if i < total - 1:
            yield notify(1, "info", RATE_LIMIT_WAIT_MESSAGE)
            yield Wait(chunk_delay)

    state.results.phases.extraction = extractions
    yield notify(1, "complete", f"Phase 1 完了: {len(extractions)}チャンク処理済み")
    return extractions


def mapping_script(
    state: PipelineState,
    meta: StoryMeta,
    extractions: Sequence[ChunkExtraction],
    phase_delay: float,
) -> PhaseScript[bool]:
    """Phase 2: map each half of the extractions, then combine."""
    yield notify(2, "start", "Phase 2: 構造マッピング開始")
    yield notify(2, "info", PHASE_WAIT_MESSAGE.format(seconds=phase_delay))
    yield Wait(phase_delay)

    first_half, second_half = split_extractions(extractions)
    try:
        yield notify(2, "progress", "マッピング前半（1/2）処理中...", progress=0)
        first = yield LLMCall(
            Stage.MAPPING, build_mapping_prompt(meta, format_extractions(first_half))
        )
        yield notify(2, "info", PHASE_WAIT_MESSAGE.format(seconds=phase_delay))
        yield Wait(phase_delay)
        yield notify(2, "progress", "マッピング後半（2/2）処理中...", progress=50)
        second = yield LLMCall(
            Stage.MAPPING, build_mapping_prompt(meta, format_extractions(second_half))
        )
    except Exception as exc:
        state.add_error(f"Phase 2: {exc}")
        yield notify(2, "error", f"Phase 2 エラー: {exc}")
        return False

    state.results.phases.mapping = combine_mapping_halves(first, second)
    yield notify(2, "complete", "Phase 2 完了: 構造マッピング完了")
    return True


def scoring_script(
    state: PipelineState, meta: StoryMeta, phase_delay: float
) -> PhaseScript[bool]:
    """Phase 3: score the mapping and compute the composite."""
    yield notify(3, "start", "Phase 3: 採点開始")
    yield notify(3, "info", PHASE_WAIT_MESSAGE.format(seconds=phase_delay))
    yield Wait(phase_delay)

    try:
        scoring = yield LLMCall(
            Stage.SCORING, build_scoring_prompt(meta, state.results.phases.mapping)
        )
    except Exception as exc:
        state.add_error(f"Phase 3: {exc}")
        yield notify(3, "error", f"Phase 3 エラー: {exc}")
        return False

    state.results.phases.scoring = scoring
    scores = parse_scores(scoring)
    try:
        composite = compute_composite(scores)
    except ScoreVectorError as exc:
        state.add_error(f"Phase 3: {exc}")
        yield notify(3, "error", f"Phase 3 エラー: {exc}")
        return False
    if composite.has_zero:
        yield notify(3, "warning", "警告: 一部スコアの抽出に失敗。手動確認推奨")
    state.results.final_score = composite
    yield notify(3, "complete", f"Phase 3 完了: 補正ESCスコア {composite.final}点")
    return True


def verification_script(
    state: PipelineState, meta: StoryMeta, phase_delay: float
) -> PhaseScript[bool]:
    """Phase 4: reverse-direction check of the scoring. Failures are non-fatal."""
    yield notify(4, "start", "Phase 4: 逆方向検証開始（見落とし検出）")
    yield notify(4, "info", PHASE_WAIT_MESSAGE.format(seconds=phase_delay))
    yield Wait(phase_delay)

    try:
        verification = yield LLMCall(
            Stage.VERIFICATION,
            build_verification_prompt(meta, state.results.phases.scoring),
        )
    except Exception as exc:
        state.add_error(f"Phase 4: {exc}")
        yield notify(4, "error", f"Phase 4 エラー: {exc}")
        return False

    state.results.phases.verification = verification
    yield notify(4, "complete", "Phase 4 完了: 検証結果出力済み")
    return True


class AnalysisOrchestrator:
    """Run the extraction, mapping, scoring and verification phases."""

    def __init__(
        self,
        llm_client: LLMClient,
        clock: Clock | None = None,
        settings: SLScoreSettings = settings,
    ):
        self.llm_client = llm_client
        self.clock = clock or AsyncioClock()
        self.settings = settings

    async def _emit(
        self, on_progress: ProgressCallback | None, step: Notify
    ) -> None:
        if on_progress is None:
            return
        outcome = on_progress(step.event)
        if inspect.isawaitable(outcome):
            await outcome

    async def _call_llm(
        self, step: LLMCall, model: str | None
    ) -> tuple[str, dict[str, int] | None]:
        return await call_llm_with_retries(
            self.llm_client,
            step.prompt,
            clock=self.clock,
            max_retries=self.settings.LLM_MAX_RETRIES,
            rate_limit_backoff=self.settings.RATE_LIMIT_BACKOFF_SECONDS,
            error_backoff=self.settings.ERROR_BACKOFF_SECONDS,
            model=model,
        )

    async def _drive(
        self,
        script: PhaseScript,
        *,
        on_progress: ProgressCallback | None,
        cancel_event: asyncio.Event | None,
        accountant: TokenAccountant,
        model: str | None,
    ):
        """Execute ``script`` step by step and return its return value."""
        reply: str | None = None
        error: Exception | None = None
        try:
            while True:
                try:
                    step = (
                        script.send(reply) if error is None else script.throw(error)
                    )
                except StopIteration as stop:
                    return stop.value
                reply, error = None, None

                if cancel_event is not None and cancel_event.is_set():
                    raise AnalysisCancelledError("Analysis cancelled by caller.")

                if isinstance(step, Notify):
                    await self._emit(on_progress, step)
                elif isinstance(step, Wait):
                    await self.clock.sleep(step.seconds)
                elif isinstance(step, LLMCall):
                    try:
                        reply, usage = await self._call_llm(step, model)
                    except Exception as exc:
                        error = exc
                    else:
                        accountant.record_usage(step.stage, usage)
                else:
                    raise TypeError(f"Unknown pipeline step: {step!r}")
        finally:
            script.close()

    async def run(
        self,
        meta: StoryMeta,
        story_text: str,
        on_progress: ProgressCallback | None = None,
        skip_verification: bool = False,
        cancel_event: asyncio.Event | None = None,
        model: str | None = None,
    ) -> AnalysisResults:
        """Analyse ``story_text`` and return the accumulated results.

        Failures are recorded in ``results.errors``; mapping and scoring
        failures end the run in ``FAILED``.
        """
        state = PipelineState()
        accountant = TokenAccountant()
        cfg = self.settings

        async def drive(script: PhaseScript):
            return await self._drive(
                script,
                on_progress=on_progress,
                cancel_event=cancel_event,
                accountant=accountant,
                model=model,
            )

        try:
            await self._emit(
                on_progress, notify(1, "start", "Phase 1: テキスト分割・精読開始")
            )
            chunks = chunk_story(
                story_text,
                group_size=cfg.CHUNK_GROUP_SIZE,
                max_chunk_chars=cfg.MAX_CHUNK_CHARS,
            )
            if not chunks:
                await self._emit(
                    on_progress,
                    notify(1, "info", "本文が空のため解析をスキップしました"),
                )
                state.advance_to(PipelinePhase.DONE)
                return state.results

            await self._emit(
                on_progress, notify(1, "info", f"{len(chunks)}チャンクに分割完了")
            )
            logger.info("Starting story analysis.", chunks=len(chunks))

            extractions = await drive(
                extraction_script(state, meta, chunks, cfg.CHUNK_DELAY_SECONDS)
            )
            if not extractions:
                state.fail("Phase 1: 全チャンクの精読に失敗しました")
                return state.results

            state.advance_to(PipelinePhase.MAPPING)
            if not await drive(
                mapping_script(state, meta, extractions, cfg.PHASE_DELAY_SECONDS)
            ):
                state.advance_to(PipelinePhase.FAILED)
                return state.results

            state.advance_to(PipelinePhase.SCORING)
            if not await drive(scoring_script(state, meta, cfg.PHASE_DELAY_SECONDS)):
                state.advance_to(PipelinePhase.FAILED)
                return state.results

            if not skip_verification:
                state.advance_to(PipelinePhase.VERIFYING)
                await drive(verification_script(state, meta, cfg.PHASE_DELAY_SECONDS))

            state.advance_to(PipelinePhase.DONE)
            await self._emit(on_progress, notify(0, "done", "全フェーズ完了"))
            return state.results
        except AnalysisCancelledError as exc:
            phase_number = state.phase.number
            logger.warning("Analysis cancelled.", phase=state.phase.value)
            state.fail(f"Phase {phase_number}: {exc}")
            await self._emit(
                on_progress, notify(phase_number, "error", "解析がキャンセルされました")
            )
            return state.results
        finally:
            state.results.token_usage = accountant.summary()
            logger.info(
                "Story analysis finished.",
                state=state.phase.value,
                errors=len(state.results.errors),
                tokens=accountant.total,
            )
