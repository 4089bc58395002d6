from __future__ import annotations

import time
from collections.abc import Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import settings
from models import ChunkPreview, CompositeScore, ProgressEvent
from rubric_constants import ESC_COEFFICIENTS, ITEM_NAMES

_STATUS_STYLES = {
    "error": "bold red",
    "warning": "yellow",
    "complete": "green",
    "done": "bold green",
}


class ProgressDisplay:
    """Rich live panel fed by pipeline progress events.

    Instances are callables so they can be passed directly as ``on_progress``.
    """

    def __init__(
        self, console: Console | None = None, enabled: bool | None = None
    ) -> None:
        self.console = console or Console()
        self.enabled = settings.ENABLE_RICH_PROGRESS if enabled is None else enabled
        self.status_text_phase: Text = Text("Phase: -")
        self.status_text_message: Text = Text("Status: Initializing...")
        self.status_text_progress: Text = Text("Progress: -")
        self.status_text_elapsed_time: Text = Text("Elapsed Time: 0s")
        self.events: list[ProgressEvent] = []
        self.run_start_time: float = 0.0
        self.live: Live | None = None
        if self.enabled:
            self.live = Live(
                Panel(
                    Group(
                        self.status_text_phase,
                        self.status_text_message,
                        self.status_text_progress,
                        self.status_text_elapsed_time,
                    ),
                    title="SL Score Analysis",
                    border_style="blue",
                    expand=True,
                ),
                console=self.console,
                refresh_per_second=4,
                transient=False,
            )

    def __enter__(self) -> ProgressDisplay:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        self.run_start_time = time.time()
        if self.live:
            self.live.start()

    def stop(self) -> None:
        if self.live and self.live.is_started:
            self.live.stop()

    def __call__(self, event: ProgressEvent) -> None:
        self.update(event)

    def update(self, event: ProgressEvent) -> None:
        self.events.append(event)
        self.status_text_phase.plain = (
            f"Phase: {event.phase}/4" if event.phase else "Phase: -"
        )
        self.status_text_message.plain = f"Status: {event.message}"
        if event.progress is not None:
            self.status_text_progress.plain = f"Progress: {event.progress:.0f}%"
        elapsed_seconds = time.time() - (self.run_start_time or time.time())
        self.status_text_elapsed_time.plain = (
            f"Elapsed Time: {time.strftime('%H:%M:%S', time.gmtime(elapsed_seconds))}"
        )

        style = _STATUS_STYLES.get(event.status)
        if style:
            self.console.print(
                Text(f"[Phase {event.phase}] {event.message}", style=style)
            )


def build_score_table(
    score: CompositeScore, item_names: Sequence[str] = ITEM_NAMES
) -> Table:
    """Per-item scores with their ESC-weighted values and the composite totals."""
    table = Table(title="SL Score", show_footer=False)
    table.add_column("No.", justify="right")
    table.add_column("項目")
    table.add_column("点数", justify="right")
    table.add_column("係数", justify="right")
    table.add_column("補正値", justify="right")
    for i, (name, value, coef, weighted) in enumerate(
        zip(item_names, score.scores, ESC_COEFFICIENTS, score.weighted), start=1
    ):
        table.add_row(
            f"{i:02d}",
            name,
            Text(f"{value:.1f}", style="red" if value == 0 else ""),
            f"{coef:.2f}",
            f"{weighted:.2f}",
        )
    table.add_section()
    table.add_row("", "構成点（W1）", f"{score.w1:.1f}", "", "")
    table.add_row("", "補正点（W2）", f"{score.w2:.1f}", "", "")
    table.add_row("", Text("補正ESCスコア", style="bold"), f"{score.final:.1f}", "", "")
    return table


def build_chunk_table(preview: ChunkPreview) -> Table:
    table = Table(title=f"{preview.count} chunks")
    table.add_column("Label")
    table.add_column("Chars", justify="right")
    table.add_column("Preview")
    for item in preview.chunks:
        table.add_row(item.label, f"{item.char_count:,}", item.preview)
    return table
