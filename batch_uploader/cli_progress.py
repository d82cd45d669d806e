"""Console rendering and progress helpers for batch uploader CLI."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from rich.console import Console, Group
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from .models import NotificationRequest, UploadItem, UploadOutcome
from .utils.events import BatchProgress

console = Console()

MAX_LISTED_NAMES = 10


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]batch-up[/bold green]",
        subtitle="[dim]batch uploader CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def _listed_names(names: Sequence[str]) -> str:
    shown = list(names[:MAX_LISTED_NAMES])
    hidden = len(names) - len(shown)
    lines = [f"  • {name}" for name in shown]
    if hidden > 0:
        lines.append(f"  … and {hidden} more")
    return "\n".join(lines)


class ConsoleNotifier:
    """Implements INotifier by printing one rich panel per notification."""

    def __init__(self, target: Optional[Console] = None):
        self._console = target or console

    def notify(self, request: NotificationRequest) -> None:
        body = [Text(request.message, style="bold")]
        if request.is_aggregate or len(request.affected) > 1:
            body.append(Text(_listed_names(request.affected)))
        elif request.affected:
            body.append(Text(request.affected[0], style="dim"))
        if request.retryable:
            body.append(Text("Retry available", style="yellow"))

        title = f"[bold red]{request.severity.value}[/bold red]"
        if request.kind is not None:
            title += f" [dim]({request.kind.value})[/dim]"
        self._console.print(Panel(Group(*body), title=title, border_style="red"))


def confirm_retry(names: Tuple[str, ...]) -> bool:
    """Ask whether the retryable items should be submitted again."""
    label = names[0] if len(names) == 1 else f"{len(names)} files"
    return Confirm.ask(f"Retry {label}?", default=False, console=console)


class BatchProgressDisplay:
    """Event-based console display for a batch upload cycle."""

    def __init__(self):
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def on_batch_start(self, items: Tuple[UploadItem, ...]) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.description}", justify="left"),
            BarColumn(bar_width=32),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
            transient=True,
        )
        self._progress.start()
        self._task_id = self._progress.add_task("Uploading", total=len(items))

    def on_item_start(self, item: UploadItem) -> None:
        if self._progress is not None and self._task_id is not None:
            self._progress.update(self._task_id, description=item.name[:60])

    def on_item_complete(self, outcome: UploadOutcome) -> None:
        console.print(f"[green]Uploaded:[/green] {outcome.name}")

    def on_item_fail(self, outcome: UploadOutcome) -> None:
        suffix = f" - {outcome.message}" if outcome.message else ""
        console.print(f"[red]Failed:[/red] {outcome.name}{suffix}")

    def on_progress(self, progress: BatchProgress) -> None:
        if self._progress is not None and self._task_id is not None:
            self._progress.update(self._task_id, completed=progress.completed)

    def on_batch_finish(self, cycle: Any) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None
        batch = cycle.batch
        console.print(
            f"[bold]Finished:[/bold] {len(batch.successes)}/{batch.total} uploaded"
            + (f", [red]{len(batch.failures)} failed[/red]" if batch.failures else "")
        )

    def attach(self, orchestrator: Any) -> None:
        orchestrator.on_batch_start(self.on_batch_start)
        orchestrator.on_item_start(self.on_item_start)
        orchestrator.on_item_complete(self.on_item_complete)
        orchestrator.on_item_fail(self.on_item_fail)
        orchestrator.on_progress(self.on_progress)
        orchestrator.on_batch_finish(self.on_batch_finish)
