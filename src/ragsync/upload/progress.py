"""Rich progress display for sync runs.

Consumes :class:`~ragsync.models.SyncProgressEvent` objects, so it can be
passed directly as the ``on_progress`` callback of a sync:

* **Phase events** -- shown as the status text
* **File events** -- advance the bar and show the current file
* **Complete event** -- final status line
"""

from __future__ import annotations

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from ragsync.models import SyncProgressEvent


class SyncProgressTracker:
    """Single-bar Rich tracker driven by sync progress events.

    Usage::

        with SyncProgressTracker() as tracker:
            result = await orchestrator.sync(name, path, on_progress=tracker)
    """

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("{task.fields[status]}", style="dim"),
            console=console,
        )
        self._task: TaskID | None = None
        self._stats: dict[str, int] = {"succeeded": 0, "failed": 0}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._progress.start()
        self._task = self._progress.add_task("[green]Sync", total=None, status="starting...")

    def stop(self) -> None:
        self._progress.stop()

    def __enter__(self) -> SyncProgressTracker:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def __call__(self, event: SyncProgressEvent) -> None:
        self.handle(event)

    def handle(self, event: SyncProgressEvent) -> None:
        """Apply one progress event to the display."""
        if self._task is None:
            return

        if event.kind == "phase":
            if event.total:
                self._progress.update(self._task, total=event.total, completed=0)
            self._progress.update(self._task, status=event.message)
        elif event.kind == "file":
            name = _truncate_name(event.file_name or "")
            if event.succeeded:
                self._stats["succeeded"] += 1
                status = name
            else:
                self._stats["failed"] += 1
                status = f"[red]FAIL[/red] {name}"
            self._progress.update(
                self._task, completed=event.current, total=event.total, status=status
            )
        elif event.kind == "complete":
            self._progress.update(self._task, status=f"[green]{event.message}[/green]")

    @property
    def stats(self) -> dict[str, int]:
        """Return a copy of the current statistics."""
        return dict(self._stats)


def _truncate_name(name: str, max_len: int = 40) -> str:
    """Truncate a file name for display, keeping its tail."""
    if len(name) <= max_len:
        return name
    return "..." + name[-(max_len - 3) :]
