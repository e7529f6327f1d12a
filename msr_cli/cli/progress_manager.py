"""
Manages the Rich progress display shown while the library is downloaded.

Callers never touch the display directly: they print lines through
`log_message` and receive a `ProgressHandle` from `track` for each counter
they drive.
"""

import asyncio
import logging

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

log = logging.getLogger("msr_cli")


class ProgressHandle:
    """A single progress bar owned by whoever called `ProgressManager.track`."""

    def __init__(self, manager: "ProgressManager", task_id: TaskID):
        self._manager = manager
        self.task_id = task_id
        self.finished = False

    def advance(self, count: int = 1) -> None:
        if not self.finished:
            self._manager.progress.advance(self.task_id, count)

    def finish(self, message: str | None = None) -> None:
        """Completes the bar and removes it from the display."""
        if self.finished:
            return
        self.finished = True
        self._manager.remove_task(self.task_id)
        if message:
            self._manager.log_message(message)


class ProgressManager:
    """
    Owns the Rich Progress instance for a run. Rich serializes its own
    rendering, so handles may be advanced from any number of concurrent tasks.
    """

    def __init__(self, console: Console, transient: bool = True):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TimeElapsedColumn(),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            console=console,
            transient=transient,
        )
        self._started = False

    def log_message(self, message: str, level: str = "info") -> None:
        """Prints a line above the progress bars through the logging system."""
        getattr(log, level, log.info)(message)

    def track(self, total: int, description: str) -> ProgressHandle:
        task_id = self.progress.add_task(description, total=total, start=True)
        return ProgressHandle(self, task_id)

    def remove_task(self, task_id: TaskID) -> None:
        try:
            self.progress.remove_task(task_id)
        except KeyError:
            pass

    async def __aenter__(self) -> "ProgressManager":
        self.progress.start()
        self._started = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._started:
            await asyncio.sleep(0.1)
            self.progress.stop()
            self._started = False
