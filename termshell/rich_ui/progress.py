"""
Busy indicators for termshell: spinner, percentage progress bar and text animator.

Only one indicator is visible at a time; showing one hides the others
through the owning execution context. While any is running the host ignores
new input lines.
"""
from typing import Any, Optional

from rich.console import Console
from rich.live import Live
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TaskProgressColumn, TextColumn
from rich.text import Text


class BusyIndicator:
    """Common show/hide bookkeeping for the indicators."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._live: Optional[Live] = None
        self.context: Optional[Any] = None

    @property
    def is_running(self) -> bool:
        return self._live is not None

    def _claim_screen(self) -> None:
        if self.context is not None:
            self.context.hide_busy_indicators(exclude=self)

    def _start(self, renderable: Any) -> None:
        self._claim_screen()
        self._live = Live(renderable, console=self._console, refresh_per_second=10, transient=True)
        self._live.start()

    def hide(self) -> None:
        if self._live is None:
            return
        try:
            self._live.stop()
        finally:
            self._live = None


class Spinner(BusyIndicator):
    """Animated spinner with a message."""

    DEFAULT_TEXT = "Working..."

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def show(self, text: Optional[str] = None) -> None:
        if self.is_running:
            self.set_text(text or self.DEFAULT_TEXT)
            return
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self._console,
            transient=True,
        )
        self._task = self._progress.add_task(text or self.DEFAULT_TEXT, total=None)
        self._start(self._progress)

    def set_text(self, text: str) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, description=text)

    def hide(self) -> None:
        super().hide()
        self._progress = None
        self._task = None


class ProgressBar(BusyIndicator):
    """Percentage progress bar (0-100)."""

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @property
    def percent(self) -> float:
        if self._progress is None or self._task is None:
            return 0.0
        return self._progress.tasks[0].completed

    def show(self, text: str = "Processing...") -> None:
        self.hide()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self._console,
            transient=True,
        )
        self._task = self._progress.add_task(text, total=100)
        self._start(self._progress)

    def update(self, percent: float, text: Optional[str] = None) -> None:
        if self._progress is None or self._task is None:
            return
        fields = {"completed": max(0.0, min(100.0, percent))}
        if text:
            fields["description"] = text
        self._progress.update(self._task, **fields)

    def complete(self) -> None:
        self.update(100)
        self.hide()

    def hide(self) -> None:
        super().hide()
        self._progress = None
        self._task = None


class TextAnimator(BusyIndicator):
    """Live-updating line of text."""

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self._text = Text()

    def show(self, text: str = "") -> None:
        self._text = Text(text)
        if self.is_running:
            self._live.update(self._text)
            return
        self._start(self._text)

    def append(self, chunk: str) -> None:
        self._text.append(chunk)
        if self._live is not None:
            self._live.update(self._text)
