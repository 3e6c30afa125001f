"""
Execution contexts for termshell.

``ExecutionContext`` is the long-lived root owned by the shell host.
``CommandExecutionContext`` is the per-command view handed to a handler.
"""
import logging
from typing import Any, List, Optional

from rich.console import Console

from ..constants import SHARED_STATE_STORE
from ..rich_ui.progress import BusyIndicator, ProgressBar, Spinner, TextAnimator
from ..rich_ui.writer import TerminalWriter
from .cancellable import AbortSignal, CancellationToken
from .process import ExecutionProcess
from .services import ServiceContainer


logger = logging.getLogger(__name__)


class ExecutionContext:
    """
    Root execution context.

    Aggregates the writer, busy indicators, abort signal, process, services,
    executor and state manager, and tracks the pinned context processor.
    """

    def __init__(
        self,
        writer: Optional[TerminalWriter] = None,
        executor: Optional[Any] = None,
        state_manager: Optional[Any] = None,
        services: Optional[ServiceContainer] = None,
        console: Optional[Console] = None,
    ) -> None:
        """
        Initialize the context.

        Args:
            writer: Output writer; built on ``console`` when omitted
            executor: Command executor used for nested execution
            state_manager: State store manager owning every bucket
            services: Service container
            console: Rich console shared by the writer and indicators
        """
        self.writer = writer or TerminalWriter(console)
        console = self.writer.console

        self.executor = executor
        self.state_manager = state_manager
        self.services = services or ServiceContainer()

        self.spinner = Spinner(console)
        self.progress_bar = ProgressBar(console)
        self.text_animator = TextAnimator(console)
        for indicator in self._busy_indicators():
            indicator.context = self

        self.on_abort = AbortSignal()
        self.process = ExecutionProcess()
        self.context_processor: Optional[Any] = None
        self.cancellation_token = CancellationToken()

    @property
    def state(self) -> Any:
        """The shared state bucket."""
        return self.state_manager.get_state_store(SHARED_STATE_STORE)

    def set_context_processor(self, processor: Optional[Any], silent: bool = False) -> None:
        """
        Pin a processor so that subsequent lines resolve among its children.

        Args:
            processor: Processor to pin, or None to clear
            silent: Suppress the confirmation message
        """
        if processor is None:
            self.context_processor = None
            return

        if not silent:
            self.writer.write_info(
                f"Set {processor.command} as context processor, press Ctrl+C to exit"
            )

        self.context_processor = processor

    def is_progress_running(self) -> bool:
        return any(indicator.is_running for indicator in self._busy_indicators())

    def hide_busy_indicators(self, exclude: Optional[BusyIndicator] = None) -> None:
        """Hide every running indicator except ``exclude``."""
        for indicator in self._busy_indicators():
            if indicator is not exclude and indicator.is_running:
                indicator.hide()

    def abort(self) -> None:
        """
        Abort the running command.

        Completes the progress bar, hides the other indicators, cancels the
        current cancellation token and notifies ``on_abort`` subscribers.
        """
        if self.progress_bar.is_running:
            self.progress_bar.complete()

        self.hide_busy_indicators()
        self.cancellation_token.cancel()
        self.on_abort.emit()
        logger.debug("Execution aborted")

    def _busy_indicators(self) -> List[BusyIndicator]:
        return [self.spinner, self.progress_bar, self.text_animator]


class CommandExecutionContext:
    """
    Context view handed to a processor's handler and hooks.

    Everything is delegated to the root context except ``state``, which is
    the bucket of the processor's root, and ``cancellation_token``, which is
    fresh for each command.
    """

    def __init__(self, context: ExecutionContext, processor: Any) -> None:
        self.context = context
        self.processor = processor
        self.state = context.state_manager.get_processor_state_store(processor)
        self.cancellation_token = CancellationToken()
        context.cancellation_token = self.cancellation_token

    def __getattr__(self, name: str) -> Any:
        return getattr(self.context, name)
