"""
Execution process state machine for termshell.
"""
from typing import Any, Optional

from ..errors import ProcessExitedError


class ExecutionProcess:
    """
    Tracks the exit status and output payload of the running segment.

    The executor calls ``start()`` before and ``end()`` after every segment;
    handlers call ``exit()`` and ``output()``.
    """

    def __init__(self) -> None:
        self.exited: Optional[bool] = None
        self.exit_code: Optional[int] = None
        self.data: Any = None
        self.running: bool = False
        self.output_called: bool = False

    def start(self) -> None:
        """Reset state for a new segment."""
        self.exited = None
        self.exit_code = None
        self.data = None
        self.output_called = False
        self.running = True

    def exit(self, code: int = 0, silent: bool = False) -> None:
        """
        Mark the segment as exited.

        Args:
            code: Exit code, 0 for success
            silent: Record the exit without unwinding the handler

        Raises:
            ProcessExitedError: Unless ``silent`` is set
        """
        self.exited = True
        self.exit_code = code

        if not silent:
            raise ProcessExitedError(code)

    def output(self, data: Any) -> None:
        """Store the payload handed to the next piped segment."""
        self.data = data
        self.output_called = True

    def end(self) -> None:
        """Finish the segment; an unset exit code becomes 0."""
        self.running = False
        if self.exit_code is None:
            self.exit_code = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code is None or self.exit_code == 0
