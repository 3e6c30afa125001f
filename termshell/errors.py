"""
Exception types for termshell.
"""


class TermShellError(Exception):
    """Base class for all termshell errors."""


class ProcessExitedError(TermShellError):
    """
    Raised by ``ExecutionProcess.exit`` to unwind the running handler.

    The command executor catches it at the segment boundary; nothing else
    should.
    """

    def __init__(self, code: int = 0) -> None:
        super().__init__(f"Process exited with code {code}")
        self.code = code


class TaskCancelledError(TermShellError):
    """Raised when awaiting a ``CancellableTask`` that has been cancelled."""


class ServiceNotFoundError(TermShellError, KeyError):
    """Raised when a service token is not registered in the container."""

    def __init__(self, token: str) -> None:
        super().__init__(token)
        self.token = token

    def __str__(self) -> str:
        return f"Service not registered: {self.token}"
