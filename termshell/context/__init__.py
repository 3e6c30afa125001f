"""
Execution context for termshell: process state, cancellation and services.
"""
from .cancellable import AbortSignal, CancellableTask, CancellationToken
from .execution_context import CommandExecutionContext, ExecutionContext
from .process import ExecutionProcess
from .services import ServiceContainer

__all__ = [
    'AbortSignal',
    'CancellableTask',
    'CancellationToken',
    'CommandExecutionContext',
    'ExecutionContext',
    'ExecutionProcess',
    'ServiceContainer',
]
