"""
Shared fixtures for termshell tests.
"""
import asyncio
import io
from typing import Any, Iterable, List, Optional

import pytest
from rich.console import Console

from termshell.command_system import CommandExecutor, FunctionProcessor, ProcessorRegistry
from termshell.command_system.commands import get_builtin_processors
from termshell.constants import FILE_SYSTEM_SERVICE, KEY_VALUE_STORE_SERVICE
from termshell.context import ExecutionContext, ServiceContainer
from termshell.rich_ui import TerminalWriter
from termshell.state import StateStoreManager
from termshell.storage import InMemoryKeyValueStore, LocalFileSystem


def make_console() -> Console:
    """Console that records plain text into a StringIO."""
    return Console(
        file=io.StringIO(),
        width=200,
        color_system=None,
        highlight=False,
        force_terminal=False,
    )


class ShellHarness:
    """Registry, executor, state and context wired together for one test."""

    def __init__(
        self,
        processors: Iterable[Any] = (),
        workspace: Optional[Any] = None,
        key_value_store: Optional[InMemoryKeyValueStore] = None,
        builtins: bool = True,
    ) -> None:
        self.console = make_console()
        self.registry = ProcessorRegistry(get_builtin_processors() if builtins else [])
        for processor in processors:
            self.registry.register_processor(processor)

        self.executor = CommandExecutor(self.registry)
        self.key_value_store = key_value_store or InMemoryKeyValueStore()
        self.state_manager = StateStoreManager(self.key_value_store, self.registry)

        services = ServiceContainer({KEY_VALUE_STORE_SERVICE: self.key_value_store})
        if workspace is not None:
            services.register(FILE_SYSTEM_SERVICE, LocalFileSystem(workspace))

        self.context = ExecutionContext(
            writer=TerminalWriter(self.console),
            executor=self.executor,
            state_manager=self.state_manager,
            services=services,
        )
        asyncio.run(self.executor.initialize_processors(self.context))

    def run(self, line: str) -> str:
        """Execute a line and return the output it produced."""
        start = len(self.output)
        asyncio.run(self.executor.execute_command(line, self.context))
        return self.output[start:]

    @property
    def output(self) -> str:
        return self.console.file.getvalue()

    @property
    def exit_code(self) -> Optional[int]:
        return self.context.process.exit_code


def recording_processor(
    name: str,
    calls: List[Any],
    output: Any = None,
    exit_code: Optional[int] = None,
    error: Optional[Exception] = None,
    **attributes: Any,
) -> FunctionProcessor:
    """Processor that records each command it receives."""

    async def handler(command, context):
        calls.append((name, command))
        if output is not None:
            context.process.output(output)
        if error is not None:
            raise error
        if exit_code is not None:
            context.process.exit(exit_code)

    return FunctionProcessor(name, handler, description=f"{name} command", **attributes)


def names(calls: List[Any]) -> List[str]:
    return [name for name, _ in calls]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for key in ("TERMSHELL_LOG_LEVEL", "TERMSHELL_STATE_DB", "TERMSHELL_WORKSPACE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def calls() -> List[Any]:
    return []


@pytest.fixture
def shell(tmp_path, calls) -> ShellHarness:
    return ShellHarness(
        processors=[
            recording_processor("ok", calls),
            recording_processor("second", calls),
            recording_processor("third", calls),
            recording_processor("fail", calls, exit_code=1),
            recording_processor("producer", calls, output="payload"),
            recording_processor("consumer", calls),
        ],
        workspace=tmp_path / "workspace",
    )
