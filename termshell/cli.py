"""
Interactive shell host for termshell.
Wires the registry, executor, state and services together and runs the
read-execute loop.
"""
import asyncio
import logging
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterable, Optional

from rich.console import Console
from rich.panel import Panel

from .command_system import CommandExecutor, ProcessorRegistry
from .command_system.commands import get_builtin_processors
from .config import ShellConfig, get_config
from .constants import APP_NAME, APP_VERSION, FILE_SYSTEM_SERVICE, KEY_VALUE_STORE_SERVICE, REGISTRY_SERVICE
from .context import ExecutionContext, ServiceContainer
from .rich_ui import TerminalWriter
from .rich_ui.prompt_input import PromptInput
from .state import StateStoreManager
from .storage import KeyValueStore, LocalFileSystem, SqliteKeyValueStore


logger = logging.getLogger(__name__)


class TermShell:
    """
    Main shell class for termshell.

    Owns the long-lived execution context and runs lines through the
    command executor, either one at a time (``execute``) or interactively
    (``run``).
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        console: Optional[Console] = None,
        key_value_store: Optional[KeyValueStore] = None,
        processors: Optional[Iterable[Any]] = None,
    ) -> None:
        """
        Initialize the shell.

        Args:
            config: Shell configuration; loaded from disk when omitted
            console: Rich console for all output
            key_value_store: State persistence backend; SQLite at
                ``config.state_db`` when omitted
            processors: Extra processors registered after the built-ins
        """
        self._config = config or get_config().config
        self._console = console or Console(highlight=False)
        self._writer = TerminalWriter(self._console)

        self._registry = ProcessorRegistry(get_builtin_processors())
        for processor in processors or []:
            self._registry.register_processor(processor)

        self._executor = CommandExecutor(self._registry)
        self._key_value_store = key_value_store or SqliteKeyValueStore(Path(self._config.state_db))
        self._state_manager = StateStoreManager(self._key_value_store, self._registry)

        services = ServiceContainer({
            KEY_VALUE_STORE_SERVICE: self._key_value_store,
            REGISTRY_SERVICE: self._registry,
        })
        if self._config.enable_filesystem:
            services.register(FILE_SYSTEM_SERVICE, LocalFileSystem(Path(self._config.workspace_dir).expanduser()))

        self._context = ExecutionContext(
            writer=self._writer,
            executor=self._executor,
            state_manager=self._state_manager,
            services=services,
        )
        self._input = PromptInput(self._registry.list_commands)
        self._initialized = False
        self._running = False

    @property
    def context(self) -> ExecutionContext:
        return self._context

    @property
    def registry(self) -> ProcessorRegistry:
        return self._registry

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    async def initialize(self) -> None:
        """Hydrate state and initialize processors, once."""
        if self._initialized:
            return
        await self._executor.initialize_processors(self._context)
        self._initialized = True

    async def execute(self, line: str) -> int:
        """
        Execute one line.

        Returns:
            Exit code of the last executed segment
        """
        await self.initialize()
        with self._interrupt_handler():
            await self._executor.execute_command(line, self._context)
        return self._context.process.exit_code or 0

    async def run_async(self) -> None:
        """Run the interactive loop until Ctrl+D."""
        await self.initialize()

        if self._config.show_welcome:
            self.print_welcome()

        self._running = True
        while self._running:
            processor = self._context.context_processor
            try:
                line = await self._input.get_input(
                    prompt=self._config.prompt,
                    context_name=processor.command if processor is not None else None,
                )
            except KeyboardInterrupt:
                self.interrupt()
                continue
            except EOFError:
                self._running = False
                break

            if not line.strip() or self._context.is_progress_running():
                continue

            try:
                with self._interrupt_handler():
                    await self._executor.execute_command(line, self._context)
            except Exception as e:
                logger.exception("Unhandled error while executing line")
                self._writer.write_error(f"Unexpected error: {e}")

    def run(self) -> None:
        """Run the interactive loop."""
        asyncio.run(self.run_async())

    def interrupt(self) -> None:
        """Ctrl+C: leave the pinned context processor and abort the running command."""
        if self._context.context_processor is not None:
            self._context.set_context_processor(None)
        self._context.abort()

    def print_welcome(self) -> None:
        self._console.print(Panel(
            f"[bold cyan]{APP_NAME}[/bold cyan] [green]v{APP_VERSION}[/green]\n"
            "Type [cyan]help[/cyan] for a list of commands, Ctrl+D to exit.",
            border_style="cyan",
            expand=False,
        ))

    @contextmanager
    def _interrupt_handler(self) -> Generator[None, None, None]:
        """Route SIGINT to ``interrupt`` while a line is executing."""
        loop = asyncio.get_running_loop()
        installed = True
        try:
            loop.add_signal_handler(signal.SIGINT, self.interrupt)
        except (NotImplementedError, RuntimeError, ValueError):
            # No signal handlers off the main thread or on Windows loops
            installed = False

        try:
            yield
        finally:
            if installed:
                loop.remove_signal_handler(signal.SIGINT)
