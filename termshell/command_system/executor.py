"""
Command executor for termshell.
Runs a raw input line: splits it on chaining operators, resolves each
segment against the processor registry and dispatches it to the handler.
"""
import logging
from typing import Any, Dict, List, Optional

from rich.markup import escape

from ..constants import (
    DEFAULT_PROCESSOR_VERSION,
    FILE_SYSTEM_SERVICE,
    MAX_ALIAS_DEPTH,
    OPERATOR_AND,
    OPERATOR_APPEND,
    OPERATOR_OR,
    OPERATOR_PIPE,
)
from ..context.cancellable import CancellableTask
from ..context.execution_context import CommandExecutionContext
from ..errors import ProcessExitedError, ServiceNotFoundError
from ..utils import format_payload
from .base import (
    HOOK_AFTER,
    HOOK_BEFORE,
    ProcessCommand,
    accepts_value,
    has_lifecycle,
    has_validator,
    hooks_for,
    maybe_await,
    processor_names,
)
from .parser import CommandParser, convert_args, get_parameter_value, get_right_of_word
from .registry import ProcessorRegistry


logger = logging.getLogger(__name__)


ALIAS_COMMAND = "alias"


class CommandExecutor:
    """
    Executes command lines against a processor registry.

    Segments run strictly one after another. A failing segment never stops
    the line; it only decides whether the following ``&&``/``||`` segments
    run.
    """

    def __init__(self, registry: ProcessorRegistry) -> None:
        self.registry = registry
        self._parser = CommandParser()

    async def execute_command(self, command: str, context: Any) -> None:
        """
        Execute a full input line.

        Args:
            command: Raw line, possibly containing &&, ||, | and >>
            context: Root execution context or a per-command view of it
        """
        root = context.context if isinstance(context, CommandExecutionContext) else context
        parts = CommandParser.split_by_operators(command)

        # Only executed segments change these; skipped ones leave them alone
        last_exit_success = True
        pipeline_data: Any = None
        should_run_next = True
        pipe_next = False

        i = 0
        while i < len(parts):
            part = parts[i]

            if part.type == OPERATOR_AND:
                should_run_next = last_exit_success
                pipe_next = False
            elif part.type == OPERATOR_OR:
                should_run_next = not last_exit_success
                pipe_next = False
            elif part.type == OPERATOR_PIPE:
                should_run_next = True
                pipe_next = True
            elif part.type == OPERATOR_APPEND:
                target = parts[i + 1] if i + 1 < len(parts) else None
                i += 1
                if target is None or not target.is_command:
                    root.writer.write_error("Missing file path after >>")
                    last_exit_success = False
                elif should_run_next:
                    if not await self._append_output_to_file(target.value, pipeline_data, root):
                        last_exit_success = False
                    pipeline_data = None
                pipe_next = False
            elif should_run_next:
                data = pipeline_data if pipe_next else None
                try:
                    await self._execute_single_command(part.value, data, root)
                    last_exit_success = root.process.succeeded
                    pipeline_data = root.process.data if root.process.output_called else None
                except Exception as e:
                    logger.exception(f"Segment failed: {part.value}")
                    root.writer.write_error(f"Command {escape(part.value)} failed: {escape(str(e))}")
                    last_exit_success = False
                should_run_next = True
                pipe_next = False
            else:
                pipe_next = False

            i += 1

    async def show_help(self, command: ProcessCommand, context: Any) -> None:
        """Show help for a command by running ``help <raw command>``."""
        try:
            await self.execute_command(f"help {command.raw_command}", context)
        except Exception as e:
            context.writer.write_error(f"Error executing command: {escape(str(e))}")

    async def initialize_processors(self, context: Any) -> None:
        """
        Hydrate persisted state and run ``initialize`` hooks.

        Each root processor's state bucket is loaded once, then
        ``initialize(context)`` is called on every processor of the tree
        that defines it. Failures are logged and reported; boot continues.
        """
        hydrated = set()
        for processor in self.registry.processors:
            store = context.state_manager.get_processor_state_store(processor)
            if store.name not in hydrated:
                hydrated.add(store.name)
                await store.initialize()

        await self._initialize_tree(context, self.registry.processors)

    def list_commands(self, include_hidden: bool = False) -> List[Dict[str, Any]]:
        return self.registry.list_commands(include_hidden=include_hidden)

    def find_processor(self, main_command: str, chain_commands: Optional[List[str]] = None) -> Optional[Any]:
        return self.registry.find_processor(main_command, chain_commands or [])

    async def _initialize_tree(self, context: Any, processors: List[Any]) -> None:
        for processor in processors:
            try:
                if has_lifecycle(processor):
                    await maybe_await(processor.initialize(CommandExecutionContext(context, processor)))
            except Exception as e:
                logger.error(f"Error initializing processor {processor.command!r}: {e}")
                context.writer.write_error(f"Error initializing processor {escape(processor.command)}: {escape(str(e))}")

            children = getattr(processor, "processors", None) or []
            if children:
                await self._initialize_tree(context, children)

    async def _execute_single_command(self, command: str, data: Any, context: Any, depth: int = 0) -> None:
        process = context.process
        process.start()
        try:
            await self._run_segment(command, data, context, depth)
        finally:
            process.end()

    async def _run_segment(self, command: str, data: Any, context: Any, depth: int) -> None:
        writer = context.writer
        process = context.process

        parsed = self._parser.parse(command)
        command_name = parsed.command_name
        main_command, *other = command_name.split(" ")
        chain_commands = [c.lower() for c in other]

        if context.context_processor is not None:
            searchable = getattr(context.context_processor, "processors", None) or []
        else:
            searchable = self.registry.processors

        processor = self.registry.find_processor_in_collection(main_command, chain_commands, searchable)

        if processor is None:
            expanded = self._expand_alias(main_command, command)
            if expanded is not None:
                if depth >= MAX_ALIAS_DEPTH:
                    writer.write_error(f"Alias expansion too deep: {writer.wrap_in_color(main_command, 'cyan')}")
                    process.exit(-1, silent=True)
                    return
                logger.debug(f"Alias {main_command} -> {expanded}")
                await self._execute_single_command(expanded, data, context, depth + 1)
                return

            writer.write_error(f"Command not found: {writer.wrap_in_color(command_name, 'cyan')}")
            writer.writeln()
            writer.write_info(f"Type {writer.wrap_in_color('help', 'cyan')} for a list of available commands")
            process.exit(-1, silent=True)
            return

        args = convert_args(parsed.args, processor)

        command_to_process = ProcessCommand(
            command=command_name,
            raw_command=command,
            chain_commands=chain_commands,
            args=args,
            data=data,
        )

        if self._version_requested(context, processor, args):
            return

        if await self._help_requested(command_to_process, context):
            return

        if self._context_requested(context, processor, args):
            return

        if not self._validate_parameters(context, processor, args):
            process.exit(-1, silent=True)
            return

        if accepts_value(processor):
            command_to_process.value = get_right_of_word(command_name, processor_names(processor))

        if getattr(processor, "value_required", False) and not command_to_process.value:
            writer.write_error(f"Value required: {writer.wrap_in_color(f'{command_name} <value>', 'cyan')}")
            process.exit(-1, silent=True)
            return

        if has_validator(processor):
            result = await maybe_await(processor.validate_before_execution(command_to_process, context))
            if result is not None and not result.valid:
                writer.write_error(result.message or "An error occurred while validating the command.")
                process.exit(-1, silent=True)
                return

        await self._dispatch(processor, command_to_process, context)

    async def _dispatch(self, processor: Any, command: ProcessCommand, context: Any) -> None:
        command_context = CommandExecutionContext(context, processor)
        cancellable: Optional[CancellableTask] = None

        try:
            for hook in hooks_for(processor, HOOK_BEFORE):
                await maybe_await(hook.execute(command_context))

            cancellable = CancellableTask(maybe_await(processor.process_command(command, command_context)))
            await cancellable.execute()

            for hook in hooks_for(processor, HOOK_AFTER):
                await maybe_await(hook.execute(command_context))
        except ProcessExitedError as e:
            if cancellable is not None:
                cancellable.cancel()
            context.abort()

            if e.code != 0:
                context.writer.write_error(f"Process exited with code {e.code}")
            else:
                context.writer.write_info("Process exited successfully with code 0")
        except Exception as e:
            logger.debug(f"Handler for {processor.command} raised", exc_info=True)
            context.hide_busy_indicators()
            context.writer.write_error(f"Error executing command: {escape(str(e))}")
            context.process.exit(-1, silent=True)

    def _expand_alias(self, main_command: str, command: str) -> Optional[str]:
        """Substitute a user alias for the first word of ``command``."""
        alias_processor = self.registry.find_processor(ALIAS_COMMAND, [])
        aliases = getattr(alias_processor, "user_aliases", None) or {}
        target = aliases.get(main_command)
        if not target:
            return None
        rest = get_right_of_word(command, [main_command]) or ""
        return f"{target} {rest}".strip()

    def _version_requested(self, context: Any, processor: Any, args: Dict[str, Any]) -> bool:
        if args.get("v") or args.get("version"):
            version = getattr(processor, "version", None) or DEFAULT_PROCESSOR_VERSION
            context.writer.writeln(context.writer.wrap_in_color(version, "cyan"))
            return True
        return False

    async def _help_requested(self, command: ProcessCommand, context: Any) -> bool:
        if command.command.startswith("help"):
            return False
        if command.args.get("h") or command.args.get("help"):
            await self.show_help(command, context)
            return True
        return False

    def _context_requested(self, context: Any, processor: Any, args: Dict[str, Any]) -> bool:
        if args.get("context"):
            context.set_context_processor(processor)
            return True
        return False

    def _validate_parameters(self, context: Any, processor: Any, args: Dict[str, Any]) -> bool:
        """
        Check required parameters and run parameter validators.

        Writes an itemized report of every failure.

        Returns:
            True if all parameters are valid
        """
        writer = context.writer
        parameters = getattr(processor, "parameters", None) or []

        missing = [p for p in parameters if p.required and get_parameter_value(p, args) is None]
        if missing:
            names = ", ".join(writer.wrap_in_color(f"--{p.name}", "cyan") for p in missing)
            writer.write_error(f"Missing required parameters: {names}")
            return False

        invalid = []
        for parameter in parameters:
            if parameter.validator is None:
                continue
            value = get_parameter_value(parameter, args)
            if value is None:
                continue
            result = parameter.validator(value)
            if not result.valid:
                invalid.append((parameter.name, value, result.message))

        if invalid:
            writer.write_error("Invalid parameters:")
            for index, (name, value, message) in enumerate(invalid, start=1):
                writer.writeln(
                    f"  {index}. {writer.wrap_in_color(f'--{name}', 'cyan')} = \"{escape(str(value))}\" → {message or 'invalid value'}"
                )
            return False

        return True

    async def _append_output_to_file(self, file_path: str, data: Any, context: Any) -> bool:
        """
        Append the pipeline payload to a file through the file system plugin.

        Returns:
            False if the redirect could not be performed
        """
        try:
            fs = context.services.get(FILE_SYSTEM_SERVICE)
        except ServiceNotFoundError:
            context.writer.write_error(">> redirect requires the file system plugin")
            return False

        if data is None:
            return True

        try:
            resolved = fs.resolve_path(file_path)
            content = format_payload(data)
            if fs.exists(resolved):
                fs.write_file(resolved, content, append=True)
            else:
                fs.create_file(resolved, content)
            await fs.persist()
        except OSError as e:
            context.writer.write_error(f">> failed: {escape(str(e))}")
            return False

        return True
