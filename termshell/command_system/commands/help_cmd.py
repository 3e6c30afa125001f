"""Help command for termshell."""
from itertools import groupby
from typing import Any

from rich.table import Table

from ...constants import DEFAULT_PROCESSOR_VERSION
from ..base import CommandProcessor, ProcessCommand, ProcessorMetadata, maybe_await


SEPARATOR = "─" * 40


class HelpProcessor(CommandProcessor):
    """Display help information."""

    command = "help"
    aliases = ["man"]
    description = "Displays help for a command"
    allow_unlisted_commands = True
    metadata = ProcessorMetadata(sealed=True, module="system", icon="📚")

    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        _, *commands_to_help = command.command.split(" ")

        if not commands_to_help:
            self._write_command_list(context)
            return

        processor = context.executor.find_processor(commands_to_help[0], commands_to_help[1:])
        writer = context.writer

        if processor is None:
            writer.write_error(f"Unknown command: {writer.wrap_in_color(commands_to_help[0], 'cyan')}")
            writer.writeln()
            writer.writeln(f"Type {writer.wrap_in_color('help', 'cyan')} to see all available commands")
            return

        await self._write_processor_description(processor, context)

    def write_description(self, context: Any) -> None:
        writer = context.writer
        writer.writeln("Displays help information for commands")
        writer.writeln()
        writer.writeln("Usage:")
        writer.writeln(f"  {writer.wrap_in_color('help', 'cyan')}                    Show all available commands")
        writer.writeln(f"  {writer.wrap_in_color('help <command>', 'cyan')}          Show details for a command")
        writer.writeln(f"  {writer.wrap_in_color('help <command> <sub>', 'cyan')}    Show details for a subcommand")

    def _write_command_list(self, context: Any) -> None:
        writer = context.writer
        registry = context.executor.registry

        visible = [
            p for p in registry.processors
            if not getattr(getattr(p, "metadata", None), "hidden", False)
        ]

        def module_of(processor: Any) -> str:
            return getattr(getattr(processor, "metadata", None), "module", None) or "uncategorized"

        writer.writeln(writer.wrap_in_color("Available commands:", "yellow"))
        writer.writeln()

        for module, processors in groupby(sorted(visible, key=module_of), key=module_of):
            writer.writeln(writer.wrap_in_color(module.capitalize(), "yellow"))
            for processor in sorted(processors, key=lambda p: p.command):
                alias_text = ""
                aliases = getattr(processor, "aliases", None) or []
                if aliases:
                    alias_text = " " + writer.wrap_in_color(f"({', '.join(aliases)})", "magenta")
                writer.writeln(
                    f"  {writer.wrap_in_color(processor.command, 'cyan')}{alias_text}"
                    f" - {getattr(processor, 'description', '') or 'Missing description'}"
                )
            writer.writeln()

        writer.writeln(
            f"Type {writer.wrap_in_color('help <command>', 'cyan')} to get more information about a specific command"
        )

    async def _write_processor_description(self, processor: Any, context: Any) -> None:
        writer = context.writer
        version = getattr(processor, "version", None) or DEFAULT_PROCESSOR_VERSION

        writer.writeln(
            f"{writer.wrap_in_color('Command:', 'yellow')} "
            f"{writer.wrap_in_color(processor.command, 'cyan')} {writer.wrap_in_color(f'v{version}', 'green')}"
        )
        if getattr(processor, "description", ""):
            writer.writeln(f"   {processor.description}")

        aliases = getattr(processor, "aliases", None) or []
        if aliases:
            writer.writeln(
                f"   {writer.wrap_in_color('Aliases:', 'yellow')} "
                + ", ".join(writer.wrap_in_color(a, "magenta") for a in aliases)
            )
        writer.writeln(SEPARATOR)

        original = getattr(processor, "original_processor", None)
        if original is not None:
            writer.writeln(writer.wrap_in_color("Extension chain:", "yellow"))
            depth = 1
            while original is not None:
                writer.writeln(f"{' ' * depth}└ {writer.wrap_in_color(original.command, 'cyan')}")
                original = getattr(original, "original_processor", None)
                depth += 1
            writer.writeln(SEPARATOR)

        if callable(getattr(processor, "write_description", None)):
            writer.writeln(writer.wrap_in_color("Description:", "yellow"))
            await maybe_await(processor.write_description(context))
            writer.writeln(SEPARATOR)

        children = getattr(processor, "processors", None) or []
        if children:
            writer.writeln(writer.wrap_in_color("Subcommands:", "yellow"))
            for child in children:
                writer.writeln(
                    f"  {writer.wrap_in_color(child.command, 'cyan')} - {getattr(child, 'description', '') or ''}"
                )
            writer.writeln(SEPARATOR)

        parameters = getattr(processor, "parameters", None) or []
        if parameters:
            table = Table(title="Parameters", show_header=True, header_style="bold")
            table.add_column("Name", style="cyan")
            table.add_column("Aliases", style="magenta")
            table.add_column("Type")
            table.add_column("Required")
            table.add_column("Description", style="dim")
            for parameter in parameters:
                table.add_row(
                    f"--{parameter.name}",
                    ", ".join(f"-{a}" for a in parameter.aliases),
                    parameter.type,
                    "yes" if parameter.required else "no",
                    parameter.description,
                )
            writer.console.print(table)
