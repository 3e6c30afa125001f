"""Echo command for termshell."""
from typing import Any

from rich.markup import escape

from ...utils import format_payload
from ..base import CommandProcessor, ProcessCommand, ProcessorMetadata


class EchoProcessor(CommandProcessor):
    """Write text (or piped data) and pass it on to the next command."""

    command = "echo"
    description = "Display a line of text"
    allow_unlisted_commands = True
    metadata = ProcessorMetadata(module="misc", icon="💬")

    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        if command.value:
            text = _strip_quotes(command.value)
        elif command.data is not None:
            text = format_payload(command.data)
        else:
            text = ""

        context.writer.writeln(escape(text))
        context.process.output(text)


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text
