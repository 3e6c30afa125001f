"""
Terminal writer for termshell.
Renders command output, errors and notices through a Rich console.
"""
from typing import Optional

from rich.console import Console
from rich.markup import escape


ICONS = {
    "error": "✗",
    "success": "✓",
    "info": "ℹ",
    "warning": "⚠",
}


class TerminalWriter:
    """
    Output sink handed to every command.

    Messages are Rich markup; use ``wrap_in_color`` to color a fragment of
    user-supplied text safely.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """
        Initialize the writer.

        Args:
            console: Optional Rich Console instance
        """
        self._console = console or Console(highlight=False)

    @property
    def console(self) -> Console:
        """Get the Rich console."""
        return self._console

    def write(self, text: str = "") -> None:
        """Write text without a trailing newline."""
        self._console.print(text, end="", highlight=False)

    def writeln(self, text: str = "") -> None:
        """Write text followed by a newline."""
        self._console.print(text, highlight=False)

    def write_error(self, message: str) -> None:
        self._console.print(f"[bold red]{ICONS['error']}[/bold red] [red]{message}[/red]", highlight=False)

    def write_success(self, message: str) -> None:
        self._console.print(f"[bold green]{ICONS['success']}[/bold green] {message}", highlight=False)

    def write_info(self, message: str) -> None:
        self._console.print(f"[bold blue]{ICONS['info']}[/bold blue] {message}", highlight=False)

    def write_warning(self, message: str) -> None:
        self._console.print(f"[bold yellow]{ICONS['warning']}[/bold yellow] {message}", highlight=False)

    @staticmethod
    def wrap_in_color(text: str, color: str) -> str:
        """
        Wrap text in a color tag.

        Args:
            text: Plain text, escaped before wrapping
            color: Any Rich color or style name

        Returns:
            Markup string
        """
        return f"[{color}]{escape(str(text))}[/{color}]"
