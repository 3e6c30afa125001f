"""
Prompt input for termshell.
Reads lines through prompt_toolkit with command-name completion.
"""
from typing import Callable, Iterable, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from ..command_system.parser import CommandParser
from ..utils import truncate_string


PROMPT_STYLE = Style.from_dict({
    'prompt': '#00aa00 bold',
    'context': '#00aaaa',
    'completion-menu.completion': 'bg:#333333 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'completion-menu.meta.completion': 'bg:#444444 #aaaaaa',
    'completion-menu.meta.completion.current': 'bg:#00aaaa #000000',
})


class CommandCompleter(Completer):
    """
    Completes command names at the start of each chained segment.

    ``commands_provider`` returns the info dicts produced by
    ``ProcessorRegistry.list_commands``; it is called on every keystroke so
    newly registered commands show up immediately.
    """

    def __init__(self, commands_provider: Callable[[], List[dict]]) -> None:
        self._commands_provider = commands_provider

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor
        parts = CommandParser.split_by_operators(text)

        # Only the first word of the segment being typed is completed
        if parts and parts[-1].is_command:
            current = parts[-1].value
            if " " in current or text[-1].isspace():
                return
        else:
            current = ""

        lowered = current.lower()
        for cmd in self._commands_provider():
            names = [cmd['name'], *cmd.get('aliases', [])]
            for name in names:
                if name.lower().startswith(lowered):
                    yield Completion(
                        name,
                        start_position=-len(current),
                        display_meta=truncate_string(cmd["description"] or "", 50),
                    )


class PromptInput:
    """Line reader backed by a prompt_toolkit ``PromptSession``."""

    def __init__(self, commands_provider: Callable[[], List[dict]]) -> None:
        self._completer = CommandCompleter(commands_provider)
        self._history = InMemoryHistory()
        self._session: Optional[PromptSession] = None

    def _create_session(self) -> PromptSession:
        """Create a new prompt session."""
        return PromptSession(
            completer=self._completer,
            complete_while_typing=True,
            history=self._history,
            style=PROMPT_STYLE,
            mouse_support=False,
        )

    async def get_input(self, prompt: str = "~$ ", context_name: Optional[str] = None) -> str:
        """
        Read one line.

        Args:
            prompt: Prompt string to display
            context_name: Pinned context processor, shown before the prompt

        Returns:
            The entered line

        Raises:
            KeyboardInterrupt: On Ctrl+C
            EOFError: On Ctrl+D
        """
        if self._session is None:
            self._session = self._create_session()

        message = [('class:prompt', prompt)]
        if context_name:
            message.insert(0, ('class:context', f"({context_name}) "))

        return await self._session.prompt_async(message)
