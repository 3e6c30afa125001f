"""
Utility functions for termshell.
"""
import json
from pathlib import Path
from typing import Any, Callable, List, Optional


class Subscription:
    """Handle returned by observable objects; call ``unsubscribe`` to stop."""

    def __init__(self, observers: List[Callable], callback: Callable) -> None:
        self._observers = observers
        self._callback = callback
        self.closed = False

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._callback in self._observers:
            self._observers.remove(self._callback)


def format_payload(data: Any) -> str:
    """
    Render a pipeline payload as text.

    Strings pass through unchanged; anything else is serialized as JSON.

    Args:
        data: Payload produced by ``process.output``

    Returns:
        Text suitable for writing to a file
    """
    if isinstance(data, str):
        return data
    return json.dumps(data, default=str)


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: The string to truncate
        max_length: Maximum length of the output string
        suffix: Suffix to append when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def expand_path(path: str, base: Optional[Path] = None) -> Path:
    """
    Expand ``~`` and resolve ``path`` against ``base`` when it is relative.

    Args:
        path: Path string to expand
        base: Directory relative paths are resolved against

    Returns:
        Absolute resolved Path
    """
    expanded = Path(path).expanduser()
    if not expanded.is_absolute() and base is not None:
        expanded = base / expanded
    return expanded.resolve()
