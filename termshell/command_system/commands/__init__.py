"""
Built-in commands for termshell.
"""
from typing import Any, List

from .alias import AliasListProcessor, AliasProcessor, UnaliasProcessor
from .echo import EchoProcessor
from .help_cmd import HelpProcessor


def get_builtin_processors() -> List[Any]:
    """Create a fresh instance of every built-in processor."""
    return [
        HelpProcessor(),
        AliasProcessor(),
        UnaliasProcessor(),
        EchoProcessor(),
    ]


__all__ = [
    'AliasListProcessor',
    'AliasProcessor',
    'EchoProcessor',
    'HelpProcessor',
    'UnaliasProcessor',
    'get_builtin_processors',
]
