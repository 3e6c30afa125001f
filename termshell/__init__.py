"""
termshell - An embeddable shell-like command interpreter.

Parses command lines with &&, ||, | and >> chaining, resolves them against a
tree of command processors and runs them with validation, hooks,
cancellation and per-command persisted state.
"""
from .constants import APP_NAME, APP_VERSION

__version__ = APP_VERSION
__app_name__ = APP_NAME

__all__ = ['__version__', '__app_name__']
