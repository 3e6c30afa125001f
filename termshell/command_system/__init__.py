"""Command system for termshell."""
from .base import (
    CommandProcessor,
    FunctionProcessor,
    ParameterDescriptor,
    ProcessCommand,
    ProcessorHook,
    ProcessorMetadata,
    StateConfiguration,
    ValidationResult,
)
from .executor import CommandExecutor
from .parser import CommandParser, CommandPart, ParsedArg, ParsedCommandLine
from .registry import ProcessorRegistry

__all__ = [
    'CommandProcessor', 'FunctionProcessor', 'ParameterDescriptor', 'ProcessCommand',
    'ProcessorHook', 'ProcessorMetadata', 'StateConfiguration', 'ValidationResult',
    'CommandExecutor',
    'CommandParser', 'CommandPart', 'ParsedArg', 'ParsedCommandLine',
    'ProcessorRegistry',
]
