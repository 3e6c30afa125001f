"""
Base classes for the command system in termshell.

A processor is any object exposing ``command`` and an (async or sync)
``process_command(command, context)``. Everything else is an optional
capability probed at dispatch time with the ``has_*`` helpers below.
"""
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


HOOK_BEFORE = "before"
HOOK_AFTER = "after"


@dataclass
class ProcessorMetadata:
    """Flags describing how a processor may be replaced and listed."""
    sealed: bool = False
    module: Optional[str] = None
    icon: Optional[str] = None
    hidden: bool = False


@dataclass
class ValidationResult:
    """Result of a parameter or command validation."""
    valid: bool = True
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def error(cls, message: str) -> 'ValidationResult':
        return cls(valid=False, message=message)


@dataclass
class ParameterDescriptor:
    """A declared ``--flag`` of a processor."""
    name: str
    description: str = ""
    required: bool = False
    type: str = "string"  # 'string', 'number', 'boolean', 'array', 'object'
    aliases: List[str] = field(default_factory=list)
    default_value: Any = None
    validator: Optional[Callable[[Any], ValidationResult]] = None


@dataclass
class ProcessorHook:
    """Callable run around a processor's handler."""
    when: str  # 'before' or 'after'
    execute: Callable[[Any], Any]


@dataclass
class StateConfiguration:
    """Declares which state bucket a processor uses and its default."""
    initial_state: Dict[str, Any] = field(default_factory=dict)
    store_name: Optional[str] = None


@dataclass
class ProcessCommand:
    """The resolved command handed to a processor's handler."""
    command: str
    raw_command: str
    chain_commands: List[str] = field(default_factory=list)
    args: Dict[str, Any] = field(default_factory=dict)
    data: Any = None
    value: Optional[str] = None


class CommandProcessor(ABC):
    """
    Base class for command processors.

    Subclasses declare their behaviour through class attributes and implement
    ``process_command``. Optional capabilities are plain methods the executor
    looks for: ``initialize(context)``,
    ``validate_before_execution(command, context)`` and
    ``write_description(context)``.
    """

    command: str = ""
    description: str = ""
    aliases: List[str] = []
    version: Optional[str] = None
    metadata: Optional[ProcessorMetadata] = None
    processors: Optional[List[Any]] = None
    parameters: List[ParameterDescriptor] = []
    hooks: List[ProcessorHook] = []
    state_configuration: Optional[StateConfiguration] = None
    allow_unlisted_commands: bool = False
    value_required: bool = False
    extends_processor: bool = False

    def __init__(self) -> None:
        if not self.command:
            self.command = self.__class__.__name__.lower().replace("processor", "")
        self.original_processor: Optional[Any] = None
        self.parent: Optional[Any] = None

    @abstractmethod
    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        """
        Execute the command.

        Args:
            command: The resolved command with args, value and piped data
            context: The per-command execution context
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.command}>"


class FunctionProcessor(CommandProcessor):
    """A processor built from a plain handler function."""

    def __init__(
        self,
        command: str,
        handler: Callable[[ProcessCommand, Any], Any],
        description: str = "",
        **attributes: Any,
    ) -> None:
        self.command = command
        self.description = description
        self._handler = handler
        for name, value in attributes.items():
            setattr(self, name, value)
        super().__init__()

    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        await maybe_await(self._handler(command, context))


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it."""
    if inspect.isawaitable(value):
        return await value
    return value


def is_sealed(processor: Any) -> bool:
    metadata = getattr(processor, "metadata", None)
    return bool(metadata and getattr(metadata, "sealed", False))


def processor_names(processor: Any) -> List[str]:
    """Lower-cased command name followed by lower-cased aliases."""
    names = [processor.command.lower()]
    names.extend(a.lower() for a in (getattr(processor, "aliases", None) or []))
    return names


def has_children(processor: Any) -> bool:
    return bool(getattr(processor, "processors", None))


def has_validator(processor: Any) -> bool:
    return callable(getattr(processor, "validate_before_execution", None))


def has_hooks(processor: Any) -> bool:
    return bool(getattr(processor, "hooks", None))


def has_lifecycle(processor: Any) -> bool:
    return callable(getattr(processor, "initialize", None))


def accepts_value(processor: Any) -> bool:
    """Whether the processor consumes trailing free text as its value."""
    return bool(
        getattr(processor, "allow_unlisted_commands", False)
        or getattr(processor, "value_required", False)
    )


def hooks_for(processor: Any, when: str) -> List[ProcessorHook]:
    """Hooks of the given phase, in declared order."""
    if not has_hooks(processor):
        return []
    return [h for h in processor.hooks if h.when == when]
