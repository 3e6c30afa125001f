"""
Command parser for termshell.
Splits raw input lines on chaining operators and parses single segments
into a command path and typed flags.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..constants import OPERATOR_AND, OPERATOR_APPEND, OPERATOR_OR, OPERATOR_PIPE


COMMAND_PART = "command"

TWO_CHAR_OPERATORS = (OPERATOR_AND, OPERATOR_OR, OPERATOR_APPEND)

BOOLEAN_TRUE_VALUES = (True, 1, "true", "1", "yes", "y")


@dataclass
class ParsedArg:
    """A single flag found in a segment."""
    name: str
    value: Any


@dataclass
class ParsedCommandLine:
    """Result of parsing one command segment."""
    command_name: str = ""
    args: List[ParsedArg] = field(default_factory=list)

    def args_dict(self) -> Dict[str, Any]:
        """Flatten the parsed flags into a mapping; later flags win."""
        return {arg.name: arg.value for arg in self.args}


@dataclass
class CommandPart:
    """One element of a split command line: a command or an operator."""
    type: str  # 'command', '&&', '||', '|', '>>'
    value: str

    @property
    def is_command(self) -> bool:
        return self.type == COMMAND_PART


class CommandParser:
    """
    Parser for shell input.

    Handles:
    - Splitting a line into command segments and operators (&&, ||, |, >>)
    - Parsing a segment into its command path and flags (--name[=value], -n)
    - Coercing flag values to int/float/bool/str
    """

    _token_pattern = re.compile(
        r"""--?([A-Za-z0-9_-]+)(?:=("[^"]*"|'[^']*'|\S+))?|\S+"""
    )
    _number_pattern = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

    @staticmethod
    def split_by_operators(text: str) -> List[CommandPart]:
        """
        Split a raw command line into commands and operators.

        Operators inside single- or double-quoted regions are literal text.

        Args:
            text: The full input line

        Returns:
            Ordered list of command parts
        """
        parts: List[CommandPart] = []
        current: List[str] = []
        in_single = False
        in_double = False

        def flush() -> None:
            segment = "".join(current).strip()
            if segment:
                parts.append(CommandPart(COMMAND_PART, segment))
            current.clear()

        i = 0
        while i < len(text):
            char = text[i]

            if char == "'" and not in_double:
                in_single = not in_single
                current.append(char)
            elif char == '"' and not in_single:
                in_double = not in_double
                current.append(char)
            elif in_single or in_double:
                current.append(char)
            elif text[i:i + 2] in TWO_CHAR_OPERATORS:
                flush()
                parts.append(CommandPart(text[i:i + 2], text[i:i + 2]))
                i += 1
            elif char == OPERATOR_PIPE:
                flush()
                parts.append(CommandPart(OPERATOR_PIPE, OPERATOR_PIPE))
            else:
                current.append(char)

            i += 1

        flush()
        return parts

    def parse(self, segment: str) -> ParsedCommandLine:
        """
        Parse a command segment into a command name and flags.

        Bare words are joined with single spaces into the command name, so
        ``pkg add foo --force`` yields ``"pkg add foo"`` and ``force=True``.
        Malformed input never raises; it produces an empty command name.

        Args:
            segment: One command segment (no operators)

        Returns:
            ParsedCommandLine with command_name and args
        """
        if not isinstance(segment, str) or not segment.strip():
            return ParsedCommandLine()

        command_parts: List[str] = []
        args: List[ParsedArg] = []

        for match in self._token_pattern.finditer(segment):
            name = match.group(1)
            if name:
                raw_value = match.group(2)
                if raw_value is None:
                    value: Any = True
                else:
                    value = self.parse_value(self._strip_quotes(raw_value))
                args.append(ParsedArg(name=name, value=value))
            elif not match.group(0).startswith("-"):
                command_parts.append(match.group(0))

        return ParsedCommandLine(command_name=" ".join(command_parts), args=args)

    @staticmethod
    def _strip_quotes(value: str) -> str:
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            return value[1:-1]
        return value

    @classmethod
    def parse_value(cls, value: Any) -> Any:
        """
        Coerce a flag value to its natural type.

        Args:
            value: Raw value string

        Returns:
            int or float for numeric strings, bool for "true"/"false",
            otherwise the string unchanged
        """
        if not isinstance(value, str):
            return value
        if cls._number_pattern.match(value):
            try:
                return int(value)
            except ValueError:
                return float(value)
        if value in ("true", "false"):
            return value == "true"
        return value


def convert_args(args: Iterable[ParsedArg], processor: Any) -> Dict[str, Any]:
    """
    Convert parsed flags into the argument mapping handed to a processor.

    Flags naming a declared parameter (by name or alias) are stored under the
    parameter name and every alias. ``array`` parameters collect repeated
    flags, ``boolean`` parameters accept true/1/yes/y. Undeclared flags pass
    through unchanged.
    """
    result: Dict[str, Any] = {}
    parameters = getattr(processor, "parameters", None) or []

    for arg in args:
        parameter = next(
            (p for p in parameters if p.name == arg.name or arg.name in (p.aliases or [])),
            None,
        )

        if parameter is None:
            result[arg.name] = arg.value
            continue

        value = arg.value
        if parameter.type == "array":
            previous = result.get(parameter.name)
            value = (previous if isinstance(previous, list) else []) + [arg.value]
        elif parameter.type == "boolean":
            value = arg.value in BOOLEAN_TRUE_VALUES

        result[parameter.name] = value
        for alias in parameter.aliases or []:
            result[alias] = value

    return result


def get_parameter_value(parameter: Any, args: Dict[str, Any]) -> Optional[Any]:
    """Return the value given for a parameter under its name or any alias."""
    if args.get(parameter.name) is not None:
        return args[parameter.name]
    for alias in parameter.aliases or []:
        if args.get(alias) is not None:
            return args[alias]
    return None


def get_right_of_word(command: str, words: Iterable[str]) -> Optional[str]:
    """
    Return the text following the first occurrence of any of ``words``.

    Matching is per whole word and case-insensitive. Returns None when none
    of the words occur and an empty string when nothing follows.
    """
    lowered = {w.lower() for w in words if w}
    tokens = command.split(" ")
    for index, token in enumerate(tokens):
        if token.lower() in lowered:
            return " ".join(tokens[index + 1:]).strip()
    return None
