"""Alias commands for termshell."""
import logging
from typing import Any, Dict, Optional

from rich.markup import escape

from ...utils import Subscription
from ..base import CommandProcessor, ProcessCommand, ProcessorMetadata, StateConfiguration


logger = logging.getLogger(__name__)

ALIAS_STORE = "aliases"


class AliasListProcessor(CommandProcessor):
    """List all aliases."""

    command = "ls"
    description = "List all aliases"

    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        writer = context.writer
        aliases: Dict[str, str] = context.state.get_state().get("aliases") or {}

        writer.writeln("Aliases:")
        if not aliases:
            writer.write_info("  No aliases defined")
            return

        for name, target in aliases.items():
            writer.write_info(f"  {writer.wrap_in_color(name, 'cyan')} -> {writer.wrap_in_color(target, 'white')}")


class AliasProcessor(CommandProcessor):
    """
    Define command aliases.

    ``alias --ll="ls -la"`` maps ``ll`` to ``ls -la``. Aliases live in the
    ``aliases`` state bucket; ``user_aliases`` mirrors it for the executor.
    """

    command = "alias"
    description = "Manage aliases for commands"
    metadata = ProcessorMetadata(sealed=True, module="misc", icon="🔥")

    def __init__(self) -> None:
        super().__init__()
        self.state_configuration = StateConfiguration(
            initial_state={"aliases": {}},
            store_name=ALIAS_STORE,
        )
        self.processors = [AliasListProcessor()]
        self.user_aliases: Dict[str, str] = {}
        self._subscription: Optional[Subscription] = None

    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        writer = context.writer
        registry = context.executor.registry

        if not command.args:
            writer.write_error("No aliases provided")
            context.process.exit(-1)

        new_aliases = {}
        for name, target in command.args.items():
            if registry.has_command(name):
                writer.write_error(f"{escape(name)} cannot be aliased to {escape(str(target))}")
                context.process.exit(-1)

            new_aliases[name] = str(target)
            writer.write_info(f"{escape(name)} -> {escape(str(target))}")

        current = context.state.get_state().get("aliases") or {}
        context.state.update_state({"aliases": {**current, **new_aliases}})
        await context.state.persist()
        logger.debug(f"Saved aliases: {', '.join(new_aliases)}")

    async def initialize(self, context: Any) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
        self._subscription = context.state.select(
            lambda state: state.get("aliases"),
            self._on_aliases_changed,
        )

    def _on_aliases_changed(self, aliases: Optional[Dict[str, str]]) -> None:
        self.user_aliases = dict(aliases or {})


class UnaliasProcessor(CommandProcessor):
    """Remove an alias."""

    command = "unalias"
    description = "Remove aliases for commands"
    value_required = True
    metadata = ProcessorMetadata(sealed=True, module="misc", icon="🔥")
    state_configuration = StateConfiguration(initial_state={"aliases": {}}, store_name=ALIAS_STORE)

    async def process_command(self, command: ProcessCommand, context: Any) -> None:
        writer = context.writer
        name = command.value
        aliases: Dict[str, str] = context.state.get_state().get("aliases") or {}

        if name not in aliases:
            writer.write_error(f"Alias {escape(name)} not found")
            context.process.exit(-1)

        context.state.update_state({
            "aliases": {k: v for k, v in aliases.items() if k != name}
        })
        await context.state.persist()
        writer.write_success(f"Removed alias {escape(name)}")
