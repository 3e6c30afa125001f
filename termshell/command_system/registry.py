"""
Processor registry for termshell.
Handles registration, extension, unregistration and tree lookup of command processors.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from .base import has_children, accepts_value, is_sealed, processor_names


logger = logging.getLogger(__name__)


@dataclass
class ProcessorSlot:
    """
    One root-level command slot.

    Extending a processor pushes a new slot whose ``previous`` is the slot it
    replaced; unregistering pops back to ``previous``.
    """
    processor: Any
    previous: Optional['ProcessorSlot'] = None


class ProcessorRegistry:
    """
    Registry of command processors.

    Root processors live in ordered slots; children are reached through each
    processor's ``processors`` list. Lookups are case-insensitive on command
    names and aliases.
    """

    def __init__(self, initial_processors: Optional[Iterable[Any]] = None) -> None:
        self._slots: List[ProcessorSlot] = []
        for processor in initial_processors or []:
            self.register_processor(processor)

    @property
    def processors(self) -> List[Any]:
        """Current root-level processors, in registration order."""
        return [slot.processor for slot in self._slots]

    def register_processor(self, processor: Any) -> bool:
        """
        Register a processor at the root level.

        If a processor with the same command or alias exists:
        - ``extends_processor`` wraps it (kept as ``original_processor``)
        - a sealed existing processor rejects the registration
        - otherwise the existing processor is replaced in place

        A processor whose names collide with more than one registered
        processor is rejected.

        Args:
            processor: Processor to register

        Returns:
            True if the registry changed
        """
        indexes = self._find_slot_indexes(processor_names(processor))
        if len(indexes) > 1:
            clashes = ", ".join(self._slots[i].processor.command for i in indexes)
            logger.warning(
                f"Processor with command: {processor.command} collides with several processors ({clashes}) and was not registered."
            )
            return False

        index = indexes[0] if indexes else None
        self._link_children(processor)

        if index is None:
            self._slots.append(ProcessorSlot(processor))
            logger.debug(f"Registered processor: {processor.command}")
            return True

        slot = self._slots[index]

        if getattr(processor, "extends_processor", False):
            processor.original_processor = slot.processor
            self._slots[index] = ProcessorSlot(processor, previous=slot)
            logger.debug(f"Processor {processor.command} extends {slot.processor.command}")
            return True

        if is_sealed(slot.processor):
            logger.warning(
                f"Processor with command: {processor.command} is sealed and cannot be replaced."
            )
            return False

        self._slots[index] = ProcessorSlot(processor)
        logger.debug(f"Replaced processor: {processor.command}")
        return True

    def unregister_processor(self, processor: Any) -> bool:
        """
        Unregister a processor by command name.

        Restores the wrapped original when the slot holds an extension.
        Sealed processors without a wrapped original cannot be removed.

        Args:
            processor: Processor (or any object with the same ``command``)

        Returns:
            True if the registry changed
        """
        index = self._find_slot_index([processor.command.lower()])
        if index is None:
            return False

        slot = self._slots[index]

        if slot.previous is not None:
            self._slots[index] = slot.previous
            logger.debug(f"Restored original processor: {slot.previous.processor.command}")
            return True

        if is_sealed(slot.processor):
            logger.warning(
                f"Processor with command: {processor.command} is sealed and cannot be removed."
            )
            return False

        del self._slots[index]
        logger.debug(f"Unregistered processor: {processor.command}")
        return True

    def find_processor(self, main_command: str, chain_commands: Sequence[str]) -> Optional[Any]:
        """Find a processor starting from the root level."""
        return self.find_processor_in_collection(main_command, chain_commands, self.processors)

    def find_processor_in_collection(
        self,
        main_command: str,
        chain_commands: Sequence[str],
        processors: Sequence[Any],
    ) -> Optional[Any]:
        """
        Recursively search for the processor matching a command path.

        Args:
            main_command: Command name (or alias) at this level
            chain_commands: Remaining path tokens
            processors: Candidates at this level

        Returns:
            The matching processor, or None if not found
        """
        lowered = main_command.lower()
        processor = next(
            (p for p in processors if lowered in processor_names(p)),
            None,
        )

        if processor is None:
            return None

        if not chain_commands:
            return processor

        if has_children(processor):
            return self.find_processor_in_collection(
                chain_commands[0],
                chain_commands[1:],
                processor.processors,
            )

        if accepts_value(processor):
            return processor

        return None

    def get_root_processor(self, processor: Any) -> Any:
        """Walk ``parent`` links up to the root processor."""
        parent = getattr(processor, "parent", None)
        return self.get_root_processor(parent) if parent is not None else processor

    def list_commands(self, include_hidden: bool = False) -> List[dict]:
        """
        List root commands.

        Args:
            include_hidden: Whether to include hidden processors

        Returns:
            List of command info dicts sorted by name
        """
        commands = []
        for processor in sorted(self.processors, key=lambda p: p.command.lower()):
            metadata = getattr(processor, "metadata", None)
            if metadata and metadata.hidden and not include_hidden:
                continue
            commands.append({
                "name": processor.command,
                "description": getattr(processor, "description", "") or "",
                "aliases": list(getattr(processor, "aliases", None) or []),
            })
        return commands

    def has_command(self, name: str) -> bool:
        """Check if a root command or alias exists."""
        return self._find_slot_index([name.lower()]) is not None

    def _find_slot_index(self, names: Sequence[str]) -> Optional[int]:
        indexes = self._find_slot_indexes(names)
        return indexes[0] if indexes else None

    def _find_slot_indexes(self, names: Sequence[str]) -> List[int]:
        wanted = set(names)
        return [
            index for index, slot in enumerate(self._slots)
            if wanted.intersection(processor_names(slot.processor))
        ]

    def _link_children(self, processor: Any) -> None:
        for child in getattr(processor, "processors", None) or []:
            child.parent = processor
            self._link_children(child)
