"""
State store manager for termshell.
Creates and memoizes state buckets by name.
"""
from typing import Any, Dict, List, Optional

from .store import StateStore


class StateStoreManager:
    """Owns every state bucket; each name maps to exactly one bucket."""

    def __init__(self, key_value_store: Any, registry: Optional[Any] = None) -> None:
        self._key_value_store = key_value_store
        self._registry = registry
        self._stores: Dict[str, StateStore] = {}

    @property
    def key_value_store(self) -> Any:
        return self._key_value_store

    def get_state_store(self, name: str, default_state: Optional[Dict[str, Any]] = None) -> StateStore:
        """
        Get the bucket called ``name``, creating it on first use.

        The default only applies when the bucket is created.
        """
        if name not in self._stores:
            self._stores[name] = StateStore(name, self._key_value_store, default_state)
        return self._stores[name]

    def get_processor_state_store(self, processor: Any) -> StateStore:
        """
        Get the bucket of the root processor owning ``processor``.

        Uses ``state_configuration.store_name`` when set, otherwise the root
        command name.
        """
        root = self._get_root(processor)
        configuration = getattr(root, "state_configuration", None)
        name = (configuration.store_name if configuration else None) or root.command
        initial_state = configuration.initial_state if configuration else None
        return self.get_state_store(name, initial_state)

    def get_store_entries(self) -> List[Dict[str, Any]]:
        """Names and current states of every bucket created so far."""
        return [
            {"name": name, "state": store.get_state()}
            for name, store in self._stores.items()
        ]

    def _get_root(self, processor: Any) -> Any:
        if self._registry is not None:
            return self._registry.get_root_processor(processor)
        while getattr(processor, "parent", None) is not None:
            processor = processor.parent
        return processor
