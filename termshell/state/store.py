"""
Named, observable state buckets for termshell processors.
"""
import copy
import logging
from typing import Any, Callable, Dict, List, Optional

from ..constants import STATE_STORAGE_PREFIX
from ..utils import Subscription


logger = logging.getLogger(__name__)


_UNSET = object()


class StateStore:
    """
    In-memory state bucket with observers and explicit persistence.

    ``update_state`` only changes memory and notifies observers; the bucket
    reaches the key-value store on ``persist()``.
    """

    def __init__(self, name: str, key_value_store: Any = None, initial_state: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the bucket.

        Args:
            name: Bucket name, also used for the storage key
            key_value_store: Async store used by ``persist``/``initialize``
            initial_state: Default state restored by ``reset``
        """
        self.name = name
        self._key_value_store = key_value_store
        self._initial_state: Dict[str, Any] = copy.deepcopy(initial_state or {})
        self._state: Dict[str, Any] = copy.deepcopy(self._initial_state)
        self._observers: List[Callable[[Dict[str, Any]], Any]] = []

    @property
    def storage_key(self) -> str:
        return f"{STATE_STORAGE_PREFIX}{self.name}"

    def get_state(self) -> Dict[str, Any]:
        return self._state

    def update_state(self, partial: Dict[str, Any]) -> None:
        """Shallow-merge ``partial`` into the state and notify observers."""
        self._set({**self._state, **partial})

    def subscribe(self, callback: Callable[[Dict[str, Any]], Any]) -> Subscription:
        """Call ``callback`` with the current state now and on every change."""
        self._observers.append(callback)
        callback(self._state)
        return Subscription(self._observers, callback)

    def select(self, selector: Callable[[Dict[str, Any]], Any], callback: Callable[[Any], Any]) -> Subscription:
        """
        Observe a projection of the state.

        ``callback`` receives the current projection immediately and then
        only when the projection compares unequal to the last one delivered.

        Args:
            selector: Maps the full state to the watched value
            callback: Receives the projected value

        Returns:
            Subscription handle
        """
        last = [_UNSET]

        def on_state(state: Dict[str, Any]) -> None:
            value = selector(state)
            if last[0] is not _UNSET and last[0] == value:
                return
            last[0] = value
            callback(value)

        return self.subscribe(on_state)

    def reset(self) -> None:
        """Restore the constructor default in memory."""
        self._set(copy.deepcopy(self._initial_state))

    async def persist(self) -> None:
        """Write the current state to the key-value store."""
        await self._key_value_store.set(self.storage_key, self._state)
        logger.debug(f"Persisted state bucket: {self.name}")

    async def initialize(self) -> None:
        """Load a persisted snapshot, if any, replacing the in-memory state."""
        try:
            snapshot = await self._key_value_store.get(self.storage_key)
        except Exception as e:
            logger.error(f"Failed to load state for {self.name!r}: {e}")
            return

        if snapshot is not None:
            self._set(snapshot)

    def _set(self, state: Dict[str, Any]) -> None:
        self._state = state
        for callback in list(self._observers):
            callback(state)
