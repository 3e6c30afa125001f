"""
Service container shared by the execution context and processors.
"""
from typing import Any, Dict, Optional

from ..errors import ServiceNotFoundError


class ServiceContainer:
    """Maps service tokens to instances (key-value store, file system, ...)."""

    def __init__(self, services: Optional[Dict[str, Any]] = None) -> None:
        self._services: Dict[str, Any] = dict(services or {})

    def register(self, token: str, service: Any) -> None:
        self._services[token] = service

    def unregister(self, token: str) -> None:
        self._services.pop(token, None)

    def has(self, token: str) -> bool:
        return token in self._services

    def get(self, token: str) -> Any:
        """
        Get a service by token.

        Raises:
            ServiceNotFoundError: If nothing is registered under ``token``
        """
        try:
            return self._services[token]
        except KeyError:
            raise ServiceNotFoundError(token) from None
