"""
State management for termshell.
"""
from .store import StateStore
from .manager import StateStoreManager

__all__ = ['StateStore', 'StateStoreManager']
