"""
Storage collaborators for termshell: key-value store and file system.
"""
from .key_value import KeyValueStore, InMemoryKeyValueStore, SqliteKeyValueStore
from .filesystem import FileSystem, LocalFileSystem

__all__ = [
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'SqliteKeyValueStore',
    'FileSystem',
    'LocalFileSystem',
]
