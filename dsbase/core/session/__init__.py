"""
Session token storage.

A single key-value slot holding the bearer token, in memory or in a
SQLite file.
"""
from .protocols import TokenStore, TOKEN_KEY
from .memory_store import MemoryTokenStore
from .sqlite_store import SQLiteTokenStore

__all__ = [
    'TokenStore',
    'TOKEN_KEY',
    'MemoryTokenStore',
    'SQLiteTokenStore',
]
