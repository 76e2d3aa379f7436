"""
SQLite token storage implementation.

Persists the session token in a small key-value table, keyed by a fixed
name, so a token survives process restarts.
"""
import sqlite3
import threading
from pathlib import Path
from datetime import datetime
from typing import Optional, Union
from contextlib import contextmanager

from .protocols import TokenStore, TOKEN_KEY


class SQLiteTokenStore(TokenStore):
    """
    SQLite-based token storage.

    Thread-safe: one connection guarded by a lock.

    Example:
        >>> store = SQLiteTokenStore("admin")
        >>> # Creates admin.storage file
        >>> store.set_token("abc")
        >>> store.has_token()
        True
    """

    EXTENSION = '.storage'
    SCHEMA_VERSION = 1

    def __init__(
        self,
        name: Union[str, Path],
        base_path: Optional[Path] = None,
        key: str = TOKEN_KEY
    ):
        """
        Initialize SQLite token storage.

        Args:
            name: Storage name (without extension) or full path
            base_path: Optional base directory for storage files
            key: Key the token is stored under
        """
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._key = key

        if isinstance(name, Path) or name.endswith(self.EXTENSION):
            self._path = Path(name)
        elif base_path:
            self._path = Path(base_path) / f"{name}{self.EXTENSION}"
        else:
            self._path = Path(f"{name}{self.EXTENSION}")

        self._path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    @property
    def path(self) -> Path:
        """Get storage file path."""
        return self._path

    @contextmanager
    def _get_connection(self):
        """Get thread-safe database connection."""
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(
                    str(self._path),
                    check_same_thread=False
                )
                self._conn.row_factory = sqlite3.Row
            yield self._conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS version (
                    version INTEGER PRIMARY KEY
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')

            cursor.execute('SELECT version FROM version LIMIT 1')
            if cursor.fetchone() is None:
                cursor.execute(
                    'INSERT INTO version (version) VALUES (?)',
                    (self.SCHEMA_VERSION,)
                )

            conn.commit()

    def has_token(self) -> bool:
        return self.get_token() is not None

    def get_token(self) -> Optional[str]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                'SELECT value FROM storage WHERE key = ?',
                (self._key,)
            )
            row = cursor.fetchone()
            return None if row is None else row['value']

    def set_token(self, token: str) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT OR REPLACE INTO storage (key, value, updated_at)
                VALUES (?, ?, ?)
            ''', (self._key, token, datetime.now().isoformat()))
            conn.commit()

    def clear_token(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM storage WHERE key = ?', (self._key,))
            conn.commit()

    def updated_at(self) -> Optional[datetime]:
        """
        When the token was last written.

        Returns:
            Timestamp, or None when no token is stored
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                'SELECT updated_at FROM storage WHERE key = ?',
                (self._key,)
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return datetime.fromisoformat(row['updated_at'])

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def delete_file(self) -> None:
        """Delete the storage file completely."""
        self.close()
        if self._path.exists():
            self._path.unlink()

    def __enter__(self) -> 'SQLiteTokenStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
