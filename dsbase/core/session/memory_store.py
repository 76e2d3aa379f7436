"""
In-memory token storage implementation.

Provides non-persistent token storage for testing and temporary use.
"""
from typing import Optional

from .protocols import TokenStore


class MemoryTokenStore(TokenStore):
    """
    In-memory token storage.

    The token is lost when the object is destroyed.

    Example:
        >>> store = MemoryTokenStore()
        >>> store.set_token('abc')
        >>> store.get_token()
        'abc'
    """

    def __init__(self, token: Optional[str] = None):
        self._token: Optional[str] = token

    def has_token(self) -> bool:
        return self._token is not None

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def close(self) -> None:
        """Close storage (no-op for memory storage)."""
        pass

    def __enter__(self) -> 'MemoryTokenStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
