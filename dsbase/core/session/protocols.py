"""
Token storage protocols.

Defines the interface of the slot holding the session token.
"""
from typing import Protocol, Optional, runtime_checkable


TOKEN_KEY = 'ds_token'


@runtime_checkable
class TokenStore(Protocol):
    """
    Protocol for session token storage implementations.

    The token is opaque: stores never validate its shape, only the
    server decides whether it is still good.
    """

    def has_token(self) -> bool:
        """
        Check if a token is currently persisted.

        Returns:
            True if a token exists
        """
        ...

    def get_token(self) -> Optional[str]:
        """
        Read the persisted token.

        Returns:
            The token, or None when absent
        """
        ...

    def set_token(self, token: str) -> None:
        """
        Persist a token, overwriting any previous one.

        Args:
            token: Session token
        """
        ...

    def clear_token(self) -> None:
        """Remove the persisted token."""
        ...

    def close(self) -> None:
        """Close storage and release resources."""
        ...
