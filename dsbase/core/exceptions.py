"""
Custom exceptions for dsbase operations.

Remote failures are reported as integer codes through the async result
channel; the classes here cover programmer errors that are raised
synchronously, before any request is built.
"""
from typing import Optional


ERROR_INVALID_CALL = 400


class DsException(Exception):
    """Base exception for all dsbase errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class InvalidCallError(DsException):
    """Raised when a required argument is missing or has the wrong type."""

    def __init__(self, message: str, argument: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            argument: Name of the offending argument
        """
        self.argument = argument
        super().__init__(message, ERROR_INVALID_CALL)


class ConfigurationError(InvalidCallError):
    """Raised when the endpoint is used unconfigured or reconfigured."""
    pass
