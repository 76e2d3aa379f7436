"""Argument checks shared by the operation services."""
import os
from typing import Any, Callable, Optional

from .exceptions import InvalidCallError


def require_str(value: Any, name: str) -> str:
    """Raise InvalidCallError unless value is a str."""
    if not isinstance(value, str):
        raise InvalidCallError(f"{name} must be a string, got {type(value).__name__}", name)
    return value


def optional_str(value: Any, name: str) -> Optional[str]:
    if value is not None:
        require_str(value, name)
    return value


def require_callback(callback: Any, name: str = 'callback') -> Optional[Callable]:
    """Callbacks are optional, but must be callable when given."""
    if callback is not None and not callable(callback):
        raise InvalidCallError(f"{name} must be callable", name)
    return callback


def require_json_container(value: Any, name: str) -> Any:
    # JSON objects and arrays only; scalars are not uploadable objects
    if not isinstance(value, (dict, list)):
        raise InvalidCallError(f"{name} must be a dict or list, got {type(value).__name__}", name)
    return value


def require_upload_source(value: Any, name: str) -> Any:
    """Accept bytes, a filesystem path, or a readable binary object."""
    if isinstance(value, (bytes, bytearray, str, os.PathLike)):
        return value
    if hasattr(value, 'read') and callable(value.read):
        if getattr(value, 'closed', False) is True:
            raise InvalidCallError(f"{name} is a closed file object", name)
        return value
    raise InvalidCallError(
        f"{name} must be bytes, a path or a readable file object, got {type(value).__name__}",
        name
    )
