"""Application lifecycle operations."""
from .service import LifecycleService

__all__ = [
    'LifecycleService',
]
