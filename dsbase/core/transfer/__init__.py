"""Resource transfer operations."""
from .service import TransferService

__all__ = [
    'TransferService',
]
