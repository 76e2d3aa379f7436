"""Administration API errors and exceptions."""
from .api_errors import (
    DsAPIError,
    APIErrorCodes,
    ERROR_TRANSPORT,
    ERROR_UNPARSABLE_OBJECT,
)

__all__ = [
    'DsAPIError',
    'APIErrorCodes',
    'ERROR_TRANSPORT',
    'ERROR_UNPARSABLE_OBJECT',
]
