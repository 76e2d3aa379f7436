"""Administration API: configuration, request protocol, authentication."""
from .errors import DsAPIError, APIErrorCodes, ERROR_TRANSPORT, ERROR_UNPARSABLE_OBJECT
from .events import EventEmitter
from .config import APIConfig, EndpointConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .request import ApiRequest, FormField, Outcome, MISSING
from .async_client import AsyncAPIClient
from .async_auth import AsyncAuthService

__all__ = [
    # Client
    'AsyncAPIClient',
    'AsyncAuthService',

    # Requests
    'ApiRequest',
    'FormField',
    'Outcome',
    'MISSING',

    # Configuration
    'APIConfig',
    'EndpointConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',

    # Errors
    'DsAPIError',
    'APIErrorCodes',
    'ERROR_TRANSPORT',
    'ERROR_UNPARSABLE_OBJECT',

    # Events
    'EventEmitter',
]
