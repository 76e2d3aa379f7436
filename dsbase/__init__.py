"""
dsbase - Async Python client for the ds administration API.

Usage:
    >>> from dsbase import DsClient
    >>>
    >>> async with DsClient("admin") as ds:
    ...     ds.set_base("https://apps.example.com")
    ...     ds.set_repo("octocat", "site")
    ...     await ds.login("octocat", "secret")
    ...     error, obj = await ds.download_object("page.json")
"""
import logging
from .client import DsClient

# Configuration
from .core.api import (
    APIConfig,
    EndpointConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncAPIClient,
    AsyncAuthService,
    Outcome,
    DsAPIError,
    APIErrorCodes,
    ERROR_TRANSPORT,
    ERROR_UNPARSABLE_OBJECT,
)
from .core.exceptions import DsException, InvalidCallError, ConfigurationError, ERROR_INVALID_CALL

# Token storage
from .core.session import (
    TokenStore,
    MemoryTokenStore,
    SQLiteTokenStore,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for dsbase modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'dsbase',
        'dsbase.api',
        'dsbase.auth',
        'dsbase.client',
        'dsbase.events',
        'dsbase.transfer',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'DsClient',
    'TokenStore',
    'MemoryTokenStore',
    'SQLiteTokenStore',
    'APIConfig',
    'EndpointConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'AsyncAuthService',
    'Outcome',
    'DsAPIError',
    'APIErrorCodes',
    'DsException',
    'InvalidCallError',
    'ConfigurationError',
    'ERROR_INVALID_CALL',
    'ERROR_TRANSPORT',
    'ERROR_UNPARSABLE_OBJECT',
    'setup_logging',
]
