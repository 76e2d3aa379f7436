"""Logging utilities for dsbase modules."""

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    The logger propagates to the root logger and only gets a default
    WARNING level when basicConfig() has not been called yet.

    Args:
        name: Logger name (typically 'dsbase.<component>')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger
