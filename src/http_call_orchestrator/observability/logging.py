"""Shared logging utilities for consistent call observability.

Usage example:
    from http_call_orchestrator.observability.logging import get_logger

    logger = get_logger("http_call_orchestrator.retry")
    logger.info("Attempt %s of %s", attempt, total)
"""

from __future__ import annotations

import logging
import time

from ..protocols import WarningSink

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_WARNING_LOGGER_NAME = "http_call_orchestrator.calls"


def get_logger(name: str) -> logging.Logger:
    """Return a standard logger configured for UTC timestamps.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        A logger with a single stream handler and a consistent UTC format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def default_warning_sink() -> WarningSink:
    """Return the warning callback used when a caller does not supply one."""
    return get_logger(_WARNING_LOGGER_NAME).warning
