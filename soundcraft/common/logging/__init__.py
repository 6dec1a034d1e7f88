"""Structured logging for soundcraft."""

from .logger import setup_logging, get_logger
from .logging_config import LoggingConfig, get_logging_config
from .formatters import ConsoleFormatter, JSONFormatter, StructuredLogAdapter
from .correlation import (
    CorrelationLogFilter,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    get_session_id,
    set_session_id,
    request_context,
)

__all__ = [
    # Logger
    'setup_logging',
    'get_logger',
    # Logging config
    'LoggingConfig',
    'get_logging_config',
    # Structured logging
    'ConsoleFormatter',
    'JSONFormatter',
    'StructuredLogAdapter',
    # Correlation
    'CorrelationLogFilter',
    'generate_correlation_id',
    'get_correlation_id',
    'set_correlation_id',
    'get_session_id',
    'set_session_id',
    'request_context',
]
