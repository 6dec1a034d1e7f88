"""Correlation context for request tracing.

Every upload / effects request runs under its own correlation ID so that
log lines from the loader, the analysis tasks and the effects chain can be
grouped per request. The session ID identifies the AnalysisSession that
issued the request.
"""

import uuid
import logging
import contextvars
from contextlib import contextmanager
from typing import Iterator, Optional


# Context variable for correlation ID (thread-safe, async-safe)
correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Context variable for session ID
session_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session_id", default=None
)


def generate_correlation_id() -> str:
    """Generate unique correlation ID."""
    return str(uuid.uuid4())[:8]


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: str | None):
    """Set correlation ID in context."""
    correlation_id_var.set(cid)


def get_session_id() -> str | None:
    """Get current session ID from context."""
    return session_id_var.get()


def set_session_id(sid: str | None):
    """Set session ID in context."""
    session_id_var.set(sid)


@contextmanager
def request_context(session_id: Optional[str] = None) -> Iterator[str]:
    """
    Run a block under a fresh correlation ID.

    Restores the previous context on exit, so nested requests
    (an effects request issued while analysing) keep their own IDs.

    Args:
        session_id: Session that issued the request

    Yields:
        The generated correlation ID
    """
    cid = generate_correlation_id()
    cid_token = correlation_id_var.set(cid)
    sid_token = session_id_var.set(session_id) if session_id else None
    try:
        yield cid
    finally:
        correlation_id_var.reset(cid_token)
        if sid_token is not None:
            session_id_var.reset(sid_token)


class CorrelationLogFilter(logging.Filter):
    """
    Logging filter that adds correlation_id and session_id to log records.

    Use with standard logging to auto-inject context vars.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        record.session_id = get_session_id()
        return True
