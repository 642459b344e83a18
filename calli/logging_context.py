"""Action ID logging context for tracing one user action across modules.

Every user-triggered flow (initial load, slot query, submission) runs
under its own action ID, so the request dispatch, the response handling
and the resulting notification of a single attempt can be lined up in
the logs even when several attempts are in flight at once.

Usage:
    from calli.logging_context import get_action_logger, new_action_id

    new_action_id("book")
    logger = get_action_logger(__name__)
    logger.info("Submitting booking")  # record.action_id == "book-1a2b3c4d"
"""

import logging
import uuid
from contextvars import ContextVar

_action_id: ContextVar[str] = ContextVar("action_id", default="NO_ACTION_ID")


def set_action_id(action_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _action_id.set(action_id)


def get_action_id() -> str:
    """Retrieve the current correlation ID."""
    return _action_id.get()


def new_action_id(prefix: str) -> str:
    """Generate, set and return a fresh action ID such as ``query-1a2b3c4d``."""
    action_id = f"{prefix}-{uuid.uuid4().hex[:8]}"
    _action_id.set(action_id)
    return action_id


class ActionIdFilter(logging.Filter):
    """Injects action_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.action_id = _action_id.get()  # type: ignore[attr-defined]
        return True


def get_action_logger(name: str) -> logging.Logger:
    """Return a logger with the ActionIdFilter attached.

    The filter adds ``action_id`` to each record so formatters can
    include ``%(action_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, ActionIdFilter) for f in logger.filters):
        logger.addFilter(ActionIdFilter())
    return logger
