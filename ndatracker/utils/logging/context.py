"""
Context management for scoped logging with correlation IDs.

A correlation id ties together every event emitted while handling one user
action (a drop, a commit), including the ones emitted from the extraction
task, because asyncio copies the context into new tasks.
"""

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_operation_context: contextvars.ContextVar[Optional[Dict[str, Any]]] = (
    contextvars.ContextVar("operation_context", default=None)
)


def get_correlation_id() -> str:
    """
    Get the current correlation ID, generating one if none exists.

    Returns:
        Correlation ID string for tracking actions across components
    """
    correlation_id = _correlation_id.get()
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
        _correlation_id.set(correlation_id)
    return correlation_id


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_operation_context() -> Dict[str, Any]:
    """Get a copy of the current operation context dictionary."""
    context = _operation_context.get()
    return context.copy() if context is not None else {}


@contextmanager
def operation_context(**values: Any) -> Iterator[Dict[str, Any]]:
    """
    Attach extra fields to every event logged inside the block.

    Example::

        with operation_context(session="edit"):
            log_event("draft_cleared")
    """
    merged = {**get_operation_context(), **values}
    token = _operation_context.set(merged)
    try:
        yield merged
    finally:
        _operation_context.reset(token)
