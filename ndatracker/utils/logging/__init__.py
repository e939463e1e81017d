"""
Logging infrastructure for NDA Tracker.

Structured events through ``log_event`` plus a single ``track`` decorator
for timing and success/failure reporting of operations.
"""

from .context import get_correlation_id, operation_context, set_correlation_id
from .smart_logger import track
from .structured import StructuredLogger, create_development_formatter, log_event

__all__ = [
    "track",
    "log_event",
    "get_correlation_id",
    "operation_context",
    "set_correlation_id",
    "StructuredLogger",
    "create_development_formatter",
]
