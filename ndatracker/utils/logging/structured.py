"""
Structured logging utilities for event-based logging.

Provides structured event logging with consistent field names and a
human-readable formatter for development consoles.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional


class StructuredLogger:
    """
    Structured logger that creates consistent, searchable log events.

    Every event carries its name, the current correlation id and any
    operation context; the payload travels on the record as
    ``structured_data``.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def event(
        self,
        event_name: str,
        data: Optional[Dict[str, Any]] = None,
        level: int = logging.INFO,
    ):
        """
        Log a structured event with optional data.

        Args:
            event_name: Name of the event (e.g., 'contract_created')
            data: Dictionary of structured data to include
            level: Log level (defaults to INFO)
        """
        if not self.logger.isEnabledFor(level):
            return

        from .context import get_correlation_id, get_operation_context

        structured_data = {
            "event": event_name,
            "correlation_id": get_correlation_id(),
        }

        operation_context = get_operation_context()
        if operation_context:
            structured_data.update(operation_context)

        if data:
            structured_data.update(data)

        record = self.logger.makeRecord(
            self.logger.name, level, "(structured)", 0, event_name, (), None
        )
        record.structured_data = structured_data

        self.logger.handle(record)


_global_logger: Optional[StructuredLogger] = None


def get_structured_logger(name: str = "ndatracker") -> StructuredLogger:
    """Get or create the structured logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name)
    return _global_logger


def log_event(
    event_name: str, data: Optional[Dict[str, Any]] = None, level: int = logging.INFO
):
    """
    Convenience function for logging structured events.

    Example::

        log_event("contract_created", {
            "record_id": "3f2a...",
            "contract_count": 4,
        })
    """
    get_structured_logger().event(event_name, data, level)


def create_development_formatter() -> logging.Formatter:
    """
    Create a human-readable formatter for development environments.

    Plain log records are printed as-is; structured events are rendered with
    a short summary chosen by event name.
    """

    class DevelopmentFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[
                :-3
            ]

            data: Optional[dict] = getattr(record, "structured_data", None)

            if not data:
                return f"{timestamp} | {record.levelname:5} | {record.getMessage()}"

            event = data.get("event", "")
            operation = data.get("operation", "")

            if event == "operation_started":
                message_content = f"🚀 {operation or 'operation'} started"
            elif event == "operation_completed":
                message_content = self._format_operation_success(data, operation)
            elif event == "operation_failed":
                message_content = self._format_operation_error(data, operation)
            else:
                message_content = self._format_generic_event(data, event)

            return f"{timestamp} | {record.levelname:5} | {message_content}"

        def _format_duration(self, duration_ms: int) -> str:
            if duration_ms >= 1000:
                return f"{duration_ms / 1000:.1f}s"
            return f"{duration_ms}ms"

        def _format_operation_success(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)

            if duration_ms < 50:
                duration_emoji = "⚡"
            elif duration_ms > 2000:
                duration_emoji = "🐌"
            else:
                duration_emoji = "⏱️"

            base_message = (
                f"{duration_emoji} {self._format_duration(duration_ms)} {operation}"
            )
            if "result_length" in data:
                return f"{base_message} ({data['result_length']} items)"
            return base_message

        def _format_operation_error(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)
            error_type = data.get("error_type", "Error")
            error_message = data.get("error_message", "")

            duration_part = f" {self._format_duration(duration_ms)}" if duration_ms else ""

            if len(error_message) > 60:
                error_message = error_message[:57] + "..."

            return (
                f"❌{duration_part} {operation} failed ({error_type}: {error_message})"
            )

        def _format_generic_event(self, data: dict, event: str) -> str:
            if not event:
                return "📝 log_event"

            context = self._get_event_context(data, event)
            return f"📝 {event}: {context}" if context else f"📝 {event}"

        def _get_event_context(self, data: dict, event: str) -> str:
            """Short summary for the events the tracker emits."""
            record_id = str(data.get("record_id", ""))[:8]

            # Store events
            if event in ("contract_created", "contract_updated", "contract_deleted"):
                count = data.get("contract_count", 0)
                return f"id={record_id}... ({count} contracts)"
            elif event == "contracts_loaded":
                return f"{data.get('contract_count', 0)} contracts from '{data.get('key')}'"
            elif event in ("contracts_load_failed", "contract_entry_skipped"):
                return str(data.get("reason", "unknown"))
            elif event == "contracts_persisted":
                size = data.get("size_bytes", 0)
                return f"{data.get('key')}, {size}B"
            elif event == "persistence_failed":
                return f"{data.get('key')} ({data.get('error')})"

            # Extraction events
            elif event == "extraction_started":
                return f"{data.get('file_name')} (generation {data.get('generation')})"
            elif event == "extraction_completed":
                return f"{data.get('file_name')} -> '{data.get('title', '')}'"
            elif event == "extraction_superseded":
                return f"generation {data.get('generation')} discarded"
            elif event == "extraction_failed":
                return f"{data.get('file_name')} ({data.get('error')})"

            # Session events
            elif event == "session_state_changed":
                return f"{data.get('from_state')} → {data.get('to_state')}"
            elif event == "commit_rejected":
                return str(data.get("reason", "unknown"))

            # Storage medium events
            elif event in ("key_value_store_ready", "redis_key_value_connected"):
                return str(data.get("backend", data.get("redis_url", "")))

            return ""

    return DevelopmentFormatter()
