"""
Operation tracking decorator.

``@track`` wraps sync and async callables and emits operation_started /
operation_completed / operation_failed events with timing, selected
arguments and a summary of the result.
"""

import functools
import inspect
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

from .context import get_correlation_id
from .structured import log_event

F = TypeVar("F", bound=Callable[..., Any])


class LogConfig:
    """Global configuration for operation tracking."""

    SAMPLE_RATES = {
        "high_frequency": 0.1,
        "medium_frequency": 0.5,
        "low_frequency": 1.0,
    }

    # Free-text contract fields are summarized rather than logged verbatim
    LARGE_CONTENT_KEYS = {"content", "notes", "limitations", "obligations"}
    MAX_ARG_LENGTH = 100

    # Mutations are never sampled away
    CRITICAL_OPS = {"create", "update", "delete", "commit", "initialize", "persist"}


def track(
    operation: Optional[str] = None,
    level: int = logging.INFO,
    frequency: str = "low_frequency",
    include_args: Union[bool, List[str]] = True,
    include_result: bool = True,
    track_performance: bool = True,
    emit_events: bool = True,
):
    """
    Decorator that logs an operation's lifecycle.

    Args:
        operation: Operation name (derived from the function if None)
        level: Log level for this operation
        frequency: Sampling category (high_frequency, medium_frequency, low_frequency)
        include_args: True for all keyword args, a list for specific ones, False for none
        include_result: Whether to log a summary of the return value
        track_performance: Whether to record duration
        emit_events: False for silent operations (nothing is logged)

    Examples:
        @track(operation="contract_create")
        @track(include_args=["record_id"], frequency="high_frequency")
    """

    def decorator(func: F) -> F:
        op_name = operation or _get_operation_name(func)

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            if not emit_events or not _should_log(op_name, frequency):
                return await func(*args, **kwargs)

            tracker = OperationTracker(
                op_name, level, include_args, include_result, track_performance, kwargs
            )
            tracker.on_enter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                tracker.on_exit(e)
                raise
            tracker.result = result
            tracker.on_exit(None)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            if not emit_events or not _should_log(op_name, frequency):
                return func(*args, **kwargs)

            tracker = OperationTracker(
                op_name, level, include_args, include_result, track_performance, kwargs
            )
            tracker.on_enter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                tracker.on_exit(e)
                raise
            tracker.result = result
            tracker.on_exit(None)
            return result

        if inspect.iscoroutinefunction(func):
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator


class OperationTracker:
    """Holds the timing and context of a single tracked call."""

    def __init__(
        self,
        operation: str,
        level: int,
        include_args: Union[bool, List[str]],
        include_result: bool,
        track_performance: bool,
        kwargs: dict,
    ):
        self.operation = operation
        self.level = level
        self.include_args = include_args
        self.include_result = include_result
        self.track_performance = track_performance
        self.kwargs = kwargs

        self.start_time: Optional[float] = None
        self.correlation_id: Optional[str] = None
        self.result: Any = None

    def on_enter(self) -> None:
        if self.track_performance:
            self.start_time = time.perf_counter()
        self.correlation_id = get_correlation_id()

        context: Dict[str, Any] = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
        }
        context.update(_extract_safe_args(self.kwargs, self.include_args))
        log_event("operation_started", context, logging.DEBUG)

    def on_exit(self, error: Optional[Exception]) -> None:
        context: Dict[str, Any] = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
            "success": error is None,
        }
        if self.track_performance and self.start_time is not None:
            context["duration_ms"] = int((time.perf_counter() - self.start_time) * 1000)

        if error is None:
            if self.include_result and self.result is not None:
                context.update(_extract_result_info(self.result))
            log_event("operation_completed", context, self.level)
        else:
            context.update(
                {"error_type": type(error).__name__, "error_message": str(error)}
            )
            log_event("operation_failed", context, logging.ERROR)


def _get_operation_name(func: Callable) -> str:
    return func.__qualname__.replace(".", "_").lower()


def _should_log(operation: str, frequency: str) -> bool:
    if any(critical in operation.lower() for critical in LogConfig.CRITICAL_OPS):
        return True
    return random.random() < LogConfig.SAMPLE_RATES.get(frequency, 1.0)


def _extract_safe_args(
    kwargs: dict, include_args: Union[bool, List[str]]
) -> Dict[str, Any]:
    if include_args is True:
        include_keys = set(kwargs.keys())
    elif isinstance(include_args, list):
        include_keys = set(include_args)
    else:
        return {}

    return {
        f"arg_{key}": _sanitize_value(key, value)
        for key, value in kwargs.items()
        if key in include_keys
    }


def _sanitize_value(key: str, value: Any) -> Any:
    if key.lower() in LogConfig.LARGE_CONTENT_KEYS and isinstance(value, (str, bytes)):
        return f"<{len(value)} chars>"

    if isinstance(value, (str, int, float, bool, type(None))):
        if isinstance(value, str) and len(value) > LogConfig.MAX_ARG_LENGTH:
            return f"{value[:LogConfig.MAX_ARG_LENGTH]}..."
        return value
    return f"<{type(value).__name__}>"


def _extract_result_info(result: Any) -> Dict[str, Any]:
    result_info: Dict[str, Any] = {"result_type": type(result).__name__}

    if isinstance(result, (list, tuple, str)):
        result_info["result_length"] = len(result)
    elif isinstance(result, dict):
        result_info["result_keys_count"] = len(result)
    elif isinstance(result, bool):
        result_info["result_value"] = result

    return result_info
