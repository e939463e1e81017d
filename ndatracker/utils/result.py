"""
Result type for explicit error handling.

Session-level operations (commit, file drop) report their outcome as either
a Success carrying the produced value or a Failure describing why nothing
changed. This keeps "rejected silently" paths observable to the presentation
layer without raising.

Example:
    >>> result = Success(record)
    >>> if result.is_success():
    ...     print(result.value.title)
    Acme-NDA

    >>> result = validation_error("Title is required")
    >>> result.to_dict()
    {'success': False, 'error': 'Title is required', 'error_type': 'ValidationError', 'recoverable': True}
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass
class Success(Generic[T]):
    """
    Represents a successful operation with a value.

    Attributes:
        value: The successful result value
        metadata: Optional metadata about the operation
    """

    value: T
    metadata: Optional[Dict[str, Any]] = None

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, func: Callable[[T], Any]) -> "Result":
        """Transform the success value, turning exceptions into a Failure."""
        try:
            return Success(func(self.value), metadata=self.metadata)
        except Exception as e:
            return Failure(error=str(e), error_type=type(e).__name__)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with success=True and data field
        """
        result = {"success": True, "data": self.value}
        if self.metadata:
            result["metadata"] = self.metadata
        return result

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Success({self.value})"


@dataclass
class Failure(Generic[E]):
    """
    Represents a failed operation with an error.

    Attributes:
        error: The error message
        error_type: Type/category of error (e.g., "ValidationError")
        context: Additional context about the error
        recoverable: Whether the operation can be retried
        status_code: HTTP-style status hint for callers that render errors
    """

    error: E
    error_type: str = "UnknownError"
    context: Optional[Dict[str, Any]] = None
    recoverable: bool = False
    status_code: int = 500

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """
        Attempt to get the value (will raise).

        Raises:
            RuntimeError: Always, since this is a Failure
        """
        raise RuntimeError(f"Called unwrap on Failure: {self.error}")

    def unwrap_or(self, default: Any) -> Any:
        return default

    def map(self, func: Callable) -> "Result":
        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with success=False and error fields
        """
        result = {
            "success": False,
            "error": str(self.error),
            "error_type": self.error_type,
        }
        if self.context:
            result["context"] = self.context
        if self.recoverable:
            result["recoverable"] = True
        return result

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Failure({self.error_type}: {self.error})"


Result = Union[Success[T], Failure[E]]


class ErrorType:
    """Error categories as (name, status code, recoverable)."""

    VALIDATION_ERROR = ("ValidationError", 400, True)
    NOT_FOUND_ERROR = ("NotFoundError", 404, False)
    CONFLICT_ERROR = ("ConflictError", 409, True)
    EXTRACTION_ERROR = ("ExtractionError", 422, True)
    EXTRACTION_SUPERSEDED = ("ExtractionSuperseded", 409, False)


def _failure(
    kind: tuple, message: str, context: Optional[Dict[str, Any]] = None
) -> Failure:
    error_type, status_code, recoverable = kind
    return Failure(
        error=message,
        error_type=error_type,
        context=context,
        recoverable=recoverable,
        status_code=status_code,
    )


def validation_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a validation error result."""
    return _failure(ErrorType.VALIDATION_ERROR, message, context)


def not_found_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a not found error result."""
    return _failure(ErrorType.NOT_FOUND_ERROR, message, context)


def conflict_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a conflict error result (operation not allowed in current state)."""
    return _failure(ErrorType.CONFLICT_ERROR, message, context)


def extraction_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create an extraction error result."""
    return _failure(ErrorType.EXTRACTION_ERROR, message, context)


def superseded_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a result for an extraction replaced by a newer one."""
    return _failure(ErrorType.EXTRACTION_SUPERSEDED, message, context)
