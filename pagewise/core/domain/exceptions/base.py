"""Base exception classes for pagewise.

Every error raised by the core or an adapter derives from ``PagewiseError``.
Each exception carries:
- An error code for quick identification
- The class, method, file and line where it was raised
- An optional underlying cause
- A structured dictionary form for logs and a client-safe form for responses
"""

import inspect
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class ExceptionContext:
    """Location where an exception was raised."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for JSON serialization."""
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


class PagewiseError(Exception):
    """Base exception for all pagewise errors.

    Example:
        try:
            client.query_points(...)
        except Exception as e:
            raise VectorStoreQueryError(
                "Similarity search failed",
                cause=e,
                context={"owner_id": owner_id},
            ) from e
    """

    error_code: str = "PW_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception with message and optional context.

        Args:
            message: Human-readable error message, safe to show to a user.
            cause: The underlying exception that caused this error.
            context: Additional key-value pairs for debugging.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = context or {}
        self.location = self._capture_location()
        self.stack_trace = traceback.format_exc() if cause else None

    def _capture_location(self) -> ExceptionContext:
        """Capture class/method/file/line of the raise site from the call stack."""
        frame = inspect.currentframe()
        # Skip frames that belong to this exception's own construction
        while frame and frame.f_back and frame.f_locals.get("self") is self:
            frame = frame.f_back

        if frame:
            class_instance = frame.f_locals.get("self", None)
            return ExceptionContext(
                class_name=type(class_instance).__name__ if class_instance else "<module>",
                method_name=frame.f_code.co_name,
                file_name=frame.f_code.co_filename.split("\\")[-1].split("/")[-1],
                line_number=frame.f_lineno,
            )
        return ExceptionContext("<unknown>", "<unknown>", "<unknown>", 0)

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """Convert exception to a structured dictionary for logging.

        Args:
            include_trace: If True, include the full stack trace.

        Returns:
            Dictionary with error details, location, context and cause.
        """
        result = self.to_client_dict()
        result["location"] = self.location.to_dict()
        if self.extra_context:
            result["context"] = dict(self.extra_context)

        if include_trace and self.stack_trace:
            result["stack_trace"] = [line for line in self.stack_trace.split("\n") if line.strip()]

        if self.cause:
            result["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }

        return result

    def to_client_dict(self) -> dict[str, Any]:
        """Payload that is safe to return to an API client.

        Only the error type, code and our own message are exposed; the
        underlying cause and location stay in the logs.
        """
        return {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
            }
        }
