"""Shared error rendering for the API and CLI.

Every exception is reduced to the same dictionary shape as
``PagewiseError.to_dict``: an ``error`` block (type, code, message) plus
``location`` and optional ``context``/``cause``/``stack_trace``. Only the
``error`` block of a pagewise error ever reaches an API client.
"""

import json
import logging
import traceback
from typing import Any

from ...core.domain.exceptions import (
    AuthError,
    ExceptionContext,
    NotFoundError,
    PagewiseError,
    ValidationError,
)

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_CODE = "PYTHON_ERR"
GENERIC_ERROR_MESSAGE = "Internal server error"

# First match wins; upstream failures, quota errors included, fall through to 500
STATUS_BY_FAMILY: list[tuple[type[PagewiseError], int]] = [
    (ValidationError, 400),
    (AuthError, 401),
    (NotFoundError, 404),
]


def _foreign_location(exc: BaseException) -> ExceptionContext:
    """Raise site of a non-pagewise exception, from its traceback."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return ExceptionContext("<unknown>", "<unknown>", "<unknown>", 0)
    last = frames[-1]
    return ExceptionContext(
        class_name="<unknown>",
        method_name=last.name,
        file_name=last.filename.replace("\\", "/").rsplit("/", 1)[-1],
        line_number=last.lineno or 0,
    )


def format_exception_json(
    exc: Exception,
    include_trace: bool = False,
    extra_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Structured form of any exception, for logs and debug output.

    Args:
        exc: The exception to format.
        include_trace: Add the formatted stack trace.
        extra_context: Merged into the ``context`` block.
    """
    if isinstance(exc, PagewiseError):
        payload = exc.to_dict(include_trace=include_trace)
    else:
        payload = {
            "error": {
                "type": type(exc).__name__,
                "code": UNKNOWN_ERROR_CODE,
                "message": str(exc),
            },
            "location": _foreign_location(exc).to_dict(),
        }
        if include_trace:
            lines = traceback.format_exception(exc)
            payload["stack_trace"] = [line.rstrip() for line in lines if line.strip()]

    if extra_context:
        payload.setdefault("context", {}).update(extra_context)
    return payload


def format_client_error(exc: Exception, include_trace: bool = False) -> dict[str, Any]:
    """Error payload for API clients.

    Pagewise errors expose only their own message; anything else is reported
    as a generic internal error. With ``include_trace`` (debug mode) the full
    structured form is returned instead.
    """
    if include_trace:
        return format_exception_json(exc, include_trace=True)
    if isinstance(exc, PagewiseError):
        return exc.to_client_dict()
    return {
        "error": {
            "type": "InternalError",
            "code": UNKNOWN_ERROR_CODE,
            "message": GENERIC_ERROR_MESSAGE,
        }
    }


def log_exception(
    exc: Exception,
    log: logging.Logger | None = None,
    level: int = logging.ERROR,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """Log the structured form of ``exc`` (with stack trace) as indented JSON."""
    payload = format_exception_json(exc, include_trace=True, extra_context=extra_context)
    (log or logger).log(level, json.dumps(payload, indent=2, default=str))


def get_error_code(exc: Exception) -> str:
    """Error code of an exception ("PW_..." or "PYTHON_ERR")."""
    return exc.error_code if isinstance(exc, PagewiseError) else UNKNOWN_ERROR_CODE


def get_http_status_code(exc: Exception) -> int:
    """HTTP status for an exception: 400, 401, 404, otherwise 500."""
    for family, status in STATUS_BY_FAMILY:
        if isinstance(exc, family):
            return status
    return 500
