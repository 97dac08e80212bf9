"""
Error handling utilities for consistent logging and error responses.

API views return ``({"success": False, "error": ...}, status)`` tuples for
every failure. Domain errors from the stores carry their own status code and
a message that is safe to show; anything else is logged in full and answered
with a generic message.
"""

import logging
import sys
from typing import Any

from teamfocuz.errors import TeamFocuzError


def safe_log_error(
    logger,
    message: str,
    exc_info: bool | BaseException | None = True,
    level: int = logging.ERROR,
    **extra_context: Any,
) -> None:
    """
    Log an error with structured context and exception information.

    Args:
        logger: structlog logger to use
        message: Event name / human-readable error message
        exc_info: True for the current exception, or an exception object
        level: Log level (default: ERROR)
        **extra_context: Additional fields to include in the event

    Example:
        try:
            tracker.poll(job_id)
        except RecordNotFound as e:
            safe_log_error(logger, "upload_poll_failed", exc_info=e, job_id=job_id)
    """
    context = dict(extra_context)
    context["has_exception"] = bool(exc_info)

    if isinstance(exc_info, BaseException):
        context["exception_type"] = type(exc_info).__name__
        context["exception_message"] = str(exc_info)
    elif exc_info is True:
        exc_type, exc_value, _ = sys.exc_info()
        if exc_type:
            context["exception_type"] = exc_type.__name__
            context["exception_message"] = str(exc_value)
        else:
            exc_info = False

    logger.log(level, message, exc_info=exc_info, **context)


def error_response(message: str, status_code: int = 400) -> tuple[dict[str, Any], int]:
    """Standard JSON error body."""
    return {"success": False, "error": message}, status_code


def domain_error_response(
    logger, exc: TeamFocuzError, **extra_context: Any
) -> tuple[dict[str, Any], int]:
    """Log a domain error at WARNING and turn it into a JSON error body."""
    safe_log_error(
        logger,
        "request_rejected",
        exc_info=exc,
        level=logging.WARNING,
        status_code=exc.status_code,
        **extra_context,
    )
    return error_response(str(exc), exc.status_code)


def handle_api_exception(
    logger,
    message: str,
    status_code: int = 500,
    public_message: str | None = None,
    **extra_context: Any,
) -> tuple[dict[str, Any], int]:
    """
    Handle an unexpected exception in an API endpoint.

    Logs the current exception with full context and returns a JSON body
    whose public message does not leak internals.

    Args:
        logger: structlog logger to use
        message: Internal error message for logs
        status_code: HTTP status code to return
        public_message: User-facing error message (defaults to a generic one)
        **extra_context: Additional context for logging

    Returns:
        Tuple of (JSON response dict, status code)
    """
    safe_log_error(logger, message, exc_info=True, **extra_context)

    if public_message is None:
        if status_code >= 500:
            public_message = "An internal error occurred. Please try again later."
        elif status_code >= 400:
            public_message = "The request could not be completed."
        else:
            public_message = "An error occurred."

    return error_response(public_message, status_code)
