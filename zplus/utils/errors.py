"""
Error types and logging helpers for moderation operations.

Provides consistent error handling across the application:
- Typed moderation errors carrying a short machine-readable code
- Sanitized user-facing messages for unexpected failures
- Logging helpers that work with or without a Flask app context
"""

from __future__ import annotations
from flask import current_app, has_app_context
import logging

logger = logging.getLogger("zplus")

# User-friendly generic error messages
GENERIC_MESSAGES = {
    "storage": "We're experiencing technical difficulties. Please try again.",
    "validation": "The information provided is invalid. Please check and try again.",
    "duplicate": "That item already exists.",
    "not_found": "The requested item was not found.",
    "format": "The uploaded data is not in the expected format.",
    "rate_limit": "Too many requests. Please slow down and try again.",
}

# HTTP status used by the API for each error code
STATUS_CODES = {
    "validation": 400,
    "format": 400,
    "not_found": 404,
    "duplicate": 409,
}


class ModerationError(Exception):
    """Base class for expected word-list failures."""

    code = "validation"

    def __init__(self, message: str | None = None):
        self.message = message or GENERIC_MESSAGES[self.code]
        super().__init__(self.message)


class ValidationError(ModerationError):
    """A word was empty after trimming, or not a string."""

    code = "validation"


class DuplicateError(ModerationError):
    """A word is already on the list."""

    code = "duplicate"


class NotFoundError(ModerationError):
    """A word to remove is not on the list."""

    code = "not_found"


class FormatError(ModerationError):
    """An import payload is not a JSON array."""

    code = "format"


ERROR_CLASSES = {
    cls.code: cls
    for cls in (ValidationError, DuplicateError, NotFoundError, FormatError)
}


def _log(level: int, message: str, exc_info: bool = False) -> None:
    """Log via the app logger when an app context exists, else the package logger."""
    if has_app_context():
        current_app.logger.log(level, message, exc_info=exc_info)
    else:
        logger.log(level, message, exc_info=exc_info)


def sanitize_error(
    error: Exception,
    error_type: str = "storage",
    log_prefix: str = ""
) -> str:
    """
    Sanitize error message for user display and log full details.

    Expected errors (validation, duplicate, not_found, format) are logged at
    INFO. Anything else is logged at ERROR with the traceback.

    Args:
        error: The exception that occurred
        error_type: Key into GENERIC_MESSAGES
        log_prefix: Optional prefix for log message context

    Returns:
        User-friendly error message

    Examples:
        >>> try:
        ...     words = moderation_filter.list_words()
        ... except OSError as e:
        ...     user_msg = sanitize_error(e, "storage", "Failed to read word list")
    """
    error_message = str(error)
    log_message = f"{log_prefix}: {error_message}" if log_prefix else error_message

    if error_type in STATUS_CODES:
        _log(logging.INFO, f"Expected error - {log_message}")
    else:
        _log(logging.ERROR, f"Unexpected error - {log_message}", exc_info=True)

    return GENERIC_MESSAGES.get(error_type, GENERIC_MESSAGES["storage"])


def log_warning(message: str, **context) -> None:
    """
    Log a warning with optional context.

    Examples:
        >>> log_warning("Stored word list is corrupt", key="z_sensitive_words")
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    _log(logging.WARNING, message)


def log_info(message: str, **context) -> None:
    """
    Log an info message with optional context.

    Examples:
        >>> log_info("Sensitive word added", word="spam")
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    _log(logging.INFO, message)
