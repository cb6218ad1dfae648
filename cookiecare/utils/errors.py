"""
Scan error types and helpers for consistent error message extraction.
"""

from __future__ import annotations


class ScanError(Exception):
    """Base class for failures that abort a scan request."""


class NavigationError(ScanError):
    """The browser could not be launched or the target page did not load."""


class ClassificationError(ScanError):
    """An LLM classification or assessment call failed."""


class MalformedResponseError(ClassificationError):
    """The LLM replied with JSON that could not be parsed or had the wrong shape."""


class EmptyResponseError(ClassificationError):
    """The LLM reply carried no content."""


class LLMNotConfiguredError(ClassificationError):
    """An agent was used before an LLM backend was configured."""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Falls back to the exception class name when the exception
    carries no message.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"


def is_malformed_json_error(error: BaseException) -> bool:
    """Whether *error* stems from unusable JSON returned by an AI step."""
    if isinstance(error, MalformedResponseError):
        return True
    return "JSON" in get_error_message(error)
