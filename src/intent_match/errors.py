"""Error types for intent-match.

Provides an exception hierarchy with:
- Error categories for handling decisions
- Construction-time validation errors for tables and corpora
- Display formatting for the CLI
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # Bad table/corpus data - fix the input
    CONFIGURATION = "configuration"  # Bad settings
    RESOURCE = "resource"  # Missing or unreadable table file
    INTERNAL = "internal"  # Bug in code


class IntentMatchError(Exception):
    """Base exception for intent-match errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ValidationError(IntentMatchError):
    """Table or corpus data failed validation."""

    category = ErrorCategory.VALIDATION


class InvalidRuleError(ValidationError):
    """A correction rule is unusable.

    Raised when building a correction table whose rule has an empty
    wrong token, or whose wrong token equals its right token.
    """


class InvalidPhraseEntryError(ValidationError):
    """A phrase entry is missing a field or reuses an existing key."""


class ConfigurationError(IntentMatchError):
    """Configuration error.

    Examples: threshold outside [0, 1], malformed config file.
    """

    category = ErrorCategory.CONFIGURATION


class ResourceError(IntentMatchError):
    """Resource not found or unreadable.

    Examples: missing phrases file, invalid JSON.
    """

    category = ErrorCategory.RESOURCE


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, IntentMatchError):
        category = error.category.value

        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {error.message} ({context_str})"

        return f"[{category}] {error.message}"

    return f"[error] {type(error).__name__}: {error}"
