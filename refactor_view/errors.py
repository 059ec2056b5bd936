"""Exceptions raised by the refactor view."""

from __future__ import annotations


class RefactorViewError(Exception):
    """Base class for refactor view failures."""


class UnresolvableLineCount(RefactorViewError):
    """Raised when the line count of a file cannot be determined."""

    def __init__(self, key: str, cause: Exception | None = None):
        self.key = key
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Unable to resolve line count of {key}{detail}")


class ProviderRefusal(RefactorViewError):
    """Raised when a provider declines to produce edits."""
