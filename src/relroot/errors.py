"""Exceptions raised while re-notating chord annotations."""

from __future__ import annotations


class RelRootError(Exception):
    """Base class for all relroot errors."""


class UnknownSpelling(RelRootError, ValueError):
    """A root or accidental spelling that is not on the lattice."""

    def __init__(self, spelling: str):
        super().__init__(f"Unknown spelling: {spelling!r}")
        self.spelling = spelling


class MalformedToken(RelRootError, ValueError):
    """Raw chord text that matches no grammar for its corpus."""

    def __init__(self, text: str, reason: str | None = None):
        message = f"Malformed chord token: {text!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.text = text
        self.reason = reason


class AmbiguousCadentialMerge(RelRootError):
    """A six-four candidate whose applied-to key differs from its successor's.

    Raised and caught inside the merge step; both tokens are then kept.
    """
