"""
Failure types raised by the record engine.

The HTTP layer maps each one to a status code; nothing below it
knows about HTTP.
"""

from __future__ import annotations

from typing import Optional


class RecordError(RuntimeError):
    """Base class for every failure the engine reports."""


class ClientInputError(RecordError):
    """Malformed payload, unparseable date or missing required field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(RecordError):
    """The identifier addresses no stored document."""


class StorageError(RecordError):
    """The store could not be reached or failed to execute a call."""
