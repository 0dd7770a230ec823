"""Error taxonomy raised by the pagination core."""

from __future__ import annotations

from typing import Optional


class ListingError(Exception):
    """Base class for every error raised while building or running a page."""


class InvalidDirection(ListingError, ValueError):
    """Raised when a direction is neither ascending nor descending."""


class InvalidColumn(ListingError, ValueError):
    """Raised for an empty column name or a sort/filter key with no mapping."""


class InvalidLimit(ListingError, ValueError):
    """Raised when a page size is not a positive integer."""


class InvalidCursor(ListingError, ValueError):
    """Raised when a cursor cannot be decoded for its sort column type."""


class ExecutionFailed(ListingError, RuntimeError):
    """Raised when the store fails while running a page query or scanning rows.

    The underlying exception is chained as `__cause__` and kept on `cause`.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
