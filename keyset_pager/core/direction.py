"""Sort direction and the cursor comparison operator derived from it."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import InvalidDirection


class Direction(str, Enum):
    """Page direction. Drives both the cursor operator and `ORDER BY`."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """Return the direction for a member or its name.

        Raises:
            InvalidDirection: If `value` is not a recognized direction.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise InvalidDirection(f"invalid order: {value!r}")


def comparison_operator(direction: Any) -> str:
    """Return the strict inequality that selects rows past the cursor."""

    return ">" if Direction.parse(direction) is Direction.ASC else "<"
