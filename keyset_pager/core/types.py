"""Shared core type aliases used across contracts, executors, and ports."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

PositionalParams = List[Any]
QueryParams = Optional[PositionalParams]

RowMapping = Mapping[str, Any]
Rows = List[RowMapping]
