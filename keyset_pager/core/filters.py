"""Filter variants for listing queries and their loose-input parser."""

from __future__ import annotations

from collections.abc import Mapping, Sequence as SequenceABC, Set as SetABC
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Equals:
    """Matches rows where the field equals one scalar."""

    value: Any


@dataclass(frozen=True)
class OneOf:
    """Matches rows where the field is one of `values`.

    An empty `values` tuple contributes no predicate at all.
    """

    values: Tuple[Any, ...]

    def __init__(self, values: Sequence[Any]):
        if isinstance(values, (str, bytes)):
            raise TypeError("OneOf values must be a sequence of scalars, not a string.")
        object.__setattr__(self, "values", tuple(values))


Filter = Equals | OneOf
FilterSet = Mapping[str, Filter]


def parse_filters(raw: Optional[Mapping[str, Any]]) -> Dict[str, Filter]:
    """Turn a loosely typed field -> value mapping into filter variants.

    Lists and tuples become `OneOf` in their given order; sets are sorted so
    that the generated SQL is reproducible. Empty collections are dropped.
    `Equals`/`OneOf` instances pass through and every other value becomes
    `Equals`.
    """

    if not raw:
        return {}

    parsed: Dict[str, Filter] = {}
    for field_name, value in raw.items():
        item = _to_filter(value)
        if item is None:
            continue
        parsed[field_name] = item
    return parsed


def _to_filter(value: Any) -> Optional[Filter]:
    if isinstance(value, (Equals, OneOf)):
        return value if not _is_empty_one_of(value) else None

    if isinstance(value, SetABC):
        values = sorted(value)
    elif isinstance(value, SequenceABC) and not isinstance(value, (str, bytes)):
        values = list(value)
    else:
        return Equals(value)

    if not values:
        return None
    return OneOf(values)


def _is_empty_one_of(value: Filter) -> bool:
    return isinstance(value, OneOf) and not value.values
