"""Static sort-column descriptors and the per-process entity registry.

Every listing call site (column resolution, filter allow-listing, cursor
decoding and page-key derivation) reads the same `EntityDescriptor`, so a sort
key can never map to one column in the query and another in the response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Generic, Iterator, Mapping, Tuple, Type, TypeVar

from .direction import Direction
from .errors import InvalidColumn, InvalidCursor
from .models import DataclassModel, model_fields, pk_field, require_dataclass_model, table_name

T = TypeVar("T", bound=DataclassModel)

_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)


class ColumnType(str, Enum):
    """Value type of a sortable column."""

    INTEGER = "integer"
    STRING = "string"
    TIMESTAMP = "timestamp"

    def decode(self, raw: Any) -> Any:
        """Turn a caller-supplied cursor into a typed column value.

        Raises:
            InvalidCursor: If `raw` cannot represent a value of this type.
        """

        if self is ColumnType.INTEGER:
            if isinstance(raw, bool):
                raise InvalidCursor(f"integer cursor expected, got {raw!r}")
            if isinstance(raw, int):
                return raw
            if isinstance(raw, str):
                try:
                    return int(raw.strip())
                except ValueError:
                    pass
            raise InvalidCursor(f"integer cursor expected, got {raw!r}")

        if self is ColumnType.TIMESTAMP:
            if isinstance(raw, datetime):
                return raw
            if isinstance(raw, str):
                try:
                    return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
                except ValueError:
                    pass
            raise InvalidCursor(f"ISO-8601 timestamp cursor expected, got {raw!r}")

        if isinstance(raw, str):
            return raw
        raise InvalidCursor(f"string cursor expected, got {raw!r}")

    def encode(self, value: Any) -> Any:
        """Turn a column value into its wire form for `next_page_key`."""

        if self is ColumnType.TIMESTAMP and isinstance(value, datetime):
            return value.isoformat()
        return value

    def seed(self, direction: Direction) -> Any:
        """Return a cursor that precedes every stored value in `direction`."""

        ascending = direction is Direction.ASC
        if self is ColumnType.INTEGER:
            return _INT64_MIN if ascending else _INT64_MAX
        if self is ColumnType.TIMESTAMP:
            if ascending:
                return datetime(1, 1, 1, tzinfo=timezone.utc)
            return datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        # Every string sorts after "" and before U+10FFFF.
        return "" if ascending else "\U0010ffff"


@dataclass(frozen=True)
class SortColumn:
    """Physical column backing one logical sort key."""

    name: str
    type: ColumnType

    def page_key(self, row: DataclassModel) -> Any:
        """Read this column from `row` and encode it as the next page key."""

        return self.type.encode(getattr(row, self.name))


@dataclass(frozen=True, eq=False)
class EntityDescriptor(Generic[T]):
    """Static listing description of one entity type.

    Attributes:
        model: Dataclass row type.
        sort_key: Enum whose members callers use to pick the sort column.
        sort_columns: Exactly one `SortColumn` per `sort_key` member.
        table: Table name; defaults to the model's `__table__`.
    """

    model: Type[T]
    sort_key: Type[Enum]
    sort_columns: Mapping[Enum, SortColumn]
    table: str = ""
    columns: Tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        require_dataclass_model(self.model)
        pk_field(self.model)
        if not self.table:
            object.__setattr__(self, "table", table_name(self.model))

        columns = tuple(f.name for f in model_fields(self.model))
        object.__setattr__(self, "columns", columns)

        mapping = dict(self.sort_columns)
        missing = [member.name for member in self.sort_key if member not in mapping]
        if missing:
            raise ValueError(
                f"{self.model.__name__}: sort key(s) without a column: {', '.join(missing)}"
            )
        extra = [key for key in mapping if not isinstance(key, self.sort_key)]
        if extra:
            raise ValueError(
                f"{self.model.__name__}: sort column keys must be {self.sort_key.__name__} members."
            )
        unknown = sorted({col.name for col in mapping.values()} - set(columns))
        if unknown:
            raise ValueError(
                f"{self.model.__name__}: sort column(s) not on model: {', '.join(unknown)}"
            )
        object.__setattr__(self, "sort_columns", MappingProxyType(mapping))

    def resolve(self, key: Any) -> SortColumn:
        """Return the column for a sort key member or member name.

        Raises:
            InvalidColumn: If `key` is not a member of this entity's sort key.
        """

        member = key
        if not isinstance(key, self.sort_key):
            try:
                member = self.sort_key[key] if isinstance(key, str) else None
            except KeyError:
                member = None
        column = self.sort_columns.get(member) if member is not None else None
        if column is None:
            raise InvalidColumn(f"unknown sort column {key!r} for {self.model.__name__}")
        return column

    def require_columns(self, names: Any) -> None:
        """Reject any field name that is not a column of this entity.

        Raises:
            InvalidColumn: For the first unknown name.
        """

        known = set(self.columns)
        for name in names:
            if name not in known:
                raise InvalidColumn(f"unknown filter field {name!r} for {self.model.__name__}")


class EntityRegistry:
    """Descriptors registered once at startup, keyed by model type."""

    def __init__(self) -> None:
        self._by_model: Dict[type, EntityDescriptor[Any]] = {}

    def register(self, descriptor: EntityDescriptor[T]) -> EntityDescriptor[T]:
        if descriptor.model in self._by_model:
            raise ValueError(f"{descriptor.model.__name__} is already registered.")
        self._by_model[descriptor.model] = descriptor
        return descriptor

    def get(self, model: Type[T]) -> EntityDescriptor[T]:
        try:
            return self._by_model[model]
        except KeyError:
            raise LookupError(f"{model.__name__} is not registered.") from None

    def __iter__(self) -> Iterator[EntityDescriptor[Any]]:
        return iter(tuple(self._by_model.values()))

    def __len__(self) -> int:
        return len(self._by_model)
