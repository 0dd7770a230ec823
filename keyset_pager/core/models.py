"""Model utilities for dataclass entity rows and typed row scanning."""

from __future__ import annotations

import types
from dataclasses import Field, fields, is_dataclass
from datetime import datetime
from functools import lru_cache
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Protocol,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .types import RowMapping


class DataclassModel(Protocol):
    """Protocol for supported dataclass model types."""

    __dataclass_fields__: ClassVar[dict[str, Any]]


T = TypeVar("T", bound=DataclassModel)


def require_dataclass_model(cls: Type[Any]) -> None:
    """Validate that a class is a dataclass model."""

    if not is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass.")


def table_name(model_or_cls: Any) -> str:
    """Resolve table name from model class or instance.

    Uses `__table__` override when present, otherwise lowercased class name.
    """

    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    name = getattr(cls, "__table__", None)
    return name if isinstance(name, str) and name else cls.__name__.lower()


def model_fields(cls: Type[DataclassModel]) -> List[Field[Any]]:
    """Return dataclass fields for a model type."""

    require_dataclass_model(cls)
    return list(fields(cls))


def pk_field(cls: Type[DataclassModel]) -> Field[Any]:
    """Return the single primary key field (`metadata={'pk': True}`)."""

    pks = [f for f in model_fields(cls) if f.metadata.get("pk")]
    if len(pks) != 1:
        raise ValueError(
            f"{cls.__name__} must declare exactly one PK field with "
            "field(metadata={'pk': True})."
        )
    return pks[0]


def row_to_model(cls: Type[T], row: RowMapping) -> T:
    """Scan one DB row mapping into a model instance.

    Values are coerced to the annotated field types. Columns the model does
    not declare are ignored; declared columns missing from the row fail.

    Raises:
        TypeError: If a column is missing or a value cannot be scanned into
            its field type.
    """

    hints = model_type_hints(cls)
    values: Dict[str, Any] = {}
    for field in _model_fields(cls):
        if field.name not in row:
            raise TypeError(f"{cls.__name__}: column {field.name!r} missing from row.")
        values[field.name] = _scan_value(
            row[field.name],
            hints.get(field.name, field.type),
            context=f"{cls.__name__}.{field.name}",
        )
    return cls(**values)


@lru_cache(maxsize=None)
def _model_fields(cls: Type[Any]) -> tuple[Field[Any], ...]:
    require_dataclass_model(cls)
    return tuple(fields(cls))


@lru_cache(maxsize=None)
def model_type_hints(cls: Type[Any]) -> dict[str, Any]:
    require_dataclass_model(cls)
    return dict(get_type_hints(cls))


def _scan_value(value: Any, annotation: Any, *, context: str) -> Any:
    base_type, nullable = unwrap_optional(annotation)
    if value is None:
        if nullable:
            return None
        raise TypeError(f"{context}: NULL scanned into non-nullable field.")

    if base_type is datetime:
        return _scan_datetime(value, context=context)
    if base_type is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{context}: expected integer, got {type(value).__name__}.")
        return value
    if base_type is str:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8")
        if not isinstance(value, str):
            raise TypeError(f"{context}: expected text, got {type(value).__name__}.")
        return value
    return value


def _scan_datetime(value: Any, *, context: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("utf-8")
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise TypeError(f"{context}: invalid timestamp {value!r}.") from exc
    raise TypeError(f"{context}: expected timestamp, got {type(value).__name__}.")


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Extract wrapped type from `Optional[T]` / `T | None` annotations."""

    origin = get_origin(annotation)
    if origin not in (Union, types.UnionType):
        return annotation, False

    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    nullable = len(args) != len(get_args(annotation))
    if len(args) == 1:
        return args[0], nullable
    return annotation, nullable
