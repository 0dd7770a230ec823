"""Listed entities and their registered sort-column descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .core.descriptors import ColumnType, EntityDescriptor, EntityRegistry, SortColumn


@dataclass(frozen=True)
class AnimalRanking:
    __table__ = "animal_rankings"

    id: int = field(metadata={"pk": True, "auto": True})
    rank: int = field(metadata={"unique": True})
    name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Resource:
    __table__ = "resources"

    id: int = field(metadata={"pk": True, "auto": True})
    uuid: str = field(metadata={"unique": True})
    name: str
    created_at: datetime
    updated_at: datetime


class AnimalRankingSortColumn(str, Enum):
    ANIMAL_RANK = "ANIMAL_RANK"
    ANIMAL_NAME = "ANIMAL_NAME"


class ResourceSortColumn(str, Enum):
    RESOURCE_CREATED_AT = "RESOURCE_CREATED_AT"
    RESOURCE_NAME = "RESOURCE_NAME"


registry = EntityRegistry()

ANIMAL_RANKINGS = registry.register(
    EntityDescriptor(
        model=AnimalRanking,
        sort_key=AnimalRankingSortColumn,
        sort_columns={
            AnimalRankingSortColumn.ANIMAL_RANK: SortColumn("rank", ColumnType.INTEGER),
            AnimalRankingSortColumn.ANIMAL_NAME: SortColumn("name", ColumnType.STRING),
        },
    )
)

RESOURCES = registry.register(
    EntityDescriptor(
        model=Resource,
        sort_key=ResourceSortColumn,
        sort_columns={
            ResourceSortColumn.RESOURCE_CREATED_AT: SortColumn(
                "created_at", ColumnType.TIMESTAMP
            ),
            ResourceSortColumn.RESOURCE_NAME: SortColumn("name", ColumnType.STRING),
        },
    )
)
