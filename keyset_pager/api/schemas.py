"""Request and response bodies of the listing RPC endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CursorValue = Union[int, str]
FilterValue = Union[int, str, List[Union[int, str]]]


class ListRequest(BaseModel):
    """Common listing request.

    `filters` maps a column to a scalar (equality) or a list (membership).
    An empty `key` starts from the first page.
    """

    model_config = ConfigDict(extra="forbid")

    sort_column: str = Field(default="", description="Sort key member name.")
    key: Optional[CursorValue] = Field(
        default=None, description="`next_key` of the previous page."
    )
    limit: Optional[int] = Field(default=None, description="Page size.")
    order: str = Field(default="ASC", description="`ASC` or `DESC`.")
    filters: Dict[str, FilterValue] = Field(default_factory=dict)


class AnimalRankingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    rank: int
    name: str
    created_at: datetime
    updated_at: datetime


class ResourceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    name: str
    created_at: datetime
    updated_at: datetime


class ListAnimalRankingsResponse(BaseModel):
    animal_rankings: List[AnimalRankingOut]
    next_key: Optional[CursorValue] = None


class ListResourcesResponse(BaseModel):
    resources: List[ResourceOut]
    next_key: Optional[CursorValue] = None


class HealthResponse(BaseModel):
    status: str = "SERVING"


class ErrorResponse(BaseModel):
    error: str
    detail: str
