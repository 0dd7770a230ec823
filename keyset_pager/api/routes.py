"""Listing RPC endpoints and the health check."""

from __future__ import annotations

from fastapi import APIRouter, Request

from ..core.listing import AsyncListingService
from ..entities import AnimalRanking, Resource
from .schemas import (
    AnimalRankingOut,
    ErrorResponse,
    HealthResponse,
    ListAnimalRankingsResponse,
    ListRequest,
    ListResourcesResponse,
    ResourceOut,
)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def _service(request: Request, model: type) -> AsyncListingService:
    return request.app.state.listing_services[model]


@router.post(
    "/rpc/AnimalRankingService/ListAnimalRankings",
    response_model=ListAnimalRankingsResponse,
    responses=_ERROR_RESPONSES,
)
async def list_animal_rankings(
    body: ListRequest, request: Request
) -> ListAnimalRankingsResponse:
    page = await _service(request, AnimalRanking).list_page(
        body.sort_column,
        cursor=body.key,
        limit=body.limit,
        direction=body.order,
        filters=body.filters,
    )
    return ListAnimalRankingsResponse(
        animal_rankings=[AnimalRankingOut.model_validate(row) for row in page.items],
        next_key=page.next_page_key,
    )


@router.post(
    "/rpc/ResourceService/ListResources",
    response_model=ListResourcesResponse,
    responses=_ERROR_RESPONSES,
)
async def list_resources(body: ListRequest, request: Request) -> ListResourcesResponse:
    page = await _service(request, Resource).list_page(
        body.sort_column,
        cursor=body.key,
        limit=body.limit,
        direction=body.order,
        filters=body.filters,
    )
    return ListResourcesResponse(
        resources=[ResourceOut.model_validate(row) for row in page.items],
        next_key=page.next_page_key,
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()
