"""Catalog router -- aggregated devfile listing, facets, and detail."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from devcat.catalog.aggregator import find_devfile
from devcat.catalog.cache import CatalogCache, CatalogSnapshot
from devcat.catalog.client import fetch_devfile_detail
from devcat.catalog.filters import apply_state
from devcat.catalog.models import FacetDimension, FilterState
from devcat.errors import CatalogError, EndpointError

from web.backend.app.models.api import (
    DevfileDetailResponse,
    DevfileListResponse,
    DevfileResponse,
    EndpointFailureResponse,
    FacetEntryResponse,
    FacetsResponse,
)

router = APIRouter(prefix="/api/devfiles", tags=["devfiles"])
facets_router = APIRouter(prefix="/api/facets", tags=["facets"])


def get_cache(request: Request) -> CatalogCache:
    """Return the catalog cache owned by the application."""
    return request.app.state.catalog_cache


async def _get_snapshot(cache: CatalogCache) -> CatalogSnapshot:
    try:
        return await cache.get()
    except CatalogError as exc:
        raise HTTPException(status_code=500, detail=f"Catalog unavailable: {exc}")


def _split(csv: Optional[str]) -> set[str]:
    if not csv:
        return set()
    return {v.strip() for v in csv.split(",") if v.strip()}


def _select(state: FilterState, dimension: FacetDimension, values: set[str]) -> FilterState:
    unknown = state.unknown_values(dimension, values)
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown {dimension.value}: {', '.join(sorted(unknown))}",
        )
    return state.select(dimension, values)


def _devfile_to_response(devfile) -> DevfileResponse:
    """Convert a Devfile dataclass to a Pydantic response model."""
    return DevfileResponse(
        name=devfile.name,
        display_name=devfile.display_name,
        description=devfile.description,
        type=devfile.type,
        tags=list(devfile.tags),
        source_repo=devfile.source_repo,
        icon=devfile.icon,
    )


def _facets_to_response(entries) -> list[FacetEntryResponse]:
    return [
        FacetEntryResponse(value=e.value, frequency=e.frequency, selected=e.selected)
        for e in entries
    ]


def _failures_to_response(failures) -> list[EndpointFailureResponse]:
    return [EndpointFailureResponse(endpoint=f.endpoint, message=f.message) for f in failures]


@router.get(
    "",
    response_model=DevfileListResponse,
    summary="List devfiles",
)
async def list_devfiles(
    search: Optional[str] = Query(None, description="Free-text search"),
    tags: Optional[str] = Query(None, description="Comma-separated tags (OR)"),
    types: Optional[str] = Query(None, description="Comma-separated types (OR)"),
    cache: CatalogCache = Depends(get_cache),
):
    """Return the devfiles visible for a search text and facet selection."""
    snapshot = await _get_snapshot(cache)

    state = FilterState(search_text=search or "", tags=snapshot.tags, types=snapshot.types)
    state = _select(state, FacetDimension.TAGS, _split(tags))
    state = _select(state, FacetDimension.TYPES, _split(types))
    visible = apply_state(snapshot.devfiles, state)

    return DevfileListResponse(
        devfiles=[_devfile_to_response(d) for d in visible],
        tags=_facets_to_response(state.tags),
        types=_facets_to_response(state.types),
        search=state.search_text,
        visible_count=len(visible),
        total_count=len(snapshot.devfiles),
        failed_endpoints=_failures_to_response(snapshot.failures),
    )


@facets_router.get(
    "",
    response_model=FacetsResponse,
    summary="Facet frequency tables",
)
async def get_facets(cache: CatalogCache = Depends(get_cache)):
    """Return tag and type frequencies across the whole catalog."""
    snapshot = await _get_snapshot(cache)
    return FacetsResponse(
        tags=_facets_to_response(snapshot.tags),
        types=_facets_to_response(snapshot.types),
    )


@router.get(
    "/{name}",
    response_model=DevfileDetailResponse,
    summary="Get a devfile",
)
async def get_devfile(
    name: str,
    request: Request,
    source: Optional[str] = Query(None, description="Endpoint the devfile came from"),
    cache: CatalogCache = Depends(get_cache),
):
    """Retrieve a devfile; stacks include their devfile YAML."""
    snapshot = await _get_snapshot(cache)
    devfile = find_devfile(snapshot.devfiles, name, source or "")
    if devfile is None:
        raise HTTPException(status_code=404, detail=f"Devfile '{name}' not found")

    try:
        detail = await fetch_devfile_detail(
            devfile,
            request.app.state.settings.registry_url,
            client=request.app.state.http_client,
        )
    except EndpointError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    return DevfileDetailResponse(
        devfile=_devfile_to_response(devfile),
        yaml_text=detail.yaml_text,
        metadata=detail.metadata,
        starter_projects=detail.starter_projects,
    )
