"""Pydantic models for API request/response serialization.

These models mirror the devcat dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Catalog models
# ---------------------------------------------------------------------------


class DevfileResponse(BaseModel):
    """Mirrors devcat.catalog.models.Devfile."""

    name: str
    display_name: str = ""
    description: str = ""
    type: str = ""
    tags: list[str] = Field(default_factory=list)
    source_repo: str = ""
    icon: str = ""


class FacetEntryResponse(BaseModel):
    """Mirrors devcat.catalog.models.FacetEntry."""

    value: str
    frequency: int = 0
    selected: bool = False


class EndpointFailureResponse(BaseModel):
    """An endpoint skipped during the last aggregation."""

    endpoint: str
    message: str = ""


class FacetsResponse(BaseModel):
    """Tag and type frequency tables."""

    tags: list[FacetEntryResponse] = Field(default_factory=list)
    types: list[FacetEntryResponse] = Field(default_factory=list)


class DevfileListResponse(BaseModel):
    """Visible subset for one search/selection, with the facet tables."""

    devfiles: list[DevfileResponse] = Field(default_factory=list)
    tags: list[FacetEntryResponse] = Field(default_factory=list)
    types: list[FacetEntryResponse] = Field(default_factory=list)
    search: str = ""
    visible_count: int = 0
    total_count: int = 0
    failed_endpoints: list[EndpointFailureResponse] = Field(default_factory=list)


class DevfileDetailResponse(BaseModel):
    """Mirrors devcat.catalog.models.DevfileDetail."""

    devfile: DevfileResponse
    yaml_text: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    starter_projects: list[dict[str, Any]] = Field(default_factory=list)
