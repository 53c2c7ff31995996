"""Catalog data models — descriptors, facet tables, and filter state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from devcat.errors import EndpointError

# Raw field names understood by the catalog; everything else is carried in
# Devfile.extra untouched.
_KNOWN_FIELDS = {"name", "displayName", "description", "type", "tags", "icon", "sourceRepo"}


class FacetDimension(str, Enum):
    """A filterable dimension of the catalog."""

    TAGS = "tags"
    TYPES = "types"


@dataclass(frozen=True)
class Devfile:
    """One catalog record ("devfile") as served by a registry index."""

    name: str
    display_name: str = ""
    description: str = ""
    type: str = ""
    tags: tuple[str, ...] = ()
    source_repo: str = ""  # Endpoint that produced the record
    icon: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, data: Any) -> Devfile:
        """Validate a raw index record.

        Raises ValueError when the record is not an object or a known field
        has the wrong type. Missing optional fields become empty values.
        """
        if not isinstance(data, dict):
            raise ValueError(f"descriptor must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("descriptor is missing a string 'name'")

        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise ValueError(f"'{name}': 'tags' must be a list")
        if any(t is not None and not isinstance(t, str) for t in tags):
            raise ValueError(f"'{name}': every tag must be a string")

        return cls(
            name=name,
            display_name=_optional_str(data, "displayName", name),
            description=_optional_str(data, "description", name),
            type=_optional_str(data, "type", name),
            tags=tuple(t for t in tags if t is not None),
            source_repo=_optional_str(data, "sourceRepo", name),
            icon=_optional_str(data, "icon", name),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )

    def with_source(self, source_repo: str) -> Devfile:
        """Return a copy stamped with the endpoint that produced it."""
        return replace(self, source_repo=source_repo)

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the index's camelCase shape."""
        data = dict(self.extra)
        data.update(
            {
                "name": self.name,
                "displayName": self.display_name,
                "description": self.description,
                "type": self.type,
                "tags": list(self.tags),
                "sourceRepo": self.source_repo,
            }
        )
        if self.icon:
            data["icon"] = self.icon
        return data


def _optional_str(data: dict, key: str, name: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"'{name}': '{key}' must be a string")
    return value


@dataclass(frozen=True)
class FacetEntry:
    """One distinct value of a facet dimension."""

    value: str
    frequency: int = 1
    selected: bool = False


@dataclass(frozen=True)
class FilterState:
    """Search text plus the two facet tables.

    Instances are immutable; every interaction produces a new state.
    """

    search_text: str = ""
    tags: tuple[FacetEntry, ...] = ()
    types: tuple[FacetEntry, ...] = ()

    def facets(self, dimension: FacetDimension) -> tuple[FacetEntry, ...]:
        return self.tags if dimension == FacetDimension.TAGS else self.types

    def selected_values(self, dimension: FacetDimension) -> frozenset[str]:
        return frozenset(e.value for e in self.facets(dimension) if e.selected)

    def with_search_text(self, text: str) -> FilterState:
        return replace(self, search_text=text)

    def toggle(self, dimension: FacetDimension, value: str) -> FilterState:
        """Flip the selection flag of one facet value.

        Raises ValueError if the value is not in the facet table.
        """
        entries = self.facets(dimension)
        if not any(e.value == value for e in entries):
            raise ValueError(f"Unknown {dimension.value} facet value: '{value}'")
        toggled = tuple(
            replace(e, selected=not e.selected) if e.value == value else e
            for e in entries
        )
        return self._with_facets(dimension, toggled)

    def unknown_values(self, dimension: FacetDimension, values: set[str] | frozenset[str]) -> set[str]:
        """Values of ``values`` that have no entry in the facet table."""
        known = {e.value for e in self.facets(dimension)}
        return set(values) - known

    def select(self, dimension: FacetDimension, values: set[str] | frozenset[str]) -> FilterState:
        """Set exactly ``values`` as selected; values not in the table are ignored.

        Callers taking values from user input should reject the result of
        ``unknown_values`` first, since an empty selection shows everything.
        """
        entries = tuple(
            replace(e, selected=e.value in values) for e in self.facets(dimension)
        )
        return self._with_facets(dimension, entries)

    def clear(self) -> FilterState:
        """Empty search text and no selections."""
        return FilterState(
            tags=tuple(replace(e, selected=False) for e in self.tags),
            types=tuple(replace(e, selected=False) for e in self.types),
        )

    def _with_facets(self, dimension: FacetDimension, entries: tuple[FacetEntry, ...]) -> FilterState:
        if dimension == FacetDimension.TAGS:
            return replace(self, tags=entries)
        return replace(self, types=entries)


@dataclass(frozen=True)
class EndpointResult:
    """Outcome of fetching one registry endpoint."""

    endpoint: str
    devfiles: tuple[Devfile, ...] = ()
    error: EndpointError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DevfileDetail:
    """Detail view of one descriptor.

    Stacks carry the devfile YAML text and its parsed document; samples
    carry neither.
    """

    devfile: Devfile
    yaml_text: str | None = None
    document: dict[str, Any] | None = None

    @property
    def metadata(self) -> dict[str, Any]:
        if not self.document:
            return {}
        return self.document.get("metadata") or {}

    @property
    def starter_projects(self) -> list[dict[str, Any]]:
        if not self.document:
            return []
        return self.document.get("starterProjects") or []
