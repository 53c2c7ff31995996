"""Catalog session — owns the aggregated collection and its filter state.

A view talks to the session through two events, ``on_search_text_change``
and ``on_facet_toggle``. After each event the pipeline re-runs over the
full collection and every registered view is rendered with the new
visible subset and facet tables.

Usage::

    session = await CatalogSession.load(endpoints)
    session.on_search_text_change("python")
    session.on_facet_toggle(FacetDimension.TYPES, "stack")
    session.visible
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Protocol

import httpx

from devcat.catalog.aggregator import aggregate, find_devfile
from devcat.catalog.client import fetch_all
from devcat.catalog.facets import tag_facets, type_facets
from devcat.catalog.filters import apply_state
from devcat.catalog.models import (
    Devfile,
    EndpointResult,
    FacetDimension,
    FacetEntry,
    FilterState,
)
from devcat.errors import DevfileNotFoundError, EndpointError

logger = logging.getLogger(__name__)


class CatalogView(Protocol):
    """Anything that can render the visible subset and facet tables."""

    def render(
        self,
        visible: Sequence[Devfile],
        tags: Sequence[FacetEntry],
        types: Sequence[FacetEntry],
    ) -> None: ...


def initial_state(devfiles: Sequence[Devfile]) -> FilterState:
    """Empty search text and unselected facet tables for ``devfiles``."""
    return FilterState(tags=tag_facets(devfiles), types=type_facets(devfiles))


class CatalogSession:
    """Owning controller for one browsing session."""

    def __init__(
        self,
        devfiles: Sequence[Devfile],
        failures: Sequence[EndpointError] = (),
    ) -> None:
        self._devfiles = tuple(devfiles)
        self._failures = tuple(failures)
        self._state = initial_state(self._devfiles)
        self._visible = apply_state(self._devfiles, self._state)
        self._views: list[CatalogView] = []

    @classmethod
    def from_results(cls, results: Sequence[EndpointResult]) -> CatalogSession:
        return cls(
            aggregate(results),
            failures=[r.error for r in results if r.error is not None],
        )

    @classmethod
    async def load(
        cls,
        endpoints: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
    ) -> CatalogSession:
        """Fetch every endpoint and start a session over the merged result."""
        results = await fetch_all(endpoints, client=client)
        return cls.from_results(results)

    # ── Read side ────────────────────────────────────────────────────

    @property
    def devfiles(self) -> tuple[Devfile, ...]:
        return self._devfiles

    @property
    def failures(self) -> tuple[EndpointError, ...]:
        return self._failures

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def visible(self) -> list[Devfile]:
        return list(self._visible)

    def get(self, name: str, source_repo: str = "") -> Devfile:
        devfile = find_devfile(self._devfiles, name, source_repo)
        if devfile is None:
            raise DevfileNotFoundError(name, source_repo)
        return devfile

    # ── Events ───────────────────────────────────────────────────────

    def subscribe(self, view: CatalogView) -> None:
        """Register a view and render the current state into it."""
        self._views.append(view)
        view.render(self.visible, self._state.tags, self._state.types)

    def on_search_text_change(self, text: str) -> list[Devfile]:
        return self._update(self._state.with_search_text(text))

    def on_facet_toggle(self, dimension: FacetDimension | str, value: str) -> list[Devfile]:
        return self._update(self._state.toggle(FacetDimension(dimension), value))

    def clear_filters(self) -> list[Devfile]:
        return self._update(self._state.clear())

    def _update(self, state: FilterState) -> list[Devfile]:
        self._state = state
        self._visible = apply_state(self._devfiles, state)
        logger.debug(
            "Filter state changed: %d of %d devfile(s) visible",
            len(self._visible),
            len(self._devfiles),
        )
        for view in self._views:
            view.render(self.visible, state.tags, state.types)
        return self.visible
