"""Catalog cache — serve the aggregated catalog, refresh it when stale.

The first access waits for a load. After that the cached snapshot is
always served immediately; once it is older than ``ttl_seconds`` the next
access starts one background refresh and keeps serving the old snapshot
until the refresh lands.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

import httpx

from devcat.catalog.aggregator import aggregate
from devcat.catalog.client import fetch_all
from devcat.catalog.facets import tag_facets, type_facets
from devcat.catalog.models import Devfile, FacetEntry
from devcat.errors import EndpointError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """One aggregation of every endpoint, with its facet tables."""

    devfiles: tuple[Devfile, ...] = ()
    tags: tuple[FacetEntry, ...] = ()
    types: tuple[FacetEntry, ...] = ()
    failures: tuple[EndpointError, ...] = field(default=(), compare=False)
    loaded_at: float = 0.0


async def load_snapshot(
    endpoints: Mapping[str, str],
    client: httpx.AsyncClient | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> CatalogSnapshot:
    """Fetch, aggregate, and index every endpoint."""
    results = await fetch_all(endpoints, client=client)
    devfiles = aggregate(results)
    return CatalogSnapshot(
        devfiles=devfiles,
        tags=tag_facets(devfiles),
        types=type_facets(devfiles),
        failures=tuple(r.error for r in results if r.error is not None),
        loaded_at=clock(),
    )


class CatalogCache:
    """Stale-while-revalidate holder for a CatalogSnapshot."""

    def __init__(
        self,
        loader: Callable[[], Awaitable[CatalogSnapshot]],
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot: CatalogSnapshot | None = None
        self._refresh_task: asyncio.Task | None = None

    @property
    def snapshot(self) -> CatalogSnapshot | None:
        return self._snapshot

    def is_stale(self) -> bool:
        if self._snapshot is None:
            return True
        return self._clock() - self._snapshot.loaded_at >= self._ttl

    async def get(self) -> CatalogSnapshot:
        """Current snapshot; loads on first access, refreshes in the background after."""
        if self._snapshot is None:
            return await self._start_refresh()

        if self.is_stale() and self._refresh_task is None:
            logger.info("Catalog is stale, refreshing in the background")
            self._start_refresh()
        return self._snapshot

    async def refresh(self) -> CatalogSnapshot:
        """Force a load and wait for it."""
        return await self._start_refresh()

    def _start_refresh(self) -> asyncio.Task:
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._run_refresh())
        return self._refresh_task

    async def _run_refresh(self) -> CatalogSnapshot:
        try:
            snapshot = await self._loader()
        except Exception:
            logger.exception("Catalog refresh failed")
            if self._snapshot is None:
                raise
            return self._snapshot
        finally:
            self._refresh_task = None

        self._snapshot = snapshot
        logger.info(
            "Catalog loaded: %d devfile(s), %d failed endpoint(s)",
            len(snapshot.devfiles),
            len(snapshot.failures),
        )
        return snapshot
