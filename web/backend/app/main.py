"""FastAPI application for the devcat web portal.

Serves the aggregated devfile catalog as JSON:
- Listing with free-text search and tag/type facet selection
- Facet frequency tables
- Devfile detail (devfile YAML for stacks)

The catalog is cached and refreshed in the background once it is older
than the configured revalidation interval (30 seconds by default).
"""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devcat import __version__
from devcat.catalog.cache import CatalogCache, load_snapshot
from devcat.config import CatalogSettings, load_endpoints

from web.backend.app.routers import catalog


def build_cache(settings: CatalogSettings, http_client: Optional[httpx.AsyncClient] = None) -> CatalogCache:
    """Catalog cache that re-reads the endpoint file on every load."""

    async def loader():
        endpoints = load_endpoints(settings.endpoints_path)
        return await load_snapshot(endpoints, client=http_client)

    return CatalogCache(loader, ttl_seconds=settings.revalidate_seconds)


def create_app(
    settings: Optional[CatalogSettings] = None,
    cache: Optional[CatalogCache] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    settings = settings or CatalogSettings.from_env()

    app = FastAPI(
        title="devcat API",
        description=(
            "REST API for the devfile catalog browser. "
            "Aggregates devfiles from every configured registry endpoint "
            "and filters them by search text, tags, and types."
        ),
        version=__version__,
    )

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.catalog_cache = cache or build_cache(settings, http_client)

    # ---------------------------------------------------------------------------
    # CORS middleware (allow all origins for development)
    # ---------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog.router)
    app.include_router(catalog.facets_router)

    # ---------------------------------------------------------------------------
    # Root and health-check endpoints
    # ---------------------------------------------------------------------------

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "devcat API",
            "version": __version__,
            "description": "Devfile catalog browser REST API",
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
