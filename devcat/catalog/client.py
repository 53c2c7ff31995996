"""Source registry client — concurrent fetch of registry indexes.

Lifecycle per load:
    1. One GET per configured endpoint, all issued concurrently
    2. Each body is decoded and validated into Devfile records
    3. Failures are captured per endpoint; they never abort the others

No retry and no timeout are applied; a request runs until it completes
or fails.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx
import yaml

from devcat.catalog.models import Devfile, DevfileDetail, EndpointResult
from devcat.errors import (
    EndpointError,
    EndpointUnreachableError,
    MalformedResponseError,
)

logger = logging.getLogger(__name__)


async def fetch_all(
    endpoints: Mapping[str, str],
    client: httpx.AsyncClient | None = None,
) -> list[EndpointResult]:
    """Fetch every endpoint concurrently.

    Returns one EndpointResult per endpoint in configured order, regardless
    of which request finished first.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=None) as own_client:
            return await _gather(endpoints, own_client)
    return await _gather(endpoints, client)


async def _gather(endpoints: Mapping[str, str], client: httpx.AsyncClient) -> list[EndpointResult]:
    tasks = [fetch_endpoint(client, name, url) for name, url in endpoints.items()]
    results = await asyncio.gather(*tasks)

    failed = [r.endpoint for r in results if not r.ok]
    logger.info(
        "Fetched %d endpoint(s): %d ok, %d failed%s",
        len(results),
        len(results) - len(failed),
        len(failed),
        f" ({', '.join(failed)})" if failed else "",
    )
    return list(results)


async def fetch_endpoint(client: httpx.AsyncClient, endpoint: str, url: str) -> EndpointResult:
    """Fetch and validate one endpoint, capturing any failure in the result."""
    try:
        resp = await client.get(url)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        return _failed(
            EndpointUnreachableError(endpoint, f"HTTP {exc.response.status_code} from {url}")
        )
    except httpx.HTTPError as exc:
        return _failed(EndpointUnreachableError(endpoint, f"request to {url} failed: {exc}"))

    try:
        body = resp.json()
    except ValueError as exc:
        return _failed(MalformedResponseError(endpoint, f"body is not JSON: {exc}"))

    try:
        devfiles = parse_descriptors(endpoint, body)
    except MalformedResponseError as exc:
        return _failed(exc)

    logger.debug("Endpoint %s returned %d devfile(s)", endpoint, len(devfiles))
    return EndpointResult(endpoint=endpoint, devfiles=devfiles)


def parse_descriptors(endpoint: str, body: Any) -> tuple[Devfile, ...]:
    """Validate a decoded index body into Devfile records."""
    if not isinstance(body, list):
        raise MalformedResponseError(
            endpoint, f"expected a JSON array, got {type(body).__name__}"
        )

    devfiles = []
    for i, item in enumerate(body):
        try:
            devfiles.append(Devfile.from_dict(item))
        except ValueError as exc:
            raise MalformedResponseError(endpoint, f"record {i}: {exc}")
    return tuple(devfiles)


def _failed(error: EndpointError) -> EndpointResult:
    logger.warning("Skipping endpoint %s", error)
    return EndpointResult(endpoint=error.endpoint, error=error)


# ── Detail ───────────────────────────────────────────────────────────


async def fetch_devfile_detail(
    devfile: Devfile,
    registry_url: str,
    client: httpx.AsyncClient | None = None,
) -> DevfileDetail:
    """Fetch the devfile YAML for a stack.

    Samples have no devfile of their own and are returned without a fetch.
    """
    if devfile.type != "stack":
        return DevfileDetail(devfile=devfile)

    if client is None:
        async with httpx.AsyncClient(timeout=None) as own_client:
            return await _fetch_detail(devfile, registry_url, own_client)
    return await _fetch_detail(devfile, registry_url, client)


async def _fetch_detail(
    devfile: Devfile, registry_url: str, client: httpx.AsyncClient
) -> DevfileDetail:
    url = f"{registry_url.rstrip('/')}/devfiles/{quote(devfile.name, safe='')}"
    source = devfile.source_repo or registry_url

    try:
        resp = await client.get(url, headers={"Accept": "text/plain"})
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise EndpointUnreachableError(source, f"HTTP {exc.response.status_code} from {url}")
    except httpx.HTTPError as exc:
        raise EndpointUnreachableError(source, f"request to {url} failed: {exc}")

    text = resp.text
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MalformedResponseError(source, f"devfile '{devfile.name}' is not valid YAML: {exc}")

    if document is not None and not isinstance(document, dict):
        raise MalformedResponseError(source, f"devfile '{devfile.name}' is not a YAML mapping")

    if document:
        _check_detail_document(source, devfile.name, document)

    return DevfileDetail(devfile=devfile, yaml_text=text, document=document)


def _check_detail_document(source: str, name: str, document: dict) -> None:
    metadata = document.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise MalformedResponseError(source, f"devfile '{name}': 'metadata' must be a mapping")

    projects = document.get("starterProjects")
    if projects is None:
        return
    if not isinstance(projects, list) or not all(isinstance(p, dict) for p in projects):
        raise MalformedResponseError(
            source, f"devfile '{name}': 'starterProjects' must be a list of mappings"
        )
