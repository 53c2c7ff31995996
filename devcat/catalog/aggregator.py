"""Aggregator — merge per-endpoint results into one sorted collection."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from devcat.catalog.collation import collation_key
from devcat.catalog.models import Devfile, EndpointResult

logger = logging.getLogger(__name__)


def aggregate(results: Iterable[EndpointResult]) -> tuple[Devfile, ...]:
    """Merge successful endpoint results.

    Every record is stamped with its endpoint name (overwriting any value it
    arrived with), the lists are concatenated in endpoint order, and the
    result is sorted by display name. Failed endpoints are skipped. Records
    with the same name from different endpoints are all kept.
    """
    merged: list[Devfile] = []
    for result in results:
        if not result.ok:
            continue
        merged.extend(df.with_source(result.endpoint) for df in result.devfiles)

    # sorted() is stable, so equal display names keep endpoint order
    collection = tuple(sorted(merged, key=lambda df: collation_key(df.display_name)))
    logger.debug("Aggregated %d devfile(s)", len(collection))
    return collection


def find_devfile(
    collection: Iterable[Devfile], name: str, source_repo: str = ""
) -> Devfile | None:
    """First descriptor called ``name``, optionally from one endpoint only."""
    for devfile in collection:
        if devfile.name == name and (not source_repo or devfile.source_repo == source_repo):
            return devfile
    return None
