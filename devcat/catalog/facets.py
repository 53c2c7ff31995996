"""Facet index builder — frequency tables over tags and types."""

from __future__ import annotations

from collections.abc import Iterable

from devcat.catalog.collation import collation_key
from devcat.catalog.models import Devfile, FacetEntry


def build_facet_table(values: Iterable[str | None]) -> tuple[FacetEntry, ...]:
    """Count the distinct values of one dimension.

    Values are sorted first so equal values are adjacent; one pass then
    either starts a new entry or bumps the last one. Null and empty values
    are skipped. All entries start unselected.

    Grouping is by exact value: "Java" and "java" sort together but stay
    separate entries, matching the exact comparison of the tag and type
    filter stages.
    """
    ordered = sorted((v for v in values if v), key=collation_key)

    values_out: list[str] = []
    counts: list[int] = []
    for value in ordered:
        if values_out and values_out[-1] == value:
            counts[-1] += 1
        else:
            values_out.append(value)
            counts.append(1)

    return tuple(FacetEntry(value=v, frequency=n) for v, n in zip(values_out, counts))


def tag_facets(devfiles: Iterable[Devfile]) -> tuple[FacetEntry, ...]:
    return build_facet_table(tag for df in devfiles for tag in df.tags)


def type_facets(devfiles: Iterable[Devfile]) -> tuple[FacetEntry, ...]:
    return build_facet_table(df.type for df in devfiles)
