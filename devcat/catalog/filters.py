"""Filter pipeline — search text, then tags, then types.

Each stage narrows the output of the previous one and preserves order.
An empty search string or an empty selection leaves its stage a no-op.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from devcat.catalog.models import Devfile, FacetEntry, FilterState


def filter_devfiles(
    devfiles: Sequence[Devfile],
    search_text: str,
    tag_facets: Iterable[FacetEntry],
    type_facets: Iterable[FacetEntry],
) -> list[Devfile]:
    """Return the visible subset of ``devfiles``."""
    visible = filter_on_search_text(devfiles, search_text)
    visible = filter_on_tags(visible, tag_facets)
    return filter_on_types(visible, type_facets)


def apply_state(devfiles: Sequence[Devfile], state: FilterState) -> list[Devfile]:
    """Run the pipeline with the search text and selections held in ``state``."""
    return filter_devfiles(devfiles, state.search_text, state.tags, state.types)


def filter_on_search_text(devfiles: Sequence[Devfile], search_text: str) -> list[Devfile]:
    if not search_text:
        return list(devfiles)

    needle = search_text.lower()
    return [
        df
        for df in devfiles
        if needle in df.display_name.lower()
        or needle in df.description.lower()
        or any(needle in tag.lower() for tag in df.tags)
    ]


def filter_on_tags(devfiles: Sequence[Devfile], tag_facets: Iterable[FacetEntry]) -> list[Devfile]:
    selected = _selected(tag_facets)
    if not selected:
        return list(devfiles)
    return [df for df in devfiles if any(tag in selected for tag in df.tags)]


def filter_on_types(devfiles: Sequence[Devfile], type_facets: Iterable[FacetEntry]) -> list[Devfile]:
    selected = _selected(type_facets)
    if not selected:
        return list(devfiles)
    return [df for df in devfiles if df.type in selected]


def _selected(facets: Iterable[FacetEntry]) -> set[str]:
    return {entry.value for entry in facets if entry.selected}
