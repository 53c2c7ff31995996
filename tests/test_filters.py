"""Tests for the three-stage filter pipeline."""

import pytest

from devcat.catalog.facets import tag_facets, type_facets
from devcat.catalog.filters import (
    apply_state,
    filter_devfiles,
    filter_on_search_text,
    filter_on_tags,
    filter_on_types,
)
from devcat.catalog.models import Devfile, FacetDimension, FacetEntry, FilterState


ALPHA = Devfile(name="a", display_name="Alpha", tags=("java",), type="stack")
BETA = Devfile(name="b", display_name="Beta", tags=("go",), type="sample")
COLLECTION = [ALPHA, BETA]


def _select(entries, *values):
    return tuple(FacetEntry(e.value, e.frequency, e.value in values) for e in entries)


@pytest.fixture
def catalog():
    return [
        Devfile(name="java-maven", display_name="Maven Java", description="Java application based on Maven", tags=("Java", "Maven"), type="stack"),
        Devfile(name="go", display_name="Go Runtime", description="Go is an open source language", tags=("Go",), type="stack"),
        Devfile(name="nodejs-basic", display_name="Basic Node.js", tags=("NodeJS", "Express"), type="sample"),
        Devfile(name="python", display_name="Python", tags=("Python", "pip"), type="stack"),
        Devfile(name="quarkus", display_name="Quarkus Java", description="", tags=("Java", "Quarkus"), type="sample"),
        Devfile(name="untagged", display_name="Untagged"),
    ]


# --- Scenarios ---


def test_search_text_scenario():
    visible = filter_devfiles(COLLECTION, "alp", tag_facets(COLLECTION), type_facets(COLLECTION))
    assert visible == [ALPHA]


def test_tag_selection_scenario():
    tags = _select(tag_facets(COLLECTION), "go")
    visible = filter_devfiles(COLLECTION, "", tags, type_facets(COLLECTION))
    assert visible == [BETA]


def test_stages_compose_with_and():
    types = _select(type_facets(COLLECTION), "stack")
    visible = filter_devfiles(COLLECTION, "beta", tag_facets(COLLECTION), types)
    assert visible == []


# --- Search stage ---


def test_search_matches_description(catalog):
    visible = filter_on_search_text(catalog, "OPEN SOURCE")
    assert [d.name for d in visible] == ["go"]


def test_search_matches_tag_substring(catalog):
    visible = filter_on_search_text(catalog, "expr")
    assert [d.name for d in visible] == ["nodejs-basic"]


def test_search_is_substring_not_tokenized(catalog):
    assert filter_on_search_text(catalog, "java app")[0].name == "java-maven"
    assert filter_on_search_text(catalog, "maven java app") == []


def test_empty_search_passes_through(catalog):
    assert filter_on_search_text(catalog, "") == catalog


def test_search_tolerates_missing_fields():
    bare = Devfile(name="bare")
    assert filter_on_search_text([bare], "anything") == []


# --- Facet stages ---


def test_tag_stage_is_or_across_selection(catalog):
    tags = _select(tag_facets(catalog), "Go", "Python")
    assert [d.name for d in filter_on_tags(catalog, tags)] == ["go", "python"]


def test_tag_stage_is_exact_match(catalog):
    tags = (FacetEntry("Jav", 1, True),)
    assert filter_on_tags(catalog, tags) == []


def test_tag_stage_empty_selection_shows_all(catalog):
    assert filter_on_tags(catalog, tag_facets(catalog)) == catalog


def test_type_stage(catalog):
    types = _select(type_facets(catalog), "sample")
    assert [d.name for d in filter_on_types(catalog, types)] == ["nodejs-basic", "quarkus"]


def test_type_stage_skips_devfiles_without_type(catalog):
    types = _select(type_facets(catalog), "sample", "stack")
    assert "untagged" not in [d.name for d in filter_on_types(catalog, types)]


# --- Properties ---


def test_empty_state_is_identity(catalog):
    state = FilterState(tags=tag_facets(catalog), types=type_facets(catalog))
    assert apply_state(catalog, state) == catalog


def test_pipeline_is_idempotent(catalog):
    state = (
        FilterState(tags=tag_facets(catalog), types=type_facets(catalog))
        .with_search_text("java")
        .toggle(FacetDimension.TYPES, "stack")
    )
    assert apply_state(catalog, state) == apply_state(catalog, state)
    assert [d.name for d in apply_state(catalog, state)] == ["java-maven"]


def test_pipeline_preserves_input_order(catalog):
    reversed_catalog = list(reversed(catalog))
    visible = filter_on_search_text(reversed_catalog, "java")
    assert [d.name for d in visible] == ["quarkus", "java-maven"]


def test_pipeline_does_not_mutate_inputs(catalog):
    before = list(catalog)
    tags = _select(tag_facets(catalog), "Java")
    filter_devfiles(catalog, "a", tags, type_facets(catalog))
    assert catalog == before
    assert [e.frequency for e in tags] == [e.frequency for e in tag_facets(catalog)]


def test_combined_search_and_tags(catalog):
    tags = _select(tag_facets(catalog), "Java")
    visible = filter_devfiles(catalog, "quarkus", tags, type_facets(catalog))
    assert [d.name for d in visible] == ["quarkus"]


def test_tag_selection_never_exceeds_unfiltered(catalog):
    facets = tag_facets(catalog)
    one = filter_on_tags(catalog, _select(facets, "Java"))
    two = filter_on_tags(catalog, _select(facets, "Java", "Go"))
    assert set(d.name for d in one) <= set(d.name for d in two)
    assert len(two) <= len(catalog)
