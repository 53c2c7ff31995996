"""Tests for the devcat command line."""

import json

import pytest
from click.testing import CliRunner

from devcat.catalog import session as session_module
from devcat.catalog.models import Devfile, DevfileDetail, EndpointResult
from devcat.cli import main
from devcat.errors import EndpointUnreachableError, MalformedResponseError


RESULTS = [
    EndpointResult(
        "Community",
        (
            Devfile(name="java-maven", display_name="Maven Java", tags=("Java", "Maven"), type="stack"),
            Devfile(name="nodejs-basic", display_name="Basic Node.js", tags=("NodeJS",), type="sample"),
        ),
    ),
    EndpointResult("Mirror", error=EndpointUnreachableError("Mirror", "HTTP 503")),
]


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    async def fake_fetch_all(endpoints, client=None):
        return RESULTS

    monkeypatch.setattr(session_module, "fetch_all", fake_fetch_all)
    path = tmp_path / "endpoints.json"
    path.write_text(json.dumps({"Community": "https://c.test", "Mirror": "https://m.test"}))
    return str(path)


def test_search_lists_all(config_path):
    result = CliRunner().invoke(main, ["search", "--config", config_path])
    assert result.exit_code == 0, result.output
    assert "java-maven" in result.output
    assert "nodejs-basic" in result.output
    assert "Mirror" in result.output


def test_search_text(config_path):
    result = CliRunner().invoke(main, ["search", "maven", "-c", config_path])
    assert result.exit_code == 0, result.output
    assert "java-maven" in result.output
    assert "nodejs-basic" not in result.output


def test_search_by_type(config_path):
    result = CliRunner().invoke(main, ["search", "-c", config_path, "--type", "sample"])
    assert result.exit_code == 0, result.output
    assert "nodejs-basic" in result.output
    assert "java-maven" not in result.output


def test_search_no_match(config_path):
    result = CliRunner().invoke(main, ["search", "rust", "-c", config_path, "-t", "Java"])
    assert result.exit_code == 0
    assert "No matching devfiles" in result.output


def test_facets(config_path):
    result = CliRunner().invoke(main, ["facets", "-c", config_path, "--dimension", "types"])
    assert result.exit_code == 0, result.output
    assert "stack" in result.output
    assert "sample" in result.output
    assert "Maven" not in result.output


def test_show_sample(config_path):
    result = CliRunner().invoke(main, ["show", "nodejs-basic", "-c", config_path])
    assert result.exit_code == 0, result.output
    assert "Basic Node.js" in result.output


def test_show_stack_prints_starter_projects(config_path, monkeypatch):
    from devcat.catalog import client as client_module

    async def fake_detail(devfile, registry_url, client=None):
        return DevfileDetail(
            devfile=devfile,
            yaml_text="schemaVersion: 2.1.0\n",
            document={"starterProjects": [{"name": "springbootproject"}]},
        )

    monkeypatch.setattr(client_module, "fetch_devfile_detail", fake_detail)
    result = CliRunner().invoke(main, ["show", "java-maven", "-c", config_path])
    assert result.exit_code == 0, result.output
    assert "springbootproject" in result.output
    assert "schemaVersion" in result.output


def test_show_unknown(config_path):
    result = CliRunner().invoke(main, ["show", "nope", "-c", config_path])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_missing_config(tmp_path):
    result = CliRunner().invoke(main, ["search", "-c", str(tmp_path / "missing.json")])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_search_rejects_unknown_tag(config_path):
    result = CliRunner().invoke(main, ["search", "-c", config_path, "-t", "java"])
    assert result.exit_code == 2
    assert "java" in result.output
    assert "java-maven" not in result.output


def test_search_rejects_unknown_type(config_path):
    result = CliRunner().invoke(main, ["search", "-c", config_path, "--type", "stacks"])
    assert result.exit_code == 2
    assert "stacks" in result.output


def test_show_reports_malformed_detail(config_path, monkeypatch):
    from devcat.catalog import client as client_module

    async def fake_detail(devfile, registry_url, client=None):
        raise MalformedResponseError("Community", "devfile 'java-maven': 'metadata' must be a mapping")

    monkeypatch.setattr(client_module, "fetch_devfile_detail", fake_detail)
    result = CliRunner().invoke(main, ["show", "java-maven", "-c", config_path])
    assert result.exit_code == 1
    assert "metadata" in result.output
