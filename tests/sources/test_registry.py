"""Tests for the npm registry provider."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from snippetgen.errors import SourceNotFoundError
from snippetgen.http import HTTPRequestError
from snippetgen.sources.registry import (
    NpmRegistryClient,
    extract_repository_url,
    is_valid_package_name,
    parse_package_identifier,
)

REGISTRY = "https://registry.npmjs.org"
DOWNLOADS = "https://api.npmjs.org/downloads"


class FakeAPI:
    def __init__(self, responses: Dict[str, Any]) -> None:
        self.responses = responses

    def __call__(self, url: str) -> Any:
        if url not in self.responses:
            raise HTTPRequestError(f"GET {url} failed with status 404", status_code=404)
        return self.responses[url]


def _package_document(**version_overrides: Any) -> Dict[str, Any]:
    version = {
        "description": "Tiny web framework",
        "keywords": ["web", "framework", 3],
        "dependencies": {"debug": "^4.0.0"},
        "devDependencies": {"mocha": "^10.0.0"},
        "repository": {"type": "git", "url": "git+https://github.com/acme/widget.git"},
        "homepage": "https://widget.dev",
        "license": "MIT",
    }
    version.update(version_overrides)
    return {
        "name": "widget",
        "dist-tags": {"latest": "2.1.0"},
        "versions": {"1.0.0": {}, "2.1.0": version},
    }


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("express", "express"),
        ("https://www.npmjs.com/package/express", "express"),
        ("https://www.npmjs.com/package/@types/node", "@types/node"),
        ("  lodash  ", "lodash"),
    ],
)
def test_parse_package_identifier(identifier: str, expected: str) -> None:
    assert parse_package_identifier(identifier) == expected


def test_is_valid_package_name() -> None:
    assert is_valid_package_name("express")
    assert is_valid_package_name("@scope/name")
    assert not is_valid_package_name("Has Spaces")
    assert not is_valid_package_name("a" * 215)


def test_extract_repository_url() -> None:
    assert (
        extract_repository_url({"url": "git+https://github.com/acme/widget.git"})
        == "https://github.com/acme/widget"
    )
    assert extract_repository_url("git@github.com:acme/widget.git") == "https://github.com/acme/widget"
    assert extract_repository_url("https://gitlab.com/acme/widget") is None
    assert extract_repository_url(None) is None


def test_fetch_package_reads_latest_version() -> None:
    api = FakeAPI(
        {
            f"{REGISTRY}/widget": _package_document(),
            f"{DOWNLOADS}/point/last-month/widget": {"downloads": 4000},
            f"{DOWNLOADS}/point/last-week/widget": {"downloads": 900},
        }
    )
    client = NpmRegistryClient(fetch_json=api)

    context = client.fetch_package("widget")

    assert context.name == "widget"
    assert context.version == "2.1.0"
    assert context.description == "Tiny web framework"
    assert context.keywords == ["web", "framework"]
    assert context.dependencies == {"debug": "^4.0.0"}
    assert context.dev_dependencies == {"mocha": "^10.0.0"}
    assert context.downloads.last_30_days == 4000
    assert context.downloads.last_week == 900
    assert context.homepage == "https://widget.dev"
    assert context.license == "MIT"
    assert context.has_type_definitions is False
    assert extract_repository_url(context.repository) == "https://github.com/acme/widget"


def test_fetch_package_detects_bundled_types() -> None:
    api = FakeAPI({f"{REGISTRY}/widget": _package_document(types="index.d.ts")})

    context = NpmRegistryClient(fetch_json=api).fetch_package("widget")

    assert context.has_type_definitions is True
    # download endpoints missing: counts fall back to zero
    assert context.downloads.last_30_days == 0


def test_fetch_package_verifies_types_dependency() -> None:
    document = _package_document(devDependencies={"@types/widget": "^1.0.0"})
    published = FakeAPI(
        {f"{REGISTRY}/widget": document, f"{REGISTRY}/@types%2Fwidget": {"name": "@types/widget"}}
    )
    unpublished = FakeAPI({f"{REGISTRY}/widget": document})

    assert NpmRegistryClient(fetch_json=published).fetch_package("widget").has_type_definitions
    assert not NpmRegistryClient(fetch_json=unpublished).fetch_package("widget").has_type_definitions


def test_fetch_package_raises_not_found() -> None:
    with pytest.raises(SourceNotFoundError):
        NpmRegistryClient(fetch_json=FakeAPI({})).fetch_package("ghost")
