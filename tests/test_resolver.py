"""Tests for identifier classification and source resolution."""

from __future__ import annotations

import asyncio

import pytest

from snippetgen.errors import SourceNotFoundError, ValidationError
from snippetgen.http import HTTPRequestError
from snippetgen.models import SOURCE_API_DOCS, SOURCE_REGISTRY, SOURCE_REPOSITORY
from snippetgen.resolver import (
    SourceResolver,
    api_display_name,
    classify_source,
    validate_identifier,
)
from tests._fixtures.stubs import (
    StubRegistryProvider,
    StubRepositoryProvider,
    make_registry,
    make_repository,
)


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("https://github.com/acme/widget", SOURCE_REPOSITORY),
        ("https://github.com/github/rest-api-description", SOURCE_API_DOCS),
        ("https://github.com/acme/petstore-openapi", SOURCE_API_DOCS),
        ("https://github.com/acme/service/tree/main/docs", SOURCE_API_DOCS),
        ("https://www.npmjs.com/package/express", SOURCE_REGISTRY),
        ("express", SOURCE_REGISTRY),
        ("https://example.com/whatever", SOURCE_REGISTRY),
    ],
)
def test_classify_source(identifier: str, expected: str) -> None:
    assert classify_source(identifier) == expected


def test_classify_source_hint_wins() -> None:
    assert classify_source("https://github.com/acme/widget", "openapi") == SOURCE_API_DOCS
    assert classify_source("widget", "npm") == SOURCE_REGISTRY
    assert classify_source("https://github.com/acme/widget", "GitHub") == SOURCE_REPOSITORY


def test_classify_source_rejects_unknown_hint() -> None:
    with pytest.raises(ValidationError):
        classify_source("widget", "pypi")


@pytest.mark.parametrize(
    ("identifier", "source_type", "message"),
    [
        ("", SOURCE_REGISTRY, "cannot be empty"),
        ("   ", SOURCE_REGISTRY, "cannot be empty"),
        ("https://github.com/acme", SOURCE_REPOSITORY, "Invalid GitHub URL format"),
        ("https://www.npmjs.com/express", SOURCE_REGISTRY, "Invalid NPM URL format"),
        ("Not A Package", SOURCE_REGISTRY, "Invalid NPM package name"),
        ("widget", SOURCE_REPOSITORY, "Invalid GitHub URL format"),
    ],
)
def test_validate_identifier_rejects(identifier: str, source_type: str, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        validate_identifier(identifier, source_type)


def test_api_display_name() -> None:
    assert api_display_name("https://github.com/github/rest-api-description") == "GitHub REST API"
    assert api_display_name("https://github.com/acme/payments-openapi") == "payments API"
    assert api_display_name("https://github.com/acme/openapi") == "REST API"


def test_resolve_repository_cross_resolves_registry() -> None:
    repositories = StubRepositoryProvider(
        {"https://github.com/acme/widget": make_repository(manifest={"name": "widget"})}
    )
    registry = StubRegistryProvider({"widget": make_registry()})
    resolver = SourceResolver(repositories, registry)

    resolved = asyncio.run(resolver.resolve("https://github.com/acme/widget"))

    assert resolved.source_type == SOURCE_REPOSITORY
    assert resolved.package_name == "widget"
    assert resolved.repository is not None
    assert resolved.registry is not None
    assert registry.requested == ["widget"]


def test_resolve_repository_tolerates_missing_registry_entry() -> None:
    repositories = StubRepositoryProvider(
        {"https://github.com/acme/widget": make_repository(manifest={"name": "unpublished"})}
    )
    resolver = SourceResolver(repositories, StubRegistryProvider())

    resolved = asyncio.run(resolver.resolve("https://github.com/acme/widget"))

    assert resolved.repository is not None
    assert resolved.registry is None


def test_resolve_registry_follows_repository_link() -> None:
    repositories = StubRepositoryProvider({"https://github.com/acme/widget": make_repository()})
    registry = StubRegistryProvider(
        {
            "widget": make_registry(
                repository={"type": "git", "url": "git+https://github.com/acme/widget.git"}
            )
        }
    )
    resolver = SourceResolver(repositories, registry)

    resolved = asyncio.run(resolver.resolve("https://www.npmjs.com/package/widget"))

    assert resolved.source_type == SOURCE_REGISTRY
    assert resolved.package_name == "widget"
    assert resolved.url == "https://github.com/acme/widget"
    assert resolved.registry is not None
    assert resolved.repository is not None


def test_resolve_registry_swallows_secondary_failure() -> None:
    class ExplodingRepositories:
        def fetch_repository(self, url: str):
            raise HTTPRequestError("boom", status_code=500)

    registry = StubRegistryProvider(
        {"widget": make_registry(repository="https://github.com/acme/widget")}
    )
    resolver = SourceResolver(ExplodingRepositories(), registry)

    resolved = asyncio.run(resolver.resolve("widget"))

    assert resolved.registry is not None
    assert resolved.repository is None


def test_resolve_primary_not_found_propagates() -> None:
    resolver = SourceResolver(StubRepositoryProvider(), StubRegistryProvider())

    with pytest.raises(SourceNotFoundError):
        asyncio.run(resolver.resolve("ghost-package"))


def test_resolve_primary_transport_failure_is_not_found() -> None:
    class FailingRegistry:
        def fetch_package(self, name: str):
            raise HTTPRequestError("connection reset")

    resolver = SourceResolver(StubRepositoryProvider(), FailingRegistry())

    with pytest.raises(SourceNotFoundError, match="connection reset"):
        asyncio.run(resolver.resolve("widget"))


def test_resolve_api_docs_uses_display_name() -> None:
    url = "https://github.com/github/rest-api-description"
    repositories = StubRepositoryProvider(
        {url: make_repository("github", "rest-api-description", with_examples=False)}
    )
    resolver = SourceResolver(repositories, StubRegistryProvider())

    resolved = asyncio.run(resolver.resolve(url))

    assert resolved.source_type == SOURCE_API_DOCS
    assert resolved.package_name == "GitHub REST API"
    assert resolved.registry is None


def test_resolve_validation_happens_before_retrieval() -> None:
    repositories = StubRepositoryProvider()
    registry = StubRegistryProvider()
    resolver = SourceResolver(repositories, registry)

    with pytest.raises(ValidationError):
        asyncio.run(resolver.resolve("https://github.com/acme"))

    assert repositories.requested == []
    assert registry.requested == []
