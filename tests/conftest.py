from __future__ import annotations

import pytest

from snippetgen.resolver import SourceResolver
from tests._fixtures.stubs import (
    StubBackend,
    StubRegistryProvider,
    StubRepositoryProvider,
)


@pytest.fixture
def backend() -> StubBackend:
    """Deterministic backend answering each step with a canned reply."""
    return StubBackend()


@pytest.fixture
def repositories() -> StubRepositoryProvider:
    return StubRepositoryProvider()


@pytest.fixture
def registry() -> StubRegistryProvider:
    return StubRegistryProvider()


@pytest.fixture
def resolver(
    repositories: StubRepositoryProvider, registry: StubRegistryProvider
) -> SourceResolver:
    return SourceResolver(repositories, registry, request_timeout=5.0)
