"""Context providers for hosted repositories and package registries."""

from __future__ import annotations

from typing import Protocol

from ..models import RegistryContext, RepositoryContext
from .github import GitHubClient, RepoRef, categorize_files, parse_repo_url
from .registry import (
    NpmRegistryClient,
    extract_repository_url,
    is_valid_package_name,
    parse_package_identifier,
)


class RepositoryProvider(Protocol):
    """Anything that can turn a repository URL into a RepositoryContext."""

    def fetch_repository(self, url: str) -> RepositoryContext:
        ...


class RegistryProvider(Protocol):
    """Anything that can turn a package name into a RegistryContext."""

    def fetch_package(self, name: str) -> RegistryContext:
        ...


__all__ = [
    "GitHubClient",
    "NpmRegistryClient",
    "RegistryProvider",
    "RepoRef",
    "RepositoryProvider",
    "categorize_files",
    "extract_repository_url",
    "is_valid_package_name",
    "parse_package_identifier",
    "parse_repo_url",
]
