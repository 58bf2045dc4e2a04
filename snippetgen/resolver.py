"""Source resolution: classify identifiers and gather available contexts."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

from . import http
from .errors import SourceNotFoundError, ValidationError
from .logging import get_logger
from .models import (
    SOURCE_API_DOCS,
    SOURCE_REGISTRY,
    SOURCE_REPOSITORY,
    RegistryContext,
    RepositoryContext,
)
from .sources import (
    RegistryProvider,
    RepositoryProvider,
    extract_repository_url,
    is_valid_package_name,
    parse_package_identifier,
    parse_repo_url,
)

T = TypeVar("T")

_HINT_ALIASES = {
    "github": SOURCE_REPOSITORY,
    "repository": SOURCE_REPOSITORY,
    "repo": SOURCE_REPOSITORY,
    "npm": SOURCE_REGISTRY,
    "registry": SOURCE_REGISTRY,
    "package": SOURCE_REGISTRY,
    "openapi": SOURCE_API_DOCS,
    "api-docs": SOURCE_API_DOCS,
    "api": SOURCE_API_DOCS,
}

_API_DOC_MARKERS = ("rest-api-description", "api-description", "/docs", "openapi", "swagger")
_REGISTRY_URL_SHAPE = re.compile(r"npmjs\.com/package/[^/?#]+")


def _is_repository_host(identifier: str) -> bool:
    return "github.com" in identifier.lower()


def _is_registry_host(identifier: str) -> bool:
    return "npmjs.com" in identifier.lower()


def _looks_like_api_docs(identifier: str) -> bool:
    lowered = identifier.lower()
    return _is_repository_host(lowered) and any(marker in lowered for marker in _API_DOC_MARKERS)


# Ordered (predicate, source type) pairs; the first match wins.
SOURCE_TYPE_RULES: Tuple[Tuple[Callable[[str], bool], str], ...] = (
    (_looks_like_api_docs, SOURCE_API_DOCS),
    (_is_repository_host, SOURCE_REPOSITORY),
    (_is_registry_host, SOURCE_REGISTRY),
    (lambda identifier: True, SOURCE_REGISTRY),
)


def classify_source(identifier: str, hint: str | None = None) -> str:
    """Return the source type for ``identifier``; an explicit hint wins."""
    if hint:
        resolved = _HINT_ALIASES.get(hint.strip().lower())
        if resolved is None:
            raise ValidationError(f"Unsupported source type: {hint}")
        return resolved
    for predicate, source_type in SOURCE_TYPE_RULES:
        if predicate(identifier):
            return source_type
    return SOURCE_REGISTRY


def validate_identifier(identifier: str, source_type: str) -> None:
    """Reject malformed identifiers before any retrieval is attempted."""
    if not identifier or not identifier.strip():
        raise ValidationError("Package identifier cannot be empty")
    if _is_repository_host(identifier) and parse_repo_url(identifier) is None:
        raise ValidationError(
            "Invalid GitHub URL format. Expected: https://github.com/owner/repo"
        )
    if _is_registry_host(identifier) and not _REGISTRY_URL_SHAPE.search(identifier):
        raise ValidationError(
            "Invalid NPM URL format. Expected: https://npmjs.com/package/name"
        )
    if source_type in (SOURCE_REPOSITORY, SOURCE_API_DOCS):
        if parse_repo_url(identifier) is None:
            raise ValidationError(
                "Invalid GitHub URL format. Expected: https://github.com/owner/repo"
            )
    elif source_type == SOURCE_REGISTRY:
        if not is_valid_package_name(parse_package_identifier(identifier)):
            raise ValidationError("Invalid NPM package name format")


def api_display_name(url: str) -> str:
    """Derive a human name for an API-documentation repository."""
    lowered = url.lower()
    if "github.com/github/rest-api-description" in lowered:
        return "GitHub REST API"
    ref = parse_repo_url(url)
    if ref is None:
        return "REST API"
    words = re.sub(r"[-_]", " ", ref.repo)
    words = re.sub(r"openapi|swagger|api", "", words, flags=re.IGNORECASE)
    words = " ".join(words.split())
    return f"{words} API" if words else "REST API"


@dataclass
class ResolvedSources:
    """Contexts gathered for one identifier."""

    identifier: str
    source_type: str
    package_name: str
    url: str
    repository: Optional[RepositoryContext] = None
    registry: Optional[RegistryContext] = None


class SourceResolver:
    """Drives primary retrieval and best-effort cross-resolution."""

    def __init__(
        self,
        repository_provider: RepositoryProvider,
        registry_provider: RegistryProvider,
        *,
        request_timeout: float | None = 30.0,
    ) -> None:
        self.repository_provider = repository_provider
        self.registry_provider = registry_provider
        self.request_timeout = request_timeout
        self.logger = get_logger("resolver")

    async def resolve(self, identifier: str, hint: str | None = None) -> ResolvedSources:
        cleaned = (identifier or "").strip()
        source_type = classify_source(cleaned, hint)
        validate_identifier(cleaned, source_type)
        self.logger.info("Resolving %s as %s", cleaned, source_type)

        if source_type == SOURCE_REGISTRY:
            return await self._resolve_registry(cleaned)
        if source_type == SOURCE_API_DOCS:
            return await self._resolve_api_docs(cleaned)
        return await self._resolve_repository(cleaned)

    async def _resolve_repository(self, url: str) -> ResolvedSources:
        repository = await self._primary(self.repository_provider.fetch_repository, url)
        resolved = ResolvedSources(
            identifier=url,
            source_type=SOURCE_REPOSITORY,
            package_name=repository.repo,
            url=url,
            repository=repository,
        )
        manifest_name = repository.manifest_name
        if manifest_name:
            self.logger.debug("Looking up registry package %s", manifest_name)
            resolved.registry = await self._secondary(
                self.registry_provider.fetch_package, manifest_name
            )
        return resolved

    async def _resolve_registry(self, identifier: str) -> ResolvedSources:
        name = parse_package_identifier(identifier)
        registry = await self._primary(self.registry_provider.fetch_package, name)
        resolved = ResolvedSources(
            identifier=identifier,
            source_type=SOURCE_REGISTRY,
            package_name=name,
            url=identifier,
            registry=registry,
        )
        repository_url = extract_repository_url(registry.repository)
        if repository_url:
            self.logger.debug("Found repository %s for %s", repository_url, name)
            resolved.url = repository_url
            resolved.repository = await self._secondary(
                self.repository_provider.fetch_repository, repository_url
            )
        return resolved

    async def _resolve_api_docs(self, url: str) -> ResolvedSources:
        repository = await self._primary(self.repository_provider.fetch_repository, url)
        return ResolvedSources(
            identifier=url,
            source_type=SOURCE_API_DOCS,
            package_name=api_display_name(url),
            url=url,
            repository=repository,
        )

    async def _call(self, func: Callable[[str], T], argument: str) -> T:
        return await asyncio.wait_for(
            asyncio.to_thread(func, argument), timeout=self.request_timeout
        )

    async def _primary(self, func: Callable[[str], T], argument: str) -> T:
        try:
            return await self._call(func, argument)
        except SourceNotFoundError:
            raise
        except (http.HTTPRequestError, asyncio.TimeoutError, OSError) as exc:
            raise SourceNotFoundError(
                f"Failed to retrieve {argument}: {_describe(exc)}", identifier=argument
            ) from exc

    async def _secondary(self, func: Callable[[str], T], argument: str) -> Optional[T]:
        try:
            return await self._call(func, argument)
        except Exception as exc:  # cross-resolution never surfaces to the caller
            self.logger.warning("Cross-resolution for %s failed: %s", argument, _describe(exc))
            return None


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


__all__ = [
    "ResolvedSources",
    "SOURCE_TYPE_RULES",
    "SourceResolver",
    "api_display_name",
    "classify_source",
    "validate_identifier",
]
