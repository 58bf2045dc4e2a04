"""End-to-end snippet generation: resolve sources, synthesize, describe."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Callable, Optional

from .config import SnippetGenConfig
from .llm import create_backend
from .llm.backend import Backend
from .logging import get_logger, request_context
from .metadata import MetadataInputs, extract_metadata
from .models import GenerationMetadata, PackageSnippet, Popularity
from .pipeline import SynthesisPipeline
from .resolver import ResolvedSources, SourceResolver
from .scoring import ConfidenceScorer, JitterScorer
from .sources import GitHubClient, NpmRegistryClient

DEFAULT_VERSION = "1.0.0"

ScorerFactory = Callable[[], ConfidenceScorer]


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _new_id() -> str:
    return str(uuid.uuid4())


class SnippetGenerator:
    """Produces a :class:`PackageSnippet` for one identifier per call.

    Each call builds its own pipeline (and scorer) so concurrent requests
    never share mutable state.
    """

    def __init__(
        self,
        resolver: SourceResolver,
        backend: Backend,
        *,
        scorer_factory: ScorerFactory | None = None,
        parallel_steps: bool = False,
        request_timeout: float | None = 90.0,
        clock: Callable[[], str] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.resolver = resolver
        self.backend = backend
        self.scorer_factory = scorer_factory or JitterScorer
        self.parallel_steps = parallel_steps
        self.request_timeout = request_timeout
        self._clock = clock or _utc_timestamp
        self._id_factory = id_factory or _new_id
        self.logger = get_logger("generator")

    @classmethod
    def from_config(
        cls, config: SnippetGenConfig, *, backend: Backend | None = None
    ) -> "SnippetGenerator":
        """Wire real providers and the configured backend."""
        sources = config.sources
        resolver = SourceResolver(
            GitHubClient(
                api_url=sources.github_api_url,
                token=sources.github_token,
                request_timeout=sources.request_timeout,
            ),
            NpmRegistryClient(
                registry_url=sources.registry_url,
                downloads_url=sources.downloads_url,
                request_timeout=sources.request_timeout,
            ),
            request_timeout=sources.request_timeout * 4,
        )
        pipeline = config.pipeline

        def scorer_factory() -> ConfidenceScorer:
            return JitterScorer(pipeline.confidence_jitter, seed=pipeline.seed)

        return cls(
            resolver,
            backend or create_backend(config.llm),
            scorer_factory=scorer_factory,
            parallel_steps=pipeline.parallel_steps,
            request_timeout=config.llm.request_timeout + 5.0,
        )

    def pipeline(self) -> SynthesisPipeline:
        return SynthesisPipeline(
            self.backend,
            scorer=self.scorer_factory(),
            request_timeout=self.request_timeout,
            parallel_steps=self.parallel_steps,
            clock=self._clock,
        )

    async def generate(self, identifier: str, hint: str | None = None) -> PackageSnippet:
        """Resolve, run the four-step pipeline and assemble the snippet."""
        with request_context(identifier.strip()):
            return await self._generate(identifier, hint)

    async def _generate(self, identifier: str, hint: str | None) -> PackageSnippet:
        resolved = await self.resolver.resolve(identifier, hint)
        self.logger.info(
            "Generating snippet for %s (%s)", resolved.package_name, resolved.source_type
        )
        result = await self.pipeline().run(
            resolved.package_name,
            repository=resolved.repository,
            registry=resolved.registry,
            identifier=resolved.identifier,
            url=resolved.url,
        )
        metadata = extract_metadata(
            MetadataInputs(
                identifier=resolved.identifier,
                source_type=resolved.source_type,
                repository=resolved.repository,
                registry=resolved.registry,
            )
        )
        return PackageSnippet(
            id=self._id_factory(),
            vendor_name=metadata.vendor_name,
            package_identifier=_package_identifier(resolved),
            languages=metadata.languages,
            topics=metadata.topics,
            last_updated=result.generated_at,
            version=resolved.registry.version if resolved.registry else DEFAULT_VERSION,
            description=metadata.description,
            popularity=_popularity(resolved),
            generation=GenerationMetadata(
                model=result.model_id,
                generated_at=result.generated_at,
                data_sources=list(result.data_sources),
                confidence=result.overall_confidence,
            ),
            markdown=result.final_markdown,
            steps=list(result.steps),
        )


def _package_identifier(resolved: ResolvedSources) -> str:
    if resolved.registry is not None:
        return resolved.registry.name
    return resolved.package_name


def _popularity(resolved: ResolvedSources) -> Popularity:
    downloads: Optional[int] = None
    stars: Optional[int] = None
    if resolved.registry is not None:
        downloads = resolved.registry.downloads.last_30_days
    if resolved.repository is not None:
        stars = resolved.repository.stars
    return Popularity(registry_downloads=downloads, repository_stars=stars)


__all__ = ["DEFAULT_VERSION", "SnippetGenerator"]
