"""Derives vendor, language, topic and description metadata from contexts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from .models import (
    DATA_SOURCE_DOCS,
    DATA_SOURCE_REGISTRY,
    DATA_SOURCE_REPOSITORY,
    DATA_SOURCE_UNKNOWN,
    SOURCE_API_DOCS,
    RegistryContext,
    RepositoryContext,
)

MAX_TOPICS = 8
DEFAULT_DESCRIPTION = "A package for modern applications"
GENERIC_API_LANGUAGE = "http"

_SCOPE_PREFIX = re.compile(r"^@[^/]+/")

KEYWORD_LANGUAGES = {
    "typescript": "typescript",
    "ts": "typescript",
    "typed": "typescript",
    "types": "typescript",
    "javascript": "javascript",
    "js": "javascript",
    "python": "python",
}

EXTENSION_LANGUAGES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    ((".ts", ".tsx", ".mts", ".cts"), "typescript"),
    ((".js", ".jsx", ".mjs", ".cjs"), "javascript"),
    ((".py",), "python"),
    ((".go",), "go"),
    ((".rs",), "rust"),
    ((".java",), "java"),
    ((".rb",), "ruby"),
)

DEPENDENCY_TOPICS = {
    "express": "web-framework",
    "react": "react",
    "axios": "http-client",
}


@dataclass
class MetadataInputs:
    """Everything the extractor looks at for one identifier."""

    identifier: str
    source_type: str
    repository: Optional[RepositoryContext] = None
    registry: Optional[RegistryContext] = None


@dataclass
class SnippetMetadata:
    vendor_name: str
    languages: List[str]
    topics: List[str]
    description: str
    data_sources: List[str]


def extract_metadata(inputs: MetadataInputs) -> SnippetMetadata:
    return SnippetMetadata(
        vendor_name=extract_vendor_name(inputs.identifier, inputs.registry),
        languages=detect_languages(inputs),
        topics=extract_topics(inputs.repository, inputs.registry),
        description=extract_description(inputs.repository, inputs.registry),
        data_sources=collect_data_sources(inputs.repository, inputs.registry),
    )


def extract_vendor_name(identifier: str, registry: Optional[RegistryContext] = None) -> str:
    """Registry name without its scope, else the identifier's last path segment."""
    if registry is not None and registry.name:
        return _SCOPE_PREFIX.sub("", registry.name)
    cleaned = (identifier or "").strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    return cleaned.split("/")[-1] or cleaned


# ----------------------------------------------------------------------
# Language rules: each maps the inputs to zero or more language names.


def _default_language(inputs: MetadataInputs) -> Iterable[str]:
    if inputs.registry is None and inputs.source_type == SOURCE_API_DOCS:
        return [GENERIC_API_LANGUAGE]
    if inputs.registry is None and inputs.repository is not None and inputs.repository.language:
        return [inputs.repository.language.lower()]
    return ["javascript"]


def _keyword_languages(inputs: MetadataInputs) -> Iterable[str]:
    if inputs.registry is None:
        return []
    return [
        KEYWORD_LANGUAGES[keyword.lower()]
        for keyword in inputs.registry.keywords
        if keyword.lower() in KEYWORD_LANGUAGES
    ]


def _type_definition_languages(inputs: MetadataInputs) -> Iterable[str]:
    if inputs.registry is not None and inputs.registry.has_type_definitions:
        return ["typescript"]
    return []


def _extension_languages(inputs: MetadataInputs) -> Iterable[str]:
    repository = inputs.repository
    if repository is None or repository.structure is None:
        return []
    found: List[str] = []
    for path in repository.structure.source_files:
        lowered = path.lower()
        for extensions, language in EXTENSION_LANGUAGES:
            if lowered.endswith(extensions):
                found.append(language)
                break
    return found


LANGUAGE_RULES: Tuple[Callable[[MetadataInputs], Iterable[str]], ...] = (
    _default_language,
    _keyword_languages,
    _type_definition_languages,
    _extension_languages,
)


def detect_languages(inputs: MetadataInputs) -> List[str]:
    return _unique(language for rule in LANGUAGE_RULES for language in rule(inputs))


# ----------------------------------------------------------------------
# Topic rules


def _keyword_topics(
    repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
) -> Iterable[str]:
    return list(registry.keywords) if registry is not None else []


def _structure_topics(
    repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
) -> Iterable[str]:
    if repository is None or repository.structure is None:
        return []
    structure = repository.structure
    topics: List[str] = []
    if structure.test_files:
        topics.append("testing")
    if structure.example_files:
        topics.append("examples")
    if len(structure.documentation_files) > 5:
        topics.append("well-documented")
    return topics


def _dependency_topics(
    repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
) -> Iterable[str]:
    if registry is None:
        return []
    return [topic for name, topic in DEPENDENCY_TOPICS.items() if name in registry.dependencies]


TOPIC_RULES = (_keyword_topics, _structure_topics, _dependency_topics)


def extract_topics(
    repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
) -> List[str]:
    topics = _unique(
        topic for rule in TOPIC_RULES for topic in rule(repository, registry) if topic
    )
    return topics[:MAX_TOPICS]


def extract_description(
    repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
) -> str:
    if registry is not None and registry.description:
        return registry.description
    if repository is not None and repository.readme:
        for line in repository.readme.splitlines():
            cleaned = line.strip().lstrip("#").strip()
            if cleaned:
                return cleaned
    return DEFAULT_DESCRIPTION


def collect_data_sources(
    repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
) -> List[str]:
    sources: List[str] = []
    if repository is not None:
        sources.append(DATA_SOURCE_REPOSITORY)
    if registry is not None:
        sources.append(DATA_SOURCE_REGISTRY)
    if repository is not None and repository.readme:
        sources.append(DATA_SOURCE_DOCS)
    return sources or [DATA_SOURCE_UNKNOWN]


def _unique(items: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


__all__ = [
    "DEFAULT_DESCRIPTION",
    "LANGUAGE_RULES",
    "MAX_TOPICS",
    "MetadataInputs",
    "SnippetMetadata",
    "TOPIC_RULES",
    "collect_data_sources",
    "detect_languages",
    "extract_description",
    "extract_metadata",
    "extract_topics",
    "extract_vendor_name",
]
