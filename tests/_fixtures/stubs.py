"""In-memory stand-ins for backends and context providers."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from snippetgen.errors import BackendError, SourceNotFoundError
from snippetgen.models import (
    DownloadStats,
    FileExcerpt,
    RegistryContext,
    RepositoryContext,
    RepositoryStructure,
)
from snippetgen.prompting.constants import (
    API_SURFACE_ANALYSIS,
    DOCUMENTATION_SYNTHESIS,
    PATTERN_EXTRACTION,
    STRUCTURE_DISCOVERY,
)

_PROMPT_PREFIXES = {
    "Analyze this repository structure": STRUCTURE_DISCOVERY,
    "Extract common usage patterns": PATTERN_EXTRACTION,
    "Document the public API surface": API_SURFACE_ANALYSIS,
    "Create a comprehensive": DOCUMENTATION_SYNTHESIS,
}

DEFAULT_REPLIES = {
    STRUCTURE_DISCOVERY: "Entry point is src/index.js.",
    PATTERN_EXTRACTION: "Clients are created with createClient().",
    API_SURFACE_ANALYSIS: "Exposes get(), post() and remove().",
    DOCUMENTATION_SYNTHESIS: "# widget\n\nA tiny widget client.\n",
}


def step_for(prompt: str) -> str:
    for prefix, step in _PROMPT_PREFIXES.items():
        if prompt.startswith(prefix):
            return step
    raise AssertionError(f"Unrecognised prompt: {prompt[:40]!r}")


class StubBackend:
    """Deterministic backend answering by step; can fail chosen steps."""

    model_id = "stub-model"

    def __init__(
        self,
        replies: Optional[Dict[str, str]] = None,
        *,
        failures: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.replies = dict(DEFAULT_REPLIES)
        self.replies.update(replies or {})
        self.failures = dict(failures or {})
        self.calls: List[dict[str, object]] = []
        self._lock = threading.Lock()

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        step = step_for(prompt)
        with self._lock:
            self.calls.append(
                {
                    "step": step,
                    "prompt": prompt,
                    "system": system,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                }
            )
        if step in self.failures:
            raise self.failures[step]
        return self.replies[step]

    @property
    def steps_called(self) -> List[str]:
        return [str(call["step"]) for call in self.calls]


def rate_limited() -> BackendError:
    return BackendError("Rate limit reached for requests", status_code=429)


class StubRepositoryProvider:
    def __init__(self, contexts: Optional[Dict[str, RepositoryContext]] = None) -> None:
        self.contexts = dict(contexts or {})
        self.requested: List[str] = []

    def fetch_repository(self, url: str) -> RepositoryContext:
        self.requested.append(url)
        key = url.rstrip("/")
        if key.endswith(".git"):
            key = key[: -len(".git")]
        if key not in self.contexts:
            raise SourceNotFoundError(f"Repository not found: {url}", identifier=url)
        return self.contexts[key]


class StubRegistryProvider:
    def __init__(self, packages: Optional[Dict[str, RegistryContext]] = None) -> None:
        self.packages = dict(packages or {})
        self.requested: List[str] = []

    def fetch_package(self, name: str) -> RegistryContext:
        self.requested.append(name)
        if name not in self.packages:
            raise SourceNotFoundError(f"Package not found: {name}", identifier=name)
        return self.packages[name]


def make_repository(
    owner: str = "acme",
    repo: str = "widget",
    *,
    manifest: Optional[dict] = None,
    readme: Optional[str] = None,
    with_structure: bool = True,
    with_examples: bool = True,
    language: Optional[str] = "JavaScript",
    stars: Optional[int] = 42,
) -> RepositoryContext:
    structure = None
    if with_structure:
        structure = RepositoryStructure(
            source_files=["src/index.js", "src/client.ts"],
            config_files=["package.json"],
            test_files=["test/client.test.js"],
            example_files=["examples/basic.js"] if with_examples else [],
            documentation_files=["README.md"],
        )
    examples: List[FileExcerpt] = []
    tests: List[FileExcerpt] = []
    if with_examples:
        examples = [FileExcerpt("examples/basic.js", "const w = createClient()")]
        tests = [FileExcerpt("test/client.test.js", "it('works', () => {})")]
    return RepositoryContext(
        owner=owner,
        repo=repo,
        structure=structure,
        manifest=manifest,
        readme=readme,
        examples=examples,
        tests=tests,
        language=language,
        stars=stars,
    )


def make_registry(
    name: str = "widget",
    *,
    version: str = "2.1.0",
    description: Optional[str] = "Widget client for the Acme API",
    keywords: Optional[List[str]] = None,
    dependencies: Optional[Dict[str, str]] = None,
    has_type_definitions: bool = False,
    repository: object = None,
    downloads: int = 1234,
) -> RegistryContext:
    return RegistryContext(
        name=name,
        version=version,
        description=description,
        keywords=list(keywords or []),
        dependencies=dict(dependencies or {}),
        has_type_definitions=has_type_definitions,
        downloads=DownloadStats(last_30_days=downloads, last_week=downloads // 4),
        homepage=None,
        repository=repository,
    )
