"""Builds bounded prompts for each analysis step."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..models import AnalysisStep, FileExcerpt, RegistryContext, RepositoryContext
from .constants import (
    API_SURFACE_ANALYSIS,
    DOCUMENTATION_SYNTHESIS,
    EXAMPLE_EXCERPT_LIMIT,
    MANIFEST_CHAR_LIMIT,
    NOT_INSTALLABLE,
    OUTPUT_TEMPLATE,
    PACKAGE_INFO_CHAR_LIMIT,
    PATTERN_EXTRACTION,
    SOURCE_EXCERPT_LIMIT,
    STRUCTURE_DISCOVERY,
    TEST_EXCERPT_LIMIT,
    TREE_CATEGORY_LIMIT,
    TREE_SOURCE_LIMIT,
    TYPE_FILE_LIMIT,
)

_API_DOC_GUIDANCE = (
    "- This is API documentation, NOT an installable package - do not include npm install commands\n"
    "- Focus on HTTP requests, authentication, and API endpoints\n"
    "- Show actual API calls with curl, fetch, or HTTP libraries\n"
    "- Include proper authentication headers and request/response examples"
)
_PACKAGE_GUIDANCE = (
    "- Only include installation section if this is actually an installable package\n"
    "- Keep examples practical and immediately usable\n"
    "- If you find 2+ additional important operations, include them as separate sections"
)


@dataclass(frozen=True)
class StepPrompt:
    """Prompt text for a single analysis step."""

    step: str
    prompt: str


def installation_command(registry: Optional[RegistryContext]) -> Optional[str]:
    """Return the registry install directive, or None when not installable."""
    if registry is None:
        return None
    return f"npm install {registry.name}"


def is_api_documentation(
    registry: Optional[RegistryContext], identifier: str, url: str | None = None
) -> bool:
    """API-documentation profile: no registry metadata and an API-looking identifier."""
    if registry is not None:
        return False
    haystack = f"{identifier} {url or ''}".lower()
    return "api" in haystack


class StepPromptBuilder:
    """Assembles the four step prompts from size-bounded context slices."""

    def structure_discovery(
        self, package_name: str, repository: Optional[RepositoryContext]
    ) -> StepPrompt:
        prompt = (
            "Analyze this repository structure and identify:\n"
            "1. Main entry points\n"
            "2. Example implementations\n"
            "3. Configuration requirements\n"
            "4. Key dependencies\n\n"
            f"Package: {package_name}\n"
            f"Repository tree: {self.format_tree(repository)}\n"
            f"Package.json: {self.format_manifest(repository)}\n\n"
            "Focus on practical information a developer needs to use this package. "
            "Return structured findings."
        )
        return StepPrompt(step=STRUCTURE_DISCOVERY, prompt=prompt)

    def pattern_extraction(
        self, package_name: str, repository: Optional[RepositoryContext]
    ) -> StepPrompt:
        examples = repository.examples if repository else []
        tests = repository.tests if repository else []
        prompt = (
            "Extract common usage patterns from these code files:\n"
            "1. How is the package initialized?\n"
            "2. What are the most used methods?\n"
            "3. How is authentication handled?\n"
            "4. What are typical error scenarios?\n\n"
            f"Package: {package_name}\n"
            f"Example files: {self.format_excerpts(examples, EXAMPLE_EXCERPT_LIMIT, 'No example files found')}\n"
            f"Test files: {self.format_excerpts(tests, TEST_EXCERPT_LIMIT, 'No test files found')}\n\n"
            "Focus on actual code patterns that show how developers use this package."
        )
        return StepPrompt(step=PATTERN_EXTRACTION, prompt=prompt)

    def api_surface_analysis(
        self,
        package_name: str,
        repository: Optional[RepositoryContext],
        registry: Optional[RegistryContext],
    ) -> StepPrompt:
        prompt = (
            "Document the public API surface:\n"
            "1. List all public methods/functions\n"
            "2. Describe parameters and return types\n"
            "3. Note any special requirements\n"
            "4. Identify async vs sync patterns\n\n"
            f"Package: {package_name}\n"
            f"Type definitions: {self.format_type_definitions(repository, registry)}\n"
            f"Source files: {self.format_source_files(repository)}\n"
            f"Package info: {self.format_package_info(registry)}\n\n"
            "Focus on the actual API that developers will call."
        )
        return StepPrompt(step=API_SURFACE_ANALYSIS, prompt=prompt)

    def documentation_synthesis(
        self,
        package_name: str,
        previous_steps: Sequence[AnalysisStep],
        registry: Optional[RegistryContext],
        identifier: str,
        url: str | None = None,
    ) -> StepPrompt:
        combined = "\n\n---\n\n".join(
            f"{step.name}:\n{step.findings}" for step in previous_steps
        )
        api_docs = is_api_documentation(registry, identifier, url)
        install = installation_command(registry)
        kind = "API documentation" if api_docs else "package"
        access_line = (
            "API endpoint base URL and access information"
            if api_docs
            else "Installation command (only if installable package)"
        )
        auth_suffix = " (API keys, tokens, etc.)" if api_docs else ""
        install_label = "API Documentation URL" if api_docs else "Installation"
        install_value = (url or NOT_INSTALLABLE) if api_docs else (install or NOT_INSTALLABLE)

        prompt = (
            f"Create a comprehensive {kind} snippet with:\n"
            "1. Brief description (2-3 sentences)\n"
            f"2. {access_line}\n"
            f"3. Authentication/authorization setup{auth_suffix}\n"
            "4. **MANDATORY**: Basic read/GET operation example\n"
            "5. **MANDATORY**: Basic write/POST operation example\n"
            "6. **MANDATORY**: Error handling example\n"
            "7. **OPTIONAL**: Up to 2 additional important operations if available "
            "(delete, update, configuration, webhooks, etc.)\n\n"
            "TOTAL: 3-5 usage examples maximum - prioritize the most common use cases.\n\n"
            f"Use this analysis: {combined}\n"
            f"Follow this format: {OUTPUT_TEMPLATE}\n\n"
            f"Package: {package_name}\n"
            f"{install_label}: {install_value}\n"
            f"URL: {url or 'Unknown'}\n\n"
            "IMPORTANT:\n"
            f"{_API_DOC_GUIDANCE if api_docs else _PACKAGE_GUIDANCE}\n"
            "- Focus on real-world usage patterns from the analysis"
        )
        return StepPrompt(step=DOCUMENTATION_SYNTHESIS, prompt=prompt)

    # ------------------------------------------------------------------
    # Context formatting

    @staticmethod
    def format_tree(repository: Optional[RepositoryContext]) -> str:
        if repository is None or repository.structure is None:
            return "No repository structure available"
        structure = repository.structure
        lines = [
            f"Source files: {_join(structure.source_files, TREE_SOURCE_LIMIT)}",
            f"Config files: {_join(structure.config_files, TREE_CATEGORY_LIMIT)}",
            f"Example files: {_join(structure.example_files, TREE_CATEGORY_LIMIT)}",
            f"Test files: {_join(structure.test_files, TREE_CATEGORY_LIMIT)}",
            f"Documentation: {_join(structure.documentation_files, TREE_CATEGORY_LIMIT)}",
        ]
        return "\n" + "\n".join(lines)

    @staticmethod
    def format_manifest(repository: Optional[RepositoryContext]) -> str:
        if repository is None or not repository.manifest:
            return "No package.json found"
        return _truncate(_dump(repository.manifest), MANIFEST_CHAR_LIMIT)

    @staticmethod
    def format_excerpts(
        excerpts: Sequence[FileExcerpt], limit: tuple[int, int], empty: str
    ) -> str:
        if not excerpts:
            return empty
        count, chars = limit
        return "\n\n---\n\n".join(
            f"{excerpt.path}:\n{excerpt.content[:chars]}" for excerpt in excerpts[:count]
        )

    @staticmethod
    def format_type_definitions(
        repository: Optional[RepositoryContext], registry: Optional[RegistryContext]
    ) -> str:
        parts: List[str] = []
        if registry is not None and registry.has_type_definitions:
            parts.append(f"Registry package {registry.name} ships type definitions")
        if repository is not None and repository.structure is not None:
            typed = [
                path
                for path in repository.structure.source_files
                if path.endswith(".d.ts") or path.endswith(".ts")
            ]
            if typed:
                parts.append(f"TypeScript files: {', '.join(typed[:TYPE_FILE_LIMIT])}")
        if not parts:
            return "No type definitions found"
        return "; ".join(parts)

    @staticmethod
    def format_source_files(repository: Optional[RepositoryContext]) -> str:
        if repository is None or repository.structure is None:
            return "No source files available"
        return f"Main source files: {_join(repository.structure.source_files, SOURCE_EXCERPT_LIMIT)}"

    @staticmethod
    def format_package_info(registry: Optional[RegistryContext]) -> str:
        if registry is None:
            return "No NPM package info"
        return _truncate(_dump(registry.package_info()), PACKAGE_INFO_CHAR_LIMIT)


def _join(items: Sequence[str], limit: int) -> str:
    return ", ".join(items[:limit]) or "None"


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, default=str)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "\n…(truncated)"


__all__ = [
    "StepPrompt",
    "StepPromptBuilder",
    "installation_command",
    "is_api_documentation",
]
