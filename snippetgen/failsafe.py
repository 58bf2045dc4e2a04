"""Deterministic fallback document used when documentation synthesis fails."""

from __future__ import annotations

import re
from typing import List, Optional

from .models import RegistryContext

FALLBACK_CONFIDENCE = 0.3
FALLBACK_MODEL_ID = "fallback"
NOT_INSTALLABLE_NOTE = (
    "This is not an installable package. No registry entry was found, so consult the "
    "project repository or API reference for access instructions."
)


def build_fallback_snippet(
    package_name: str,
    registry: Optional[RegistryContext] = None,
    *,
    repository_url: str | None = None,
) -> str:
    """Return a non-generative snippet built only from registry metadata."""
    title = registry.name if registry is not None else package_name
    language = _language_for(registry)
    description = (registry.description if registry is not None else None) or (
        f"A {language} package for modern applications."
    )

    lines: List[str] = [f"# {title}", "", description, ""]

    if registry is not None:
        binding = _binding_name(registry.name)
        lines.extend(
            [
                "## Installation",
                "",
                "```bash",
                f"npm install {registry.name}",
                "```",
                "",
                "## Basic Usage",
                "",
                f"```{language}",
                f"import {binding} from '{registry.name}'",
                "",
                "// Initialize",
                f"const client = {binding}({{",
                "  // configuration options",
                "})",
                "",
                "// Example usage",
                "const result = await client.someMethod()",
                "console.log(result)",
                "```",
                "",
            ]
        )
    else:
        lines.extend(["## Usage", "", NOT_INSTALLABLE_NOTE, ""])

    resources = _resources(registry, repository_url)
    if resources:
        lines.extend(["## Additional Resources", *resources, ""])

    return "\n".join(lines).strip() + "\n"


def _language_for(registry: Optional[RegistryContext]) -> str:
    if registry is None:
        return "javascript"
    if "typescript" in registry.keywords or registry.has_type_definitions or "types" in registry.name:
        return "typescript"
    return "javascript"


def _binding_name(package_name: str) -> str:
    bare = package_name.rsplit("/", 1)[-1]
    words = [word for word in re.split(r"[^A-Za-z0-9]+", bare) if word]
    if not words:
        return "pkg"
    binding = words[0].lower() + "".join(word.capitalize() for word in words[1:])
    return f"pkg{binding}" if binding[0].isdigit() else binding


def _resources(registry: Optional[RegistryContext], repository_url: str | None) -> List[str]:
    resources: List[str] = []
    if registry is not None and registry.homepage:
        resources.append(f"- [Homepage]({registry.homepage})")
    if registry is not None:
        resources.append(f"- [NPM Package](https://www.npmjs.com/package/{registry.name})")
    if repository_url and "github.com" in repository_url:
        resources.append(f"- [GitHub Repository]({repository_url})")
    return resources


__all__ = [
    "FALLBACK_CONFIDENCE",
    "FALLBACK_MODEL_ID",
    "NOT_INSTALLABLE_NOTE",
    "build_fallback_snippet",
]
