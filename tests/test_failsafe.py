"""Tests for the deterministic fallback snippet."""

from __future__ import annotations

from snippetgen.failsafe import NOT_INSTALLABLE_NOTE, build_fallback_snippet
from tests._fixtures.stubs import make_registry


def test_fallback_for_registry_package() -> None:
    registry = make_registry("@acme/widget-client", keywords=["typescript"])
    registry.homepage = "https://widget.dev"

    markdown = build_fallback_snippet(
        "widget", registry, repository_url="https://github.com/acme/widget"
    )

    assert markdown.startswith("# @acme/widget-client\n")
    assert "Widget client for the Acme API" in markdown
    assert "## Installation" in markdown
    assert "npm install @acme/widget-client" in markdown
    assert "```typescript" in markdown
    assert "import widgetClient from '@acme/widget-client'" in markdown
    assert "- [Homepage](https://widget.dev)" in markdown
    assert "- [NPM Package](https://www.npmjs.com/package/@acme/widget-client)" in markdown
    assert "- [GitHub Repository](https://github.com/acme/widget)" in markdown


def test_fallback_without_registry_is_not_installable() -> None:
    markdown = build_fallback_snippet("GitHub REST API")

    assert markdown.startswith("# GitHub REST API\n")
    assert NOT_INSTALLABLE_NOTE in markdown
    assert "## Installation" not in markdown
    assert "npm install" not in markdown
    assert "## Additional Resources" not in markdown


def test_fallback_is_deterministic() -> None:
    registry = make_registry()

    assert build_fallback_snippet("widget", registry) == build_fallback_snippet("widget", registry)
