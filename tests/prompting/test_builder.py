"""Tests for step prompt assembly and context bounds."""

from __future__ import annotations

from snippetgen.models import AnalysisStep, FileExcerpt, RepositoryStructure
from snippetgen.prompting import StepPromptBuilder, installation_command, is_api_documentation
from snippetgen.prompting.constants import (
    API_SURFACE_ANALYSIS,
    NOT_INSTALLABLE,
    PATTERN_EXTRACTION,
    STRUCTURE_DISCOVERY,
)
from tests._fixtures.stubs import make_registry, make_repository


def test_structure_prompt_bounds_tree_listing() -> None:
    repository = make_repository()
    repository.structure = RepositoryStructure(
        source_files=[f"src/file{index}.js" for index in range(15)],
        config_files=[f"config{index}.json" for index in range(8)],
    )

    prompt = StepPromptBuilder().structure_discovery("widget", repository)

    assert prompt.step == STRUCTURE_DISCOVERY
    assert "src/file9.js" in prompt.prompt
    assert "src/file10.js" not in prompt.prompt
    assert "config4.json" in prompt.prompt
    assert "config5.json" not in prompt.prompt
    assert "No package.json found" in prompt.prompt


def test_structure_prompt_without_repository() -> None:
    prompt = StepPromptBuilder().structure_discovery("widget", None)

    assert "No repository structure available" in prompt.prompt


def test_pattern_prompt_truncates_excerpts() -> None:
    repository = make_repository()
    repository.examples = [FileExcerpt(f"examples/{index}.js", "e" * 900) for index in range(4)]
    repository.tests = [FileExcerpt(f"test/{index}.js", "t" * 700) for index in range(3)]

    prompt = StepPromptBuilder().pattern_extraction("widget", repository)

    assert prompt.step == PATTERN_EXTRACTION
    assert "examples/2.js" in prompt.prompt
    assert "examples/3.js" not in prompt.prompt
    assert "e" * 800 in prompt.prompt
    assert "e" * 801 not in prompt.prompt
    assert "test/1.js" in prompt.prompt
    assert "test/2.js" not in prompt.prompt
    assert "t" * 601 not in prompt.prompt


def test_api_surface_prompt_mentions_type_definitions() -> None:
    registry = make_registry(has_type_definitions=True)

    prompt = StepPromptBuilder().api_surface_analysis("widget", make_repository(), registry)

    assert prompt.step == API_SURFACE_ANALYSIS
    assert "Registry package widget ships type definitions" in prompt.prompt
    assert "TypeScript files: src/client.ts" in prompt.prompt
    assert '"name": "widget"' in prompt.prompt


def test_package_info_is_capped() -> None:
    registry = make_registry(dependencies={f"dep-{index}": "^1.0.0" for index in range(200)})

    info = StepPromptBuilder.format_package_info(registry)

    assert len(info) <= 2000 + len("\n…(truncated)")
    assert info.endswith("(truncated)")


def test_synthesis_prompt_for_package_and_api_docs() -> None:
    steps = [AnalysisStep("Structure Discovery", "goal", "found things", 0.9)]
    builder = StepPromptBuilder()

    package_prompt = builder.documentation_synthesis("widget", steps, make_registry(), "widget")
    assert "Installation: npm install widget" in package_prompt.prompt
    assert "found things" in package_prompt.prompt

    api_prompt = builder.documentation_synthesis(
        "GitHub REST API",
        steps,
        None,
        "https://github.com/github/rest-api-description",
        None,
    )
    assert f"API Documentation URL: {NOT_INSTALLABLE}" in api_prompt.prompt
    assert "Create a comprehensive API documentation snippet" in api_prompt.prompt


def test_installation_helpers() -> None:
    assert installation_command(make_registry("@acme/widget")) == "npm install @acme/widget"
    assert installation_command(None) is None
    assert is_api_documentation(None, "https://github.com/acme/payments-api")
    assert not is_api_documentation(make_registry(), "payments-api")
    assert not is_api_documentation(None, "https://github.com/acme/widget")
