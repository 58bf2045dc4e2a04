"""Tests for snippetgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from snippetgen.config import (
    ConfigError,
    LLMConfig,
    SnippetGenConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, SnippetGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.llm == LLMConfig()
    assert config.llm.max_tokens == 1500
    assert config.llm.temperature == pytest.approx(0.2)
    assert config.sources.github_token is None
    assert config.pipeline.parallel_steps is False
    assert config.pipeline.confidence_jitter == pytest.approx(0.1)
    assert config.storage.marketplace_path is None
    assert config.storage.recent_limit == 100


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".snippetgen.yml"
    config_file.write_text(
        """
llm:
  backend: "Anthropic"
  model: "claude-test"
  temperature: 0.1
  max_tokens: 900
  api_key: "file-key"
  request_timeout: 30
sources:
  github_api_url: "https://github.example.com/api/v3/"
  github_token: "gh-token"
  registry_url: "https://registry.example.com/"
  request_timeout: 5
pipeline:
  parallel_steps: true
  confidence_jitter: 0.05
  seed: 7
storage:
  marketplace_path: "data/marketplace.json"
  recent_limit: 20
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.llm.backend == "anthropic"
    assert config.llm.model == "claude-test"
    assert config.llm.temperature == pytest.approx(0.1)
    assert config.llm.max_tokens == 900
    assert config.llm.api_key == "file-key"
    assert config.llm.request_timeout == pytest.approx(30.0)

    assert config.sources.github_api_url == "https://github.example.com/api/v3"
    assert config.sources.github_token == "gh-token"
    assert config.sources.registry_url == "https://registry.example.com"
    assert config.sources.request_timeout == pytest.approx(5.0)

    assert config.pipeline.parallel_steps is True
    assert config.pipeline.confidence_jitter == pytest.approx(0.05)
    assert config.pipeline.seed == 7

    assert config.storage.marketplace_path == tmp_path.resolve() / "data" / "marketplace.json"
    assert config.storage.recent_limit == 20


def test_load_config_reads_secrets_from_environment(tmp_path: Path) -> None:
    env = {"OPENAI_API_KEY": "env-openai", "GITHUB_TOKEN": "env-github"}

    config = load_config(tmp_path, environ=env)

    assert config.llm.api_key == "env-openai"
    assert config.sources.github_token == "env-github"


def test_snippetgen_specific_env_vars_take_precedence(tmp_path: Path) -> None:
    env = {
        "SNIPPETGEN_LLM_API_KEY": "specific",
        "OPENAI_API_KEY": "generic",
        "SNIPPETGEN_GITHUB_TOKEN": "specific-gh",
        "GITHUB_TOKEN": "generic-gh",
    }

    config = load_config(tmp_path, environ=env)

    assert config.llm.api_key == "specific"
    assert config.sources.github_token == "specific-gh"


def test_load_config_rejects_unknown_backend(tmp_path: Path) -> None:
    (tmp_path / ".snippetgen.yml").write_text("llm:\n  backend: mystery\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mystery"):
        load_config(tmp_path, environ={})


def test_load_config_rejects_out_of_range_jitter(tmp_path: Path) -> None:
    (tmp_path / ".snippetgen.yml").write_text(
        "pipeline:\n  confidence_jitter: 0.5\n", encoding="utf-8"
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".snippetgen.yml").write_text("llm: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_load_config_requires_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".snippetgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})
