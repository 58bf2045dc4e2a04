"""Tests for configuration-driven backend selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from snippetgen.config import LLMConfig
from snippetgen.errors import ConfigError
from snippetgen.llm import (
    AnthropicBackend,
    Backend,
    LlamaCppBackend,
    OpenAIBackend,
    create_backend,
)


def test_create_backend_builds_openai_by_default() -> None:
    backend = create_backend(LLMConfig(api_key="key", model="gpt-test"))

    assert isinstance(backend, OpenAIBackend)
    assert isinstance(backend, Backend)
    assert backend.model_id == "gpt-test"


def test_create_backend_builds_anthropic() -> None:
    backend = create_backend(LLMConfig(backend="anthropic", api_key="key"))

    assert isinstance(backend, AnthropicBackend)
    assert backend.model_id == AnthropicBackend.DEFAULT_MODEL


def test_create_backend_builds_llamacpp(tmp_path: Path) -> None:
    model = tmp_path / "tiny.gguf"
    model.write_text("weights", encoding="utf-8")

    backend = create_backend(LLMConfig(backend="llamacpp", model_path=str(model)))

    assert isinstance(backend, LlamaCppBackend)
    assert backend.model_id == "tiny"


@pytest.mark.parametrize(
    "config",
    [
        LLMConfig(backend="openai"),
        LLMConfig(backend="anthropic"),
        LLMConfig(backend="llamacpp"),
        LLMConfig(backend="llamacpp", model_path="/nonexistent/model.gguf"),
        LLMConfig(backend="mystery", api_key="key"),
    ],
)
def test_create_backend_rejects_incomplete_configuration(config: LLMConfig) -> None:
    with pytest.raises(ConfigError):
        create_backend(config)
