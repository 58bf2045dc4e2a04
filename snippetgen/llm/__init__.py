"""Generative backend adapters and the configuration-driven factory."""

from __future__ import annotations

from ..config import LLMConfig
from ..errors import ConfigError
from .anthropic import AnthropicBackend
from .backend import Backend, CompletionRequest
from .llamacpp import LlamaCppBackend
from .openai import OpenAIBackend


def create_backend(config: LLMConfig) -> Backend:
    """Instantiate the backend named by ``config.backend``.

    Called once at process start; the pipeline only ever sees the result.
    """
    if config.backend == "openai":
        if not config.api_key:
            raise ConfigError("OpenAI API key is required (set llm.api_key or OPENAI_API_KEY)")
        return OpenAIBackend(
            config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            request_timeout=config.request_timeout,
        )
    if config.backend == "anthropic":
        if not config.api_key:
            raise ConfigError(
                "Anthropic API key is required (set llm.api_key or ANTHROPIC_API_KEY)"
            )
        return AnthropicBackend(
            config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            request_timeout=config.request_timeout,
        )
    if config.backend == "llamacpp":
        if not config.model_path:
            raise ConfigError("llm.model_path is required for the llamacpp backend")
        return LlamaCppBackend(
            model_path=config.model_path,
            executable=config.executable,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            request_timeout=config.request_timeout,
        )
    raise ConfigError(f"Unsupported llm.backend '{config.backend}'")


__all__ = [
    "AnthropicBackend",
    "Backend",
    "CompletionRequest",
    "LlamaCppBackend",
    "OpenAIBackend",
    "create_backend",
]
