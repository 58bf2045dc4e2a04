"""Configuration loading for snippetgen (.snippetgen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".snippetgen.yml"

_API_KEY_ENV = {
    "openai": ("SNIPPETGEN_LLM_API_KEY", "OPENAI_API_KEY"),
    "anthropic": ("SNIPPETGEN_LLM_API_KEY", "ANTHROPIC_API_KEY"),
}
_GITHUB_TOKEN_ENV = ("SNIPPETGEN_GITHUB_TOKEN", "GITHUB_TOKEN")


@dataclass
class LLMConfig:
    """Generative backend settings. ``backend`` selects the implementation."""

    backend: str = "openai"
    model: Optional[str] = None
    temperature: float = 0.2
    max_tokens: int = 1500
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: float = 60.0
    executable: Optional[str] = None
    model_path: Optional[str] = None


@dataclass
class SourcesConfig:
    """Repository host and package registry endpoints."""

    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    registry_url: str = "https://registry.npmjs.org"
    downloads_url: str = "https://api.npmjs.org/downloads"
    request_timeout: float = 20.0


@dataclass
class PipelineConfig:
    """Synthesis pipeline behaviour."""

    parallel_steps: bool = False
    confidence_jitter: float = 0.1
    seed: Optional[int] = None


@dataclass
class StorageConfig:
    """Where saved snippets live and how many recent snippets to keep."""

    marketplace_path: Optional[Path] = None
    recent_limit: int = 100


@dataclass
class SnippetGenConfig:
    """Represents the settings defined in .snippetgen.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> SnippetGenConfig:
    """Load configuration from disk, filling secrets from the environment."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm = _load_llm(_as_dict(data.get("llm")))
    if llm.backend not in {"openai", "anthropic", "llamacpp"}:
        raise ConfigError(f"Unsupported llm.backend '{llm.backend}'")
    if llm.api_key is None and llm.backend in _API_KEY_ENV:
        llm.api_key = _first_env_value(env, _API_KEY_ENV[llm.backend])

    sources = _load_sources(_as_dict(data.get("sources")))
    if sources.github_token is None:
        sources.github_token = _first_env_value(env, _GITHUB_TOKEN_ENV)

    pipeline_data = _as_dict(data.get("pipeline"))
    pipeline = PipelineConfig()
    if pipeline_data:
        pipeline.parallel_steps = bool(_as_bool(pipeline_data.get("parallel_steps")))
        jitter = _as_float(pipeline_data.get("confidence_jitter"))
        if jitter is not None:
            if not 0.0 <= jitter <= 0.1:
                raise ConfigError("pipeline.confidence_jitter must be between 0 and 0.1")
            pipeline.confidence_jitter = jitter
        pipeline.seed = _as_int(pipeline_data.get("seed"))

    storage_data = _as_dict(data.get("storage"))
    storage = StorageConfig()
    if storage_data:
        marketplace = _as_str(storage_data.get("marketplace_path"))
        storage.marketplace_path = root / marketplace if marketplace else None
        limit = _as_int(storage_data.get("recent_limit"))
        if limit is not None:
            storage.recent_limit = max(1, limit)

    return SnippetGenConfig(
        root=root,
        llm=llm,
        sources=sources,
        pipeline=pipeline,
        storage=storage,
    )


def _load_llm(llm_data: Dict[str, Any]) -> LLMConfig:
    llm = LLMConfig()
    if not llm_data:
        return llm
    backend = _as_str(llm_data.get("backend"))
    if backend:
        llm.backend = backend.strip().lower()
    llm.model = _as_str(llm_data.get("model"))
    temperature = _as_float(llm_data.get("temperature"))
    if temperature is not None:
        llm.temperature = temperature
    max_tokens = _as_int(llm_data.get("max_tokens"))
    if max_tokens is not None:
        llm.max_tokens = max_tokens
    llm.base_url = _as_str(llm_data.get("base_url"))
    llm.api_key = _as_str(llm_data.get("api_key"))
    timeout = _as_float(llm_data.get("request_timeout"))
    if timeout is not None:
        llm.request_timeout = timeout
    llm.executable = _as_str(llm_data.get("executable"))
    llm.model_path = _as_str(llm_data.get("model_path"))
    return llm


def _load_sources(sources_data: Dict[str, Any]) -> SourcesConfig:
    sources = SourcesConfig()
    if not sources_data:
        return sources
    github_api_url = _as_str(sources_data.get("github_api_url"))
    if github_api_url:
        sources.github_api_url = github_api_url.rstrip("/")
    sources.github_token = _as_str(sources_data.get("github_token"))
    registry_url = _as_str(sources_data.get("registry_url"))
    if registry_url:
        sources.registry_url = registry_url.rstrip("/")
    downloads_url = _as_str(sources_data.get("downloads_url"))
    if downloads_url:
        sources.downloads_url = downloads_url.rstrip("/")
    timeout = _as_float(sources_data.get("request_timeout"))
    if timeout is not None:
        sources.request_timeout = timeout
    return sources


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _first_env_value(env: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = env.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "ConfigError",
    "CONFIG_FILENAME",
    "LLMConfig",
    "PipelineConfig",
    "SnippetGenConfig",
    "SourcesConfig",
    "StorageConfig",
    "load_config",
]
