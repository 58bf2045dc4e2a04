"""Adapter for llama.cpp local execution."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from ..errors import BackendError, ConfigError


class LlamaCppBackend:
    """Executes prompts using the llama.cpp CLI binary."""

    def __init__(
        self,
        *,
        model_path: str,
        executable: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 120.0,
    ) -> None:
        self.model_path = self._validate_model_path(model_path)
        self.model_id = self.model_path.stem
        self.executable = executable or "llama-cli"
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        full_prompt = self._compose_prompt(system, prompt)
        effective_tokens = max_tokens if max_tokens is not None else self.max_tokens
        effective_temperature = temperature if temperature is not None else self.temperature

        args = [self.executable, "-m", str(self.model_path), "-p", full_prompt]
        if effective_temperature is not None:
            args.extend(["--temp", str(effective_temperature)])
        if effective_tokens is not None:
            args.extend(["-n", str(effective_tokens)])

        try:
            completed = subprocess.run(
                args,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.request_timeout,
            )
        except FileNotFoundError as exc:  # pragma: no cover - environment dependent
            raise BackendError(
                f"Unable to locate llama.cpp executable '{self.executable}'."
            ) from exc
        except subprocess.TimeoutExpired as exc:  # pragma: no cover - environment dependent
            raise BackendError(
                f"llama.cpp did not finish within {self.request_timeout}s"
            ) from exc
        except subprocess.CalledProcessError as exc:  # pragma: no cover - environment dependent
            message = exc.stderr.strip() or exc.stdout.strip() or str(exc.returncode)
            raise BackendError(f"llama.cpp execution failed: {message}") from exc

        return completed.stdout.strip()

    @staticmethod
    def _compose_prompt(system: str | None, prompt: str) -> str:
        if system:
            return f"{system.strip()}\n\n{prompt}"
        return prompt

    @staticmethod
    def _validate_model_path(model_path: str) -> Path:
        path = Path(model_path).expanduser().resolve()
        if not path.exists():
            raise ConfigError(f"llama.cpp model not found at {path}")
        if not path.is_file():
            raise ConfigError(f"llama.cpp model must be a file: {path}")
        return path


__all__ = ["LlamaCppBackend"]
