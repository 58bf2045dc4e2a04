"""Backend capability shared by every generative provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass
class CompletionRequest:
    """Represents one completion call against a backend."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]


@runtime_checkable
class Backend(Protocol):
    """Blocking text-completion capability.

    Implementations raise :class:`snippetgen.errors.BackendError` on
    authentication, quota or network failure.
    """

    model_id: str

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        ...


__all__ = ["Backend", "CompletionRequest"]
