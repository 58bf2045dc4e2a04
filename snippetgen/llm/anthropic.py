"""Adapter for the Anthropic messages endpoint."""

from __future__ import annotations

from typing import Callable, Optional

from .. import http
from ..errors import BackendError
from .backend import CompletionRequest

_API_VERSION = "2023-06-01"


class AnthropicBackend:
    """Executes prompts against ``/v1/messages``."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    DEFAULT_BASE_URL = "https://api.anthropic.com/v1"

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = 1500,
        request_timeout: Optional[float] = 60.0,
        transport: Callable[[CompletionRequest], str] | None = None,
    ) -> None:
        self.model_id = model or self.DEFAULT_MODEL
        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._transport = transport or self._http_transport

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        request = CompletionRequest(
            prompt=prompt,
            system=system,
            model=self.model_id,
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._transport(request)

    @staticmethod
    def _http_transport(request: CompletionRequest) -> str:
        if not request.api_key:
            raise BackendError("Anthropic API key is required", status_code=401)
        payload: dict[str, object] = {
            "model": request.model,
            # The messages API rejects requests without an explicit budget.
            "max_tokens": request.max_tokens or 1500,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.system:
            payload["system"] = request.system
        if request.temperature is not None:
            payload["temperature"] = request.temperature

        try:
            response_payload = http.request_json(
                f"{request.base_url}/messages",
                method="POST",
                payload=payload,
                headers={
                    "x-api-key": request.api_key,
                    "anthropic-version": _API_VERSION,
                },
                timeout=request.request_timeout or 60.0,
            )
        except http.HTTPRequestError as exc:
            raise BackendError(
                f"Anthropic backend request failed: {exc}", status_code=exc.status_code
            ) from exc

        if not isinstance(response_payload, dict):
            raise BackendError("Anthropic backend returned an unexpected payload")
        blocks = response_payload.get("content")
        if not isinstance(blocks, list):
            return ""
        texts = [
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return "".join(text for text in texts if isinstance(text, str)).strip()


__all__ = ["AnthropicBackend"]
