"""Adapter for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

from typing import Callable, Optional

from .. import http
from ..errors import BackendError
from .backend import CompletionRequest


class OpenAIBackend:
    """Executes prompts against a ``/chat/completions`` endpoint."""

    DEFAULT_MODEL = "gpt-4"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

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
        """Send the prompt and return the response text."""
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
            raise BackendError("OpenAI API key is required", status_code=401)
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": OpenAIBackend._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        try:
            response_payload = http.request_json(
                endpoint,
                method="POST",
                payload=payload,
                headers={"Authorization": f"Bearer {request.api_key}"},
                timeout=request.request_timeout or 60.0,
            )
        except http.HTTPRequestError as exc:
            raise BackendError(
                f"OpenAI backend request failed: {exc}", status_code=exc.status_code
            ) from exc

        if not isinstance(response_payload, dict):
            raise BackendError("OpenAI backend returned an unexpected payload")
        return OpenAIBackend._extract_content(response_payload).strip()

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""


__all__ = ["OpenAIBackend"]
