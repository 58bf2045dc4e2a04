"""Small JSON-over-HTTP helper used by backends and context providers."""

from __future__ import annotations

import http.client
import json
from typing import Any, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

USER_AGENT = "snippetgen/1.0"


class HTTPRequestError(RuntimeError):
    """Raised when a request fails at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def request_json(
    url: str,
    *,
    method: str = "GET",
    payload: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 30.0,
) -> Any:
    """Send a request and decode the JSON body of the response."""
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    merged = {"Accept": "application/json", "User-Agent": USER_AGENT}
    if data is not None:
        merged["Content-Type"] = "application/json"
    for key, value in (headers or {}).items():
        if value:
            merged[key] = value

    http_request = Request(url, data=data, headers=merged, method=method)
    try:
        with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
        message = detail.strip() or str(exc.reason)
        raise HTTPRequestError(
            f"{method} {url} failed with status {exc.code}: {message[:300]}",
            status_code=exc.code,
        ) from exc
    except URLError as exc:
        raise HTTPRequestError(f"{method} {url} failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise HTTPRequestError(f"{method} {url} timed out after {timeout}s") from exc
    except (OSError, http.client.HTTPException) as exc:
        raise HTTPRequestError(f"{method} {url} failed: {exc}") from exc

    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise HTTPRequestError(f"{method} {url} returned invalid JSON") from exc


__all__ = ["HTTPRequestError", "USER_AGENT", "request_json"]
