"""Error taxonomy shared by the resolver, pipeline and service layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class SnippetGenError(RuntimeError):
    """Base class for failures surfaced to snippetgen callers."""


class ConfigError(SnippetGenError):
    """Raised when the configuration file cannot be parsed."""


class ValidationError(SnippetGenError):
    """Raised when an identifier is malformed. No retrieval has happened yet."""


class SourceNotFoundError(SnippetGenError):
    """Raised when the primary repository or registry lookup fails."""

    def __init__(self, message: str, *, identifier: str | None = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class BackendError(SnippetGenError):
    """Raised by generative backends on authentication, quota or network failure."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def rate_limited(self) -> bool:
        if self.status_code == 429:
            return True
        lowered = str(self).lower()
        return "rate limit" in lowered or "quota" in lowered


class GenerationFailed(SnippetGenError):
    """Raised when an analysis step fails and the pipeline must abort."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"{step} failed: {cause}")
        self.step = step
        self.cause = cause


@dataclass(frozen=True)
class ErrorCategory:
    """User-facing classification of a failed generation."""

    name: str
    status_code: int
    message: str


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Map an exception to a single descriptive user-visible error."""
    if isinstance(exc, GenerationFailed) and isinstance(exc.cause, BaseException):
        inner = categorize_error(exc.cause)
        if inner.name != "internal":
            return inner
        return ErrorCategory("service-unavailable", 503, "Failed to generate snippet")
    if isinstance(exc, ValidationError):
        return ErrorCategory("invalid-input", 400, str(exc))
    if isinstance(exc, SourceNotFoundError):
        return ErrorCategory("not-found", 404, "Package or repository not found")
    if isinstance(exc, BackendError):
        if exc.rate_limited:
            return ErrorCategory(
                "rate-limited", 429, "API rate limit exceeded. Please try again later."
            )
        return ErrorCategory("service-unavailable", 503, "Service temporarily unavailable")
    return ErrorCategory("internal", 500, "Failed to generate snippet")


def describe_cause(exc: BaseException) -> Optional[str]:
    """Return the innermost message for diagnostics, if any."""
    cause = exc.cause if isinstance(exc, GenerationFailed) else exc
    text = str(cause).strip()
    return text or None


__all__ = [
    "BackendError",
    "ConfigError",
    "ErrorCategory",
    "GenerationFailed",
    "SnippetGenError",
    "SourceNotFoundError",
    "ValidationError",
    "categorize_error",
    "describe_cause",
]
