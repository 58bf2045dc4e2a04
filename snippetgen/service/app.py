"""FastAPI application entrypoint for snippetgen service mode."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..errors import SnippetGenError, ValidationError, categorize_error, describe_cause
from ..generator import SnippetGenerator
from ..logging import get_logger
from ..models import PackageSnippet
from ..stores import (
    DEFAULT_PAGE_SIZE,
    InMemorySnippetRepository,
    MarketplaceStore,
    SavedSnippet,
    SnippetRepository,
)

SERVICE_VERSION = "1.0.0"
ANONYMOUS_USER = "anonymous"


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


class GenerateRequest(BaseModel):
    package_url: str
    package_type: Optional[str] = None


class GenerateResponse(BaseModel):
    status: str
    snippet: Dict[str, Any]


class SnippetListResponse(BaseModel):
    snippets: List[Dict[str, Any]]
    total: int


class UpdateRequest(BaseModel):
    package_identifier: Optional[str] = None


class MessageResponse(BaseModel):
    status: str = "success"
    message: str


class SaveRequest(BaseModel):
    snippet: Dict[str, Any]
    user_id: Optional[str] = None


class SaveResponse(BaseModel):
    status: str
    message: str
    saved_snippet: Dict[str, Any]


class StatsResponse(BaseModel):
    total_snippets: int
    language_breakdown: Dict[str, int]
    recent_activity: int


def _saved_payload(saved: SavedSnippet) -> Dict[str, Any]:
    payload = saved.snippet.to_dict()
    payload["saved_to_marketplace"] = True
    payload["saved_at"] = saved.saved_at
    payload["user_id"] = saved.user_id
    return payload


def _error_response(exc: BaseException, *, debug: bool) -> JSONResponse:
    category = categorize_error(exc)
    content: Dict[str, Any] = {
        "status": "error",
        "error": category.name,
        "message": category.message,
    }
    if debug:
        content["details"] = describe_cause(exc)
    return JSONResponse(status_code=category.status_code, content=content)


def create_app(
    generator_factory: Callable[[], SnippetGenerator],
    *,
    recent: SnippetRepository | None = None,
    marketplace: MarketplaceStore | None = None,
    debug: bool = False,
) -> FastAPI:
    """Create the FastAPI application exposing snippet generation and the marketplace."""

    app = FastAPI(title="SnippetGen Service", version=SERVICE_VERSION)
    logger = get_logger("service")
    recent_store: SnippetRepository = recent if recent is not None else InMemorySnippetRepository()
    saved_store = marketplace if marketplace is not None else MarketplaceStore(None)

    async def get_generator() -> SnippetGenerator:
        return generator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            version=SERVICE_VERSION,
        )

    # ------------------------------------------------------------------
    # Snippets

    @app.post("/api/snippets/generate", response_model=GenerateResponse)
    async def generate_snippet(
        payload: GenerateRequest,
        generator: SnippetGenerator = Depends(get_generator),
    ) -> GenerateResponse:
        snippet = await generator.generate(payload.package_url, payload.package_type)
        recent_store.append(snippet)
        return GenerateResponse(status="success", snippet=snippet.to_dict())

    @app.get("/api/snippets", response_model=SnippetListResponse)
    def list_snippets(
        search: Optional[str] = None,
        language: Optional[str] = None,
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=0),
        offset: int = Query(0, ge=0),
    ) -> SnippetListResponse:
        items, total = recent_store.list(
            search=search, language=language, limit=limit, offset=offset
        )
        return SnippetListResponse(snippets=[item.to_dict() for item in items], total=total)

    @app.post("/api/snippets/request-update", response_model=MessageResponse)
    async def request_update(payload: UpdateRequest) -> MessageResponse:
        identifier = (payload.package_identifier or "").strip()
        if not identifier:
            raise ValidationError("Package identifier is required")
        logger.info("Update requested for package: %s", identifier)
        return MessageResponse(message="Update request submitted successfully")

    @app.get("/api/snippets/{snippet_id}")
    def get_snippet(snippet_id: str) -> Dict[str, Any]:
        snippet = recent_store.get(snippet_id)
        if snippet is None:
            raise HTTPException(status_code=404, detail="Snippet not found")
        return snippet.to_dict()

    # ------------------------------------------------------------------
    # Marketplace

    @app.get("/api/marketplace", response_model=SnippetListResponse)
    def list_marketplace(
        search: Optional[str] = None,
        language: Optional[str] = None,
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=0),
        offset: int = Query(0, ge=0),
    ) -> SnippetListResponse:
        items, total = saved_store.list(
            search=search, language=language, limit=limit, offset=offset
        )
        payloads = []
        for item in items:
            saved = saved_store.get_saved(item.id)
            if saved is not None:
                payloads.append(_saved_payload(saved))
        return SnippetListResponse(snippets=payloads, total=total)

    @app.post("/api/marketplace/save", response_model=SaveResponse)
    def save_to_marketplace(payload: SaveRequest) -> SaveResponse:
        if not payload.snippet.get("id"):
            raise ValidationError("Valid snippet data is required")
        try:
            snippet = PackageSnippet.from_dict(payload.snippet)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError("Valid snippet data is required") from exc
        saved = saved_store.save(snippet, payload.user_id or ANONYMOUS_USER)
        return SaveResponse(
            status="success",
            message="Snippet saved to marketplace successfully",
            saved_snippet=_saved_payload(saved),
        )

    @app.get("/api/marketplace/stats/overview", response_model=StatsResponse)
    def marketplace_stats() -> StatsResponse:
        stats = saved_store.stats()
        return StatsResponse(
            total_snippets=stats.total_snippets,
            language_breakdown=stats.language_breakdown,
            recent_activity=stats.recent_activity,
        )

    @app.get("/api/marketplace/{snippet_id}")
    def get_marketplace_snippet(snippet_id: str) -> Dict[str, Any]:
        saved = saved_store.get_saved(snippet_id)
        if saved is None:
            raise HTTPException(status_code=404, detail="Snippet not found in marketplace")
        return _saved_payload(saved)

    @app.delete("/api/marketplace/{snippet_id}", response_model=MessageResponse)
    def remove_from_marketplace(snippet_id: str) -> MessageResponse:
        if not saved_store.remove(snippet_id):
            raise HTTPException(status_code=404, detail="Snippet not found in marketplace")
        return MessageResponse(message="Snippet removed from marketplace")

    @app.exception_handler(SnippetGenError)
    async def snippetgen_error_handler(_: Any, exc: SnippetGenError) -> JSONResponse:
        logger.warning("Request failed: %s", exc)
        return _error_response(exc, debug=debug)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(_: Any, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error while handling request")
        return _error_response(exc, debug=debug)

    return app


def create_app_from_config(config_path: Path | None = None, *, debug: bool = False) -> FastAPI:
    """Build the service from ``.snippetgen.yml``; the backend is chosen once here."""
    config = load_config(config_path)
    generator = SnippetGenerator.from_config(config)
    return create_app(
        lambda: generator,
        recent=InMemorySnippetRepository(config.storage.recent_limit),
        marketplace=MarketplaceStore(config.storage.marketplace_path),
        debug=debug,
    )


def run_service(
    host: str = "0.0.0.0",
    port: int = 8000,
    *,
    config_path: Path | None = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app_from_config(config_path)
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "create_app_from_config", "run_service"]
