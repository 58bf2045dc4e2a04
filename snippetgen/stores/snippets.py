"""Snippet repositories: the recent-snippets list and the saved marketplace."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from ..logging import get_logger
from ..models import PackageSnippet

_STORE_VERSION = 1
DEFAULT_PAGE_SIZE = 50


class SnippetRepository(Protocol):
    """Swappable backing store for generated snippets."""

    def get(self, snippet_id: str) -> Optional[PackageSnippet]:
        ...

    def list(
        self,
        *,
        search: str | None = None,
        language: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[PackageSnippet], int]:
        ...

    def append(self, snippet: PackageSnippet) -> None:
        ...


def matches(snippet: PackageSnippet, search: str | None, language: str | None) -> bool:
    """Case-insensitive filter on vendor/description/topics and language."""
    if search:
        needle = search.lower()
        haystacks = [snippet.vendor_name, snippet.description, *snippet.topics]
        if not any(needle in text.lower() for text in haystacks):
            return False
    if language:
        wanted = language.lower()
        if not any(item.lower() == wanted for item in snippet.languages):
            return False
    return True


def paginate(items: Sequence[PackageSnippet], limit: int, offset: int) -> List[PackageSnippet]:
    start = max(0, offset)
    return list(items[start : start + max(0, limit)])


class InMemorySnippetRepository:
    """Process-local, newest-first list of recently generated snippets.

    Not durable and not shared between processes.
    """

    def __init__(self, limit: int = 100) -> None:
        self._limit = max(1, limit)
        self._items: List[PackageSnippet] = []
        self._lock = threading.Lock()

    def append(self, snippet: PackageSnippet) -> None:
        with self._lock:
            self._items = [item for item in self._items if item.id != snippet.id]
            self._items.insert(0, snippet)
            del self._items[self._limit :]

    def get(self, snippet_id: str) -> Optional[PackageSnippet]:
        with self._lock:
            for item in self._items:
                if item.id == snippet_id:
                    return item
        return None

    def list(
        self,
        *,
        search: str | None = None,
        language: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[PackageSnippet], int]:
        with self._lock:
            snapshot = list(self._items)
        filtered = [item for item in snapshot if matches(item, search, language)]
        return paginate(filtered, limit, offset), len(filtered)


@dataclass
class SavedSnippet:
    """A snippet explicitly saved to the marketplace."""

    snippet: PackageSnippet
    saved_at: str
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "snippet": self.snippet.to_dict(),
            "saved_at": self.saved_at,
            "user_id": self.user_id,
        }


@dataclass
class MarketplaceStats:
    total_snippets: int
    language_breakdown: Dict[str, int]
    recent_activity: int


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _isoformat(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=UTC)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


class MarketplaceStore:
    """JSON-file backed store of saved snippets, newest first."""

    def __init__(self, path: Path | None, *, clock: Callable[[], datetime] | None = None) -> None:
        self._path = path
        self._clock = clock or _utc_now
        self._lock = threading.Lock()
        self._entries: List[SavedSnippet] = []
        self.logger = get_logger("stores.marketplace")
        if self._path is not None:
            self._entries = self._load(self._path)

    # SnippetRepository interface -------------------------------------

    def append(self, snippet: PackageSnippet) -> None:
        self.save(snippet)

    def get(self, snippet_id: str) -> Optional[PackageSnippet]:
        saved = self.get_saved(snippet_id)
        return saved.snippet if saved else None

    def list(
        self,
        *,
        search: str | None = None,
        language: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[PackageSnippet], int]:
        with self._lock:
            snapshot = [entry.snippet for entry in self._entries]
        filtered = [item for item in snapshot if matches(item, search, language)]
        return paginate(filtered, limit, offset), len(filtered)

    # Marketplace operations ------------------------------------------

    def save(self, snippet: PackageSnippet, user_id: str | None = None) -> SavedSnippet:
        """Insert a snippet or replace the saved copy with the same id."""
        now = _isoformat(self._clock())
        snippet.last_updated = now
        saved = SavedSnippet(snippet=snippet, saved_at=now, user_id=user_id)
        with self._lock:
            index = next(
                (i for i, entry in enumerate(self._entries) if entry.snippet.id == snippet.id),
                None,
            )
            if index is None:
                self._entries.insert(0, saved)
            else:
                self._entries[index] = saved
            self._persist()
        self.logger.info("Saved snippet to marketplace: %s", snippet.vendor_name)
        return saved

    def remove(self, snippet_id: str) -> bool:
        with self._lock:
            remaining = [entry for entry in self._entries if entry.snippet.id != snippet_id]
            if len(remaining) == len(self._entries):
                return False
            self._entries = remaining
            self._persist()
        self.logger.info("Removed snippet from marketplace: %s", snippet_id)
        return True

    def get_saved(self, snippet_id: str) -> Optional[SavedSnippet]:
        with self._lock:
            for entry in self._entries:
                if entry.snippet.id == snippet_id:
                    return entry
        return None

    def stats(self) -> MarketplaceStats:
        with self._lock:
            snapshot = list(self._entries)
        breakdown: Dict[str, int] = {}
        for entry in snapshot:
            for language in entry.snippet.languages:
                breakdown[language] = breakdown.get(language, 0) + 1
        week_ago = self._clock() - timedelta(days=7)
        recent = sum(1 for entry in snapshot if _parse_timestamp(entry.saved_at) > week_ago)
        return MarketplaceStats(
            total_snippets=len(snapshot),
            language_breakdown=breakdown,
            recent_activity=recent,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _persist(self) -> None:
        if self._path is None:
            return
        payload = {
            "version": _STORE_VERSION,
            "snippets": [entry.to_dict() for entry in self._entries],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _load(self, path: Path) -> List[SavedSnippet]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.warning("Ignoring unreadable marketplace file %s: %s", path, exc)
            return []
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return []
        entries: List[SavedSnippet] = []
        for raw in data.get("snippets") or []:
            if not isinstance(raw, dict) or not isinstance(raw.get("snippet"), dict):
                continue
            try:
                snippet = PackageSnippet.from_dict(raw["snippet"])
            except (KeyError, TypeError, ValueError):
                continue
            user_id = raw.get("user_id")
            entries.append(
                SavedSnippet(
                    snippet=snippet,
                    saved_at=str(raw.get("saved_at", "")),
                    user_id=user_id if isinstance(user_id, str) else None,
                )
            )
        return entries


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "InMemorySnippetRepository",
    "MarketplaceStats",
    "MarketplaceStore",
    "SavedSnippet",
    "SnippetRepository",
]
