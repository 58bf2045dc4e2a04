"""Storage collaborators for generated snippets."""

from .snippets import (
    DEFAULT_PAGE_SIZE,
    InMemorySnippetRepository,
    MarketplaceStats,
    MarketplaceStore,
    SavedSnippet,
    SnippetRepository,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "InMemorySnippetRepository",
    "MarketplaceStats",
    "MarketplaceStore",
    "SavedSnippet",
    "SnippetRepository",
]
