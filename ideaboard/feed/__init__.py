"""
Feed module.

Holds the window of the most recent ideas and the bindings that scope it.
"""

from ideaboard.feed.store import (
    FeedResult,
    FeedStatus,
    IdeaFeedStore,
    RemoveStrategy,
    StoreDisposed,
)
from ideaboard.feed.bindings import (
    BINDINGS,
    FeedBinding,
    PerRequestFeedBinding,
    SharedFeedBinding,
    create_binding,
    store_factory,
)

__all__ = [
    "FeedResult",
    "FeedStatus",
    "IdeaFeedStore",
    "RemoveStrategy",
    "StoreDisposed",
    "BINDINGS",
    "FeedBinding",
    "PerRequestFeedBinding",
    "SharedFeedBinding",
    "create_binding",
    "store_factory",
]
