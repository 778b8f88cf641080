"""
Idea feed store.

Owns the in-memory window of the most recent ideas (newest first, at most
FEED_LIMIT entries) and exposes fetch / add / remove against the backend.

Consistency model:
- fetch() replaces the window with exactly what the backend returns.
- add() applies the server-confirmed document (the backend's echo) as a
  local delta: prepend, then truncate. It does not re-fetch.
- remove() deletes, then reconciles either by re-fetching (default, keeps
  the window full) or by filtering the id out locally.

Operations never raise for backend failures. They print a diagnostic line
and return a FeedResult the UI can turn into a notice.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ideaboard.backend.base import BackendClient, Permission, Query, Role, unique_id
from ideaboard.config import APPWRITE_COLLECTION_ID, APPWRITE_DATABASE_ID, FEED_LIMIT
from ideaboard.models.idea import Idea, IdeaInput
from ideaboard.state.base import StateHolder


class FeedStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class RemoveStrategy(str, Enum):
    """How the window is reconciled after a successful delete."""

    REFETCH = "refetch"
    LOCAL_FILTER = "local_filter"


@dataclass
class FeedResult:
    """
    Outcome of a feed operation.

    Attributes:
        success: Whether the backend call succeeded.
        error: Error message if it did not. Also set on a successful
            remove() whose follow-up re-fetch failed.
        error_type: Exception class name of the failure (e.g. "AuthFailure").
        idea: The idea created by add(), if any.
        items: Snapshot of the window after the operation.
    """

    success: bool
    error: Optional[str] = None
    error_type: Optional[str] = None
    idea: Optional[Idea] = None
    items: List[Idea] = field(default_factory=list)

    @classmethod
    def failure(cls, exc: Exception, items: List[Idea] = None) -> "FeedResult":
        return cls(
            success=False,
            error=str(exc),
            error_type=type(exc).__name__,
            items=list(items or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "items": [idea.to_dict() for idea in self.items],
        }
        if self.idea is not None:
            data["idea"] = self.idea.to_dict()
        if self.error is not None:
            data["error"] = self.error
            data["error_type"] = self.error_type
        return data


class StoreDisposed(Exception):
    """The store was disposed before the operation started."""


class IdeaFeedStore(StateHolder):
    """
    Feed of the most recent ideas for one binding.

    Usage:
        store = IdeaFeedStore(backend)
        store.mount()                       # initial fetch in the background
        result = store.add(IdeaInput("Title", "Body", user.id))
        if not result.success:
            show_notice(result.error)
    """

    name = "ideas"

    CREATED_AT = "$createdAt"

    def __init__(
        self,
        backend: BackendClient,
        database_id: str = None,
        collection_id: str = None,
        limit: int = FEED_LIMIT,
        remove_strategy: RemoveStrategy = RemoveStrategy.REFETCH,
    ):
        """
        Args:
            backend: Client used for all document calls.
            database_id: Database id. Defaults to config.APPWRITE_DATABASE_ID.
            collection_id: Collection id. Defaults to config.APPWRITE_COLLECTION_ID.
            limit: Size of the window.
            remove_strategy: Default reconciliation after remove().
        """
        super().__init__()
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        self.backend = backend
        self.database_id = database_id if database_id is not None else APPWRITE_DATABASE_ID
        self.collection_id = collection_id if collection_id is not None else APPWRITE_COLLECTION_ID
        self.limit = limit
        self.remove_strategy = RemoveStrategy(remove_strategy)

        self._items: List[Idea] = []
        self._status = FeedStatus.UNINITIALIZED
        # Fetches started but not yet resolved; READY only when this is 0
        self._in_flight = 0

    # =========================================================================
    # Snapshots
    # =========================================================================

    @property
    def items(self) -> List[Idea]:
        """Copy of the current window, newest first."""
        with self._lock:
            return list(self._items)

    @property
    def status(self) -> FeedStatus:
        with self._lock:
            return self._status

    @property
    def loading(self) -> bool:
        return self.status != FeedStatus.READY

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view of the store for UI consumers."""
        with self._lock:
            return {
                "status": self._status.value,
                "loading": self._status != FeedStatus.READY,
                "items": [idea.to_dict() for idea in self._items],
            }

    # =========================================================================
    # Operations
    # =========================================================================

    def mount(self) -> threading.Thread:
        """Run the initial fetch() once on a background thread."""
        return self._start_once(self.fetch)

    def fetch(self) -> FeedResult:
        """
        Reload the window from the backend.

        Returns:
            FeedResult with the new items, or the failure (items unchanged).
        """
        def start_loading() -> None:
            self._in_flight += 1
            self._status = FeedStatus.LOADING

        if not self._apply(start_loading):
            return FeedResult.failure(StoreDisposed("store has been disposed"))

        try:
            documents = self.backend.list_documents(
                self.database_id,
                self.collection_id,
                [Query.order_desc(self.CREATED_AT), Query.limit(self.limit)],
            )
            ideas = [Idea.from_document(doc) for doc in documents][: self.limit]
        except Exception as e:
            self._log(f"Error fetching ideas: {e}")

            self._apply(self._finish_fetch)
            self._ready.set()
            return FeedResult.failure(e, self.items)

        def replace() -> None:
            self._items = ideas
            self._finish_fetch()

        self._apply(replace)
        self._ready.set()
        return FeedResult(success=True, items=list(ideas))

    def _finish_fetch(self) -> None:
        """Mark one fetch resolved. Called under the lock from _apply()."""
        self._in_flight = max(self._in_flight - 1, 0)
        if self._in_flight == 0:
            self._status = FeedStatus.READY

    def add(self, idea: Union[IdeaInput, Dict[str, str]]) -> FeedResult:
        """
        Create an idea readable by anyone and editable only by its owner.

        The created document is prepended to the window, which is then
        truncated back to the limit.

        Args:
            idea: IdeaInput, or a dict with title / description / userId.

        Returns:
            FeedResult carrying the created Idea, or the failure.
        """
        try:
            if isinstance(idea, dict):
                idea = IdeaInput(
                    title=idea.get("title", ""),
                    description=idea.get("description", ""),
                    user_id=idea.get("userId") or idea.get("user_id", ""),
                )
            owner = Role.user(idea.user_id)
            document = self.backend.create_document(
                self.database_id,
                self.collection_id,
                unique_id(),
                idea.to_fields(),
                [
                    Permission.read(Role.any()),
                    Permission.update(owner),
                    Permission.delete(owner),
                ],
            )
            created = Idea.from_document(document)
        except Exception as e:
            self._log(f"Error adding idea: {e}")
            return FeedResult.failure(e, self.items)

        def prepend() -> None:
            self._items = [created] + self._items[: self.limit - 1]

        self._apply(prepend)
        return FeedResult(success=True, idea=created, items=self.items)

    def remove(self, idea_id: str, strategy: RemoveStrategy = None) -> FeedResult:
        """
        Delete an idea, then reconcile the window.

        Args:
            idea_id: Id of the idea to delete.
            strategy: Overrides the store's default RemoveStrategy.

        Returns:
            FeedResult with the reconciled items, or the failure (items unchanged).
        """
        strategy = RemoveStrategy(strategy) if strategy is not None else self.remove_strategy

        try:
            if not idea_id:
                raise ValueError("idea id is required")
            self.backend.delete_document(self.database_id, self.collection_id, idea_id)
        except Exception as e:
            self._log(f"Error removing idea: {e}")
            return FeedResult.failure(e, self.items)

        refetch: Optional[FeedResult] = None
        if strategy == RemoveStrategy.REFETCH:
            refetch = self.fetch()
            if refetch.success:
                return refetch
            # The delete went through; keep the window consistent with it
            self._log(f"Refetch after removing {idea_id} failed, filtering locally")

        def drop() -> None:
            self._items = [item for item in self._items if item.id != idea_id]

        self._apply(drop)
        if refetch is not None:
            # success refers to the delete; error reports the stale window
            return FeedResult(
                success=True,
                error=refetch.error,
                error_type=refetch.error_type,
                items=self.items,
            )
        return FeedResult(success=True, items=self.items)
