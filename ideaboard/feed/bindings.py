"""
Feed store bindings.

The embedding application decides how feed stores are scoped:

- SharedFeedBinding: one store for the whole application, owned by the
  application object and mounted (background fetch) on first use.
- PerRequestFeedBinding: a fresh store for every consumer, loaded
  synchronously before it is handed out.

Both build stores through the same factory, so the feed logic lives in
IdeaFeedStore only.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ideaboard.backend.base import BackendClient
from ideaboard.feed.store import IdeaFeedStore, RemoveStrategy


StoreFactory = Callable[[], IdeaFeedStore]


def store_factory(
    backend: BackendClient,
    database_id: str = None,
    collection_id: str = None,
    remove_strategy: RemoveStrategy = RemoveStrategy.REFETCH,
) -> StoreFactory:
    """Return a zero-argument callable building identically configured stores."""
    def build() -> IdeaFeedStore:
        return IdeaFeedStore(
            backend,
            database_id=database_id,
            collection_id=collection_id,
            remove_strategy=remove_strategy,
        )
    return build


class FeedBinding(ABC):
    """Hands out the IdeaFeedStore a consumer should use."""

    def __init__(self, factory: StoreFactory):
        self.factory = factory

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def get_store(self) -> IdeaFeedStore:
        pass

    def release(self, store: IdeaFeedStore) -> None:
        """Called by the consumer once it is done with a store."""

    def close(self) -> None:
        """Dispose whatever the binding still holds."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class SharedFeedBinding(FeedBinding):
    """One store shared by every consumer of the application."""

    def __init__(self, factory: StoreFactory):
        super().__init__(factory)
        self._store: Optional[IdeaFeedStore] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "shared"

    def get_store(self) -> IdeaFeedStore:
        with self._lock:
            if self._store is None:
                self._store = self.factory()
                self._store.mount()
            return self._store

    def close(self) -> None:
        with self._lock:
            if self._store is not None:
                self._store.dispose()
                self._store = None


class PerRequestFeedBinding(FeedBinding):
    """A fresh, already-loaded store per consumer."""

    @property
    def name(self) -> str:
        return "per_request"

    def get_store(self) -> IdeaFeedStore:
        store = self.factory()
        store.fetch()
        return store

    def release(self, store: IdeaFeedStore) -> None:
        store.dispose()


BINDINGS = {
    "shared": SharedFeedBinding,
    "per_request": PerRequestFeedBinding,
}


def create_binding(kind: str, factory: StoreFactory) -> FeedBinding:
    """
    Build a binding by name ("shared" or "per_request").

    Raises:
        ValueError: For an unknown binding name.
    """
    try:
        binding_cls = BINDINGS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown feed binding {kind!r}, expected one of {sorted(BINDINGS)}"
        ) from None
    return binding_cls(factory)
