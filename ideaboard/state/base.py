"""
Shared plumbing for UI-facing state holders.

A state holder owns some state behind a lock, lets consumers subscribe to
changes, runs its mount-time work on a background thread, and ignores any
result that arrives after it has been disposed.
"""

import threading
from typing import Callable, List, Optional


Listener = Callable[["StateHolder"], None]


class StateHolder:
    """
    Base class for SessionManager and IdeaFeedStore.

    Subclasses mutate state only through _apply(), which holds the lock,
    checks liveness and notifies listeners afterwards.
    """

    # Prefix for console diagnostics
    name = "state"

    def __init__(self):
        self._lock = threading.RLock()
        self._alive = True
        self._listeners: List[Listener] = []
        self._ready = threading.Event()
        self._mount_thread: Optional[threading.Thread] = None

    @property
    def alive(self) -> bool:
        """False once dispose() has been called."""
        with self._lock:
            return self._alive

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with this holder after every state change.

        Returns:
            A callable that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception as e:
                # One broken consumer must not stop the others
                self._log(f"Listener error: {e}")

    def _apply(self, mutate: Callable[[], None]) -> bool:
        """
        Run a state mutation if this holder is still alive.

        Returns:
            True if the mutation was applied, False if the holder was disposed.
        """
        with self._lock:
            if not self._alive:
                return False
            mutate()
        self._notify()
        return True

    def _start_once(self, target: Callable[[], None]) -> threading.Thread:
        """Run target on a daemon thread the first time this is called."""
        with self._lock:
            if self._mount_thread is None:
                self._mount_thread = threading.Thread(
                    target=target,
                    name=f"{self.name}-mount",
                    daemon=True,
                )
                self._mount_thread.start()
            return self._mount_thread

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the first load has resolved.

        Returns:
            True if ready, False if the timeout expired first.
        """
        return self._ready.wait(timeout)

    def dispose(self) -> None:
        """Detach from consumers. Late results are ignored from now on."""
        with self._lock:
            self._alive = False
            self._listeners.clear()

    def _log(self, message: str) -> None:
        print(f"[{self.name}] {message}")
