"""
Session manager.

Owns the current authenticated identity (or its absence) and exposes
register / login / logout plus the initial session probe run on mount.
"""

import threading
from typing import Callable, Optional

from ideaboard.backend.base import BackendClient, unique_id
from ideaboard.backend.errors import AuthFailure
from ideaboard.models.user import UserIdentity
from ideaboard.state.base import StateHolder


# Where login and logout send the user afterwards
ROOT_PATH = "/"


def _no_navigation(path: str) -> None:
    pass


class SessionManager(StateHolder):
    """
    Current-session state for one UI consumer.

    Usage:
        manager = SessionManager(backend, navigate=router.push)
        manager.start()                # probe in the background
        manager.wait_until_ready(5)
        if manager.current is None:
            manager.login(email, password)

    probe() absorbs every failure into "no session"; register, login and
    logout propagate BackendError so the caller can show it and retry.
    """

    name = "session"

    def __init__(self, backend: BackendClient, navigate: Callable[[str], None] = None):
        """
        Args:
            backend: Client used for all identity calls.
            navigate: Called with the target path after login/logout.
        """
        super().__init__()
        self.backend = backend
        self._navigate = navigate or _no_navigation
        self._current: Optional[UserIdentity] = None
        self._loading = True
        # Bumped by login/logout so a slow probe cannot overwrite a newer identity
        self._generation = 0

    @property
    def current(self) -> Optional[UserIdentity]:
        with self._lock:
            return self._current

    @property
    def loading(self) -> bool:
        with self._lock:
            return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None

    def start(self) -> threading.Thread:
        """Run probe() once on a background thread. Later calls are no-ops."""
        return self._start_once(self.probe)

    def probe(self) -> Optional[UserIdentity]:
        """
        Ask the backend who is logged in.

        Never raises: any failure means "no current user".

        Returns:
            The current identity, or None.
        """
        with self._lock:
            generation = self._generation

        user: Optional[UserIdentity] = None
        try:
            user = UserIdentity.from_account(self.backend.get_current_identity())
        except AuthFailure:
            user = None
        except Exception as e:
            self._log(f"No current user: {e}")
            user = None

        def resolve() -> None:
            if self._generation == generation:
                self._current = user
            self._loading = False

        self._apply(resolve)
        self._ready.set()
        return user

    def register(self, email: str, password: str) -> UserIdentity:
        """
        Create an account and log straight into it.

        Raises:
            BackendError: If account creation or the follow-up login fails.
        """
        self.backend.create_account(unique_id(), email, password)
        return self.login(email, password)

    def login(self, email: str, password: str) -> UserIdentity:
        """
        Open an email/password session and load its identity.

        On success the identity replaces the current one and the user is
        sent to the root page. On failure nothing changes.

        Raises:
            AuthFailure: On invalid credentials.
            BackendError: On any other backend failure.
        """
        self.backend.create_email_password_session(email, password)
        user = UserIdentity.from_account(self.backend.get_current_identity())

        def set_user() -> None:
            self._generation += 1
            self._current = user
            self._loading = False

        if self._apply(set_user):
            self._log(f"Signed in as {user.email}")
            self._navigate(ROOT_PATH)
        return user

    def logout(self) -> None:
        """
        Delete the current session and clear the identity.

        Raises:
            BackendError: If the session could not be deleted.
        """
        self.backend.delete_session("current")

        def clear_user() -> None:
            self._generation += 1
            self._current = None

        if self._apply(clear_user):
            self._log("Signed out")
            self._navigate(ROOT_PATH)
