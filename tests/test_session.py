"""
Tests for the session manager.

Covers the initial probe, register / login / logout, failure propagation,
the navigation side effect and the liveness guard.
"""

import threading
import pytest
from unittest.mock import Mock

from ideaboard.backend import AuthFailure, TransportFailure, ValidationFailure
from ideaboard.models import UserIdentity
from ideaboard.session import ROOT_PATH, SessionManager
from tests.test_config import CONFIG, TEST_DATA


ALICE = TEST_DATA["accounts"]["alice"]
BAD = TEST_DATA["accounts"]["bad"]


class TestProbe:
    """Tests for the initial session probe."""

    def test_initial_state(self, session_manager):
        assert session_manager.current is None
        assert session_manager.loading is True
        assert session_manager.is_authenticated is False

    def test_probe_without_session(self, session_manager):
        """
        GIVEN: No active session
        WHEN: probe() runs
        THEN: current is None, loading is False, nothing is raised
        """
        result = session_manager.probe()

        assert result is None
        assert session_manager.current is None
        assert session_manager.loading is False

    def test_probe_with_session(self, mock_backend, alice, session_manager):
        user = session_manager.probe()

        assert user.id == alice["$id"]
        assert session_manager.current == user
        assert session_manager.loading is False

    def test_probe_absorbs_transport_failure(self, spec_backend):
        spec_backend.get_current_identity.side_effect = TransportFailure("offline")
        manager = SessionManager(spec_backend)

        assert manager.probe() is None
        assert manager.current is None
        assert manager.loading is False

    def test_probe_absorbs_unexpected_errors(self, spec_backend, capsys):
        spec_backend.get_current_identity.side_effect = RuntimeError("kaboom")
        manager = SessionManager(spec_backend)

        assert manager.probe() is None
        assert manager.loading is False
        assert "[session] No current user: kaboom" in capsys.readouterr().out

    def test_probe_absorbs_malformed_account(self, spec_backend):
        spec_backend.get_current_identity.return_value = {"email": "no-id@example.com"}
        manager = SessionManager(spec_backend)

        assert manager.probe() is None
        assert manager.loading is False

    def test_start_runs_probe_in_background(self, mock_backend, alice, session_manager):
        thread = session_manager.start()

        assert session_manager.wait_until_ready(CONFIG["thread_timeout"])
        thread.join(CONFIG["thread_timeout"])
        assert session_manager.current.id == alice["$id"]
        assert session_manager.loading is False

    def test_start_runs_only_once(self, spec_backend):
        spec_backend.get_current_identity.side_effect = AuthFailure("no session", 401)
        manager = SessionManager(spec_backend)

        first = manager.start()
        second = manager.start()
        first.join(CONFIG["thread_timeout"])

        assert first is second
        assert spec_backend.get_current_identity.call_count == 1

    def test_start_does_not_block(self, spec_backend):
        release = threading.Event()

        def slow_identity():
            release.wait(CONFIG["thread_timeout"])
            raise AuthFailure("no session", 401)

        spec_backend.get_current_identity.side_effect = slow_identity
        manager = SessionManager(spec_backend)

        manager.start()
        assert manager.loading is True
        assert manager.wait_until_ready(0.05) is False

        release.set()
        assert manager.wait_until_ready(CONFIG["thread_timeout"])
        assert manager.loading is False

    def test_slow_probe_does_not_override_login(self, mock_backend):
        """A probe that resolves after a login must not clear the new identity."""
        mock_backend.create_account("u1", ALICE["email"], ALICE["password"])
        entered = threading.Event()
        release = threading.Event()
        real_get = mock_backend.get_current_identity
        calls = {"n": 0}

        def get_identity():
            calls["n"] += 1
            if calls["n"] == 1:
                entered.set()
                release.wait(CONFIG["thread_timeout"])
                raise AuthFailure("no session", 401)
            return real_get()

        mock_backend.get_current_identity = get_identity
        manager = SessionManager(mock_backend)

        thread = manager.start()
        assert entered.wait(CONFIG["thread_timeout"])
        manager.login(ALICE["email"], ALICE["password"])
        release.set()
        thread.join(CONFIG["thread_timeout"])

        assert manager.current is not None
        assert manager.current.email == ALICE["email"]
        assert manager.loading is False


class TestLogin:
    """Tests for login."""

    def test_login_sets_current_and_navigates(self, mock_backend, session_manager, navigate):
        mock_backend.create_account("u1", ALICE["email"], ALICE["password"])

        user = session_manager.login(ALICE["email"], ALICE["password"])

        assert isinstance(user, UserIdentity)
        assert user.email == ALICE["email"]
        assert session_manager.current == user
        navigate.assert_called_once_with(ROOT_PATH)

    def test_bad_credentials(self, session_manager, navigate):
        """
        GIVEN: No account for bad@x.com
        WHEN: login("bad@x.com", "wrong") is called
        THEN: AuthFailure propagates, current stays None, no navigation
        """
        with pytest.raises(AuthFailure):
            session_manager.login(BAD["email"], BAD["password"])

        assert session_manager.current is None
        navigate.assert_not_called()

    def test_failed_login_keeps_previous_user(self, mock_backend, session_manager, navigate):
        mock_backend.create_account("u1", ALICE["email"], ALICE["password"])
        previous = session_manager.login(ALICE["email"], ALICE["password"])
        navigate.reset_mock()

        with pytest.raises(AuthFailure):
            session_manager.login(ALICE["email"], "not-the-password")

        assert session_manager.current == previous
        navigate.assert_not_called()

    def test_identity_fetch_failure_propagates(self, spec_backend, navigate):
        spec_backend.create_email_password_session.return_value = {"$id": "s1"}
        spec_backend.get_current_identity.side_effect = TransportFailure("offline")
        manager = SessionManager(spec_backend, navigate=navigate)

        with pytest.raises(TransportFailure):
            manager.login(ALICE["email"], ALICE["password"])

        assert manager.current is None
        navigate.assert_not_called()

    def test_login_notifies_listeners(self, mock_backend, session_manager):
        mock_backend.create_account("u1", ALICE["email"], ALICE["password"])
        listener = Mock()
        session_manager.subscribe(listener)

        session_manager.login(ALICE["email"], ALICE["password"])

        listener.assert_called_with(session_manager)


class TestRegister:
    """Tests for register."""

    def test_register_creates_account_and_logs_in(self, mock_backend, session_manager, navigate):
        user = session_manager.register(ALICE["email"], ALICE["password"])

        assert session_manager.current == user
        assert user.email == ALICE["email"]
        assert mock_backend.get_current_identity()["email"] == ALICE["email"]
        navigate.assert_called_once_with(ROOT_PATH)

    def test_register_uses_fresh_ids(self, spec_backend):
        spec_backend.create_email_password_session.return_value = {}
        spec_backend.get_current_identity.return_value = {"$id": "u1", "email": ALICE["email"]}
        manager = SessionManager(spec_backend)

        manager.register(ALICE["email"], ALICE["password"])
        manager.register("other@example.com", "password-2")

        first_id = spec_backend.create_account.call_args_list[0].args[0]
        second_id = spec_backend.create_account.call_args_list[1].args[0]
        assert first_id and second_id and first_id != second_id

    def test_duplicate_email_propagates(self, mock_backend, session_manager, navigate):
        mock_backend.create_account("u1", ALICE["email"], ALICE["password"])

        with pytest.raises(ValidationFailure):
            session_manager.register(ALICE["email"], ALICE["password"])

        assert session_manager.current is None
        navigate.assert_not_called()

    def test_login_not_attempted_when_account_creation_fails(self, spec_backend):
        spec_backend.create_account.side_effect = ValidationFailure("exists", 409)
        manager = SessionManager(spec_backend)

        with pytest.raises(ValidationFailure):
            manager.register(ALICE["email"], ALICE["password"])

        spec_backend.create_email_password_session.assert_not_called()


class TestLogout:
    """Tests for logout."""

    def test_logout_clears_current_and_navigates(self, mock_backend, session_manager, navigate):
        session_manager.register(ALICE["email"], ALICE["password"])
        navigate.reset_mock()

        session_manager.logout()

        assert session_manager.current is None
        navigate.assert_called_once_with(ROOT_PATH)
        assert SessionManager(mock_backend).probe() is None

    def test_logout_failure_propagates(self, spec_backend, navigate):
        spec_backend.create_email_password_session.return_value = {}
        spec_backend.get_current_identity.return_value = {"$id": "u1", "email": ALICE["email"]}
        spec_backend.delete_session.side_effect = TransportFailure("offline")
        manager = SessionManager(spec_backend, navigate=navigate)
        manager.login(ALICE["email"], ALICE["password"])
        navigate.reset_mock()

        with pytest.raises(TransportFailure):
            manager.logout()

        assert manager.current is not None
        navigate.assert_not_called()

    def test_logout_deletes_current_session(self, spec_backend):
        manager = SessionManager(spec_backend)
        manager.logout()
        spec_backend.delete_session.assert_called_once_with("current")


@pytest.mark.concurrency
class TestLiveness:
    """Tests for disposal while requests are in flight."""

    def test_probe_after_dispose_does_not_touch_state(self, mock_backend, alice):
        manager = SessionManager(mock_backend)
        listener = Mock()
        manager.subscribe(listener)
        manager.dispose()

        manager.probe()

        assert manager.current is None
        assert manager.loading is True
        listener.assert_not_called()
        # Waiters are still released
        assert manager.wait_until_ready(0)

    def test_login_resolving_after_dispose_does_not_navigate(self, mock_backend, navigate):
        mock_backend.create_account("u1", ALICE["email"], ALICE["password"])
        manager = SessionManager(mock_backend, navigate=navigate)
        manager.dispose()

        user = manager.login(ALICE["email"], ALICE["password"])

        assert user.email == ALICE["email"]
        assert manager.current is None
        navigate.assert_not_called()

    def test_unsubscribe(self, mock_backend, alice):
        manager = SessionManager(mock_backend)
        listener = Mock()
        unsubscribe = manager.subscribe(listener)
        unsubscribe()
        unsubscribe()

        manager.probe()

        listener.assert_not_called()

    def test_broken_listener_does_not_break_others(self, mock_backend, alice, capsys):
        manager = SessionManager(mock_backend)
        good = Mock()
        manager.subscribe(Mock(side_effect=RuntimeError("bad listener")))
        manager.subscribe(good)

        manager.probe()

        good.assert_called_once_with(manager)
        assert "Listener error" in capsys.readouterr().out
