"""
Idea Board - Web Dashboard

A small Flask JSON application embedding the session manager and the
idea feed store. It is a single-user local dashboard: one backend client
(and therefore one Appwrite session) serves every request.

Run with: python main.py
Or: python -m web.app
"""

from dataclasses import dataclass
from typing import Optional

from flask import Blueprint, Flask, current_app, g, jsonify, request

from ideaboard.backend import AppwriteClient, BackendClient
from ideaboard.backend.errors import AuthFailure, BackendError, NotFoundFailure, ValidationFailure
from ideaboard.config import WEB_HOST, WEB_PORT, require_config
from ideaboard.feed import FeedBinding, FeedResult, RemoveStrategy, create_binding, store_factory
from ideaboard.session import SessionManager

EXTENSION_KEY = "ideaboard"

bp = Blueprint("ideaboard", __name__)


# =============================================================================
# Application State
# =============================================================================

@dataclass
class BoardState:
    """Everything the routes need, owned by one Flask app."""
    backend: BackendClient
    session: SessionManager
    feed: FeedBinding


def _state() -> BoardState:
    return current_app.extensions[EXTENSION_KEY]


def _navigate(path: str) -> None:
    """Navigation side effect: remember where the client should go next."""
    g.redirect_to = path


# Status codes for failed feed operations, by FeedResult.error_type
_FEED_ERROR_STATUS = {
    "AuthFailure": 401,
    "ValidationFailure": 400,
    "ValueError": 400,
    "NotFoundFailure": 404,
    "StoreDisposed": 503,
}


def _backend_error_response(error: BackendError):
    if isinstance(error, AuthFailure):
        status = 401
    elif isinstance(error, NotFoundFailure):
        status = 404
    elif isinstance(error, ValidationFailure):
        status = 400
    else:
        status = 502
    return jsonify({
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
    }), status


def _feed_response(result: FeedResult, success_status: int = 200):
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), _FEED_ERROR_STATUS.get(result.error_type, 502)


def _credentials():
    """Read email/password from the JSON body, or None if incomplete."""
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""
    if not email or not password:
        return None
    return email, password


# =============================================================================
# Session Routes
# =============================================================================

@bp.route("/")
def index():
    """Dashboard summary."""
    state = _state()
    user = state.session.current
    store = state.feed.get_store()
    try:
        feed = store.snapshot()
    finally:
        state.feed.release(store)

    return jsonify({
        "backend": state.backend.name,
        "feed_binding": state.feed.name,
        "session": {
            "loading": state.session.loading,
            "user": user.to_dict() if user else None,
        },
        "feed": feed,
    })


@bp.route("/api/session")
def api_session():
    """Current user (null when logged out) and whether the probe has finished."""
    session = _state().session
    user = session.current
    return jsonify({
        "loading": session.loading,
        "user": user.to_dict() if user else None,
    })


@bp.route("/api/register", methods=["POST"])
def api_register():
    """Create an account and log into it."""
    credentials = _credentials()
    if credentials is None:
        return jsonify({"success": False, "error": "Email and password are required"}), 400

    try:
        user = _state().session.register(*credentials)
    except BackendError as e:
        return _backend_error_response(e)

    return jsonify({
        "success": True,
        "user": user.to_dict(),
        "redirect": g.get("redirect_to"),
    }), 201


@bp.route("/api/login", methods=["POST"])
def api_login():
    """Log in with email and password."""
    credentials = _credentials()
    if credentials is None:
        return jsonify({"success": False, "error": "Email and password are required"}), 400

    try:
        user = _state().session.login(*credentials)
    except BackendError as e:
        return _backend_error_response(e)

    return jsonify({
        "success": True,
        "user": user.to_dict(),
        "redirect": g.get("redirect_to"),
    })


@bp.route("/api/logout", methods=["POST"])
def api_logout():
    """End the current session."""
    try:
        _state().session.logout()
    except BackendError as e:
        return _backend_error_response(e)

    return jsonify({"success": True, "redirect": g.get("redirect_to")})


# =============================================================================
# Idea Routes
# =============================================================================

@bp.route("/api/ideas")
def api_ideas():
    """Current feed window."""
    binding = _state().feed
    store = binding.get_store()
    try:
        return jsonify(store.snapshot())
    finally:
        binding.release(store)


@bp.route("/api/ideas/refresh", methods=["POST"])
def api_ideas_refresh():
    """Reload the feed window from the backend."""
    binding = _state().feed
    store = binding.get_store()
    try:
        return _feed_response(store.fetch())
    finally:
        binding.release(store)


@bp.route("/api/ideas", methods=["POST"])
def api_ideas_add():
    """Post a new idea owned by the current user."""
    state = _state()
    user = state.session.current
    if user is None:
        return jsonify({"success": False, "error": "Login required"}), 401

    data = request.get_json(silent=True) or {}
    idea = {
        "title": (data.get("title") or "").strip(),
        "description": (data.get("description") or "").strip(),
        "userId": user.id,
    }

    store = state.feed.get_store()
    try:
        return _feed_response(store.add(idea), success_status=201)
    finally:
        state.feed.release(store)


@bp.route("/api/ideas/<idea_id>", methods=["DELETE"])
def api_ideas_remove(idea_id):
    """Delete an idea; only its owner is allowed to."""
    state = _state()
    strategy: Optional[str] = request.args.get("strategy")
    try:
        strategy = RemoveStrategy(strategy) if strategy else None
    except ValueError:
        return jsonify({"success": False, "error": f"Unknown strategy: {strategy}"}), 400

    store = state.feed.get_store()
    try:
        return _feed_response(store.remove(idea_id, strategy=strategy))
    finally:
        state.feed.release(store)


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    backend: BackendClient = None,
    feed_binding: str = "shared",
    remove_strategy: RemoveStrategy = RemoveStrategy.REFETCH,
    database_id: str = None,
    collection_id: str = None,
) -> Flask:
    """
    Build the dashboard application.

    Args:
        backend: Backend client. If None, configuration is validated (fail
            fast) and an AppwriteClient is created from it.
        feed_binding: "shared" or "per_request".
        remove_strategy: Default reconciliation after deleting an idea.
        database_id: Overrides config.APPWRITE_DATABASE_ID.
        collection_id: Overrides config.APPWRITE_COLLECTION_ID.

    Raises:
        ConfigurationError: If no backend is given and config is incomplete.
    """
    if backend is None:
        require_config()
        backend = AppwriteClient()

    app = Flask(__name__)

    session = SessionManager(backend, navigate=_navigate)
    binding = create_binding(
        feed_binding,
        store_factory(
            backend,
            database_id=database_id,
            collection_id=collection_id,
            remove_strategy=remove_strategy,
        ),
    )
    app.extensions[EXTENSION_KEY] = BoardState(backend=backend, session=session, feed=binding)
    app.register_blueprint(bp)

    session.start()
    return app


if __name__ == "__main__":
    print("=" * 50)
    print("Idea Board Dashboard")
    print("=" * 50)
    print(f"Open http://{WEB_HOST}:{WEB_PORT} in your browser")
    print("Press Ctrl+C to stop")
    print("=" * 50)
    create_app().run(host=WEB_HOST, port=WEB_PORT, debug=True)
