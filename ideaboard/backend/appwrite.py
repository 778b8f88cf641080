"""
Appwrite backend for Idea Board.

Implements the BackendClient interface against the Appwrite REST API (v1).
Uses a requests.Session so the session cookie issued on login is kept in
the cookie jar and sent on every following request.

Appwrite API Documentation: https://appwrite.io/docs/references

=============================================================================
COLLECTION SCHEMA
=============================================================================

Required attributes on the ideas collection:

| Attribute    | Type    | Description                          |
|--------------|---------|--------------------------------------|
| title        | string  | Idea headline                        |
| description  | string  | Idea body text                       |
| userId       | string  | Id of the owning account             |

Document-level security must be enabled on the collection, and the
"users" role needs the create permission. Read/update/delete are set per
document by the feed store.

=============================================================================
"""

import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests

from ideaboard.config import (
    APPWRITE_ENDPOINT,
    APPWRITE_PROJECT_ID,
    REQUEST_TIMEOUT,
    ConfigurationError,
)
from ideaboard.backend.base import BackendClient, Permission, Role
from ideaboard.backend.errors import (
    AuthFailure,
    NotFoundFailure,
    TransportFailure,
    ValidationFailure,
    error_for_status,
)


class AppwriteClient(BackendClient):
    """
    Appwrite-backed client implementation.

    Configuration is pulled from environment variables via ideaboard.config:
    - APPWRITE_ENDPOINT: API endpoint (e.g. "https://cloud.appwrite.io/v1")
    - APPWRITE_PROJECT_ID: Project id
    """

    # Header Appwrite uses to hand session cookies to non-browser clients
    FALLBACK_COOKIES_HEADER = "X-Fallback-Cookies"

    def __init__(
        self,
        endpoint: str = None,
        project_id: str = None,
        timeout: int = None,
        session: requests.Session = None,
    ):
        """
        Initialize AppwriteClient.

        Args:
            endpoint: API endpoint. Defaults to config.APPWRITE_ENDPOINT.
            project_id: Project id. Defaults to config.APPWRITE_PROJECT_ID.
            timeout: Per-request timeout in seconds. Defaults to config.REQUEST_TIMEOUT.
            session: requests.Session to use (a new one by default).

        Raises:
            ConfigurationError: If endpoint or project id is missing.
        """
        # Use provided values, or fall back to config if None (not empty string)
        self.endpoint = (endpoint if endpoint is not None else APPWRITE_ENDPOINT).rstrip("/")
        self.project_id = project_id if project_id is not None else APPWRITE_PROJECT_ID
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT

        self._validate_config()

        self._session = session or requests.Session()
        self._fallback_cookies: Optional[str] = None
        self._cookie_lock = threading.Lock()

    @property
    def name(self) -> str:
        return "appwrite"

    @property
    def _headers(self) -> Dict[str, str]:
        """Construct headers for API requests."""
        headers = {
            "X-Appwrite-Project": self.project_id,
            "Content-Type": "application/json",
        }
        with self._cookie_lock:
            if self._fallback_cookies:
                headers[self.FALLBACK_COOKIES_HEADER] = self._fallback_cookies
        return headers

    def _validate_config(self) -> None:
        """Validate that required configuration is present."""
        errors = []
        if not self.endpoint:
            errors.append("APPWRITE_ENDPOINT is not configured")
        if not self.project_id:
            errors.append("APPWRITE_PROJECT_ID is not configured")
        if errors:
            raise ConfigurationError(errors)

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    @staticmethod
    def _parse_error(response: requests.Response) -> Tuple[str, Optional[str]]:
        """Extract (message, type) from an Appwrite error body."""
        try:
            body = response.json()
        except ValueError:
            return (response.text or f"HTTP {response.status_code}", None)
        if not isinstance(body, dict):
            return (f"HTTP {response.status_code}", None)
        return (body.get("message") or f"HTTP {response.status_code}", body.get("type"))

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] = None,
        payload: Dict[str, Any] = None,
    ) -> Dict[str, Any]:
        """
        Perform one API call and translate failures into BackendError.

        Args:
            method: HTTP method.
            path: Path below the endpoint, starting with "/".
            params: Query string parameters.
            payload: JSON body.

        Returns:
            Decoded JSON body, or an empty dict for empty replies.
        """
        url = f"{self.endpoint}{path}"

        try:
            response = self._session.request(
                method,
                url,
                headers=self._headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportFailure(f"{method} {path} timed out: {e}") from e
        except requests.RequestException as e:
            raise TransportFailure(f"{method} {path} failed: {e}") from e

        fallback = response.headers.get(self.FALLBACK_COOKIES_HEADER)
        if fallback:
            with self._cookie_lock:
                self._fallback_cookies = fallback

        if response.status_code >= 400:
            message, error_type = self._parse_error(response)
            raise error_for_status(response.status_code, message, error_type)

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(
                f"{method} {path} returned invalid JSON", response.status_code
            ) from e

    @staticmethod
    def _documents_path(database_id: str, collection_id: str) -> str:
        return f"/databases/{database_id}/collections/{collection_id}/documents"

    # =========================================================================
    # Identity
    # =========================================================================

    def create_account(self, user_id: str, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/account",
            payload={"userId": user_id, "email": email, "password": password},
        )

    def create_email_password_session(self, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/account/sessions/email",
            payload={"email": email, "password": password},
        )

    def get_current_identity(self) -> Dict[str, Any]:
        return self._request("GET", "/account")

    def delete_session(self, session_id: str = "current") -> None:
        self._request("DELETE", f"/account/sessions/{session_id}")
        if session_id == "current":
            with self._cookie_lock:
                self._fallback_cookies = None
            self._session.cookies.clear()

    # =========================================================================
    # Documents
    # =========================================================================

    def list_documents(
        self,
        database_id: str,
        collection_id: str,
        queries: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        params = {"queries[]": list(queries)} if queries else None
        data = self._request("GET", self._documents_path(database_id, collection_id), params=params)
        documents = data.get("documents")
        if not isinstance(documents, list):
            raise TransportFailure("list response has no documents array")
        return documents

    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        data: Dict[str, Any],
        permissions: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        payload = {"documentId": document_id, "data": data}
        if permissions is not None:
            payload["permissions"] = list(permissions)
        return self._request("POST", self._documents_path(database_id, collection_id), payload=payload)

    def delete_document(self, database_id: str, collection_id: str, document_id: str) -> None:
        self._request("DELETE", f"{self._documents_path(database_id, collection_id)}/{document_id}")


class MockBackendClient(BackendClient):
    """
    In-memory mock backend for testing and development.

    Use this when Appwrite is not configured or for testing.
    Accounts, the current session and documents live in memory and are
    lost when the process ends. Duplicate emails and per-document delete
    permissions are enforced the way the real service enforces them.
    """

    DEFAULT_LIST_LIMIT = 25

    def __init__(self):
        self._accounts: Dict[str, Dict[str, Any]] = {}  # email -> {"account", "password"}
        self._current_email: Optional[str] = None
        self._collections: Dict[Tuple[str, str], Dict[str, Dict[str, Any]]] = {}
        self._last_timestamp: Optional[datetime] = None
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return "mock"

    def _now(self) -> str:
        """Strictly increasing creation timestamps, formatted like the service's."""
        now = datetime.now(timezone.utc)
        # Compare at the precision that is formatted
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if self._last_timestamp and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(milliseconds=1)
        self._last_timestamp = now
        return now.isoformat(timespec="milliseconds")

    def _current_account(self) -> Optional[Dict[str, Any]]:
        if self._current_email is None:
            return None
        return self._accounts[self._current_email]["account"]

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    def create_account(self, user_id: str, email: str, password: str) -> Dict[str, Any]:
        with self._lock:
            if not email or "@" not in email:
                raise ValidationFailure("Invalid email param", 400, "general_argument_invalid")
            if not password or len(password) < 8:
                raise ValidationFailure("Password must be at least 8 characters", 400, "general_argument_invalid")
            if email in self._accounts:
                raise ValidationFailure(
                    "A user with the same id, email, or phone already exists",
                    409,
                    "user_already_exists",
                )
            stamp = self._now()
            account = {
                "$id": user_id,
                "$createdAt": stamp,
                "$updatedAt": stamp,
                "email": email,
                "name": "",
            }
            self._accounts[email] = {"account": account, "password": password}
            return dict(account)

    def create_email_password_session(self, email: str, password: str) -> Dict[str, Any]:
        with self._lock:
            entry = self._accounts.get(email)
            if entry is None or entry["password"] != password:
                raise AuthFailure(
                    "Invalid credentials. Please check the email and password.",
                    401,
                    "user_invalid_credentials",
                )
            self._current_email = email
            return {"$id": "current", "userId": entry["account"]["$id"], "provider": "email"}

    def get_current_identity(self) -> Dict[str, Any]:
        with self._lock:
            account = self._current_account()
            if account is None:
                raise AuthFailure(
                    "User (role: guests) missing scope (account)",
                    401,
                    "general_unauthorized_scope",
                )
            return dict(account)

    def delete_session(self, session_id: str = "current") -> None:
        with self._lock:
            if self._current_email is None:
                raise AuthFailure("User (role: guests) missing scope (account)", 401, "general_unauthorized_scope")
            self._current_email = None

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def _collection(self, database_id: str, collection_id: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault((database_id, collection_id), {})

    def list_documents(
        self,
        database_id: str,
        collection_id: str,
        queries: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            documents = list(self._collection(database_id, collection_id).values())

        limit = self.DEFAULT_LIST_LIMIT
        for raw in queries or []:
            query = json.loads(raw)
            method = query.get("method")
            if method in ("orderDesc", "orderAsc"):
                attribute = query["attribute"]
                documents.sort(
                    key=lambda d: d.get(attribute) or "",
                    reverse=(method == "orderDesc"),
                )
            elif method == "limit":
                limit = query["values"][0]
            else:
                raise ValidationFailure(f"Unsupported query method: {method}", 400, "general_query_invalid")

        return [dict(d) for d in documents[:limit]]

    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        data: Dict[str, Any],
        permissions: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        with self._lock:
            if self._current_account() is None:
                raise AuthFailure(
                    "The current user is not authorized to perform the requested action.",
                    401,
                    "user_unauthorized",
                )
            collection = self._collection(database_id, collection_id)
            if document_id in collection:
                raise ValidationFailure(
                    "Document with the requested ID already exists.",
                    409,
                    "document_already_exists",
                )
            stamp = self._now()
            document = dict(data)
            document.update({
                "$id": document_id,
                "$createdAt": stamp,
                "$updatedAt": stamp,
                "$permissions": list(permissions or []),
                "$databaseId": database_id,
                "$collectionId": collection_id,
            })
            collection[document_id] = document
            return dict(document)

    def delete_document(self, database_id: str, collection_id: str, document_id: str) -> None:
        with self._lock:
            collection = self._collection(database_id, collection_id)
            document = collection.get(document_id)
            if document is None:
                raise NotFoundFailure(
                    "Document with the requested ID could not be found.",
                    404,
                    "document_not_found",
                )
            account = self._current_account()
            allowed = account is not None and (
                Permission.delete(Role.user(account["$id"])) in document["$permissions"]
            )
            if not allowed:
                raise AuthFailure(
                    "The current user is not authorized to perform the requested action.",
                    401,
                    "user_unauthorized",
                )
            del collection[document_id]

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Drop all accounts, sessions and documents (for testing)."""
        with self._lock:
            self._accounts.clear()
            self._collections.clear()
            self._current_email = None

    def count(self, database_id: str, collection_id: str) -> int:
        """Return number of stored documents in a collection (for testing)."""
        with self._lock:
            return len(self._collection(database_id, collection_id))
