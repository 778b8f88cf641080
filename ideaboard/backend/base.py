"""
Base backend abstraction for Idea Board.

Defines the abstract interface of the backend-as-a-service client that
the session manager and the feed store talk to, plus the small helpers
used to build queries, permissions and ids in the service's formats.
"""

import json
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


def unique_id() -> str:
    """Generate a fresh document/account id (32 hex chars, valid for Appwrite)."""
    return uuid.uuid4().hex


class Query:
    """
    Builders for list queries.

    Each method returns the JSON-encoded query string the REST API expects
    in the ``queries[]`` parameter.
    """

    @staticmethod
    def _encode(method: str, attribute: Optional[str] = None, values: Optional[list] = None) -> str:
        query: Dict[str, Any] = {"method": method}
        if attribute is not None:
            query["attribute"] = attribute
        if values is not None:
            query["values"] = values
        return json.dumps(query, separators=(",", ":"))

    @staticmethod
    def order_desc(attribute: str) -> str:
        return Query._encode("orderDesc", attribute)

    @staticmethod
    def order_asc(attribute: str) -> str:
        return Query._encode("orderAsc", attribute)

    @staticmethod
    def limit(n: int) -> str:
        if n < 1:
            raise ValueError(f"limit must be at least 1, got {n}")
        return Query._encode("limit", values=[n])


class Role:
    """Principals a permission can be granted to."""

    @staticmethod
    def any() -> str:
        return "any"

    @staticmethod
    def user(user_id: str) -> str:
        return f"user:{user_id}"


class Permission:
    """Builders for per-document permission strings, e.g. 'read("any")'."""

    @staticmethod
    def read(role: str) -> str:
        return f'read("{role}")'

    @staticmethod
    def update(role: str) -> str:
        return f'update("{role}")'

    @staticmethod
    def delete(role: str) -> str:
        return f'delete("{role}")'


class BackendClient(ABC):
    """
    Abstract base class for backend-as-a-service clients.

    Implementations must provide:
    - Identity operations (accounts and the current session)
    - Document operations (list / create / delete)

    Every method raises a BackendError subclass on failure
    (see ideaboard.backend.errors).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Return the name of this backend.

        Used as the prefix of console diagnostics.
        """
        pass

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_account(self, user_id: str, email: str, password: str) -> Dict[str, Any]:
        """
        Create a new account.

        Raises:
            ValidationFailure: If the email is already registered or invalid.
        """
        pass

    @abstractmethod
    def create_email_password_session(self, email: str, password: str) -> Dict[str, Any]:
        """
        Open a session for the given credentials and keep it on this client.

        Raises:
            AuthFailure: On invalid credentials.
        """
        pass

    @abstractmethod
    def get_current_identity(self) -> Dict[str, Any]:
        """
        Return the account payload of the current session.

        Raises:
            AuthFailure: If there is no active session.
        """
        pass

    @abstractmethod
    def delete_session(self, session_id: str = "current") -> None:
        """Delete a session ("current" for the one held by this client)."""
        pass

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_documents(
        self,
        database_id: str,
        collection_id: str,
        queries: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        List documents of a collection.

        Args:
            database_id: Database id.
            collection_id: Collection id.
            queries: Query strings built with Query.

        Returns:
            Documents in the order the backend returned them.
        """
        pass

    @abstractmethod
    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        data: Dict[str, Any],
        permissions: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a document and return it as stored (with "$id", "$createdAt", ...).
        """
        pass

    @abstractmethod
    def delete_document(self, database_id: str, collection_id: str, document_id: str) -> None:
        """
        Delete a document.

        Raises:
            NotFoundFailure: If no such document exists.
            AuthFailure: If the current principal may not delete it.
        """
        pass

    def __str__(self) -> str:
        return f"BackendClient({self.name})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
