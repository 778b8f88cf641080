"""
Backend module.

Client for the backend-as-a-service (Appwrite) holding accounts,
sessions and idea documents, plus an in-memory stand-in.
"""

from ideaboard.backend.base import BackendClient, Permission, Query, Role, unique_id
from ideaboard.backend.errors import (
    AuthFailure,
    BackendError,
    NotFoundFailure,
    TransportFailure,
    ValidationFailure,
)
from ideaboard.backend.appwrite import AppwriteClient, MockBackendClient

__all__ = [
    "BackendClient",
    "Permission",
    "Query",
    "Role",
    "unique_id",
    "BackendError",
    "AuthFailure",
    "NotFoundFailure",
    "TransportFailure",
    "ValidationFailure",
    "AppwriteClient",
    "MockBackendClient",
]
