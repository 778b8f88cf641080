"""
Idea data models.

Defines the Idea record as returned by the backend and the IdeaInput
payload the feed store sends when creating one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a backend timestamp (ISO 8601, e.g. "2025-01-05T10:00:00.000+00:00").

    Returns None for empty or unparseable values.
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class IdeaInput:
    """
    Fields supplied by the user when posting a new idea.

    Attributes:
        title: Short headline of the idea.
        description: Free-form body text.
        user_id: Id of the account that owns the idea.
    """

    title: str
    description: str
    user_id: str

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Validate that required fields are present.

        Raises:
            ValueError: If validation fails.
        """
        errors = []

        if not self.title or not self.title.strip():
            errors.append("title is required and cannot be empty")

        if not self.user_id or not self.user_id.strip():
            errors.append("user_id is required and cannot be empty")

        if self.description is None:
            errors.append("description cannot be None")

        if errors:
            raise ValueError(f"IdeaInput validation failed: {'; '.join(errors)}")

    def to_fields(self) -> Dict[str, str]:
        """Document payload in the collection's attribute names."""
        return {
            "title": self.title,
            "description": self.description,
            "userId": self.user_id,
        }


@dataclass(frozen=True)
class Idea:
    """
    An idea document stored in the backend.

    Only existence is ever mutated by this client: once created, title,
    description and user_id are read-only.

    Attributes:
        id: Document id assigned at creation.
        title: Short headline.
        description: Free-form body text.
        user_id: Id of the owning account (not enforced client-side).
        created_at: Creation time assigned by the backend.
        updated_at: Last update time assigned by the backend.
        permissions: Permission strings attached to the document.
    """

    id: str
    title: str
    description: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    permissions: tuple = field(default_factory=tuple)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Idea":
        """
        Build an Idea from a backend document.

        Args:
            document: Document dict with "$id", "$createdAt" and the idea fields.

        Returns:
            New Idea instance.

        Raises:
            ValueError: If the document has no id.
        """
        doc_id = document.get("$id")
        if not doc_id:
            raise ValueError("document has no $id")

        return cls(
            id=doc_id,
            title=document.get("title", ""),
            description=document.get("description", ""),
            user_id=document.get("userId", ""),
            created_at=parse_timestamp(document.get("$createdAt")),
            updated_at=parse_timestamp(document.get("$updatedAt")),
            permissions=tuple(document.get("$permissions", ())),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-friendly dictionary.

        Datetime fields are converted to ISO format strings.
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "userId": self.user_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __str__(self) -> str:
        return f"{self.title} ({self.id})"
