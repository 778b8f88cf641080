"""
Authenticated user model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class UserIdentity:
    """
    The account behind the current session.

    Attributes:
        id: Unique account id.
        email: Login email.
        name: Display name (may be empty).
        raw: The full account payload as returned by the backend.
    """

    id: str
    email: str
    name: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_account(cls, account: Dict[str, Any]) -> "UserIdentity":
        """Build a UserIdentity from an account payload ("$id", "email", "name")."""
        if not account.get("$id"):
            raise ValueError("account payload has no $id")
        return cls(
            id=account["$id"],
            email=account.get("email", ""),
            name=account.get("name", ""),
            raw=dict(account),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "email": self.email, "name": self.name}
