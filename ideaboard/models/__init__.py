"""
Data models module.

Defines data structures for ideas and authenticated users.
"""

from ideaboard.models.idea import Idea, IdeaInput, parse_timestamp
from ideaboard.models.user import UserIdentity

__all__ = [
    "Idea",
    "IdeaInput",
    "UserIdentity",
    "parse_timestamp",
]
