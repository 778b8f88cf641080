"""
Session module.

Tracks the authenticated user and handles register / login / logout.
"""

from ideaboard.session.manager import ROOT_PATH, SessionManager

__all__ = [
    "ROOT_PATH",
    "SessionManager",
]
