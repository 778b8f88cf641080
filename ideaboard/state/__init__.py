"""
State holder plumbing shared by the session manager and the feed store.
"""

from ideaboard.state.base import Listener, StateHolder

__all__ = [
    "Listener",
    "StateHolder",
]
