"""
Idea Board.

Session and idea-feed state holders backed by an Appwrite project.
"""

__version__ = "1.0.0"
