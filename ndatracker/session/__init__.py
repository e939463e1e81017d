"""
Edit session coordinating drafts, extraction and commits.
"""

from .edit_session import EditSession, SessionState

__all__ = ["EditSession", "SessionState"]
