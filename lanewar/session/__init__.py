"""
Session Module - Manages ephemeral match sessions.

A session represents one match:
- Created when a caller starts a game
- Owns the turn engine and its event bus
- Destroyed when the match ends

Sessions are EPHEMERAL: no persistence, nothing shared between them.
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
