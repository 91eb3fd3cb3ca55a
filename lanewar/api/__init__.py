"""
API Module - HTTP interface to the engine.

Exposes matches via a REST API. A client:
1. Creates a session (one match against a bot)
2. Places, retracts and moves cards during its turn
3. Ends the turn and reads the new board and the narration log

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    PlaceCardRequest,
    RetractCardRequest,
    MoveCardRequest,
    # Responses
    ActionResponse,
    SessionResponse,
    GameStateResponse,
    LanePowerResponse,
    LogResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    LaneInfo,
    SlotInfo,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "PlaceCardRequest",
    "RetractCardRequest",
    "MoveCardRequest",
    # Responses
    "ActionResponse",
    "SessionResponse",
    "GameStateResponse",
    "LanePowerResponse",
    "LogResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "LaneInfo",
    "SlotInfo",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
