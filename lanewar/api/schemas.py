"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has been ended
- INVALID_ACTION: The engine refused the action (occupied slot, energy, ...)
- GAME_OVER: The match has ended; no further actions are accepted
- INVALID_REQUEST: Request parameters are out of range
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    GAME_OVER = "GAME_OVER"
    INVALID_REQUEST = "INVALID_REQUEST"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card template information for display."""
    card_id: int
    name: str
    cost: int
    power: int
    description: str = ""
    image: Optional[str] = None


class SlotInfo(BaseModel):
    """One slot on one side of a lane."""
    slot_index: int
    card_handle: Optional[int] = None
    card: Optional[CardInfo] = None
    power: int = 0
    is_revealed: bool = False


class LaneInfo(BaseModel):
    """A lane with both sides' slots and totals."""
    lane_index: int
    effect_name: Optional[str] = Field(None, description="Hidden until the lane is revealed")
    effect_description: Optional[str] = None
    is_revealed: bool = False
    player_slots: list[SlotInfo] = Field(default_factory=list)
    opponent_slots: list[SlotInfo] = Field(default_factory=list)
    player_power: int = 0
    opponent_power: int = 0
    cards_cannot_be_destroyed: bool = False


class ResultInfo(BaseModel):
    """Final outcome of a match."""
    winner: Optional[str] = Field(None, description="player, opponent, or null for a draw")
    lanes_won: dict[str, int] = Field(default_factory=dict)
    retreated: bool = False


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to start a new match."""
    bot_policy: str = Field("greedy", description="greedy, random or first")
    seed: Optional[int] = Field(None, description="Seed for shuffles, lane effects and ties")
    player_deck: Optional[list[int]] = Field(None, description="Card ids; starter deck if omitted")
    opponent_deck: Optional[list[int]] = Field(None, description="Card ids; starter deck if omitted")


class PlaceCardRequest(BaseModel):
    """Place the card at hand_index on a slot of the player's side."""
    hand_index: int = Field(..., ge=0)
    lane_index: int = Field(..., ge=0)
    slot_index: int = Field(..., ge=0)


class RetractCardRequest(BaseModel):
    """Return a card placed this turn to the hand."""
    card_handle: int


class MoveCardRequest(BaseModel):
    """Move a revealed card with a move ability to another lane."""
    card_handle: int
    lane_index: int = Field(..., ge=0)
    slot_index: int = Field(..., ge=0)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Full view of a match from the player's side."""
    session_id: str
    status: SessionStatus
    turn: int
    max_turn: int
    phase: str
    priority: str
    player_energy: int
    opponent_energy: int
    hand: list[CardInfo] = Field(default_factory=list)
    opponent_hand_size: int = 0
    player_deck_size: int = 0
    opponent_deck_size: int = 0
    lanes: list[LaneInfo] = Field(default_factory=list)
    result: Optional[ResultInfo] = None


class SessionResponse(BaseModel):
    """Response after creating or reading a session."""
    session_id: str
    status: SessionStatus
    bot_policy: str
    created_at: float
    game_state: GameStateResponse


class ActionResponse(BaseModel):
    """Outcome of a player action."""
    success: bool
    changes: list[str] = Field(default_factory=list)
    card_handle: Optional[int] = None
    game_state: GameStateResponse


class LanePowerResponse(BaseModel):
    """Both sides' totals for one lane."""
    lane_index: int
    player_power: int
    opponent_power: int
    leader: Optional[str] = None


class LogResponse(BaseModel):
    """Narration lines for a session, oldest first."""
    session_id: str
    lines: list[str] = Field(default_factory=list)
    count: int = 0


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str = "development"
