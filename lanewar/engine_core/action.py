"""
Action System - Actions, payloads, and results.

Actions represent the caller-facing entry points:
1. Card placement and retraction during the player turn
2. Moving a card that has a move ability
3. Ending the turn and retreating

Expected rule failures (occupied slot, not enough energy, stale
retraction) come back as failed ActionResults, never as exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Side


class ActionType(Enum):
    """Types of actions in the system."""
    PLACE_CARD = "place_card"
    RETRACT_CARD = "retract_card"
    MOVE_CARD = "move_card"
    END_TURN = "end_turn"
    RETREAT = "retreat"


class ErrorCode(Enum):
    """Machine-readable reasons an action was refused."""
    SLOT_OCCUPIED = "SLOT_OCCUPIED"
    INSUFFICIENT_ENERGY = "INSUFFICIENT_ENERGY"
    NOT_IN_HAND = "NOT_IN_HAND"
    STALE_RETRACTION = "STALE_RETRACTION"
    NOT_ON_BOARD = "NOT_ON_BOARD"
    CANNOT_MOVE = "CANNOT_MOVE"
    INTERACTIONS_DISABLED = "INTERACTIONS_DISABLED"
    GAME_OVER = "GAME_OVER"
    INVALID_LANE = "INVALID_LANE"
    INVALID_SLOT = "INVALID_SLOT"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields; validation happens in
    the reducer.
    """
    side: Side = Side.PLAYER
    hand_index: int | None = None
    card_handle: int | None = None
    lane_index: int | None = None
    slot_index: int | None = None


@dataclass
class Action:
    """A complete action to be applied to the game state."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def place(cls, side: Side, hand_index: int, lane_index: int, slot_index: int) -> Action:
        """Factory for placing the hand card at hand_index on a slot."""
        return cls(
            action_type=ActionType.PLACE_CARD,
            payload=ActionPayload(
                side=side, hand_index=hand_index, lane_index=lane_index, slot_index=slot_index
            ),
        )

    @classmethod
    def retract(cls, card_handle: int, side: Side = Side.PLAYER) -> Action:
        """Factory for returning a just-placed card to hand."""
        return cls(
            action_type=ActionType.RETRACT_CARD,
            payload=ActionPayload(side=side, card_handle=card_handle),
        )

    @classmethod
    def move(cls, card_handle: int, lane_index: int, slot_index: int,
             side: Side = Side.PLAYER) -> Action:
        return cls(
            action_type=ActionType.MOVE_CARD,
            payload=ActionPayload(
                side=side, card_handle=card_handle, lane_index=lane_index, slot_index=slot_index
            ),
        )

    @classmethod
    def end_turn(cls) -> Action:
        return cls(action_type=ActionType.END_TURN)

    @classmethod
    def retreat(cls, side: Side = Side.PLAYER) -> Action:
        return cls(action_type=ActionType.RETREAT, payload=ActionPayload(side=side))


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - The game state (if succeeded)
    - Errors (if failed)
    - Human-readable changes for the caller
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None
    state_changes: list[str] = field(default_factory=list)
    card_handle: int | None = None  # Instance created or touched by the action

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        card_handle: int | None = None,
    ) -> ActionResult:
        """Create a success result with the updated state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            card_handle=card_handle,
        )
