"""
Engine Core - Board state, effect dispatch and turn resolution.

The engine is the runtime that:
1. Holds the GameState (lanes, slots, card arena)
2. Applies placements and retractions via the reducer
3. Dispatches card abilities to their handlers
4. Resolves the reveal queue in priority order
5. Computes lane power and drives the turn state machine
"""

from .state import (
    CardInstance,
    CardTemplate,
    GameConfig,
    GameResult,
    GameState,
    InvariantViolation,
    Lane,
    LaneEffect,
    LanePower,
    RevealQueueItem,
    Side,
    Slot,
    TurnPhase,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .events import EventBus, EventType
from .reducer import Reducer
from .action_generator import legal_actions, legal_placements
from .effect_resolver import EffectContext, EffectDispatcher, EffectHandler
from .lane_power import compute_lane_power
from .reveal import RevealResolver, order_reveal_queue
from .turn import DeferredScheduler, ImmediateScheduler, TurnEngine

__all__ = [
    "CardInstance",
    "CardTemplate",
    "GameConfig",
    "GameResult",
    "GameState",
    "InvariantViolation",
    "Lane",
    "LaneEffect",
    "LanePower",
    "RevealQueueItem",
    "Side",
    "Slot",
    "TurnPhase",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "EventBus",
    "EventType",
    "Reducer",
    "legal_actions",
    "legal_placements",
    "EffectContext",
    "EffectDispatcher",
    "EffectHandler",
    "compute_lane_power",
    "RevealResolver",
    "order_reveal_queue",
    "DeferredScheduler",
    "ImmediateScheduler",
    "TurnEngine",
]
