"""
Lane Effects - Location modifiers assigned to the lanes at game start.

Each modifier receives one side's slot group and the lane, and returns
the power delta for that side. Modifiers only count once the lane's
effect has been revealed; the lane power calculator enforces that.
"""

from __future__ import annotations
import random

from ...engine_core.state import GameState, Lane, LaneEffect, Slot


def _occupied(slots: list[Slot]) -> int:
    return sum(1 for slot in slots if slot.occupied)


def _sewer_system(slots: list[Slot], lane: Lane) -> int:
    return -_occupied(slots)


def _nidavellir(slots: list[Slot], lane: Lane) -> int:
    return 5 * _occupied(slots)


def _atlantis(slots: list[Slot], lane: Lane) -> int:
    return 5 if _occupied(slots) == 1 else 0


def _no_change(slots: list[Slot], lane: Lane) -> int:
    return 0


def _extend_game(state: GameState) -> None:
    state.max_turn = state.config.extended_max_turn


SEWER_SYSTEM = LaneEffect(
    effect_id="sewer_system",
    name="Sewer System",
    description="Cards here have -1 Power.",
    modifier=_sewer_system,
)

NIDAVELLIR = LaneEffect(
    effect_id="nidavellir",
    name="Nidavellir",
    description="Cards here have +5 Power.",
    modifier=_nidavellir,
)

ATLANTIS = LaneEffect(
    effect_id="atlantis",
    name="Atlantis",
    description="If you only have one card here, it has +5 Power.",
    modifier=_atlantis,
)

LIMBO = LaneEffect(
    effect_id="limbo",
    name="Limbo",
    description="There is a turn 7 this game.",
    modifier=_no_change,
    on_reveal=_extend_game,
)

LANE_EFFECTS: list[LaneEffect] = [SEWER_SYSTEM, NIDAVELLIR, ATLANTIS, LIMBO]


def assign_lane_effects(state: GameState, rng: random.Random,
                        pool: list[LaneEffect] | None = None) -> list[LaneEffect]:
    """Draw one distinct effect per lane, hidden until its reveal turn."""
    pool = list(pool or LANE_EFFECTS)
    chosen = rng.sample(pool, min(len(pool), len(state.lanes)))
    for lane, effect in zip(state.lanes, chosen):
        lane.effect = effect
        lane.is_revealed = False
    return chosen
