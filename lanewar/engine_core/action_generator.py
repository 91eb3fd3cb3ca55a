"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible placements
2. The CLI to show available plays

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified.
"""

from __future__ import annotations

from ..spec_schema.effect_dsl import EffectCategory
from .action import Action
from .state import GameState, Side, TurnPhase


def legal_placements(state: GameState, side: Side) -> list[Action]:
    """Every affordable (hand card, empty slot) placement for a side."""
    if state.phase == TurnPhase.GAME_OVER or state.game_ended:
        return []
    side_state = state.side(side)
    actions = []
    for hand_index, card in enumerate(side_state.hand):
        if card.cost > side_state.energy:
            continue
        for lane in state.lanes:
            for slot in lane.slots_for(side):
                if slot.occupied:
                    continue
                actions.append(Action.place(side, hand_index, lane.index, slot.slot_index))
    return actions


def legal_moves(state: GameState, side: Side) -> list[Action]:
    """Lane changes available to revealed cards with an unspent move ability."""
    if state.phase != TurnPhase.PLAYER_TURN:
        return []
    actions = []
    for slot in list(state.board_slots(side)):
        card = state.card_in(slot)
        if (
            not card.template.effects_in(EffectCategory.MOVE)
            or not card.is_revealed
            or card.has_moved
            or card.immunities.cannot_be_moved
        ):
            continue
        for lane in state.lanes:
            if lane.index == slot.lane_index:
                continue
            target = lane.free_slot(side)
            if target is not None:
                actions.append(Action.move(card.handle, lane.index, target.slot_index, side))
    return actions


def legal_actions(state: GameState, side: Side = Side.PLAYER) -> list[Action]:
    """Placements, moves and end turn for the side to act."""
    if state.phase == TurnPhase.GAME_OVER or state.game_ended:
        return []
    actions = legal_placements(state, side) + legal_moves(state, side)
    actions.append(Action.end_turn())
    return actions
