"""
Reducer - Applies caller actions to the game state.

The reducer is the single point of mutation for placement, retraction,
moves and retreat. Turn resolution lives in the turn engine.

Design principles:
- Validates before applying; a refused action leaves the state untouched
- Returns ActionResult with success/failure
- Publishes energy changes on the session's event bus
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..spec_schema.effect_dsl import EffectCategory
from .action import Action, ActionResult, ActionType, ErrorCode
from .events import EnergyChangedEvent, EventBus, GameEndedEvent
from .hand import HandManager
from .lane_power import compute_result
from .state import GameState, LanePower, RevealQueueItem, Side, TurnPhase

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Applies actions to one session's game state.

    Holds no game data of its own; everything lives in GameState.
    """
    state: GameState
    bus: EventBus
    hands: HandManager

    def apply(self, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the state or an error.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.UNKNOWN_ACTION,
            )

        failure = self._validate_action(action)
        if failure is not None:
            return failure
        return handler(action)

    def _validate_action(self, action: Action) -> ActionResult | None:
        """Checks shared by every action. Returns a failure, or None if valid."""
        if self.state.phase == TurnPhase.GAME_OVER or self.state.game_ended:
            return ActionResult.failure("Game is over - no actions allowed", ErrorCode.GAME_OVER)

        # The opponent plays while the turn resolves; the player only during their turn
        if action.payload.side is Side.PLAYER and not self.state.interactions_enabled:
            return ActionResult.failure(
                "Interactions are disabled while the turn resolves",
                ErrorCode.INTERACTIONS_DISABLED,
            )
        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLACE_CARD: self._handle_place,
            ActionType.RETRACT_CARD: self._handle_retract,
            ActionType.MOVE_CARD: self._handle_move,
            ActionType.RETREAT: self._handle_retreat,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Placement
    # =========================================================================

    def can_place(self, side: Side, hand_index: int, lane_index: int,
                  slot_index: int) -> ActionResult | None:
        """Returns a failure if the placement is illegal, None otherwise."""
        state = self.state
        if not 0 <= lane_index < len(state.lanes):
            return ActionResult.failure(f"No lane {lane_index}", ErrorCode.INVALID_LANE)
        slots = state.lanes[lane_index].slots_for(side)
        if not 0 <= slot_index < len(slots):
            return ActionResult.failure(f"No slot {slot_index}", ErrorCode.INVALID_SLOT)
        if slots[slot_index].occupied:
            return ActionResult.failure("Slot is already occupied", ErrorCode.SLOT_OCCUPIED)

        side_state = state.side(side)
        if not 0 <= hand_index < len(side_state.hand):
            return ActionResult.failure(f"No card at hand index {hand_index}", ErrorCode.NOT_IN_HAND)
        card = side_state.hand[hand_index]
        if card.cost > side_state.energy:
            return ActionResult.failure(
                f"{card.name} costs {card.cost}, only {side_state.energy} energy left",
                ErrorCode.INSUFFICIENT_ENERGY,
            )
        return None

    def _handle_place(self, action: Action) -> ActionResult:
        payload = action.payload
        if payload.hand_index is None or payload.lane_index is None or payload.slot_index is None:
            return ActionResult.failure("Placement needs hand, lane and slot", ErrorCode.INVALID_SLOT)
        failure = self.can_place(payload.side, payload.hand_index,
                                 payload.lane_index, payload.slot_index)
        if failure is not None:
            return failure

        state = self.state
        side_state = state.side(payload.side)
        template = side_state.hand.pop(payload.hand_index)
        slot = state.slot(payload.lane_index, payload.side, payload.slot_index)

        instance = state.new_instance(template, payload.side, hand_index=payload.hand_index)
        state.place_instance(instance, slot)
        self.set_energy(payload.side, side_state.energy - template.cost)
        state.reveal_queue.append(RevealQueueItem(
            card_handle=instance.handle,
            lane_index=slot.lane_index,
            slot_index=slot.slot_index,
            side=payload.side,
            turn_played=state.current_turn,
        ))

        return ActionResult.success_with_state(
            state,
            changes=[f"{template.name} placed in lane {slot.lane_index + 1}"],
            card_handle=instance.handle,
        )

    # =========================================================================
    # Retraction
    # =========================================================================

    def _handle_retract(self, action: Action) -> ActionResult:
        state = self.state
        handle = action.payload.card_handle
        card = state.cards.get(handle) if handle is not None else None
        slot = state.find_slot(handle) if card is not None else None
        if card is None or slot is None or card.side is not action.payload.side:
            return ActionResult.failure(f"Card {handle} is not on the board", ErrorCode.NOT_ON_BOARD)

        if card.turn_played != state.current_turn or card.is_revealed:
            logger.warning("%s was played in turn %d, can't return", card.name, card.turn_played)
            self.bus.log(f"{card.name} was played in a previous turn, can't return")
            return ActionResult.failure(
                "Card played in a previous turn can't be returned",
                ErrorCode.STALE_RETRACTION,
            )

        self.remove_from_reveal_queue(handle, slot.lane_index, slot.slot_index)
        state.remove_instance(slot)
        self.set_energy(card.side, state.side(card.side).energy + card.cost)
        self.hands.return_to_hand(card.side, card.template, card.hand_index)

        return ActionResult.success_with_state(
            state,
            changes=[f"{card.name} returned to hand"],
            card_handle=handle,
        )

    def remove_from_reveal_queue(self, handle: int, lane_index: int, slot_index: int) -> bool:
        """Drop the entry for (card, slot); a missing entry is a no-op."""
        for i, item in enumerate(self.state.reveal_queue):
            if (item.card_handle == handle and item.lane_index == lane_index
                    and item.slot_index == slot_index):
                del self.state.reveal_queue[i]
                return True
        logger.debug("No reveal queue entry for card %d in lane %d", handle, lane_index)
        return False

    # =========================================================================
    # Moves
    # =========================================================================

    def _handle_move(self, action: Action) -> ActionResult:
        state = self.state
        payload = action.payload
        handle = payload.card_handle
        card = state.cards.get(handle) if handle is not None else None
        source = state.find_slot(handle) if card is not None else None
        if card is None or source is None or card.side is not payload.side:
            return ActionResult.failure(f"Card {handle} is not on the board", ErrorCode.NOT_ON_BOARD)

        if not card.template.effects_in(EffectCategory.MOVE):
            return ActionResult.failure(f"{card.name} cannot move", ErrorCode.CANNOT_MOVE)
        if not card.is_revealed or card.has_moved or card.immunities.cannot_be_moved:
            return ActionResult.failure(f"{card.name} cannot move now", ErrorCode.CANNOT_MOVE)

        lane_index, slot_index = payload.lane_index, payload.slot_index
        if lane_index is None or not 0 <= lane_index < len(state.lanes):
            return ActionResult.failure(f"No lane {lane_index}", ErrorCode.INVALID_LANE)
        if lane_index == source.lane_index:
            return ActionResult.failure(f"{card.name} is already in that lane", ErrorCode.CANNOT_MOVE)
        slots = state.lanes[lane_index].slots_for(card.side)
        if slot_index is None or not 0 <= slot_index < len(slots):
            return ActionResult.failure(f"No slot {slot_index}", ErrorCode.INVALID_SLOT)
        if slots[slot_index].occupied:
            return ActionResult.failure("Slot is already occupied", ErrorCode.SLOT_OCCUPIED)

        state.move_card(handle, slots[slot_index])
        return ActionResult.success_with_state(
            state,
            changes=[f"{card.name} moved to lane {lane_index + 1}"],
            card_handle=handle,
        )

    # =========================================================================
    # Retreat
    # =========================================================================

    def _handle_retreat(self, action: Action) -> ActionResult:
        """Concede: synthetic standings that favour the other side, then game over."""
        loser = action.payload.side
        synthetic = [
            LanePower(player_power=0, opponent_power=1) if loser is Side.PLAYER
            else LanePower(player_power=1, opponent_power=0)
            for _ in self.state.lanes
        ]
        state = self.state
        state.result = compute_result(synthetic, retreated=True)
        state.game_ended = True
        state.phase = TurnPhase.GAME_OVER
        state.reveal_queue.clear()
        self.bus.log(f"{loser.label} retreated")
        self.bus.emit(GameEndedEvent(result=state.result))
        return ActionResult.success_with_state(state, changes=[f"{loser.label} retreated"])

    # =========================================================================
    # Energy
    # =========================================================================

    def set_energy(self, side: Side, energy: int) -> None:
        side_state = self.state.side(side)
        side_state.energy = max(0, energy)
        self.bus.emit(EnergyChangedEvent(side=side, energy=side_state.energy))
