"""
Reveal Resolver - Orders and resolves the cards placed this turn.

Per turn:
    sort queue -> log reveal order -> for each item: reveal, on-reveal,
    on-card-played, refresh powers -> clear queue -> full recompute

The side with priority reveals all of its cards first. Within a side the
order is the order the cards were played.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence
import logging

from ..spec_schema.catalog import CardCatalog
from .effect_resolver import AddToHandAction, EffectAction, EffectDispatcher
from .events import EventBus, LanePowerChangedEvent
from .hand import HandManager
from .lane_power import compute_lane_breakdown
from .state import GameState, RevealQueueItem, Side

logger = logging.getLogger(__name__)


def order_reveal_queue(queue: Sequence[RevealQueueItem], priority: Side) -> list[RevealQueueItem]:
    """Priority side first, stable within a side."""
    return sorted(queue, key=lambda item: item.side is not priority)


@dataclass
class RevealResolver:
    """Runs the reveal phase of one turn for a session."""
    state: GameState
    bus: EventBus
    dispatcher: EffectDispatcher
    hands: HandManager
    catalog: CardCatalog | None = None

    def process_reveal_queue(self) -> list[RevealQueueItem]:
        """Resolve every queued card. Returns the items in the order they resolved."""
        state = self.state
        if not state.reveal_queue:
            return []

        snapshot = tuple(state.reveal_queue)
        ordered = order_reveal_queue(snapshot, state.priority)
        self.bus.log(f"---------- Turn {state.current_turn} ----------")
        names = []
        for item in ordered:
            card = state.cards.get(item.card_handle)
            names.append(f"{card.name if card else '?'} ({item.side.label})")
        self.bus.log("Reveal order: " + ", ".join(names))

        resolved = []
        for item in ordered:
            if self._reveal_item(item, snapshot):
                resolved.append(item)

        state.reveal_queue.clear()
        self.recompute_all(narrate=True)
        return resolved

    def _reveal_item(self, item: RevealQueueItem, snapshot: Sequence[RevealQueueItem]) -> bool:
        state = self.state
        slot = state.slot(item.lane_index, item.side, item.slot_index)
        card = state.cards.get(item.card_handle)
        if card is None or slot.card_handle != item.card_handle:
            logger.warning(
                "Reveal queue entry for card %d no longer matches lane %d slot %d",
                item.card_handle, item.lane_index, item.slot_index,
            )
            return False

        self.bus.log(f"{item.side.label} played {card.name} in lane {item.lane_index + 1}")
        card.is_revealed = True
        actions = self.dispatcher.apply_on_reveal(state, slot, card, snapshot)
        self.apply_actions(actions)
        self.dispatcher.trigger_on_card_played(state, card, item.lane_index)
        self.refresh_powers()
        return True

    def apply_actions(self, actions: Sequence[EffectAction]) -> None:
        for action in actions:
            if isinstance(action, AddToHandAction):
                template = self.catalog.get(action.card_id) if self.catalog else None
                if template is None:
                    logger.warning("Catalog has no card %d to add to hand", action.card_id)
                    self.bus.log(f"Card {action.card_id} not found!")
                    continue
                self.hands.add_card_to_hand(action.side, template)

    # -------------------------------------------------------------------------
    # Recompute
    # -------------------------------------------------------------------------

    def refresh_powers(self) -> None:
        """Ongoing pass, then publish every lane's totals."""
        self.dispatcher.recompute_ongoing(self.state)
        self._publish_lane_powers(narrate=False)

    def recompute_all(self, narrate: bool = False) -> None:
        """Ongoing pass, lane properties and lane totals."""
        self.dispatcher.recompute_ongoing(self.state)
        self.dispatcher.update_lane_properties(self.state)
        self._publish_lane_powers(narrate=narrate)

    def _publish_lane_powers(self, narrate: bool) -> None:
        for lane in self.state.lanes:
            breakdown = compute_lane_breakdown(self.state, lane.index)
            if narrate:
                for note in breakdown.notes:
                    self.bus.log(note)
            power = breakdown.to_lane_power()
            self.bus.emit(LanePowerChangedEvent(
                lane_index=lane.index,
                player_power=power.player_power,
                opponent_power=power.opponent_power,
            ))
