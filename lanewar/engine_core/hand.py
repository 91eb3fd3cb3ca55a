"""
Hands and decks - Starting hands, draws and ability-driven additions.

Decks are FIFO: cards leave from the front. The only exception is the
guaranteed starting card, pulled out of the deck before it is shuffled.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random

from ..spec_schema.effect_dsl import EffectId
from .events import CardAddedToHandEvent, EventBus
from .state import CardTemplate, GameState, Side, SideState

logger = logging.getLogger(__name__)


def deal_starting_hand(
    side_state: SideState,
    deck: list[CardTemplate],
    size: int,
    rng: random.Random,
    bus: EventBus,
) -> None:
    """
    Fill a side's hand and deck from a deck list.

    A card with the start-in-hand ability is always dealt first; the rest
    of the deck is shuffled and dealt from the front.
    """
    remaining = list(deck)
    hand: list[CardTemplate] = []

    for index, template in enumerate(remaining):
        if template.has_effect(EffectId.QUICKSILVER_START_IN_HAND):
            hand.append(remaining.pop(index))
            bus.log(f"{template.name} guaranteed in starting hand")
            break

    rng.shuffle(remaining)
    while len(hand) < size and remaining:
        hand.append(remaining.pop(0))

    side_state.hand = hand
    side_state.deck = remaining


@dataclass
class HandManager:
    """Moves cards into hands for one game state."""
    state: GameState
    bus: EventBus

    def draw_card(self, side: Side) -> CardTemplate | None:
        """Draw from the front of the deck unless the hand is full or the deck empty."""
        side_state = self.state.side(side)
        if len(side_state.hand) >= self.state.config.max_hand_size:
            logger.debug("%s hand full, no draw", side.value)
            return None
        if not side_state.deck:
            logger.debug("%s deck empty, no draw", side.value)
            return None
        card = side_state.deck.pop(0)
        side_state.hand.append(card)
        self.bus.emit(CardAddedToHandEvent(side=side, card=card))
        return card

    def add_card_to_hand(self, side: Side, card: CardTemplate) -> bool:
        """Ability-driven addition, refused once the hand holds max_turn cards."""
        hand = self.state.side(side).hand
        if len(hand) < self.state.max_turn:
            hand.append(card)
            logger.info("%s added to %s hand", card.name, side.value)
            self.bus.emit(CardAddedToHandEvent(side=side, card=card))
            return True
        self.bus.log(f"{side.possessive} hand is full, {card.name} was not added")
        return False

    def return_to_hand(self, side: Side, card: CardTemplate, index: int) -> None:
        """Put a retracted card back at its old position, or at the end."""
        hand = self.state.side(side).hand
        if 0 <= index <= len(hand):
            hand.insert(index, card)
        else:
            hand.append(card)
