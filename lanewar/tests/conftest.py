"""
Pytest fixtures for Lanewar tests.
"""

import random

import pytest

from ..engine_core.events import EventBus, EventRecorder
from ..engine_core.state import CardInstance, CardTemplate, GameConfig, GameState, Side
from ..engine_core.turn import TurnEngine
from ..games.marvel import MARVEL_CATALOG
from ..spec_schema.catalog import CardCatalog


# Vanilla cards used to build exact power totals
SCOUT = CardTemplate(901, "Scout", 1, 1)
BRUTE = CardTemplate(902, "Brute", 1, 10)
FILLER = CardTemplate(903, "Filler", 1, 3)


class BoardBuilder:
    """Puts cards straight onto the board, bypassing hands and energy."""

    def __init__(self, state: GameState, catalog: CardCatalog):
        self.state = state
        self.catalog = catalog

    def template(self, card) -> CardTemplate:
        if isinstance(card, CardTemplate):
            return card
        return self.catalog.get(card)

    def put(self, card, side: Side, lane_index: int, slot_index: int | None = None,
            revealed: bool = True, turn: int | None = None) -> CardInstance:
        """Place a card instance on a slot (first free slot by default)."""
        lane = self.state.lanes[lane_index]
        slot = lane.free_slot(side) if slot_index is None else lane.slots_for(side)[slot_index]
        instance = self.state.new_instance(self.template(card), side)
        if turn is not None:
            instance.turn_played = turn
        instance.is_revealed = revealed
        self.state.place_instance(instance, slot)
        return instance

    def hand(self, side: Side, *cards) -> list[CardTemplate]:
        hand = [self.template(card) for card in cards]
        self.state.side(side).hand = hand
        return hand

    def deck(self, side: Side, *cards) -> list[CardTemplate]:
        deck = [self.template(card) for card in cards]
        self.state.side(side).deck = deck
        return deck

    def slot_power(self, instance: CardInstance) -> int:
        return self.state.find_slot(instance.handle).power


@pytest.fixture
def catalog() -> CardCatalog:
    """The built-in card catalog."""
    return MARVEL_CATALOG


@pytest.fixture
def bus() -> EventBus:
    """A fresh session-scoped event bus."""
    return EventBus(session_id="test-session")


@pytest.fixture
def recorder(bus: EventBus) -> EventRecorder:
    """Records everything published on the bus."""
    return EventRecorder().attach(bus)


@pytest.fixture
def state() -> GameState:
    """Empty three-lane board, no lane effects, player has priority."""
    return GameState.create(GameConfig(random_seed=7), priority=Side.PLAYER)


@pytest.fixture
def board(state: GameState, catalog: CardCatalog) -> BoardBuilder:
    return BoardBuilder(state, catalog)


@pytest.fixture
def engine(state: GameState, bus: EventBus, catalog: CardCatalog) -> TurnEngine:
    """Turn engine without a bot, callbacks run immediately."""
    return TurnEngine(state=state, bus=bus, catalog=catalog, rng=random.Random(7))
