"""
Tests for hands and decks.
"""

import random

import pytest

from ..engine_core.events import EventType
from ..engine_core.hand import HandManager, deal_starting_hand
from ..engine_core.state import Side
from ..games.marvel import MARVEL_CATALOG, PLAYER_DECK_IDS
from .conftest import BRUTE, FILLER, SCOUT

SENTINEL = 21


@pytest.fixture
def hands(state, bus):
    return HandManager(state, bus)


class TestStartingHand:
    """Tests for the opening deal."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 42])
    def test_quicksilver_is_always_dealt(self, state, bus, recorder, seed):
        deck = MARVEL_CATALOG.resolve(PLAYER_DECK_IDS)
        side_state = state.side(Side.PLAYER)

        deal_starting_hand(side_state, deck, 4, random.Random(seed), bus)

        assert side_state.hand[0].name == "Quicksilver"
        assert len(side_state.hand) == 4
        assert len(side_state.deck) == 8
        assert "Quicksilver guaranteed in starting hand" in recorder.log_lines

    def test_deal_does_not_mutate_the_deck_list(self, state, bus):
        deck = [SCOUT, FILLER, BRUTE]

        deal_starting_hand(state.side(Side.PLAYER), deck, 2, random.Random(1), bus)

        assert deck == [SCOUT, FILLER, BRUTE]

    def test_small_deck_deals_what_it_has(self, state, bus, recorder):
        side_state = state.side(Side.OPPONENT)

        deal_starting_hand(side_state, [SCOUT], 4, random.Random(1), bus)

        assert side_state.hand == [SCOUT]
        assert side_state.deck == []
        assert recorder.log_lines == []

    def test_same_seed_same_deal(self, state, bus):
        deck = MARVEL_CATALOG.resolve(PLAYER_DECK_IDS)
        first, second = state.side(Side.PLAYER), state.side(Side.OPPONENT)

        deal_starting_hand(first, deck, 4, random.Random(9), bus)
        deal_starting_hand(second, deck, 4, random.Random(9), bus)

        assert first.hand == second.hand
        assert first.deck == second.deck


class TestDraw:
    """Tests for the per-turn draw."""

    def test_draws_from_the_front(self, state, board, hands, recorder):
        board.deck(Side.PLAYER, SCOUT, BRUTE)

        drawn = hands.draw_card(Side.PLAYER)

        assert drawn == SCOUT
        assert state.side(Side.PLAYER).hand == [SCOUT]
        assert state.side(Side.PLAYER).deck == [BRUTE]
        assert recorder.of_type(EventType.ADD_CARD_TO_HAND)[0].side is Side.PLAYER

    def test_full_hand_skips_the_draw(self, state, board, hands):
        board.hand(Side.PLAYER, *([FILLER] * 7))
        board.deck(Side.PLAYER, SCOUT)

        assert hands.draw_card(Side.PLAYER) is None
        assert len(state.side(Side.PLAYER).hand) == 7
        assert state.side(Side.PLAYER).deck == [SCOUT]

    def test_empty_deck(self, state, hands):
        assert hands.draw_card(Side.OPPONENT) is None
        assert state.side(Side.OPPONENT).hand == []


class TestAddToHand:
    """Tests for ability-driven additions."""

    def test_added_at_the_end(self, state, board, hands, catalog):
        board.hand(Side.PLAYER, SCOUT)

        assert hands.add_card_to_hand(Side.PLAYER, catalog.get(SENTINEL))
        assert [c.name for c in state.side(Side.PLAYER).hand] == ["Scout", "Sentinel"]

    def test_refused_once_the_hand_reaches_the_turn_limit(self, state, board, hands, catalog, recorder):
        board.hand(Side.PLAYER, *([FILLER] * 6))

        added = hands.add_card_to_hand(Side.PLAYER, catalog.get(SENTINEL))

        assert not added
        assert len(state.side(Side.PLAYER).hand) == 6
        assert "Your hand is full, Sentinel was not added" in recorder.log_lines

    def test_opponent_message(self, board, hands, catalog, recorder):
        board.hand(Side.OPPONENT, *([FILLER] * 6))

        hands.add_card_to_hand(Side.OPPONENT, catalog.get(SENTINEL))

        assert "Opponent's hand is full, Sentinel was not added" in recorder.log_lines


class TestReturnToHand:
    """Tests for putting a retracted card back."""

    def test_inserted_at_its_old_index(self, state, board, hands):
        board.hand(Side.PLAYER, SCOUT, BRUTE)

        hands.return_to_hand(Side.PLAYER, FILLER, 1)

        assert state.side(Side.PLAYER).hand == [SCOUT, FILLER, BRUTE]

    def test_unknown_index_appends(self, state, board, hands):
        board.hand(Side.PLAYER, SCOUT)

        hands.return_to_hand(Side.PLAYER, FILLER, -1)

        assert state.side(Side.PLAYER).hand == [SCOUT, FILLER]
