"""
Tests for the lane power calculator.

Tests:
- Slot sum, lane effect gating
- Adjacency grants and their stacking multiplier
- Doubler compounding
- Standings and results
"""

import pytest

from ..engine_core.effect_resolver import EffectDispatcher
from ..engine_core.lane_power import (
    all_lane_powers,
    compute_lane_breakdown,
    compute_lane_power,
    compute_result,
    leading_side,
    multiplicative_factor,
)
from ..engine_core.state import LanePower, Side
from ..games.marvel.lane_effects import ATLANTIS, NIDAVELLIR, SEWER_SYSTEM
from .conftest import BRUTE, FILLER, SCOUT

IRON_MAN, MISTER_FANTASTIC, KLAW, ONSLAUGHT = 16, 11, 15, 18


@pytest.fixture
def dispatcher(bus, catalog):
    return EffectDispatcher(bus, catalog)


class TestSlotSum:
    """Tests for the additive part of a lane total."""

    def test_empty_lane_is_zero(self, state):
        assert compute_lane_power(state, 0) == LanePower(0, 0)

    def test_sums_each_side(self, state, board):
        board.put(BRUTE, Side.PLAYER, 0)
        board.put(FILLER, Side.PLAYER, 0)
        board.put(SCOUT, Side.OPPONENT, 0)

        assert compute_lane_power(state, 0) == LanePower(13, 1)

    def test_query_is_pure(self, state, board):
        board.put(BRUTE, Side.PLAYER, 1)
        before = [slot.power for slot in state.all_slots()]

        first = compute_lane_power(state, 1)
        second = compute_lane_power(state, 1)

        assert first == second
        assert [slot.power for slot in state.all_slots()] == before


class TestLaneEffectGating:
    """A lane effect adds nothing until revealed, then its full bonus."""

    def test_hidden_effect_contributes_nothing(self, state, board):
        state.lanes[0].effect = NIDAVELLIR
        board.put(FILLER, Side.PLAYER, 0)

        assert compute_lane_power(state, 0).player_power == 3

    def test_revealed_effect_contributes_fully(self, state, board):
        state.lanes[0].effect = NIDAVELLIR
        board.put(FILLER, Side.PLAYER, 0)
        board.put(FILLER, Side.PLAYER, 0)
        state.lanes[0].is_revealed = True

        assert compute_lane_power(state, 0).player_power == 6 + 10

    def test_sewer_system_penalises_each_card(self, state, board):
        state.lanes[2].effect = SEWER_SYSTEM
        state.lanes[2].is_revealed = True
        board.put(FILLER, Side.OPPONENT, 2)
        board.put(FILLER, Side.OPPONENT, 2)

        assert compute_lane_power(state, 2).opponent_power == 4

    def test_atlantis_only_for_a_lone_card(self, state, board):
        state.lanes[1].effect = ATLANTIS
        state.lanes[1].is_revealed = True
        board.put(SCOUT, Side.PLAYER, 1)
        board.put(SCOUT, Side.OPPONENT, 1)
        board.put(SCOUT, Side.OPPONENT, 1)

        assert compute_lane_power(state, 1) == LanePower(6, 2)


class TestAdjacency:
    """Tests for neighbour-lane grants."""

    def test_mister_fantastic_reaches_both_neighbours(self, state, board):
        board.put(MISTER_FANTASTIC, Side.PLAYER, 1)

        powers = all_lane_powers(state)

        assert powers[0].player_power == 2
        assert powers[1].player_power == 2
        assert powers[2].player_power == 2

    def test_klaw_only_reaches_the_lane_to_its_right(self, state, board):
        board.put(KLAW, Side.PLAYER, 0)

        powers = all_lane_powers(state)

        assert powers[0].player_power == 4
        assert powers[1].player_power == 6
        assert powers[2].player_power == 0

    def test_klaw_in_the_middle_skips_the_left_lane(self, state, board):
        board.put(KLAW, Side.OPPONENT, 1)

        powers = all_lane_powers(state)

        assert powers[0].opponent_power == 0
        assert powers[2].opponent_power == 6

    def test_grants_stay_on_their_own_side(self, state, board):
        board.put(MISTER_FANTASTIC, Side.PLAYER, 1)

        assert compute_lane_power(state, 0).opponent_power == 0

    def test_onslaught_in_the_neighbour_doubles_the_grant(self, state, board):
        board.put(KLAW, Side.PLAYER, 0)
        board.put(ONSLAUGHT, Side.PLAYER, 0)

        breakdown = compute_lane_breakdown(state, 1)

        assert breakdown.player.adjacency_bonus == 12
        assert "Lane 2 (You) received +12 from Klaw in lane 1" in breakdown.notes
        assert "(Effect doubled by Onslaught in lane 1)" in breakdown.notes

    def test_multiplier_is_computed_per_neighbour_lane(self, state, board):
        # Onslaught sits with Klaw on the left; Mister Fantastic on the right is undoubled
        board.put(KLAW, Side.PLAYER, 0)
        board.put(ONSLAUGHT, Side.PLAYER, 0)
        board.put(MISTER_FANTASTIC, Side.PLAYER, 2)

        breakdown = compute_lane_breakdown(state, 1)

        assert breakdown.player.adjacency_bonus == 12 + 2


class TestDoublerCompounding:
    """Tests for the multiplicative pass."""

    def test_doubler_and_stacker_quadruple(self, state, board, dispatcher):
        board.put(IRON_MAN, Side.PLAYER, 0)
        board.put(ONSLAUGHT, Side.PLAYER, 0)
        board.put(FILLER, Side.PLAYER, 0)
        dispatcher.recompute_ongoing(state)

        # 0 + 7 + 3 = 10 before the multiplicative pass
        assert compute_lane_power(state, 0).player_power == 40

    def test_single_doubler(self, state, board):
        board.put(IRON_MAN, Side.PLAYER, 0)
        board.put(BRUTE, Side.PLAYER, 0)

        assert compute_lane_power(state, 0).player_power == 20

    def test_two_doublers_without_stacker(self, state, board):
        board.put(IRON_MAN, Side.OPPONENT, 2)
        board.put(IRON_MAN, Side.OPPONENT, 2)
        board.put(BRUTE, Side.OPPONENT, 2)

        assert compute_lane_power(state, 2).opponent_power == 40

    def test_stacker_alone_does_not_multiply(self, state, board):
        slots = state.lanes[0].slots_for(Side.PLAYER)
        board.put(ONSLAUGHT, Side.PLAYER, 0)

        assert multiplicative_factor(state, slots) == 1

    def test_multiplier_is_applied_after_additive_bonuses(self, state, board):
        state.lanes[0].effect = NIDAVELLIR
        state.lanes[0].is_revealed = True
        board.put(IRON_MAN, Side.PLAYER, 0)

        # (0 + 5) * 2
        assert compute_lane_power(state, 0).player_power == 10

    def test_multiplier_note(self, state, board):
        board.put(IRON_MAN, Side.PLAYER, 0)
        board.put(ONSLAUGHT, Side.PLAYER, 0)

        notes = compute_lane_breakdown(state, 0).notes

        assert "Lane 1 (You) power multiplied by 4x due to Iron Man x1 and Onslaught x1" in notes


class TestStandings:
    """Tests for lane standings and the final result."""

    def test_more_lanes_won_leads(self):
        powers = [LanePower(5, 3), LanePower(1, 2), LanePower(4, 0)]
        assert leading_side(powers) is Side.PLAYER

    def test_margin_breaks_a_lane_tie(self):
        powers = [LanePower(10, 0), LanePower(0, 3), LanePower(0, 0)]
        assert leading_side(powers) is Side.PLAYER

    def test_full_tie_has_no_leader(self):
        powers = [LanePower(2, 5), LanePower(5, 2), LanePower(1, 1)]
        assert leading_side(powers) is None

    def test_result_counts_lanes_won(self):
        result = compute_result([LanePower(0, 1), LanePower(0, 4), LanePower(9, 0)])

        assert result.winner is Side.OPPONENT
        assert result.lanes_won == {Side.PLAYER: 1, Side.OPPONENT: 2}
        assert not result.retreated

    def test_draw(self):
        result = compute_result([LanePower(3, 3)] * 3)
        assert result.winner is None
