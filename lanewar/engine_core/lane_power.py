"""
Lane Power Calculator - Per-side lane totals.

A side's total in a lane is built in four steps:
1. Sum of slot power (already base + permanent bonus + ongoing)
2. Lane effect bonus, only once the lane effect is revealed
3. Adjacency bonus from same-side cards in the neighbouring lanes
4. Multiplicative pass: 2 ** (doublers * 2 ** stackers)

Everything here is a pure query over the current board. Narration of the
adjacency and doubling steps is returned as notes so the caller decides
when to publish it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from ..spec_schema.effect_dsl import EffectId, effect_value
from .state import GameResult, GameState, Lane, LanePower, Side, Slot

# Neighbour on the left grants both; neighbour on the right only the symmetric one.
LEFT_NEIGHBOUR_EFFECTS = (EffectId.MISTER_FANTASTIC_ADJACENT, EffectId.KLAW_RIGHT)
RIGHT_NEIGHBOUR_EFFECTS = (EffectId.MISTER_FANTASTIC_ADJACENT,)


@dataclass
class SidePowerBreakdown:
    """How one side's lane total was reached."""
    slot_power: int = 0
    lane_effect_bonus: int = 0
    adjacency_bonus: int = 0
    multiplier: int = 1
    notes: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (self.slot_power + self.lane_effect_bonus + self.adjacency_bonus) * self.multiplier


@dataclass
class LanePowerBreakdown:
    lane_index: int
    player: SidePowerBreakdown
    opponent: SidePowerBreakdown

    def to_lane_power(self) -> LanePower:
        return LanePower(player_power=self.player.total, opponent_power=self.opponent.total)

    @property
    def notes(self) -> list[str]:
        return self.player.notes + self.opponent.notes


def count_with_effect(state: GameState, slots: list[Slot], effect_id: EffectId) -> int:
    """Number of occupied slots whose card declares effect_id."""
    count = 0
    for slot in slots:
        card = state.card_in(slot)
        if card is not None and card.template.has_effect(effect_id):
            count += 1
    return count


def stacking_multiplier(state: GameState, slots: list[Slot]) -> int:
    """2 ** (number of ongoing-doubling cards in the group)."""
    return 2 ** count_with_effect(state, slots, EffectId.ONSLAUGHT_DOUBLE_ONGOING)


def lane_effect_bonus(lane: Lane, side: Side) -> int:
    if lane.effect is None or not lane.is_revealed:
        return 0
    return lane.effect.modifier(lane.slots_for(side), lane)


def adjacency_bonus(state: GameState, lane_index: int, side: Side) -> tuple[int, list[str]]:
    """Bonus granted to a lane by same-side cards in the lanes beside it."""
    total = 0
    notes: list[str] = []
    neighbours = (
        (lane_index - 1, LEFT_NEIGHBOUR_EFFECTS),
        (lane_index + 1, RIGHT_NEIGHBOUR_EFFECTS),
    )
    for neighbour_index, effect_ids in neighbours:
        if neighbour_index < 0 or neighbour_index >= len(state.lanes):
            continue
        neighbour_slots = state.lanes[neighbour_index].slots_for(side)
        # Computed once per neighbour lane, shared by every granting card there
        multiplier = stacking_multiplier(state, neighbour_slots)
        for slot in neighbour_slots:
            card = state.card_in(slot)
            if card is None:
                continue
            for effect in card.template.effects:
                if effect.effect_id not in effect_ids:
                    continue
                bonus = effect_value(effect) * multiplier
                total += bonus
                notes.append(
                    f"Lane {lane_index + 1} ({side.label}) received +{bonus} "
                    f"from {card.name} in lane {neighbour_index + 1}"
                )
                if multiplier > 1:
                    notes.append(f"(Effect doubled by Onslaught in lane {neighbour_index + 1})")
    return total, notes


def multiplicative_factor(state: GameState, slots: list[Slot]) -> int:
    """2 ** (doublers * 2 ** stackers), or 1 without doublers."""
    doublers = count_with_effect(state, slots, EffectId.IRON_MAN_DOUBLE_POWER)
    if doublers == 0:
        return 1
    stackers = count_with_effect(state, slots, EffectId.ONSLAUGHT_DOUBLE_ONGOING)
    return 2 ** (doublers * 2 ** stackers)


def compute_side(state: GameState, lane_index: int, side: Side) -> SidePowerBreakdown:
    lane = state.lanes[lane_index]
    slots = lane.slots_for(side)
    breakdown = SidePowerBreakdown(
        slot_power=sum(slot.power for slot in slots if slot.occupied),
        lane_effect_bonus=lane_effect_bonus(lane, side),
    )
    breakdown.adjacency_bonus, breakdown.notes = adjacency_bonus(state, lane_index, side)
    breakdown.multiplier = multiplicative_factor(state, slots)
    if breakdown.multiplier > 1:
        doublers = count_with_effect(state, slots, EffectId.IRON_MAN_DOUBLE_POWER)
        stackers = count_with_effect(state, slots, EffectId.ONSLAUGHT_DOUBLE_ONGOING)
        sources = [f"Iron Man x{doublers}"]
        if stackers:
            sources.append(f"Onslaught x{stackers}")
        breakdown.notes.append(
            f"Lane {lane_index + 1} ({side.label}) power multiplied by "
            f"{breakdown.multiplier}x due to {' and '.join(sources)}"
        )
    return breakdown


def compute_lane_breakdown(state: GameState, lane_index: int) -> LanePowerBreakdown:
    return LanePowerBreakdown(
        lane_index=lane_index,
        player=compute_side(state, lane_index, Side.PLAYER),
        opponent=compute_side(state, lane_index, Side.OPPONENT),
    )


def compute_lane_power(state: GameState, lane_index: int) -> LanePower:
    """Both sides' totals for one lane. Pure."""
    return compute_lane_breakdown(state, lane_index).to_lane_power()


def all_lane_powers(state: GameState) -> list[LanePower]:
    return [compute_lane_power(state, i) for i in range(len(state.lanes))]


# =============================================================================
# Standings
# =============================================================================

def _standings(lane_powers: list[LanePower]) -> tuple[dict[Side, int], dict[Side, int]]:
    wins = {Side.PLAYER: 0, Side.OPPONENT: 0}
    margins = {Side.PLAYER: 0, Side.OPPONENT: 0}
    for power in lane_powers:
        winner = power.winner
        if winner is None:
            continue
        wins[winner] += 1
        margins[winner] += power.for_side(winner) - power.for_side(winner.other)
    return wins, margins


def leading_side(lane_powers: list[LanePower]) -> Side | None:
    """Side ahead on lanes won, then on summed winning margins. None on a full tie."""
    wins, margins = _standings(lane_powers)
    for table in (wins, margins):
        if table[Side.PLAYER] > table[Side.OPPONENT]:
            return Side.PLAYER
        if table[Side.OPPONENT] > table[Side.PLAYER]:
            return Side.OPPONENT
    return None


def priority_side(state: GameState, rng: random.Random) -> Side:
    """Who reveals first next turn; a full tie is broken at random."""
    leader = leading_side(all_lane_powers(state))
    if leader is None:
        return rng.choice([Side.PLAYER, Side.OPPONENT])
    return leader


def compute_result(lane_powers: list[LanePower], retreated: bool = False) -> GameResult:
    """Final outcome; a full tie is a draw."""
    wins, _ = _standings(lane_powers)
    return GameResult(
        winner=leading_side(lane_powers),
        lane_powers=lane_powers,
        lanes_won=wins,
        retreated=retreated,
    )
