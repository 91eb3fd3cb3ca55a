"""
Bot Policy - Interface for bot decision-making.

A BotPolicy looks at the game state and the legal actions for its side
and returns one decision at a time. The turn engine keeps asking until
the policy answers with END_TURN or nothing is left to play.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import random

from ..engine_core.action import Action, ActionType
from ..engine_core.lane_power import all_lane_powers

if TYPE_CHECKING:
    from ..engine_core.state import GameState, Side


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for logs/debugging)
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0

    @property
    def ends_turn(self) -> bool:
        return self.action.action_type == ActionType.END_TURN


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects placements.
    """

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        side: Side,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal placements.

        Args:
            state: Current game state
            side: The side the bot plays
            legal_actions: Legal placements for that side

        Returns:
            BotDecision with the selected action, or END_TURN to stop
        """

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class GreedyLanePolicy(BotPolicy):
    """
    Greedy lane-filling heuristic.

    Plays the strongest affordable card first, into the lane it is losing
    by the most where the card would take or keep the lead. If no lane
    qualifies, the card goes to the first lane with room.

    Myopic on purpose: no lookahead and no reading of the opponent's hand.
    """

    def select_action(
        self,
        state: GameState,
        side: Side,
        legal_actions: list[Action],
    ) -> BotDecision:
        placements = [a for a in legal_actions if a.action_type == ActionType.PLACE_CARD]
        if not placements or state.side(side).energy <= 0:
            return BotDecision(action=Action.end_turn(), explanation="Nothing left to play")

        # First free slot per (hand card, lane)
        options: dict[tuple[int, int], Action] = {}
        for action in placements:
            key = (action.payload.hand_index, action.payload.lane_index)
            current = options.get(key)
            if current is None or action.payload.slot_index < current.payload.slot_index:
                options[key] = action

        hand = state.side(side).hand
        playable = sorted(
            {hand_index for hand_index, _ in options},
            key=lambda i: (-hand[i].power, i),
        )
        powers = all_lane_powers(state)
        ranked = sorted(
            range(len(state.lanes)),
            key=lambda i: powers[i].for_side(side) - powers[i].for_side(side.other),
        )

        for hand_index in playable:
            card = hand[hand_index]
            for lane_index in ranked:
                action = options.get((hand_index, lane_index))
                if action is None:
                    continue
                own = powers[lane_index].for_side(side)
                opp = powers[lane_index].for_side(side.other)
                would_overpower = (own <= opp and own + card.power > opp) or own > opp
                if would_overpower:
                    return BotDecision(
                        action=action,
                        explanation=f"{card.name} to lane {lane_index + 1} ({own} vs {opp})",
                        evaluated_actions=len(placements),
                    )
            for lane_index in range(len(state.lanes)):
                action = options.get((hand_index, lane_index))
                if action is not None:
                    return BotDecision(
                        action=action,
                        explanation=f"{card.name} to first open lane {lane_index + 1}",
                        evaluated_actions=len(placements),
                    )

        return BotDecision(action=Action.end_turn(), explanation="No lane has room")


class RandomPolicy(BotPolicy):
    """
    Random policy - selects placements uniformly at random.

    Used for:
    - Simulation baselines
    - Testing
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: GameState,
        side: Side,
        legal_actions: list[Action],
    ) -> BotDecision:
        placements = [a for a in legal_actions if a.action_type == ActionType.PLACE_CARD]
        if not placements:
            return BotDecision(action=Action.end_turn(), explanation="Nothing left to play")

        action = self.rng.choice(placements)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            evaluated_actions=len(placements),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal placement.

    Used for deterministic testing.
    """

    def select_action(
        self,
        state: GameState,
        side: Side,
        legal_actions: list[Action],
    ) -> BotDecision:
        placements = [a for a in legal_actions if a.action_type == ActionType.PLACE_CARD]
        if not placements:
            return BotDecision(action=Action.end_turn(), explanation="Nothing left to play")
        return BotDecision(
            action=placements[0],
            explanation="Selected first legal placement",
            evaluated_actions=1,
        )


POLICIES: dict[str, type[BotPolicy]] = {
    "greedy": GreedyLanePolicy,
    "random": RandomPolicy,
    "first": FirstLegalPolicy,
}


def make_policy(name: str, seed: int | None = None) -> BotPolicy:
    """Build a policy by name."""
    if name not in POLICIES:
        raise ValueError(f"Unknown bot policy '{name}', choose from {sorted(POLICIES)}")
    if name == "random":
        return RandomPolicy(seed)
    return POLICIES[name]()
