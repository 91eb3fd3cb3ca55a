"""
Turn Engine - The turn state machine and the caller-facing entry points.

States:
    PLAYER_TURN -> RESOLVING -> (GAME_OVER | next PLAYER_TURN)

Resolving a turn:
1. Opponent bot fills its plays (after a scheduled pause)
2. Record each card's lane at the start of the turn
3. Delayed (resolution-timed) bonuses
4. Reveal queue
5. Move checks
6. End-of-turn hooks and a final recompute
7. Game over once the last turn resolves; otherwise advance, reveal the
   lane effect for the new turn, refresh energy, draw, pick priority

The engine has no suspension points. The only delay is the pause before
the bot plays, modelled as a callback on a Scheduler.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, TYPE_CHECKING
import logging
import random

from ..spec_schema.catalog import CardCatalog
from .action import Action, ActionResult, ActionType, ErrorCode
from .action_generator import legal_placements
from .effect_resolver import EffectDispatcher
from .events import EventBus, GameEndedEvent
from .hand import HandManager
from .lane_power import all_lane_powers, compute_lane_power, compute_result, priority_side
from .reducer import Reducer
from .reveal import RevealResolver
from .state import GameState, LanePower, RevealQueueItem, Side, TurnPhase

if TYPE_CHECKING:
    from ..bots.policy import BotPolicy

logger = logging.getLogger(__name__)

# Safety net for policies that never end their turn
MAX_BOT_ACTIONS_PER_TURN = 32


class Scheduler(ABC):
    """Runs a callback after a delay expressed in milliseconds."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        ...


class ImmediateScheduler(Scheduler):
    """Runs callbacks right away; the delay is ignored."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        callback()


@dataclass
class DeferredScheduler(Scheduler):
    """Holds callbacks until the caller runs them."""
    pending: list[tuple[int, Callable[[], None]]] = field(default_factory=list)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending.append((delay_ms, callback))

    def run_pending(self) -> int:
        """Run every pending callback in order. Returns how many ran."""
        ran = 0
        while self.pending:
            _, callback = self.pending.pop(0)
            callback()
            ran += 1
        return ran


@dataclass
class TurnEngine:
    """
    Owns one match: state, dispatcher, reveal resolver and turn flow.

    Callers go through place_card / retract_card / move_card /
    end_player_turn / retreat and read through get_lane_power.
    """
    state: GameState
    bus: EventBus
    catalog: CardCatalog | None = None
    bot: BotPolicy | None = None
    rng: random.Random = field(default_factory=random.Random)
    scheduler: Scheduler = field(default_factory=ImmediateScheduler)
    bot_side: Side = Side.OPPONENT

    def __post_init__(self):
        self.hands = HandManager(self.state, self.bus)
        self.dispatcher = EffectDispatcher(self.bus, self.catalog)
        self.reducer = Reducer(self.state, self.bus, self.hands)
        self.reveal = RevealResolver(
            self.state, self.bus, self.dispatcher, self.hands, self.catalog
        )

    # =========================================================================
    # Entry points
    # =========================================================================

    def start(self) -> None:
        """Reveal the first lane effect and compute the opening board."""
        self.state.phase = TurnPhase.PLAYER_TURN
        self.reveal_lane_effect_for_turn(self.state.current_turn)
        self.reveal.recompute_all()
        for side in Side:
            self.reducer.set_energy(side, self.state.side(side).energy)

    def apply(self, action: Action) -> ActionResult:
        if action.action_type == ActionType.END_TURN:
            return self.end_player_turn()
        return self.reducer.apply(action)

    def place_card(self, hand_index: int, lane_index: int, slot_index: int,
                   side: Side = Side.PLAYER) -> ActionResult:
        return self.reducer.apply(Action.place(side, hand_index, lane_index, slot_index))

    def retract_card(self, card_handle: int, side: Side = Side.PLAYER) -> ActionResult:
        return self.reducer.apply(Action.retract(card_handle, side))

    def move_card(self, card_handle: int, lane_index: int, slot_index: int,
                  side: Side = Side.PLAYER) -> ActionResult:
        return self.reducer.apply(Action.move(card_handle, lane_index, slot_index, side))

    def retreat(self, side: Side = Side.PLAYER) -> ActionResult:
        return self.reducer.apply(Action.retreat(side))

    def get_lane_power(self, lane_index: int) -> LanePower:
        """Both sides' totals for a lane. Pure query."""
        return compute_lane_power(self.state, lane_index)

    def lane_powers(self) -> list[LanePower]:
        return all_lane_powers(self.state)

    def reveal_queue_snapshot(self) -> tuple[RevealQueueItem, ...]:
        return tuple(self.state.reveal_queue)

    def end_player_turn(self) -> ActionResult:
        """Leave PLAYER_TURN; resolution runs when the scheduler fires."""
        state = self.state
        if state.is_game_over:
            return ActionResult.failure("Game is over - no actions allowed", ErrorCode.GAME_OVER)
        if state.phase != TurnPhase.PLAYER_TURN:
            return ActionResult.failure(
                "Turn is already resolving", ErrorCode.INTERACTIONS_DISABLED
            )

        state.phase = TurnPhase.RESOLVING
        self.scheduler.schedule(state.config.bot_delay_ms, self.resolve_turn)
        return ActionResult.success_with_state(state, changes=[f"Turn {state.current_turn} ended"])

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_turn(self) -> None:
        """Run the whole RESOLVING phase."""
        state = self.state
        if state.phase != TurnPhase.RESOLVING:
            logger.warning("resolve_turn called in phase %s", state.phase.value)
            return

        self.run_bot_turn()
        self.record_lanes_at_start_of_turn()
        self.dispatcher.check_resolution_effects(
            state, tuple(state.reveal_queue), state.current_turn
        )
        self.reveal.process_reveal_queue()
        self.dispatcher.handle_move_effects(state)
        self.dispatcher.apply_end_of_turn(state)
        self.reveal.recompute_all()

        if state.current_turn >= state.max_turn:
            self.end_game()
        else:
            self.prepare_next_turn()

    def run_bot_turn(self) -> int:
        """Let the bot place cards until it ends its turn. Returns placements made."""
        if self.bot is None:
            return 0
        placed = 0
        for _ in range(MAX_BOT_ACTIONS_PER_TURN):
            legal = legal_placements(self.state, self.bot_side)
            decision = self.bot.select_action(self.state, self.bot_side, legal)
            if decision.ends_turn:
                break
            result = self.reducer.apply(decision.action)
            if not result.success:
                logger.warning("Bot chose an illegal action: %s", result.error)
                break
            logger.debug("Bot: %s", decision.explanation)
            placed += 1
        return placed

    def record_lanes_at_start_of_turn(self) -> None:
        for slot in self.state.all_slots():
            card = self.state.card_in(slot)
            if card is not None and card.lane_index_at_start_of_turn is None:
                card.lane_index_at_start_of_turn = slot.lane_index

    def prepare_next_turn(self) -> None:
        state = self.state
        state.current_turn += 1
        self.reveal_lane_effect_for_turn(state.current_turn)
        self.reveal.recompute_all()
        for side in Side:
            self.reducer.set_energy(side, state.current_turn)
        for side in Side:
            self.hands.draw_card(side)
        state.priority = priority_side(state, self.rng)
        state.phase = TurnPhase.PLAYER_TURN
        logger.debug("Turn %d begins, %s reveals first", state.current_turn, state.priority.value)

    def reveal_lane_effect_for_turn(self, turn: int) -> None:
        """Lane i reveals its effect at the start of turn i + 1."""
        lane_index = turn - 1
        if not 0 <= lane_index < len(self.state.lanes):
            return
        lane = self.state.lanes[lane_index]
        if lane.effect is None or lane.is_revealed:
            return
        lane.is_revealed = True
        self.bus.log(f"World revealed: {lane.effect.name} - {lane.effect.description}")
        if lane.effect.on_reveal is not None:
            lane.effect.on_reveal(self.state)

    def end_game(self) -> None:
        state = self.state
        state.phase = TurnPhase.GAME_OVER
        state.game_ended = True
        state.result = compute_result(all_lane_powers(state))
        winner = state.result.winner
        self.bus.log("Game over: draw" if winner is None else f"Game over: {winner.label} won")
        self.bus.emit(GameEndedEvent(result=state.result))
