"""
Game State - Lanes, slots, card instances and per-side resources.

Design principles:
- Arena storage: every CardInstance lives in GameState.cards, keyed by handle
- Slots hold a handle, never the instance itself
- Moving a card transfers the handle between two slot records
- Slot power is derived; it is recomputed from base power + permanent bonus
  on every ongoing pass and is never a source of truth
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator

from ..spec_schema.effect_dsl import CardEffect, EffectCategory, EffectId


class InvariantViolation(AssertionError):
    """Board state broke an invariant the engine relies on."""


class Side(Enum):
    """The two sides of the table."""
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Side:
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER

    @property
    def label(self) -> str:
        """Narration label used in log lines."""
        return "You" if self is Side.PLAYER else "Opponent"

    @property
    def possessive(self) -> str:
        return "Your" if self is Side.PLAYER else "Opponent's"


class TurnPhase(Enum):
    """Turn state machine phases."""
    PLAYER_TURN = "player_turn"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    """Tunable rules for one match."""
    lane_count: int = 3
    slots_per_side: int = 4
    max_turn: int = 6
    extended_max_turn: int = 7
    starting_hand_size: int = 4
    max_hand_size: int = 7
    bot_delay_ms: int = 1000
    random_seed: int | None = None


# =============================================================================
# Cards
# =============================================================================

@dataclass(frozen=True)
class CardTemplate:
    """
    Immutable card definition from the catalog.

    Never mutated after the catalog loads; in-play state lives on
    CardInstance.
    """
    card_id: int
    name: str
    cost: int
    power: int
    description: str = ""
    effects: tuple[CardEffect, ...] = ()
    image: str | None = None

    def has_effect(self, effect_id: EffectId) -> bool:
        return any(e.effect_id == effect_id for e in self.effects)

    def find_effect(self, effect_id: EffectId) -> CardEffect | None:
        for effect in self.effects:
            if effect.effect_id == effect_id:
                return effect
        return None

    def effects_in(self, category: EffectCategory) -> list[CardEffect]:
        """Declared effects of one category, in declaration order."""
        return [e for e in self.effects if e.category == category]

    @property
    def has_ongoing(self) -> bool:
        return any(e.category == EffectCategory.ONGOING for e in self.effects)


@dataclass
class Immunities:
    """Protections granted by ongoing abilities."""
    cannot_be_destroyed: bool = False
    cannot_be_moved: bool = False
    cannot_have_power_reduced: bool = False


@dataclass
class CardInstance:
    """
    A card on the board.

    Created when a card is placed on a slot and discarded when it returns
    to hand or the game ends.
    """
    handle: int
    template: CardTemplate
    side: Side
    turn_played: int
    hand_index: int = -1  # Position in hand before placement; -1 when unknown
    is_revealed: bool = False
    has_moved: bool = False
    permanent_bonus: int = 0
    immunities: Immunities = field(default_factory=Immunities)

    # Delayed on-reveal bonus (fires during a later turn's resolution)
    hawkeye_ready_turn: int | None = None
    hawkeye_bonus: int = 0

    lane_index_at_start_of_turn: int | None = None

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def cost(self) -> int:
        return self.template.cost

    @property
    def base_power(self) -> int:
        return self.template.power

    def add_permanent_bonus(self, amount: int) -> bool:
        """Grant a permanent bonus. Non-positive amounts are ignored."""
        if amount <= 0:
            return False
        self.permanent_bonus += amount
        return True


# =============================================================================
# Board
# =============================================================================

@dataclass
class Slot:
    """A single card position within one side of a lane."""
    lane_index: int
    side: Side
    slot_index: int
    card_handle: int | None = None
    power: int = 0

    @property
    def occupied(self) -> bool:
        return self.card_handle is not None


@dataclass
class LaneProperties:
    """Lane-wide flags derived from occupying cards on each recompute."""
    cards_cannot_be_destroyed: bool = False


@dataclass(frozen=True)
class LaneEffect:
    """
    A location modifier assigned to a lane at game start.

    modifier(slots, lane) returns the power delta for one side's slot group.
    on_reveal(state) runs once when the lane effect is revealed.
    """
    effect_id: str
    name: str
    description: str
    modifier: Callable[[list[Slot], Lane], int]
    on_reveal: Callable[[GameState], None] | None = None


@dataclass
class Lane:
    """One of the board columns, scored independently."""
    index: int
    player_slots: list[Slot] = field(default_factory=list)
    opponent_slots: list[Slot] = field(default_factory=list)
    effect: LaneEffect | None = None
    is_revealed: bool = False
    properties: LaneProperties = field(default_factory=LaneProperties)

    @classmethod
    def empty(cls, index: int, slots_per_side: int) -> Lane:
        return cls(
            index=index,
            player_slots=[Slot(index, Side.PLAYER, i) for i in range(slots_per_side)],
            opponent_slots=[Slot(index, Side.OPPONENT, i) for i in range(slots_per_side)],
        )

    def slots_for(self, side: Side) -> list[Slot]:
        return self.player_slots if side is Side.PLAYER else self.opponent_slots

    def occupied_slots(self, side: Side) -> list[Slot]:
        return [s for s in self.slots_for(side) if s.occupied]

    def all_slots(self) -> list[Slot]:
        return self.player_slots + self.opponent_slots

    def free_slot(self, side: Side) -> Slot | None:
        for slot in self.slots_for(side):
            if not slot.occupied:
                return slot
        return None


@dataclass
class RevealQueueItem:
    """A just-placed card waiting for turn resolution."""
    card_handle: int
    lane_index: int
    slot_index: int
    side: Side
    turn_played: int


@dataclass
class LanePower:
    """Snapshot of both sides' totals in one lane."""
    player_power: int = 0
    opponent_power: int = 0

    def for_side(self, side: Side) -> int:
        return self.player_power if side is Side.PLAYER else self.opponent_power

    @property
    def winner(self) -> Side | None:
        if self.player_power > self.opponent_power:
            return Side.PLAYER
        if self.opponent_power > self.player_power:
            return Side.OPPONENT
        return None


@dataclass
class GameResult:
    """Final outcome of a match. winner is None for a draw."""
    winner: Side | None
    lane_powers: list[LanePower]
    lanes_won: dict[Side, int]
    retreated: bool = False


@dataclass
class SideState:
    """Hand, deck and energy of one side."""
    hand: list[CardTemplate] = field(default_factory=list)
    deck: list[CardTemplate] = field(default_factory=list)
    energy: int = 1


# =============================================================================
# Game State
# =============================================================================

@dataclass
class GameState:
    """
    The whole mutable board graph of one match.

    Only engine entry points mutate it; callers read through queries.
    """
    config: GameConfig = field(default_factory=GameConfig)
    lanes: list[Lane] = field(default_factory=list)
    sides: dict[Side, SideState] = field(default_factory=dict)
    cards: dict[int, CardInstance] = field(default_factory=dict)
    reveal_queue: list[RevealQueueItem] = field(default_factory=list)
    current_turn: int = 1
    max_turn: int = 6
    priority: Side = Side.PLAYER
    phase: TurnPhase = TurnPhase.PLAYER_TURN
    game_ended: bool = False
    result: GameResult | None = None
    next_handle: int = 1

    @classmethod
    def create(cls, config: GameConfig | None = None, priority: Side = Side.PLAYER) -> GameState:
        """Empty board with both sides at 1 energy."""
        config = config or GameConfig()
        return cls(
            config=config,
            lanes=[Lane.empty(i, config.slots_per_side) for i in range(config.lane_count)],
            sides={Side.PLAYER: SideState(), Side.OPPONENT: SideState()},
            max_turn=config.max_turn,
            priority=priority,
        )

    @property
    def interactions_enabled(self) -> bool:
        return self.phase == TurnPhase.PLAYER_TURN

    @property
    def is_game_over(self) -> bool:
        return self.game_ended or self.phase == TurnPhase.GAME_OVER

    def side(self, side: Side) -> SideState:
        return self.sides[side]

    def lane(self, index: int) -> Lane:
        return self.lanes[index]

    def slot(self, lane_index: int, side: Side, slot_index: int) -> Slot:
        return self.lanes[lane_index].slots_for(side)[slot_index]

    # -------------------------------------------------------------------------
    # Arena access
    # -------------------------------------------------------------------------

    def card(self, handle: int) -> CardInstance:
        try:
            return self.cards[handle]
        except KeyError:
            raise InvariantViolation(f"No card instance for handle {handle}") from None

    def card_in(self, slot: Slot) -> CardInstance | None:
        """Instance held by a slot; raises if the slot points at nothing."""
        if slot.card_handle is None:
            return None
        return self.card(slot.card_handle)

    def new_instance(
        self, template: CardTemplate, side: Side, hand_index: int = -1
    ) -> CardInstance:
        """Allocate a handle and register a fresh instance in the arena."""
        instance = CardInstance(
            handle=self.next_handle,
            template=template,
            side=side,
            turn_played=self.current_turn,
            hand_index=hand_index,
        )
        self.cards[instance.handle] = instance
        self.next_handle += 1
        return instance

    def place_instance(self, instance: CardInstance, slot: Slot) -> None:
        if slot.occupied:
            raise InvariantViolation(
                f"Slot {slot.slot_index} in lane {slot.lane_index} is already occupied"
            )
        slot.card_handle = instance.handle
        slot.power = instance.base_power + instance.permanent_bonus

    def remove_instance(self, slot: Slot) -> CardInstance:
        """Clear a slot and drop its instance from the arena."""
        instance = self.card_in(slot)
        if instance is None:
            raise InvariantViolation(
                f"Slot {slot.slot_index} in lane {slot.lane_index} is empty"
            )
        slot.card_handle = None
        slot.power = 0
        del self.cards[instance.handle]
        return instance

    def move_card(self, handle: int, target: Slot) -> None:
        """Transfer a card's handle from its current slot to an empty one."""
        source = self.find_slot(handle)
        if source is None:
            raise InvariantViolation(f"Card {handle} is not on the board")
        if target.occupied:
            raise InvariantViolation(
                f"Slot {target.slot_index} in lane {target.lane_index} is already occupied"
            )
        target.card_handle = handle
        target.power = source.power
        source.card_handle = None
        source.power = 0

    def find_slot(self, handle: int) -> Slot | None:
        for slot in self.all_slots():
            if slot.card_handle == handle:
                return slot
        return None

    def all_slots(self) -> Iterator[Slot]:
        for lane in self.lanes:
            yield from lane.all_slots()

    def board_slots(self, side: Side) -> Iterator[Slot]:
        """Occupied slots of one side across every lane."""
        for lane in self.lanes:
            yield from lane.occupied_slots(side)
