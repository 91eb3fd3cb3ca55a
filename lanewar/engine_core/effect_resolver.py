"""
Effect Dispatcher - Routes declared card abilities to their handlers.

Each category (ongoing, on-reveal, on-card-played, resolution, move,
end-of-turn) has its own registry mapping an EffectId to a handler
object. A new ability registers a new handler; nothing here switches on
effect identifiers.

Ongoing handlers are recomputed from scratch on every pass: slot power
is reset to base + permanent bonus first, so running the pass twice on
the same board gives the same result.

Some ongoing identifiers have no per-slot handler because they are
consumed elsewhere: power doublers and adjacency grants by the lane
power calculator, Armor by lane properties and Cosmo by the reveal guard.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence
import logging

from ..spec_schema.catalog import CardCatalog
from ..spec_schema.effect_dsl import CardEffect, EffectCategory, EffectId, effect_value
from .events import EventBus
from .lane_power import stacking_multiplier
from .state import (
    CardInstance,
    GameState,
    Immunities,
    Lane,
    RevealQueueItem,
    Side,
    Slot,
)

logger = logging.getLogger(__name__)

SENTINEL_CARD_ID = 21


@dataclass(frozen=True)
class AddToHandAction:
    """Follow-up requested by an ability: put a catalog card into a hand."""
    side: Side
    card_id: int


EffectAction = AddToHandAction


@dataclass
class EffectContext:
    """Everything a handler may read or touch while applying one effect."""
    state: GameState
    bus: EventBus
    catalog: CardCatalog | None
    slot: Slot
    card: CardInstance
    effect: CardEffect
    multiplier: int = 1
    reveal_queue: Sequence[RevealQueueItem] = ()
    played_card: CardInstance | None = None

    @property
    def lane(self) -> Lane:
        return self.state.lanes[self.slot.lane_index]

    @property
    def side(self) -> Side:
        return self.slot.side

    @property
    def value(self) -> int:
        return effect_value(self.effect)

    @property
    def friendly_slots(self) -> list[Slot]:
        return self.lane.slots_for(self.side)

    @property
    def enemy_slots(self) -> list[Slot]:
        return self.lane.slots_for(self.side.other)

    @property
    def friendly_occupied(self) -> int:
        return sum(1 for s in self.friendly_slots if s.occupied)

    @property
    def enemy_occupied(self) -> int:
        return sum(1 for s in self.enemy_slots if s.occupied)

    def log(self, message: str) -> None:
        self.bus.log(message)


class EffectHandler(ABC):
    """Applies one ability identifier."""
    effect_id: EffectId

    @abstractmethod
    def apply(self, context: EffectContext) -> list[EffectAction]:
        """Apply the effect; return any follow-up actions."""


# =============================================================================
# Ongoing handlers
# =============================================================================

class AntManHandler(EffectHandler):
    """+N while this side of the lane is full."""
    effect_id = EffectId.ANT_MAN_FULL_LANE

    def apply(self, context: EffectContext) -> list[EffectAction]:
        if context.friendly_occupied < len(context.friendly_slots) or context.value <= 0:
            return []
        context.slot.power += context.value * context.multiplier
        if context.multiplier > 1:
            logger.debug(
                "%s bonus multiplied by %d by Onslaught", context.card.name, context.multiplier
            )
        return []


class PunisherHandler(EffectHandler):
    """+N per enemy card in the lane."""
    effect_id = EffectId.PUNISHER_PER_ENEMY

    def apply(self, context: EffectContext) -> list[EffectAction]:
        context.slot.power += context.enemy_occupied * context.value * context.multiplier
        return []


class NamorHandler(EffectHandler):
    """+N while alone on this side of the lane. Not affected by stacking."""
    effect_id = EffectId.NAMOR_ALONE

    def apply(self, context: EffectContext) -> list[EffectAction]:
        if context.friendly_occupied == 1:
            context.slot.power += context.value
        return []


class ColossusHandler(EffectHandler):
    effect_id = EffectId.COLOSSUS_IMMUNE

    def apply(self, context: EffectContext) -> list[EffectAction]:
        context.card.immunities = Immunities(
            cannot_be_destroyed=True,
            cannot_be_moved=True,
            cannot_have_power_reduced=True,
        )
        logger.debug("%s has its immunities active", context.card.name)
        return []


# =============================================================================
# On-reveal handlers
# =============================================================================

class MedusaHandler(EffectHandler):
    """+N if revealed in the middle lane."""
    effect_id = EffectId.MEDUSA_CENTER

    def apply(self, context: EffectContext) -> list[EffectAction]:
        if context.slot.lane_index != len(context.state.lanes) // 2:
            return []
        if context.card.add_permanent_bonus(context.value):
            context.log(f"{context.card.name} gained +{context.value} in the center lane")
        return []


class StarLordHandler(EffectHandler):
    """+N if the other side queued a card into this lane this turn."""
    effect_id = EffectId.STAR_LORD_OPPONENT_PLAYED

    def apply(self, context: EffectContext) -> list[EffectAction]:
        opponent_played_here = any(
            item.side is not context.side
            and item.lane_index == context.slot.lane_index
            and item.turn_played == context.card.turn_played
            for item in context.reveal_queue
        )
        if not opponent_played_here:
            return []
        if context.card.add_permanent_bonus(context.value):
            context.log(
                f"{context.card.name} gained +{context.value} because "
                f"{context.side.other.label} also played here"
            )
        return []


class WolfsbaneHandler(EffectHandler):
    """+N per other revealed friendly card in the lane at reveal time."""
    effect_id = EffectId.WOLFSBANE_PER_ALLY

    def apply(self, context: EffectContext) -> list[EffectAction]:
        others = 0
        for slot in context.friendly_slots:
            other = context.state.card_in(slot)
            if other is not None and slot is not context.slot and other.is_revealed:
                others += 1
        bonus = others * context.value
        if context.card.add_permanent_bonus(bonus):
            context.log(
                f"{context.card.name} ({context.side.label}) gained +{bonus} "
                f"for {others} other allied card(s)"
            )
        return []


class SentinelHandler(EffectHandler):
    """Adds a Sentinel to its owner's hand."""
    effect_id = EffectId.SENTINEL_ADD_COPY

    def apply(self, context: EffectContext) -> list[EffectAction]:
        if context.catalog is None or SENTINEL_CARD_ID not in context.catalog:
            logger.warning("Sentinel card %d not found in catalog", SENTINEL_CARD_ID)
            context.log("Sentinel card not found!")
            return []
        logger.debug("Queued Sentinel for %s hand", context.side.value)
        return [AddToHandAction(side=context.side, card_id=SENTINEL_CARD_ID)]


class SpectrumHandler(EffectHandler):
    """+N permanent to every friendly ongoing card on the board."""
    effect_id = EffectId.SPECTRUM_BUFF_ONGOING

    def apply(self, context: EffectContext) -> list[EffectAction]:
        if context.value <= 0:
            return []
        context.log(f"{context.card.name} ({context.side.label}) activated its effect")
        for slot in context.state.board_slots(context.side):
            target = context.state.card_in(slot)
            if target is not None and target.template.has_ongoing:
                target.add_permanent_bonus(context.value)
                context.log(f"{target.name} received +{context.value} power")
        return []


class HawkeyeHandler(EffectHandler):
    """Schedules +N for next turn if an ally is played here then."""
    effect_id = EffectId.HAWKEYE_NEXT_TURN

    def apply(self, context: EffectContext) -> list[EffectAction]:
        context.card.hawkeye_ready_turn = context.card.turn_played + 1
        context.card.hawkeye_bonus = context.value
        context.log(
            f"{context.card.name} will gain +{context.value} if a card is played "
            f"in lane {context.slot.lane_index + 1} next turn"
        )
        return []


# =============================================================================
# Reactive, timed and move handlers
# =============================================================================

class AngelaHandler(EffectHandler):
    """+N whenever an ally is played into this card's lane."""
    effect_id = EffectId.ANGELA_ALLY_PLAYED

    def apply(self, context: EffectContext) -> list[EffectAction]:
        played = context.played_card
        if played is None or played.side is not context.side:
            return []
        if context.card.add_permanent_bonus(context.value):
            context.log(
                f"{context.card.name} gained +{context.value} because "
                f"{played.name} was played in its lane"
            )
        return []


class HawkeyeResolutionHandler(EffectHandler):
    """Pays out a scheduled Hawkeye bonus and clears the marker."""
    effect_id = EffectId.HAWKEYE_NEXT_TURN

    def apply(self, context: EffectContext) -> list[EffectAction]:
        bonus = context.card.hawkeye_bonus
        if context.card.add_permanent_bonus(bonus):
            context.log(
                f"Hawkeye triggered: {context.card.name} in lane "
                f"{context.slot.lane_index + 1} received +{bonus}"
            )
        context.card.hawkeye_ready_turn = None
        context.card.hawkeye_bonus = 0
        return []


class NightcrawlerHandler(EffectHandler):
    """Spends the one-time move if the card changed lanes this turn."""
    effect_id = EffectId.NIGHTCRAWLER_MOVE

    def apply(self, context: EffectContext) -> list[EffectAction]:
        card = context.card
        if card.has_moved:
            return []
        start = card.lane_index_at_start_of_turn
        if start is not None and start != context.slot.lane_index:
            card.has_moved = True
            context.log(f"{card.name} spent its move this turn by changing lanes")
            context.log(
                f"{card.name} moved from lane {start + 1} to lane {context.slot.lane_index + 1}"
            )
        else:
            context.log(f"{card.name} ended the turn in the same lane, move not spent")
        return []


DEFAULT_HANDLERS: dict[EffectCategory, list[EffectHandler]] = {
    EffectCategory.ONGOING: [AntManHandler(), PunisherHandler(), NamorHandler(), ColossusHandler()],
    EffectCategory.ON_REVEAL: [
        MedusaHandler(),
        StarLordHandler(),
        WolfsbaneHandler(),
        SentinelHandler(),
        SpectrumHandler(),
        HawkeyeHandler(),
    ],
    EffectCategory.ON_CARD_PLAYED: [AngelaHandler()],
    EffectCategory.RESOLUTION: [HawkeyeResolutionHandler()],
    EffectCategory.MOVE: [NightcrawlerHandler()],
    EffectCategory.END_OF_TURN: [],
}


# =============================================================================
# Dispatcher
# =============================================================================

@dataclass
class EffectDispatcher:
    """
    Applies declared abilities for every trigger point of a turn.

    Owns the per-category registries; shares the session's event bus.
    """
    bus: EventBus
    catalog: CardCatalog | None = None
    registries: dict[EffectCategory, dict[EffectId, EffectHandler]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.registries:
            for category, handlers in DEFAULT_HANDLERS.items():
                for handler in handlers:
                    self.register(category, handler)

    def register(self, category: EffectCategory, handler: EffectHandler) -> None:
        self.registries.setdefault(category, {})[handler.effect_id] = handler

    def handler_for(self, category: EffectCategory, effect_id: EffectId) -> EffectHandler | None:
        return self.registries.get(category, {}).get(effect_id)

    def _context(self, state: GameState, slot: Slot, card: CardInstance, effect: CardEffect,
                 **kwargs) -> EffectContext:
        return EffectContext(
            state=state, bus=self.bus, catalog=self.catalog,
            slot=slot, card=card, effect=effect, **kwargs,
        )

    # -------------------------------------------------------------------------
    # Ongoing
    # -------------------------------------------------------------------------

    def recompute_ongoing(self, state: GameState) -> None:
        """Reset every occupied slot to base + permanent bonus, then apply ongoing abilities."""
        for lane in state.lanes:
            for slot in lane.all_slots():
                card = state.card_in(slot)
                if card is None:
                    continue
                slot.power = card.base_power + card.permanent_bonus
                card.immunities = Immunities()
                ongoing = card.template.effects_in(EffectCategory.ONGOING)
                if not ongoing:
                    continue
                multiplier = stacking_multiplier(state, lane.slots_for(slot.side))
                for effect in ongoing:
                    handler = self.handler_for(EffectCategory.ONGOING, effect.effect_id)
                    if handler is not None:
                        handler.apply(self._context(state, slot, card, effect, multiplier=multiplier))

    def update_lane_properties(self, state: GameState) -> None:
        """Derive lane-wide flags from the cards currently in each lane."""
        for lane in state.lanes:
            protected = any(
                state.card_in(slot).template.has_effect(EffectId.ARMOR_PREVENT_DESTROY)
                for slot in lane.all_slots()
                if slot.occupied
            )
            if protected and not lane.properties.cards_cannot_be_destroyed:
                self.bus.log(f"Lane {lane.index + 1} is protected by Armor")
            lane.properties.cards_cannot_be_destroyed = protected

    # -------------------------------------------------------------------------
    # Reveal
    # -------------------------------------------------------------------------

    def is_on_reveal_blocked(self, state: GameState, lane_index: int, card: CardInstance) -> bool:
        """True if a revealed blocker in the lane suppresses this card's on-reveal."""
        if card.template.has_effect(EffectId.COSMO_BLOCK_ON_REVEAL):
            return False
        for slot in state.lanes[lane_index].all_slots():
            occupant = state.card_in(slot)
            if (
                occupant is not None
                and occupant.is_revealed
                and occupant.template.has_effect(EffectId.COSMO_BLOCK_ON_REVEAL)
            ):
                return True
        return False

    def apply_on_reveal(
        self,
        state: GameState,
        slot: Slot,
        card: CardInstance,
        reveal_queue: Sequence[RevealQueueItem],
    ) -> list[EffectAction]:
        on_reveal = card.template.effects_in(EffectCategory.ON_REVEAL)
        if not on_reveal:
            return []
        if self.is_on_reveal_blocked(state, slot.lane_index, card):
            self.bus.log(
                f"Cosmo blocked the on-reveal effect of {card.name} in lane {slot.lane_index + 1}"
            )
            return []

        actions: list[EffectAction] = []
        for effect in on_reveal:
            handler = self.handler_for(EffectCategory.ON_REVEAL, effect.effect_id)
            if handler is None:
                logger.warning("No on-reveal handler for %s", effect.effect_id.value)
                continue
            actions.extend(
                handler.apply(self._context(state, slot, card, effect, reveal_queue=reveal_queue))
            )
        return actions

    def trigger_on_card_played(self, state: GameState, played: CardInstance, lane_index: int) -> None:
        """Let other occupants of the lane react to a card being played there."""
        for slot in state.lanes[lane_index].all_slots():
            occupant = state.card_in(slot)
            if occupant is None or occupant.handle == played.handle:
                continue
            for effect in occupant.template.effects_in(EffectCategory.ON_CARD_PLAYED):
                handler = self.handler_for(EffectCategory.ON_CARD_PLAYED, effect.effect_id)
                if handler is not None:
                    handler.apply(self._context(state, slot, occupant, effect, played_card=played))

    # -------------------------------------------------------------------------
    # Turn hooks
    # -------------------------------------------------------------------------

    def check_resolution_effects(
        self, state: GameState, reveal_queue: Sequence[RevealQueueItem], current_turn: int
    ) -> None:
        """Pay out delayed bonuses whose condition is met by this turn's plays."""
        handler = self.handler_for(EffectCategory.RESOLUTION, EffectId.HAWKEYE_NEXT_TURN)
        if handler is None:
            return
        for item in reveal_queue:
            for slot in state.lanes[item.lane_index].slots_for(item.side):
                card = state.card_in(slot)
                if card is None or card.hawkeye_ready_turn != current_turn:
                    continue
                effect = card.template.find_effect(EffectId.HAWKEYE_NEXT_TURN)
                if effect is not None:
                    handler.apply(self._context(state, slot, card, effect, reveal_queue=reveal_queue))

    def handle_move_effects(self, state: GameState) -> None:
        self._apply_board_category(state, EffectCategory.MOVE)

    def apply_end_of_turn(self, state: GameState) -> None:
        self._apply_board_category(state, EffectCategory.END_OF_TURN)

    def _apply_board_category(self, state: GameState, category: EffectCategory) -> None:
        for slot in list(state.all_slots()):
            card = state.card_in(slot)
            if card is None:
                continue
            for effect in card.template.effects_in(category):
                handler = self.handler_for(category, effect.effect_id)
                if handler is not None:
                    handler.apply(self._context(state, slot, card, effect))
