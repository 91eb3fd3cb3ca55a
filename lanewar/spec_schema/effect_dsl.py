"""
Effect DSL - Declarative card abilities.

Card templates declare their abilities as a tuple of effect records.
Each record names:
- The category (when the ability fires)
- The effect identifier (which handler applies it)
- The payload the handler needs, and nothing else

Two variants exist:
- ValueEffect: the ability carries an integer bonus
- FlagEffect: the ability carries no payload

Which variant and which categories are legal for each identifier is
recorded in EFFECT_SIGNATURES and checked once, when the catalog loads.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union


class EffectCategory(Enum):
    """When an ability fires."""
    ONGOING = "ongoing"
    ON_REVEAL = "on_reveal"
    ON_CARD_PLAYED = "on_card_played"
    END_OF_TURN = "end_of_turn"
    RESOLUTION = "resolution"
    MOVE = "move"
    PASSIVE = "passive"  # Deck/hand setup abilities, never dispatched on board


class EffectId(Enum):
    """Identifiers for every ability the engine knows how to apply."""
    # Ongoing
    ANT_MAN_FULL_LANE = "ant_man_full_lane"
    PUNISHER_PER_ENEMY = "punisher_per_enemy"
    NAMOR_ALONE = "namor_alone"
    COLOSSUS_IMMUNE = "colossus_immune"
    IRON_MAN_DOUBLE_POWER = "iron_man_double_power"
    ONSLAUGHT_DOUBLE_ONGOING = "onslaught_double_ongoing"
    MISTER_FANTASTIC_ADJACENT = "mister_fantastic_adjacent"
    KLAW_RIGHT = "klaw_right"
    ARMOR_PREVENT_DESTROY = "armor_prevent_destroy"
    COSMO_BLOCK_ON_REVEAL = "cosmo_block_on_reveal"

    # On reveal
    MEDUSA_CENTER = "medusa_center"
    STAR_LORD_OPPONENT_PLAYED = "star_lord_opponent_played"
    WOLFSBANE_PER_ALLY = "wolfsbane_per_ally"
    SENTINEL_ADD_COPY = "sentinel_add_copy"
    SPECTRUM_BUFF_ONGOING = "spectrum_buff_ongoing"
    HAWKEYE_NEXT_TURN = "hawkeye_next_turn"

    # On card played
    ANGELA_ALLY_PLAYED = "angela_ally_played"

    # Move
    NIGHTCRAWLER_MOVE = "nightcrawler_move"

    # Passive
    QUICKSILVER_START_IN_HAND = "quicksilver_start_in_hand"


@dataclass(frozen=True)
class ValueEffect:
    """An ability with an integer bonus, e.g. '+3 if in the middle lane'."""
    category: EffectCategory
    effect_id: EffectId
    value: int


@dataclass(frozen=True)
class FlagEffect:
    """An ability with no payload, e.g. 'cannot be destroyed'."""
    category: EffectCategory
    effect_id: EffectId


CardEffect = Union[ValueEffect, FlagEffect]


@dataclass(frozen=True)
class EffectSignature:
    """Which variant and categories an effect identifier accepts."""
    variant: type
    categories: frozenset[EffectCategory]


def _sig(variant: type, *categories: EffectCategory) -> EffectSignature:
    return EffectSignature(variant=variant, categories=frozenset(categories))


EFFECT_SIGNATURES: dict[EffectId, EffectSignature] = {
    EffectId.ANT_MAN_FULL_LANE: _sig(ValueEffect, EffectCategory.ONGOING),
    EffectId.PUNISHER_PER_ENEMY: _sig(ValueEffect, EffectCategory.ONGOING),
    EffectId.NAMOR_ALONE: _sig(ValueEffect, EffectCategory.ONGOING),
    EffectId.COLOSSUS_IMMUNE: _sig(FlagEffect, EffectCategory.ONGOING),
    EffectId.IRON_MAN_DOUBLE_POWER: _sig(FlagEffect, EffectCategory.ONGOING),
    EffectId.ONSLAUGHT_DOUBLE_ONGOING: _sig(FlagEffect, EffectCategory.ONGOING),
    EffectId.MISTER_FANTASTIC_ADJACENT: _sig(ValueEffect, EffectCategory.ONGOING),
    EffectId.KLAW_RIGHT: _sig(ValueEffect, EffectCategory.ONGOING),
    EffectId.ARMOR_PREVENT_DESTROY: _sig(FlagEffect, EffectCategory.ONGOING),
    EffectId.COSMO_BLOCK_ON_REVEAL: _sig(FlagEffect, EffectCategory.ONGOING),
    EffectId.MEDUSA_CENTER: _sig(ValueEffect, EffectCategory.ON_REVEAL),
    EffectId.STAR_LORD_OPPONENT_PLAYED: _sig(ValueEffect, EffectCategory.ON_REVEAL),
    EffectId.WOLFSBANE_PER_ALLY: _sig(ValueEffect, EffectCategory.ON_REVEAL),
    EffectId.SENTINEL_ADD_COPY: _sig(FlagEffect, EffectCategory.ON_REVEAL),
    EffectId.SPECTRUM_BUFF_ONGOING: _sig(ValueEffect, EffectCategory.ON_REVEAL),
    EffectId.HAWKEYE_NEXT_TURN: _sig(
        ValueEffect, EffectCategory.ON_REVEAL, EffectCategory.RESOLUTION
    ),
    EffectId.ANGELA_ALLY_PLAYED: _sig(ValueEffect, EffectCategory.ON_CARD_PLAYED),
    EffectId.NIGHTCRAWLER_MOVE: _sig(FlagEffect, EffectCategory.MOVE),
    EffectId.QUICKSILVER_START_IN_HAND: _sig(FlagEffect, EffectCategory.PASSIVE),
}


def ongoing(effect_id: EffectId, value: int | None = None) -> CardEffect:
    """Shorthand for an ongoing ability."""
    return _make(EffectCategory.ONGOING, effect_id, value)


def on_reveal(effect_id: EffectId, value: int | None = None) -> CardEffect:
    """Shorthand for an on-reveal ability."""
    return _make(EffectCategory.ON_REVEAL, effect_id, value)


def on_card_played(effect_id: EffectId, value: int) -> CardEffect:
    """Shorthand for an on-card-played ability."""
    return _make(EffectCategory.ON_CARD_PLAYED, effect_id, value)


def move(effect_id: EffectId) -> CardEffect:
    return _make(EffectCategory.MOVE, effect_id, None)


def passive(effect_id: EffectId) -> CardEffect:
    return _make(EffectCategory.PASSIVE, effect_id, None)


def _make(category: EffectCategory, effect_id: EffectId, value: int | None) -> CardEffect:
    if value is None:
        return FlagEffect(category=category, effect_id=effect_id)
    return ValueEffect(category=category, effect_id=effect_id, value=value)


def effect_value(effect: CardEffect) -> int:
    """Bonus carried by an effect; 0 for flag effects."""
    if isinstance(effect, ValueEffect):
        return effect.value
    return 0
