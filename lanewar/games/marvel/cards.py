"""
Marvel Cards - The built-in card catalog.

Card structure:
- Integer id (stable; effects may refer to cards by id, e.g. Sentinel = 21)
- Cost (energy) and base power
- Declared abilities from the effect DSL

The catalog is validated once at import and is read-only afterwards.
"""

from __future__ import annotations

from ...engine_core.state import CardTemplate
from ...spec_schema.catalog import CardCatalog
from ...spec_schema.effect_dsl import (
    EffectId,
    move,
    on_card_played,
    on_reveal,
    ongoing,
    passive,
)
from ...spec_schema.validation import load_catalog


MARVEL_CARDS: list[CardTemplate] = [
    # Cost 1
    CardTemplate(1, "Quicksilver", 1, 2, "Starts in your opening hand.",
                 (passive(EffectId.QUICKSILVER_START_IN_HAND),)),
    CardTemplate(2, "Ant-Man", 1, 1, "Ongoing: If you have 4 cards here, +3 Power.",
                 (ongoing(EffectId.ANT_MAN_FULL_LANE, 3),)),
    CardTemplate(3, "Hawkeye", 1, 1, "On Reveal: If you play a card here next turn, +3 Power.",
                 (on_reveal(EffectId.HAWKEYE_NEXT_TURN, 3),)),
    CardTemplate(4, "Nightcrawler", 1, 2, "You can move this once.",
                 (move(EffectId.NIGHTCRAWLER_MOVE),)),
    CardTemplate(20, "Misty Knight", 1, 2),

    # Cost 2
    CardTemplate(5, "Medusa", 2, 2, "On Reveal: If this is at the middle location, +3 Power.",
                 (on_reveal(EffectId.MEDUSA_CENTER, 3),)),
    CardTemplate(6, "Star-Lord", 2, 2,
                 "On Reveal: If your opponent played a card here this turn, +3 Power.",
                 (on_reveal(EffectId.STAR_LORD_OPPONENT_PLAYED, 3),)),
    CardTemplate(7, "Angela", 2, 2, "After you play a card here, +2 Power.",
                 (on_card_played(EffectId.ANGELA_ALLY_PLAYED, 2),)),
    CardTemplate(12, "Armor", 2, 3, "Ongoing: Cards at this location can't be destroyed.",
                 (ongoing(EffectId.ARMOR_PREVENT_DESTROY),)),
    CardTemplate(14, "Colossus", 2, 3, "Can't be destroyed, moved, or have its Power reduced.",
                 (ongoing(EffectId.COLOSSUS_IMMUNE),)),
    CardTemplate(21, "Sentinel", 2, 3, "On Reveal: Add another Sentinel to your hand.",
                 (on_reveal(EffectId.SENTINEL_ADD_COPY),)),
    CardTemplate(24, "Shocker", 2, 3),

    # Cost 3
    CardTemplate(8, "Cosmo", 3, 3, "Ongoing: On Reveal abilities won't happen at this location.",
                 (ongoing(EffectId.COSMO_BLOCK_ON_REVEAL),)),
    CardTemplate(9, "Wolfsbane", 3, 1, "On Reveal: +2 Power for each other card you have here.",
                 (on_reveal(EffectId.WOLFSBANE_PER_ALLY, 2),)),
    CardTemplate(10, "Punisher", 3, 2, "Ongoing: +1 Power for each opposing card here.",
                 (ongoing(EffectId.PUNISHER_PER_ENEMY, 1),)),
    CardTemplate(11, "Mister Fantastic", 3, 2, "Ongoing: Adjacent locations have +2 Power.",
                 (ongoing(EffectId.MISTER_FANTASTIC_ADJACENT, 2),)),
    CardTemplate(23, "Cyclops", 3, 4),

    # Cost 4+
    CardTemplate(13, "Namor", 4, 5, "Ongoing: +5 Power if this is your only card here.",
                 (ongoing(EffectId.NAMOR_ALONE, 5),)),
    CardTemplate(15, "Klaw", 5, 4, "Ongoing: The location to the right has +6 Power.",
                 (ongoing(EffectId.KLAW_RIGHT, 6),)),
    CardTemplate(16, "Iron Man", 5, 0, "Ongoing: Your total Power is doubled here.",
                 (ongoing(EffectId.IRON_MAN_DOUBLE_POWER),)),
    CardTemplate(22, "Abomination", 5, 9),
    CardTemplate(17, "Spectrum", 6, 5, "On Reveal: Give your Ongoing cards +2 Power.",
                 (on_reveal(EffectId.SPECTRUM_BUFF_ONGOING, 2),)),
    CardTemplate(18, "Onslaught", 6, 7, "Ongoing: Double your other Ongoing effects here.",
                 (ongoing(EffectId.ONSLAUGHT_DOUBLE_ONGOING),)),
    CardTemplate(19, "Hulk", 6, 12),
]

MARVEL_CATALOG: CardCatalog = load_catalog("marvel", MARVEL_CARDS)

# Twelve-card starter decks, by card id
PLAYER_DECK_IDS: list[int] = [1, 2, 3, 5, 7, 9, 10, 11, 13, 16, 18, 19]
OPPONENT_DECK_IDS: list[int] = [20, 4, 6, 12, 14, 21, 24, 8, 23, 15, 22, 17]


def get_card_by_id(card_id: int) -> CardTemplate | None:
    return MARVEL_CATALOG.get(card_id)
