"""
Marvel Game Setup - Creates the initial game state.

This module handles:
- Building both decks from catalog ids
- Assigning hidden lane effects
- Dealing starting hands (with the guaranteed starting card)
- Choosing the initial priority side

Shuffling uses a seeded RNG so a seed reproduces the whole setup.
"""

from __future__ import annotations
import logging
import random

from ...engine_core.events import EventBus
from ...engine_core.hand import deal_starting_hand
from ...engine_core.state import GameConfig, GameState, Side
from ...spec_schema.catalog import CardCatalog
from .cards import MARVEL_CATALOG, OPPONENT_DECK_IDS, PLAYER_DECK_IDS
from .lane_effects import assign_lane_effects

logger = logging.getLogger(__name__)


def setup_marvel_game(
    bus: EventBus,
    config: GameConfig | None = None,
    rng: random.Random | None = None,
    catalog: CardCatalog | None = None,
    player_deck_ids: list[int] | None = None,
    opponent_deck_ids: list[int] | None = None,
) -> GameState:
    """
    Set up a new match.

    Args:
        bus: The session's event bus (receives setup narration)
        config: Rules configuration (defaults if not provided)
        rng: Random source; seeded from config.random_seed if not provided
        catalog: Card catalog (built-in Marvel catalog by default)
        player_deck_ids: Player deck as catalog ids
        opponent_deck_ids: Opponent deck as catalog ids

    Returns:
        GameState ready for the first player turn
    """
    config = config or GameConfig()
    rng = rng or random.Random(config.random_seed)
    catalog = catalog or MARVEL_CATALOG

    player_deck = catalog.resolve(player_deck_ids or PLAYER_DECK_IDS)
    opponent_deck = catalog.resolve(opponent_deck_ids or OPPONENT_DECK_IDS)

    state = GameState.create(config, priority=rng.choice([Side.PLAYER, Side.OPPONENT]))
    chosen = assign_lane_effects(state, rng)
    logger.info("Lane effects for this match: %s", ", ".join(e.name for e in chosen))

    deal_starting_hand(state.side(Side.PLAYER), player_deck, config.starting_hand_size, rng, bus)
    deal_starting_hand(state.side(Side.OPPONENT), opponent_deck, config.starting_hand_size, rng, bus)
    return state
