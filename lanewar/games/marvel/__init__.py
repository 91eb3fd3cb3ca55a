"""
Marvel - The built-in card set.

This module contains:
- The card catalog and starter decks
- The lane effect registry
- Match setup
"""

from .cards import MARVEL_CARDS, MARVEL_CATALOG, PLAYER_DECK_IDS, OPPONENT_DECK_IDS, get_card_by_id
from .lane_effects import LANE_EFFECTS, assign_lane_effects
from .setup import setup_marvel_game

__all__ = [
    "MARVEL_CARDS",
    "MARVEL_CATALOG",
    "PLAYER_DECK_IDS",
    "OPPONENT_DECK_IDS",
    "get_card_by_id",
    "LANE_EFFECTS",
    "assign_lane_effects",
    "setup_marvel_game",
]
