"""
Games module - Card sets for the engine.

Each card set has its own subpackage with:
- Card catalog and starter decks
- Lane effect registry
- Match setup
"""
