"""
Lanewar - Lane battle card game engine

A turn-based, rules-driven engine for a three-lane card battler played
against a bot opponent. It provides:
- Board state with arena-stored card instances
- Card abilities dispatched through per-category handler registries
- Lane power calculation with lane effects, adjacency and doubling
- A turn state machine with a priority-ordered reveal queue
- Bot policies for the opponent
"""

__version__ = "0.1.0"
