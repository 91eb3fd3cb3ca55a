"""
Bots module - Opponent AI implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- GreedyLanePolicy: Strongest card into the weakest winnable lane
- RandomPolicy / FirstLegalPolicy: Baselines for simulation and tests
"""

from .policy import (
    BotPolicy,
    BotDecision,
    GreedyLanePolicy,
    RandomPolicy,
    FirstLegalPolicy,
    POLICIES,
    make_policy,
)

__all__ = [
    "BotPolicy",
    "BotDecision",
    "GreedyLanePolicy",
    "RandomPolicy",
    "FirstLegalPolicy",
    "POLICIES",
    "make_policy",
]
