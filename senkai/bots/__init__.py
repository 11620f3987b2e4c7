"""
Bots module - Automated seats.

Provides:
- BotPolicy: Interface for bot decision-making
- CpuPolicy: The heuristic CPU opponent
- RandomPolicy / FirstLegalPolicy: Baselines over the legal-action generator
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .cpu import CpuPolicy

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "CpuPolicy",
]
