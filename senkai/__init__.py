"""
Senkai - Three-lane card battle engine

A deterministic, rules-driven engine for a two-player card battle game with
a CPU opponent. The engine provides:
- A card catalog with keyword capability flags and starter decks
- State management through a single reducer
- Suspendable card effects (discard, target, yes/no prompts)
- Legal action generation
- Bot policies and a session driver
"""

__version__ = "0.1.0"
