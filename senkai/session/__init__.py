"""
Session Module - Manages ephemeral game sessions.

A session represents one play-through of a game:
- Created when a client starts a game
- Holds the current game state and the bot seats
- Driven by the GameLoop between human inputs
- Destroyed when the game ends

Sessions are EPHEMERAL: no persistence, no replay storage.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
