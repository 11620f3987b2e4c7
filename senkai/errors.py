"""Rule violation exceptions raised by action handlers.

Handlers raise these; the reducer converts them into failed ActionResults
so nothing escapes a transition.
"""

from __future__ import annotations


class GameRuleViolation(Exception):
    """Base class for rule related exceptions."""

    error_code = "INVALID_ACTION"

    @property
    def code(self) -> str:
        return self.error_code


class IllegalActionError(GameRuleViolation):
    """Raised when an action breaks a game rule (mana, placement, attack legality)."""

    error_code = "ILLEGAL_ACTION"


class WrongPhaseError(GameRuleViolation):
    error_code = "WRONG_PHASE"


class PendingActionError(GameRuleViolation):
    """Raised when an action does not address the outstanding pending effect."""

    error_code = "PENDING_ACTION"


class NoPendingActionError(GameRuleViolation):
    error_code = "NO_PENDING_ACTION"


class NotYourTurnError(GameRuleViolation):
    error_code = "NOT_YOUR_TURN"


class GameOverError(GameRuleViolation):
    error_code = "GAME_OVER"


class StaleReferenceError(GameRuleViolation):
    """Raised when an action names a card instance that is not on the board."""

    error_code = "STALE_REFERENCE"


class UnknownCardError(GameRuleViolation):
    """Raised when a card id does not resolve in the catalog."""

    error_code = "UNKNOWN_CARD"

    def __init__(self, card_id: str) -> None:
        super().__init__(f"Unknown card id: {card_id}")
        self.card_id = card_id


__all__ = [
    "GameRuleViolation",
    "IllegalActionError",
    "WrongPhaseError",
    "PendingActionError",
    "NoPendingActionError",
    "NotYourTurnError",
    "GameOverError",
    "StaleReferenceError",
    "UnknownCardError",
]
