"""
Bot Policy - Interface for bot decision-making.

A BotPolicy looks at a game state and returns a decision for its seat, or
None when it has nothing to do (the driver then advances the phase).
Responses to pending effects are ordinary actions, so one method covers
both turns and choices.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import random

from ..engine_core.action_generator import legal_actions as generate_legal_actions
from ..engine_core.effect_resolver import responding_player_id

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for logs/UI)
    - Confidence in the decision
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects actions for one seat. Implementations
    range from fixed heuristics to random play.
    """

    player_id: int

    @abstractmethod
    def select_action(self, state: GameState) -> BotDecision | None:
        """
        Select the next action for this policy's seat.

        Args:
            state: Current game state

        Returns:
            BotDecision with the selected action, or None to pass
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects legal actions uniformly at random.

    Used for:
    - Fuzz testing the engine
    - Baseline comparison
    """

    def __init__(self, player_id: int, seed: int | None = None):
        self.player_id = player_id
        self.rng = random.Random(seed)

    def select_action(self, state: GameState) -> BotDecision | None:
        if responding_player_id(state) != self.player_id:
            return None
        legal = generate_legal_actions(state)
        if not legal:
            return None

        action = self.rng.choice(legal)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            confidence=1.0 / len(legal),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    The first generated action outside a pending effect is NEXT_PHASE, so
    this policy simply passes through every turn. Used for deterministic
    tests.
    """

    def __init__(self, player_id: int):
        self.player_id = player_id

    def select_action(self, state: GameState) -> BotDecision | None:
        if responding_player_id(state) != self.player_id:
            return None
        legal = generate_legal_actions(state)
        if not legal:
            return None
        return BotDecision(action=legal[0], explanation="Selected first legal action")
