"""
Action System - Actions, payloads, and results.

Every change to a GameState flows through one Action submitted to the
reducer. Actions are plain values; validation happens in the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

PLAYER_TARGET = "player"


class ActionType(Enum):
    """Types of actions in the system."""
    START_GAME = "START_GAME"
    NEXT_PHASE = "NEXT_PHASE"

    # Main phase
    SELECT_HAND_CARD = "SELECT_HAND_CARD"
    SELECT_LANE_CARD = "SELECT_LANE_CARD"
    PLAY_CARD = "PLAY_CARD"
    DECLARE_ATTACK = "DECLARE_ATTACK"

    # Responses to a pending effect
    DISCARD_CARD = "DISCARD_CARD"
    CHOOSE_TARGET = "CHOOSE_TARGET"
    RESPOND_TO_CHOICE = "RESPOND_TO_CHOICE"


RESPONSE_ACTIONS = frozenset({
    ActionType.DISCARD_CARD,
    ActionType.CHOOSE_TARGET,
    ActionType.RESPOND_TO_CHOICE,
})

MAIN_PHASE_ACTIONS = frozenset({
    ActionType.SELECT_HAND_CARD,
    ActionType.SELECT_LANE_CARD,
    ActionType.PLAY_CARD,
    ActionType.DECLARE_ATTACK,
})


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields. `player_id` optionally names
    the submitting seat; when set, it must be the seat entitled to act.
    """
    player_id: int | None = None

    # START_GAME
    p1_deck: Any | None = None  # Deck
    p2_deck: Any | None = None  # Deck
    game_mode: Any | None = None  # GameMode
    starting_player_id: int | None = None

    # Selection / discard
    card_index: int | None = None
    instance_id: str | None = None

    # PLAY_CARD / DECLARE_ATTACK / CHOOSE_TARGET
    lane_index: int | None = None
    target_instance_id: str | None = None

    # RESPOND_TO_CHOICE
    choice: bool | None = None


@dataclass
class Action:
    """A complete action to be applied to the game state."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def start_game(cls, p1_deck, p2_deck, game_mode=None, starting_player_id: int | None = None) -> Action:
        return cls(
            action_type=ActionType.START_GAME,
            payload=ActionPayload(
                p1_deck=p1_deck,
                p2_deck=p2_deck,
                game_mode=game_mode,
                starting_player_id=starting_player_id,
            ),
        )

    @classmethod
    def next_phase(cls, player_id: int | None = None) -> Action:
        return cls(ActionType.NEXT_PHASE, ActionPayload(player_id=player_id))

    @classmethod
    def select_hand_card(cls, card_index: int, player_id: int | None = None) -> Action:
        return cls(ActionType.SELECT_HAND_CARD, ActionPayload(player_id=player_id, card_index=card_index))

    @classmethod
    def select_lane_card(cls, instance_id: str, player_id: int | None = None) -> Action:
        return cls(ActionType.SELECT_LANE_CARD, ActionPayload(player_id=player_id, instance_id=instance_id))

    @classmethod
    def discard_card(cls, card_index: int, player_id: int | None = None) -> Action:
        return cls(ActionType.DISCARD_CARD, ActionPayload(player_id=player_id, card_index=card_index))

    @classmethod
    def play_card(
        cls,
        lane_index: int | None = None,
        target_instance_id: str | None = None,
        player_id: int | None = None,
    ) -> Action:
        return cls(
            ActionType.PLAY_CARD,
            ActionPayload(player_id=player_id, lane_index=lane_index, target_instance_id=target_instance_id),
        )

    @classmethod
    def declare_attack(cls, target: str, player_id: int | None = None) -> Action:
        """`target` is an enemy instance id or PLAYER_TARGET."""
        return cls(ActionType.DECLARE_ATTACK, ActionPayload(player_id=player_id, target_instance_id=target))

    @classmethod
    def choose_target(cls, target_instance_id: str, player_id: int | None = None) -> Action:
        return cls(
            ActionType.CHOOSE_TARGET,
            ActionPayload(player_id=player_id, target_instance_id=target_instance_id),
        )

    @classmethod
    def respond_to_choice(cls, choice: bool, player_id: int | None = None) -> Action:
        return cls(ActionType.RESPOND_TO_CHOICE, ActionPayload(player_id=player_id, choice=choice))

    def describe(self) -> str:
        """Short human-readable form, used in logs."""
        p = self.payload
        args = {
            "card_index": p.card_index,
            "instance_id": p.instance_id,
            "lane_index": p.lane_index,
            "target": p.target_instance_id,
            "choice": p.choice,
        }
        shown = ", ".join(f"{k}={v}" for k, v in args.items() if v is not None)
        return f"{self.action_type.value}({shown})"


@dataclass
class ActionResult:
    """
    Result of applying an action.

    A failed result still carries a state: the previous one with only its
    message replaced, so drivers can always publish `new_state`.
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes, for logs and UI
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None, state: Any | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(cls, state: Any, changes: list[str] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
