"""
Engine Core - Deterministic game state management and effect resolution.

The engine is the runtime that:
1. Builds a GameState from two decks (START_GAME)
2. Drives the phase cycle
3. Validates and applies actions via the reducer
4. Suspends on pending effects and resumes when they are answered
5. Generates legal actions
"""

from .state import (
    GameState, GamePhase, GameMode, PlayerState, InPlayCard, AttachedCard,
    SequentialIds, LANE_COUNT,
)
from .action import Action, ActionType, ActionPayload, ActionResult, PLAYER_TARGET
from .pending import (
    PendingAction, DiscardPending, DiscardReason, SelectTargetPending, TargetEffect,
    ChooseEffectPending, ChoiceEffect,
)
from .reducer import Reducer, apply_action
from .effect_resolver import responding_player_id
from .action_generator import legal_actions, is_legal

__all__ = [
    "GameState",
    "GamePhase",
    "GameMode",
    "PlayerState",
    "InPlayCard",
    "AttachedCard",
    "SequentialIds",
    "LANE_COUNT",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "PLAYER_TARGET",
    "PendingAction",
    "DiscardPending",
    "DiscardReason",
    "SelectTargetPending",
    "TargetEffect",
    "ChooseEffectPending",
    "ChoiceEffect",
    "Reducer",
    "apply_action",
    "responding_player_id",
    "legal_actions",
    "is_legal",
]
