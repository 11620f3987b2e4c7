"""
Game Loop - Drives a session between human inputs.

The loop:
1. Work out which seat must act next
2. Bot seat -> ask its policy (None means "advance the phase")
3. Human seat -> auto-advance Upkeep/Draw/Set/End, otherwise stop
4. Repeat until human input is needed or the game is over

Presentation pacing (CPU "thinking" delays) is not modelled; every step is
a synchronous reducer call. A step limit guards against policies that never
pass.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import logging

from ..engine_core.state import GamePhase
from ..engine_core.action import Action, ActionType
from ..engine_core.effect_resolver import responding_player_id
from ..engine_core.phases import seat_name

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)

# Phases a human never has to act in
AUTO_PHASES = frozenset({GamePhase.UPKEEP, GamePhase.DRAW, GamePhase.SET, GamePhase.END})

DEFAULT_MAX_STEPS = 500


class LoopState(Enum):
    """State of the game loop."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    GAME_OVER = "game_over"
    STALLED = "stalled"  # a bot could not move, or the step limit was hit


@dataclass
class TurnResult:
    """
    Result of driving the loop.

    Contains what the bots did and, on failure, why the loop stopped.
    """
    success: bool
    loop_state: LoopState

    # Actions taken while running
    bot_actions: list[str] = field(default_factory=list)
    changes: list[str] = field(default_factory=list)
    steps: int = 0

    # Errors/warnings
    errors: list[str] = field(default_factory=list)
    error_code: str | None = None

    # Game over info
    winner: int | None = None
    is_draw: bool = False


class GameLoop:
    """
    The game loop driver.

    Usage:
        loop = GameLoop(session)
        result = loop.run_until_input()      # bots play, auto phases pass
        result = loop.submit(Action.next_phase())  # human acts, bots answer
    """

    def __init__(self, session: Session, max_steps: int = DEFAULT_MAX_STEPS):
        self.session = session
        self.max_steps = max_steps

    def submit(self, action: Action) -> TurnResult:
        """Apply one human action, then run until human input is needed again."""
        state = self.session.game_state
        seat = responding_player_id(state)

        if action.action_type == ActionType.START_GAME:
            return TurnResult(
                success=False,
                loop_state=self._idle_state(),
                errors=["Games are started by creating a session"],
                error_code="INVALID_ACTION",
            )
        if self.session.is_bot_seat(seat) and not state.is_over:
            return TurnResult(
                success=False,
                loop_state=self._idle_state(),
                errors=[f"Waiting for {seat_name(state, seat)}"],
                error_code="NOT_YOUR_TURN",
            )

        result = self.session.apply(action, actor=seat_name(state, seat))
        if not result.success:
            return TurnResult(
                success=False,
                loop_state=self._idle_state(),
                errors=[result.error or "Action rejected"],
                error_code=result.error_code,
            )

        turn = self.run_until_input()
        turn.changes = result.state_changes + turn.changes
        return turn

    def run_until_input(self) -> TurnResult:
        """
        Run bots and automatic phases until a human must act.

        Returns a TurnResult describing what happened.
        """
        session = self.session
        bot_actions: list[str] = []
        changes: list[str] = []
        steps = 0

        while steps < self.max_steps:
            state = session.game_state
            if state.is_over:
                return self._finish(bot_actions, changes, steps)

            seat = responding_player_id(state)
            bot = session.bots.get(seat)
            actor = seat_name(state, seat)

            if bot is None:
                if state.pending_action is not None or state.phase not in AUTO_PHASES:
                    break
                action = Action.next_phase(player_id=seat)
            else:
                decision = bot.select_action(state)
                if decision is not None:
                    action = decision.action
                elif state.pending_action is None and state.current_player_id == seat:
                    action = Action.next_phase(player_id=seat)
                else:
                    return self._stalled(bot_actions, changes, steps, f"{actor} has no move")

            result = session.reducer.apply(state, action)
            steps += 1

            if not result.success and bot is not None and action.action_type != ActionType.NEXT_PHASE:
                logger.warning("%s action %s rejected: %s", actor, action.describe(), result.error)
                action = Action.next_phase(player_id=seat)
                result = session.reducer.apply(state, action)
                steps += 1

            if not result.success:
                return self._stalled(bot_actions, changes, steps, result.error or "Action rejected")

            session.record(result, actor)
            changes.extend(result.state_changes)
            if bot is not None:
                bot_actions.append(f"{actor}: {action.describe()}")
        else:
            logger.warning("Loop stopped after %d steps", steps)
            return self._stalled(bot_actions, changes, steps, f"Step limit of {self.max_steps} reached")

        return TurnResult(
            success=True,
            loop_state=LoopState.WAITING_HUMAN_ACTION,
            bot_actions=bot_actions,
            changes=changes,
            steps=steps,
        )

    def _idle_state(self) -> LoopState:
        return LoopState.GAME_OVER if self.session.game_state.is_over else LoopState.WAITING_HUMAN_ACTION

    def _finish(self, bot_actions: list[str], changes: list[str], steps: int) -> TurnResult:
        state = self.session.game_state
        return TurnResult(
            success=True,
            loop_state=LoopState.GAME_OVER,
            bot_actions=bot_actions,
            changes=changes,
            steps=steps,
            winner=state.winner_id,
            is_draw=state.is_draw,
        )

    def _stalled(self, bot_actions: list[str], changes: list[str], steps: int, reason: str) -> TurnResult:
        return TurnResult(
            success=False,
            loop_state=LoopState.STALLED,
            bot_actions=bot_actions,
            changes=changes,
            steps=steps,
            errors=[reason],
        )
