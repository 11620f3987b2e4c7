"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through Reducer.apply().

Design principles:
- (state, action) -> ActionResult; the input state is never modified
- Validates before applying
- Rule violations become failed results carrying the previous state with
  only its message replaced; no exception leaves apply()
- Shuffling and instance ids come from injected sources so a seed and an
  action sequence reproduce a game exactly
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from ..catalog import CardCatalog, CardType, default_catalog
from .state import GameState, GamePhase, GameMode, AttachedCard, uuid_ids
from .action import (
    Action, ActionType, ActionPayload, ActionResult,
    RESPONSE_ACTIONS, MAIN_PHASE_ACTIONS,
)
from .effects import EffectContext, run_on_play
from .effect_resolver import (
    responding_player_id, expected_response,
    resolve_discard, resolve_target, resolve_choice,
)
from .combat import declare_attack
from .phases import advance_phase, enter_phase, seat_name
from . import rules
from ..errors import (
    GameRuleViolation, IllegalActionError, WrongPhaseError, PendingActionError,
    NoPendingActionError, NotYourTurnError, GameOverError, StaleReferenceError,
)

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless apart from its injected sources - all game state is in GameState.
    """
    catalog: CardCatalog = field(default_factory=default_catalog)
    rng: random.Random = field(default_factory=random.Random)
    id_factory: Callable[[], str] = uuid_ids

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the new state, or a failure whose
        new_state is `state` with the error as its message.
        """
        try:
            self._validate_action(state, action)
        except GameRuleViolation as e:
            return self._reject(state, action, e)

        handler = self._get_handler(action.action_type)
        draft = state.clone()
        ctx = EffectContext(catalog=self.catalog, rng=self.rng, new_id=self.id_factory)

        try:
            new_state = handler(draft, action.payload, ctx) or draft
        except GameRuleViolation as e:
            return self._reject(state, action, e)
        except Exception as e:
            logger.exception("Handler for %s crashed", action.describe())
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR", state=state.with_message(str(e)))

        logger.debug(
            "%s -> turn %d %s (player %d)",
            action.describe(), new_state.turn, new_state.phase.value, new_state.current_player_id,
        )
        return ActionResult.success_with_state(new_state, changes=ctx.changes)

    def _reject(self, state: GameState, action: Action, error: GameRuleViolation) -> ActionResult:
        logger.info("Rejected %s: [%s] %s", action.describe(), error.code, error)
        return ActionResult.failure(str(error), error_code=error.code, state=state.with_message(str(error)))

    def _validate_action(self, state: GameState, action: Action) -> None:
        """
        Raise a GameRuleViolation if the action may not be applied now.

        Order: setup / game over, pending effect gating, seat, phase.
        """
        action_type = action.action_type
        if action_type == ActionType.START_GAME:
            return

        if state.phase == GamePhase.SETUP:
            raise WrongPhaseError("Game not started - only START_GAME is allowed")

        if state.phase == GamePhase.GAME_OVER:
            if action_type == ActionType.NEXT_PHASE:
                return
            raise GameOverError("Game is over - no actions allowed")

        pending = state.pending_action
        if pending is not None:
            if action_type != expected_response(pending):
                raise PendingActionError(f"Resolve the pending {pending.kind} first.")
        elif action_type in RESPONSE_ACTIONS:
            raise NoPendingActionError("There is nothing to respond to.")

        player_id = action.payload.player_id
        if player_id is not None and player_id != responding_player_id(state):
            raise NotYourTurnError(f"Player {player_id} may not act now.")

        if action_type in MAIN_PHASE_ACTIONS and state.phase != GamePhase.MAIN:
            raise WrongPhaseError(f"{action_type.value} is only allowed in the Main phase.")

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_GAME: self._handle_start_game,
            ActionType.NEXT_PHASE: self._handle_next_phase,
            ActionType.SELECT_HAND_CARD: self._handle_select_hand_card,
            ActionType.SELECT_LANE_CARD: self._handle_select_lane_card,
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.DECLARE_ATTACK: self._handle_declare_attack,
            ActionType.DISCARD_CARD: resolve_discard,
            ActionType.CHOOSE_TARGET: resolve_target,
            ActionType.RESPOND_TO_CHOICE: resolve_choice,
        }
        return handlers[action_type]

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_start_game(self, state: GameState, payload: ActionPayload, ctx: EffectContext) -> GameState:
        """Build a fresh game from two decks. Replaces whatever state existed."""
        decks = [payload.p1_deck, payload.p2_deck]
        if any(d is None for d in decks):
            raise IllegalActionError("Two decks are required to start a game.")

        # Resolve every id before touching the rng
        resolved = [
            (
                [self.catalog.require(card_id) for card_id in deck.main_deck],
                [self.catalog.require(card_id) for card_id in deck.magic_deck],
            )
            for deck in decks
        ]

        mode = GameMode(payload.game_mode) if payload.game_mode is not None else GameMode.PVP
        starting = payload.starting_player_id
        if starting is None:
            starting = self.rng.randrange(2)
        elif starting not in (0, 1):
            raise IllegalActionError(f"Invalid starting player: {starting}")

        new_state = GameState.initial()
        new_state.game_mode = mode
        new_state.turn = 1
        new_state.current_player_id = starting
        new_state.starting_player_id = starting

        for player, (main, magic) in zip(new_state.players, resolved):
            player.name = seat_name(new_state, player.player_id)
            self.rng.shuffle(main)
            self.rng.shuffle(magic)
            player.walls = main[:rules.STARTING_WALLS]
            player.hand = main[rules.STARTING_WALLS:rules.STARTING_WALLS + rules.STARTING_HAND]
            player.main_deck = main[rules.STARTING_WALLS + rules.STARTING_HAND:]
            player.magic_deck = magic

        logger.info("Game started (%s), %s goes first", mode.value, new_state.current_player.name)
        enter_phase(new_state, GamePhase.UPKEEP, ctx)
        return new_state

    def _handle_next_phase(self, state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
        advance_phase(state, ctx)

    def _handle_select_hand_card(self, state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
        """Toggle the hand selection; clears any lane selection."""
        hand = state.current_player.hand
        index = payload.card_index
        if index is None or not 0 <= index < len(hand):
            raise IllegalActionError("No card at that hand position.")
        state.selected_hand_index = None if state.selected_hand_index == index else index
        state.selected_lane_instance_id = None

    def _handle_select_lane_card(self, state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
        """Toggle the lane selection; clears any hand selection."""
        instance_id = payload.instance_id
        if state.current_player.find_lane_card(instance_id) is None:
            raise StaleReferenceError(f"No monster {instance_id} in your lanes.")
        if state.selected_lane_instance_id == instance_id:
            state.selected_lane_instance_id = None
        else:
            state.selected_lane_instance_id = instance_id
        state.selected_hand_index = None

    def _handle_play_card(self, state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
        """
        Play the selected hand card.

        All checks (mana, color, placement, attachment target) run before
        any magic is tapped.
        """
        player = state.current_player
        index = state.selected_hand_index
        if index is None or not 0 <= index < len(player.hand):
            raise IllegalActionError("Select a card from your hand first.")
        card = player.hand[index]
        if card.type == CardType.MAGIC:
            raise IllegalActionError("Magic cards cannot be played from hand.")

        rules.check_affordable(player, card)
        target = None
        if card.type == CardType.MONSTER:
            rules.check_monster_placement(player, card, payload.lane_index)
        elif card.type == CardType.ATTACHMENT:
            target = rules.check_attachment_target(player, payload.target_instance_id)

        for magic in rules.select_payment(player, card):
            magic.tapped = True

        player.hand.pop(index)
        state.clear_selection()
        ctx.note(state, f"Played {card.name}!")

        if card.type == CardType.MONSTER:
            occupant = player.lanes[payload.lane_index]
            if occupant is not None:
                player.discard.append(occupant.card)
                player.discard.extend(a.card for a in occupant.attachments)
            player.lanes[payload.lane_index] = ctx.instantiate(card)
        elif card.type == CardType.ATTACHMENT:
            target.attachments.append(AttachedCard(card=card, instance_id=ctx.new_id()))
            ctx.note(state, f"Attached {card.name} to {target.name}.")
        else:
            player.discard.append(card)

        run_on_play(state, player, card, payload, ctx)

    def _handle_declare_attack(self, state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
        declare_attack(state, payload.target_instance_id, ctx)


def apply_action(state: GameState, action: Action, reducer: Reducer | None = None) -> ActionResult:
    """
    Convenience function to apply an action.

    Uses a default Reducer (built-in catalog, unseeded rng) if none is given.
    """
    reducer = reducer or Reducer()
    return reducer.apply(state, action)
