"""
Effect Resolver - Answers to pending effects.

A pending effect pauses normal play until the entitled player addresses it:

    DiscardPending       -> DISCARD_CARD
    SelectTargetPending  -> CHOOSE_TARGET
    ChooseEffectPending  -> RESPOND_TO_CHOICE

Resolving one may install the next (SAVE_PHOENIX yes -> Discard; an
Awakened Magic answer resumes wall destruction, which may prompt again).

A pending effect whose card instance has vanished is cleared with a
warning instead of being applied.
"""

from __future__ import annotations
from dataclasses import replace
import logging

from .state import GameState, GamePhase, PlayerState
from .action import ActionType, ActionPayload
from .pending import (
    PendingAction, DiscardPending, DiscardReason, SelectTargetPending, TargetEffect,
    ChooseEffectPending, ChoiceEffect,
)
from .effects import EffectContext, run_on_kill
from .combat import damage_monster, destroy_monster, return_to_hand, continue_wall_destruction
from .phases import enter_phase
from ..errors import IllegalActionError, NoPendingActionError

logger = logging.getLogger(__name__)

# Which action answers which pending variant
RESPONSE_FOR: dict[type, ActionType] = {
    DiscardPending: ActionType.DISCARD_CARD,
    SelectTargetPending: ActionType.CHOOSE_TARGET,
    ChooseEffectPending: ActionType.RESPOND_TO_CHOICE,
}


def responding_player_id(state: GameState) -> int:
    """
    The seat entitled to submit the next action.

    Usually the current player; a pending effect can redirect input to the
    owner of the affected card.
    """
    pending = state.pending_action
    if pending is None:
        return state.current_player_id
    if isinstance(pending, (DiscardPending, SelectTargetPending)):
        return pending.player_id
    owner = state.owner_of_instance(pending.instance_id)
    return owner.player_id if owner is not None else state.current_player_id


def expected_response(pending: PendingAction) -> ActionType:
    return RESPONSE_FOR[type(pending)]


def _stale(state: GameState, pending: PendingAction, instance_id: str | None, ctx: EffectContext) -> None:
    logger.warning(
        "Pending %s refers to missing instance %s; clearing it",
        type(pending).__name__, instance_id,
    )
    state.pending_action = None
    ctx.note(state, "The effect's card is no longer in play.")


# ============================================================================
# DISCARD_CARD
# ============================================================================

def resolve_discard(state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
    pending = state.pending_action
    if not isinstance(pending, DiscardPending):
        raise NoPendingActionError("No discard is pending.")

    player = state.get_player(pending.player_id)
    index = payload.card_index
    if index is None or not 0 <= index < len(player.hand):
        raise IllegalActionError("Choose a card in hand to discard.")

    card = player.hand.pop(index)
    player.discard.append(card)
    ctx.note(state, f"Discarded {card.name}.")

    if pending.count > 1 and player.hand:
        state.pending_action = replace(pending, count=pending.count - 1)
        return

    state.pending_action = None
    if pending.reason == DiscardReason.SAVE_PHOENIX:
        _finish_phoenix_save(state, player, pending, ctx)


def _finish_phoenix_save(state: GameState, owner: PlayerState, pending: DiscardPending,
                         ctx: EffectContext) -> None:
    phoenix = owner.find_lane_card(pending.save_instance_id)
    if phoenix is None:
        _stale(state, pending, pending.save_instance_id, ctx)
        return
    phoenix.damage = 0
    return_to_hand(owner, phoenix)
    ctx.note(state, f"{owner.name} discarded a card to return {phoenix.name} to hand!")


# ============================================================================
# CHOOSE_TARGET
# ============================================================================

def resolve_target(state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
    pending = state.pending_action
    if not isinstance(pending, SelectTargetPending):
        raise NoPendingActionError("No target selection is pending.")

    target_id = payload.target_instance_id
    if target_id not in pending.valid_targets:
        raise IllegalActionError("Invalid target.")

    owner = state.opponent_of(pending.player_id)
    target = owner.find_lane_card(target_id)
    if target is None:
        _stale(state, pending, target_id, ctx)
        return

    state.pending_action = None
    if pending.effect == TargetEffect.DEAL_DAMAGE:
        damage_monster(state, owner, target, pending.amount or 0, ctx)
    elif pending.effect == TargetEffect.RETURN_TO_HAND:
        return_to_hand(owner, target)
        ctx.note(state, f"{target.name} is returned to hand.")


# ============================================================================
# RESPOND_TO_CHOICE
# ============================================================================

def resolve_choice(state: GameState, payload: ActionPayload, ctx: EffectContext) -> None:
    pending = state.pending_action
    if not isinstance(pending, ChooseEffectPending):
        raise NoPendingActionError("No choice is pending.")
    if payload.choice is None:
        raise IllegalActionError("Answer yes or no.")

    owner = state.owner_of_instance(pending.instance_id)
    if owner is None:
        _stale(state, pending, pending.instance_id, ctx)
        if pending.effect == ChoiceEffect.KARASU_TENGU_RETURN:
            enter_phase(state, GamePhase.END, ctx)
        return

    state.pending_action = None
    handler = CHOICE_HANDLERS[pending.effect]
    handler(state, owner, pending, payload.choice, ctx)


def _save_phoenix(state, owner, pending, accept, ctx):
    phoenix = owner.find_lane_card(pending.instance_id)
    if accept:
        state.pending_action = DiscardPending(
            player_id=owner.player_id,
            count=1,
            reason=DiscardReason.SAVE_PHOENIX,
            save_instance_id=pending.instance_id,
        )
        ctx.note(state, f"{owner.name}, choose a card to discard to save {phoenix.name}.")
        return

    destroy_monster(owner, phoenix)
    ctx.note(state, f"{phoenix.name} was not saved and is destroyed.")
    if pending.attacker_instance_id is not None:
        attacker_owner = state.owner_of_lane_card(pending.attacker_instance_id)
        if attacker_owner is not None:
            run_on_kill(state, attacker_owner.find_lane_card(pending.attacker_instance_id), ctx)


def _awakened_magic(state, owner, pending, accept, ctx):
    if accept:
        magic = owner.find_magic(pending.instance_id)
        magic.face_down = True
        # Most recent matching card is the wall just destroyed
        for i in range(len(owner.discard) - 1, -1, -1):
            if owner.discard[i].id == pending.wall_card_id:
                wall = owner.discard.pop(i)
                owner.hand.append(wall)
                ctx.note(state, f"Used {magic.name} to save {wall.name}!")
                break
    else:
        ctx.note(state, "Awakened Magic was not used.")
    continue_wall_destruction(state, owner, pending.walls_remaining, ctx)


def _karasu_tengu_return(state, owner, pending, accept, ctx):
    if accept:
        tengu = owner.find_lane_card(pending.instance_id)
        index = owner.lane_index_of(tengu.instance_id)
        owner.lanes[index] = None
        owner.hand.append(tengu.card)
        owner.hand.extend(a.card for a in tengu.attachments)
        ctx.note(state, f"{tengu.name} and its attachments returned to hand.")
    enter_phase(state, GamePhase.END, ctx)


CHOICE_HANDLERS = {
    ChoiceEffect.SAVE_PHOENIX: _save_phoenix,
    ChoiceEffect.AWAKENED_MAGIC: _awakened_magic,
    ChoiceEffect.KARASU_TENGU_RETURN: _karasu_tengu_return,
}
