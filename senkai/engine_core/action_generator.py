"""
Action Generator - Generates legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. The API to show available actions
3. Fuzz tests driving random games

Design: Generates fully specified Action objects for the seat entitled to
act. Toggling a selection off is never generated.
"""

from __future__ import annotations

from ..catalog.cards import CardType
from .state import GameState, GamePhase
from .action import Action, ActionType
from .pending import DiscardPending, SelectTargetPending, ChooseEffectPending
from .effect_resolver import responding_player_id
from . import rules


def legal_actions(state: GameState) -> list[Action]:
    """
    Generate every legal action for the responding seat.

    Returns [] before START_GAME and after the game is over.
    """
    if state.phase in (GamePhase.SETUP, GamePhase.GAME_OVER):
        return []

    seat = responding_player_id(state)
    if state.pending_action is not None:
        return _pending_actions(state, seat)

    actions = [Action.next_phase(player_id=seat)]
    if state.phase != GamePhase.MAIN:
        return actions

    actions.extend(_selection_actions(state, seat))
    actions.extend(_play_actions(state, seat))
    actions.extend(_attack_actions(state, seat))
    return actions


def _pending_actions(state: GameState, seat: int) -> list[Action]:
    pending = state.pending_action
    if isinstance(pending, DiscardPending):
        hand = state.get_player(pending.player_id).hand
        return [Action.discard_card(i, player_id=seat) for i in range(len(hand))]
    if isinstance(pending, SelectTargetPending):
        return [Action.choose_target(t, player_id=seat) for t in pending.valid_targets]
    if isinstance(pending, ChooseEffectPending):
        return [
            Action.respond_to_choice(True, player_id=seat),
            Action.respond_to_choice(False, player_id=seat),
        ]
    return []


def _is_playable(state: GameState, index: int) -> bool:
    player = state.current_player
    card = player.hand[index]
    if card.type == CardType.MAGIC or not rules.can_afford(player, card):
        return False
    if card.type == CardType.MONSTER:
        return bool(rules.placeable_lanes(player, card))
    if card.type == CardType.ATTACHMENT:
        return any(True for _ in player.monsters())
    return True


def _selection_actions(state: GameState, seat: int) -> list[Action]:
    player = state.current_player
    actions = []
    for i in range(len(player.hand)):
        if i != state.selected_hand_index and _is_playable(state, i):
            actions.append(Action.select_hand_card(i, player_id=seat))
    for monster in player.monsters():
        if monster.instance_id == state.selected_lane_instance_id:
            continue
        if rules.attack_targets(state, monster):
            actions.append(Action.select_lane_card(monster.instance_id, player_id=seat))
    return actions


def _play_actions(state: GameState, seat: int) -> list[Action]:
    index = state.selected_hand_index
    if index is None or not _is_playable(state, index):
        return []
    player = state.current_player
    card = player.hand[index]
    if card.type == CardType.MONSTER:
        return [Action.play_card(lane_index=lane, player_id=seat) for lane in rules.placeable_lanes(player, card)]
    if card.type == CardType.ATTACHMENT:
        return [Action.play_card(target_instance_id=m.instance_id, player_id=seat) for m in player.monsters()]
    return [Action.play_card(lane_index=0, player_id=seat)]


def _attack_actions(state: GameState, seat: int) -> list[Action]:
    attacker = state.current_player.find_lane_card(state.selected_lane_instance_id)
    if attacker is None:
        return []
    return [Action.declare_attack(t, player_id=seat) for t in rules.attack_targets(state, attacker)]


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action is among the generated legal actions."""
    for a in legal_actions(state):
        if a.action_type != action.action_type:
            continue
        if a.action_type == ActionType.NEXT_PHASE:
            return True
        p, q = a.payload, action.payload
        if (
            p.card_index == q.card_index
            and p.instance_id == q.instance_id
            and p.lane_index == q.lane_index
            and p.target_instance_id == q.target_instance_id
            and p.choice == q.choice
        ):
            return True
    return False
