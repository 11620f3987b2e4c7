"""
Phase Machine - Turn structure and automatic per-phase effects.

    Setup -> Upkeep -> Draw -> Set -> Main -> End -> Upkeep -> ...

GameOver is terminal. Leaving Main may be suspended by an end-of-main
trigger; leaving End switches the active seat.
"""

from __future__ import annotations
import logging

from ..catalog.cards import Keyword
from .state import GameState, GamePhase, GameMode, PlayerState
from .effects import EffectContext, run_end_of_main
from . import rules

logger = logging.getLogger(__name__)

NEXT_PHASE: dict[GamePhase, GamePhase] = {
    GamePhase.SETUP: GamePhase.UPKEEP,
    GamePhase.UPKEEP: GamePhase.DRAW,
    GamePhase.DRAW: GamePhase.SET,
    GamePhase.SET: GamePhase.MAIN,
    GamePhase.MAIN: GamePhase.END,
    GamePhase.END: GamePhase.UPKEEP,
    GamePhase.GAME_OVER: GamePhase.GAME_OVER,
}


def seat_name(state: GameState, player_id: int) -> str:
    if state.game_mode == GameMode.PVCPU and player_id == 1:
        return "CPU"
    return f"P{player_id + 1}"


def advance_phase(state: GameState, ctx: EffectContext) -> None:
    """Apply one NEXT_PHASE step to the draft state."""
    current = state.phase
    if current == GamePhase.GAME_OVER:
        return

    if current == GamePhase.MAIN and run_end_of_main(state, ctx):
        logger.debug("Leaving Main suspended by %s", type(state.pending_action).__name__)
        return

    if current == GamePhase.END:
        end_of_turn(state, ctx)
        if state.phase == GamePhase.GAME_OVER:
            return

    enter_phase(state, NEXT_PHASE[current], ctx)


def end_of_turn(state: GameState, ctx: EffectContext) -> None:
    """
    End-phase cleanup across both boards, then hand the turn over.

    Both main decks empty at this point ends the game in a draw.
    """
    for player in state.players:
        for monster in player.monsters():
            monster.damage = 0
            monster.temp_ap_modifier = 0
    state.clear_selection()

    if all(not p.main_deck for p in state.players):
        state.phase = GamePhase.GAME_OVER
        state.is_draw = True
        ctx.note(state, "Both players are out of cards. It's a draw!")
        logger.info("Game over: draw on turn %d", state.turn)
        return

    state.current_player_id = (state.current_player_id + 1) % 2
    if state.current_player_id == state.starting_player_id:
        state.turn += 1


def enter_phase(state: GameState, phase: GamePhase, ctx: EffectContext) -> None:
    """Set the phase and run its automatic effects for the current player."""
    state.phase = phase
    player = state.current_player

    if phase == GamePhase.UPKEEP:
        _upkeep(player)
    elif phase == GamePhase.DRAW:
        player.draw()
    elif phase == GamePhase.SET:
        _set_magic(state, player, ctx)

    ctx.note(state, f"Turn {state.turn} - {seat_name(state, player.player_id)}'s {phase.value} Phase.")


def _upkeep(player: PlayerState) -> None:
    for monster in player.monsters():
        kept = []
        for attachment in monster.attachments:
            if attachment.card.has(Keyword.VANISH):
                player.discard.append(attachment.card)
            else:
                kept.append(attachment)
        monster.attachments = kept
        monster.tapped = False
    for magic in player.magic_zone:
        magic.tapped = False


def _set_magic(state: GameState, player: PlayerState, ctx: EffectContext) -> None:
    first_turn = state.turn == 1 and player.player_id == state.starting_player_id
    amount = rules.SET_AMOUNT_FIRST_TURN if first_turn else rules.SET_AMOUNT
    for _ in range(amount):
        if not player.magic_deck:
            break
        player.magic_zone.append(ctx.instantiate(player.magic_deck.pop()))
