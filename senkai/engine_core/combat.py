"""
Combat - Attack resolution, damage and monster removal.

Direct attacks destroy walls one at a time so an Awakened Magic prompt can
interrupt between walls; the remaining destruction resumes once the prompt
is answered (see continue_wall_destruction).
"""

from __future__ import annotations
import logging

from ..catalog.cards import CardDefinition, Keyword
from .state import GameState, GamePhase, PlayerState, InPlayCard
from .pending import ChooseEffectPending, ChoiceEffect
from .effects import EffectContext, run_on_kill
from ..errors import IllegalActionError
from .action import PLAYER_TARGET
from . import rules

logger = logging.getLogger(__name__)


# ============================================================================
# Removal
# ============================================================================

def destroy_monster(owner: PlayerState, monster: InPlayCard) -> None:
    """Base card and its attachments go to the owner's discard."""
    index = owner.lane_index_of(monster.instance_id)
    if index is None:
        return
    owner.lanes[index] = None
    owner.discard.append(monster.card)
    owner.discard.extend(a.card for a in monster.attachments)


def return_to_hand(owner: PlayerState, monster: InPlayCard) -> None:
    """Base card to hand; attachments are discarded."""
    index = owner.lane_index_of(monster.instance_id)
    if index is None:
        return
    owner.lanes[index] = None
    owner.hand.append(monster.card)
    owner.discard.extend(a.card for a in monster.attachments)


# ============================================================================
# Damage
# ============================================================================

def damage_monster(
    state: GameState,
    owner: PlayerState,
    target: InPlayCard,
    amount: int,
    ctx: EffectContext,
    attacker: InPlayCard | None = None,
) -> None:
    """
    Add damage to `target` and destroy it if lethal.

    A lethal hit on a Phoenix whose owner holds a card is intercepted with a
    SAVE_PHOENIX choice instead.
    """
    target.damage += amount
    if attacker is None:
        ctx.note(state, f"{target.name} takes {amount} damage.")
    if not rules.is_lethal(owner, target):
        return

    if target.card.has(Keyword.PHOENIX) and owner.hand:
        state.pending_action = ChooseEffectPending(
            effect=ChoiceEffect.SAVE_PHOENIX,
            instance_id=target.instance_id,
            attacker_instance_id=attacker.instance_id if attacker else None,
        )
        ctx.note(state, f"{owner.name}, discard a card to save {target.name}?", append=True)
        return

    destroy_monster(owner, target)
    ctx.note(state, f"{target.name} is destroyed!", append=True)
    if attacker is not None:
        run_on_kill(state, attacker, ctx)


# ============================================================================
# Attacks
# ============================================================================

def declare_attack(state: GameState, target: str | None, ctx: EffectContext) -> None:
    """
    Resolve DECLARE_ATTACK for the selected lane card of the current player.

    The attacker is tapped once legality checks pass, before the enemy
    target is looked up.
    """
    player = state.current_player
    opponent = state.opponent_of(player.player_id)
    attacker = player.find_lane_card(state.selected_lane_instance_id)
    if attacker is None:
        raise IllegalActionError("Select one of your monsters to attack with.")
    if not target:
        raise IllegalActionError("Choose an attack target.")
    rules.check_attack(state, attacker, target)

    attacker.tapped = True
    state.selected_lane_instance_id = None

    if target == PLAYER_TARGET:
        _attack_player(state, player, opponent, attacker, ctx)
        return

    defender = opponent.find_lane_card(target)
    if defender is None:
        logger.info("Attack target %s not found; %s stays tapped", target, attacker.instance_id)
        ctx.note(state, f"{attacker.name} found no target.")
        return

    ap = rules.total_ap(player, attacker)
    ctx.note(state, f"{attacker.name} attacks {defender.name} for {ap} damage.")
    damage_monster(state, opponent, defender, ap, ctx, attacker=attacker)


def _attack_player(state: GameState, player: PlayerState, opponent: PlayerState,
                   attacker: InPlayCard, ctx: EffectContext) -> None:
    if not opponent.walls:
        declare_winner(state, player, ctx, f"{attacker.name} delivers the final blow!")
        return
    count = rules.DOUBLE_CRASH_WALLS if attacker.card.has(Keyword.DOUBLE_CRASHER) else 1
    ctx.note(state, f"{attacker.name} attacks {opponent.name}!")
    continue_wall_destruction(state, opponent, count, ctx)


def continue_wall_destruction(state: GameState, defender: PlayerState, count: int,
                              ctx: EffectContext) -> None:
    """
    Destroy up to `count` walls from the top of the defender's pile.

    Stops early when an Awakened Magic prompt is installed. When the run is
    finished and the defender has no walls left, the attacker wins.
    """
    for i in range(count):
        if not defender.walls:
            break
        wall = defender.walls.pop()
        defender.discard.append(wall)
        ctx.note(state, f"A wall of {defender.name} is destroyed.", append=True)

        magic = find_awakened_magic(defender, wall)
        if magic is not None:
            state.pending_action = ChooseEffectPending(
                effect=ChoiceEffect.AWAKENED_MAGIC,
                instance_id=magic.instance_id,
                wall_card_id=wall.id,
                walls_remaining=count - i - 1,
            )
            ctx.note(state, f"{defender.name} may use {magic.name} to save {wall.name}.", append=True)
            return

    if not defender.walls:
        attacker_side = state.opponent_of(defender.player_id)
        declare_winner(state, attacker_side, ctx, f"{defender.name} has no walls left!")


def find_awakened_magic(defender: PlayerState, wall: CardDefinition) -> InPlayCard | None:
    for m in defender.magic_zone:
        if (m.card.has(Keyword.AWAKENED) and not m.tapped and not m.face_down
                and m.card.color == wall.color):
            return m
    return None


def declare_winner(state: GameState, winner: PlayerState, ctx: EffectContext, reason: str) -> None:
    winner.has_won = True
    state.phase = GamePhase.GAME_OVER
    state.clear_selection()
    ctx.note(state, f"{reason} {winner.name} wins!")
    logger.info("Game over: %s wins on turn %d", winner.name, state.turn)
