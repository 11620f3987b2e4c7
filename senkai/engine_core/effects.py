"""
Card Effects - Identity-keyed triggered abilities.

Effects are registered per card id in dispatch tables instead of being
branched on inside the reducer:

    ON_PLAY      fires after a card is placed / resolved from hand
    ON_KILL      fires when an attacker destroys a monster in combat
    END_OF_MAIN  checked before leaving Main; may suspend the transition

Every handler mutates the draft state it is given and may install a
pending effect.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from ..catalog.cards import CardDefinition, CardColor, Keyword
from ..catalog.catalog import CardCatalog
from .state import GameState, PlayerState, InPlayCard
from .action import ActionPayload
from .pending import (
    DiscardPending, DiscardReason, SelectTargetPending, TargetEffect,
    ChooseEffectPending, ChoiceEffect,
)
from . import rules

logger = logging.getLogger(__name__)


@dataclass
class EffectContext:
    """
    Services available to a transition while it mutates a draft state.

    Collects human-readable changes for the ActionResult.
    """
    catalog: CardCatalog
    rng: random.Random
    new_id: Callable[[], str]
    changes: list[str] = field(default_factory=list)

    def note(self, state: GameState, message: str, append: bool = False) -> None:
        """Record a change and show it as the status message."""
        state.message = f"{state.message} {message}" if append else message
        self.changes.append(message)

    def instantiate(self, card: CardDefinition, tapped: bool = False) -> InPlayCard:
        return InPlayCard(card=card, instance_id=self.new_id(), tapped=tapped)


OnPlay = Callable[[GameState, PlayerState, CardDefinition, ActionPayload, EffectContext], None]
OnKill = Callable[[GameState, PlayerState, InPlayCard, EffectContext], None]
EndOfMain = Callable[[GameState, PlayerState, EffectContext], None]

ON_PLAY: dict[str, OnPlay] = {}
ON_KILL: dict[str, OnKill] = {}
END_OF_MAIN: dict[str, EndOfMain] = {}


def _register(table: dict, card_id: str):
    def decorator(fn):
        table[card_id] = fn
        return fn
    return decorator


def on_play(card_id: str):
    return _register(ON_PLAY, card_id)


def on_kill(card_id: str):
    return _register(ON_KILL, card_id)


def end_of_main(card_id: str):
    return _register(END_OF_MAIN, card_id)


def run_on_play(state: GameState, player: PlayerState, card: CardDefinition,
                payload: ActionPayload, ctx: EffectContext) -> None:
    handler = ON_PLAY.get(card.id)
    if handler is not None:
        logger.debug("on-play effect %s for player %d", card.id, player.player_id)
        handler(state, player, card, payload, ctx)


def run_on_kill(state: GameState, attacker: InPlayCard, ctx: EffectContext) -> None:
    handler = ON_KILL.get(attacker.card.id)
    if handler is None:
        return
    owner = state.owner_of_lane_card(attacker.instance_id)
    if owner is None:
        return
    handler(state, owner, attacker, ctx)


def run_end_of_main(state: GameState, ctx: EffectContext) -> bool:
    """Run end-of-main triggers. Returns True if one suspended the phase change."""
    player = state.current_player
    for card_id, handler in END_OF_MAIN.items():
        if any(c.card.id == card_id for c in player.monsters()):
            handler(state, player, ctx)
            if state.pending_action is not None:
                return True
    return False


def _enemy_targets(state: GameState, player: PlayerState,
                   allow: Callable[[InPlayCard], bool] = lambda c: True) -> tuple[str, ...]:
    opponent = state.opponent_of(player.player_id)
    return tuple(c.instance_id for c in opponent.monsters() if allow(c))


# ============================================================================
# On play
# ============================================================================

@on_play("b008")
def hakutaku(state, player, card, payload, ctx):
    """Draw 1, then discard 1."""
    if player.draw() is not None:
        state.pending_action = DiscardPending(
            player_id=player.player_id, count=1, reason=DiscardReason.DRAW_DISCARD,
        )
        ctx.note(state, "Draw 1, now choose a card to discard.", append=True)


@on_play("g008")
def smilodon(state, player, card, payload, ctx):
    """+200 AP until end of turn when placed in a side lane."""
    if payload.lane_index not in rules.SIDE_LANES:
        return
    monster = player.lanes[payload.lane_index]
    if monster is not None:
        monster.temp_ap_modifier = 200
        ctx.note(state, f"{card.name} gains 200 AP this turn.", append=True)


@on_play("r001")
def fire_drake(state, player, card, payload, ctx):
    if rules.magic_count(player, CardColor.RED) < 4:
        return
    targets = _enemy_targets(state, player)
    if targets:
        state.pending_action = SelectTargetPending(
            player_id=player.player_id,
            effect=TargetEffect.DEAL_DAMAGE,
            source_card_id=card.id,
            valid_targets=targets,
            amount=300,
        )
        ctx.note(state, "Choose a target for its effect.", append=True)


@on_play("r005")
def fire_barrage(state, player, card, payload, ctx):
    targets = _enemy_targets(state, player)
    if targets:
        state.pending_action = SelectTargetPending(
            player_id=player.player_id,
            effect=TargetEffect.DEAL_DAMAGE,
            source_card_id=card.id,
            valid_targets=targets,
            amount=300,
        )


@on_play("g005")
def ancient_pulse(state, player, card, payload, ctx):
    """Ramp: one magic card enters the magic zone tapped."""
    if player.magic_deck:
        magic = player.magic_deck.pop()
        player.magic_zone.append(ctx.instantiate(magic, tapped=True))
        ctx.note(state, f"{magic.name} enters the magic zone tapped.", append=True)


@on_play("b005")
def fleeting_send_off(state, player, card, payload, ctx):
    targets = _enemy_targets(state, player, lambda c: not c.card.has(Keyword.BIG_DEMON))
    if targets:
        state.pending_action = SelectTargetPending(
            player_id=player.player_id,
            effect=TargetEffect.RETURN_TO_HAND,
            source_card_id=card.id,
            valid_targets=targets,
        )


# ============================================================================
# On kill
# ============================================================================

@on_kill("b001")
def yamato_takeru(state, player, attacker, ctx):
    if rules.magic_count(player, CardColor.BLUE) >= 4 and player.draw() is not None:
        ctx.note(state, f"{attacker.card.name}'s effect draws a card!", append=True)


# ============================================================================
# End of main
# ============================================================================

@end_of_main("b009")
def karasu_tengu(state, player, ctx):
    if rules.magic_count(player, CardColor.BLUE) < 3:
        return
    tengu = next(c for c in player.monsters() if c.card.id == "b009")
    state.pending_action = ChooseEffectPending(
        effect=ChoiceEffect.KARASU_TENGU_RETURN,
        instance_id=tengu.instance_id,
    )
    ctx.note(state, f"Return {tengu.card.name} and its attachments to hand?")
