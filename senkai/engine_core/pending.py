"""
Pending effects - suspended, choice-driven effects.

At most one pending effect is outstanding on a GameState. While one is set,
only the action that addresses it is accepted. Each variant is its own typed
record; the `kind` tag is what clients see.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union


class DiscardReason(Enum):
    DRAW_DISCARD = "draw_discard"  # Hakutaku: draw 1, then discard 1
    SAVE_PHOENIX = "save_phoenix"  # discard paid to rescue a Phoenix


class TargetEffect(Enum):
    DEAL_DAMAGE = "deal_damage"
    RETURN_TO_HAND = "return_to_hand"


class ChoiceEffect(Enum):
    SAVE_PHOENIX = "save_phoenix"
    AWAKENED_MAGIC = "awakened_magic"
    KARASU_TENGU_RETURN = "karasu_tengu_return"


@dataclass(frozen=True)
class DiscardPending:
    """Player `player_id` must discard `count` cards from hand."""
    player_id: int
    count: int
    reason: DiscardReason
    save_instance_id: str | None = None  # Phoenix being rescued

    kind = "discard"


@dataclass(frozen=True)
class SelectTargetPending:
    """Player `player_id` must choose one of `valid_targets`."""
    player_id: int
    effect: TargetEffect
    source_card_id: str
    valid_targets: tuple[str, ...]
    amount: int | None = None

    kind = "select_target"


@dataclass(frozen=True)
class ChooseEffectPending:
    """
    A yes/no decision about an optional effect of card instance `instance_id`.

    The responder is whoever owns that instance when the answer arrives.

    Context fields:
        attacker_instance_id: SAVE_PHOENIX raised by an attack, for on-kill
            triggers if the rescue is declined.
        wall_card_id / walls_remaining: AWAKENED_MAGIC, the wall just
            destroyed and how many more the attack still has to destroy.
    """
    effect: ChoiceEffect
    instance_id: str
    attacker_instance_id: str | None = None
    wall_card_id: str | None = None
    walls_remaining: int = 0

    kind = "choose_effect"


PendingAction = Union[DiscardPending, SelectTargetPending, ChooseEffectPending]
