"""
Rules - Game constants and side-effect-free rule checks.

Shared by the reducer, the legal-action generator and the CPU policy so
every caller agrees on what is affordable, placeable and attackable.
"""

from __future__ import annotations

from ..catalog.cards import CardDefinition, CardColor, Keyword
from .state import GameState, PlayerState, InPlayCard, LANE_COUNT
from .action import PLAYER_TARGET
from ..errors import IllegalActionError

CENTER_LANE = 1
SIDE_LANES = (0, 2)
STARTING_WALLS = 4
STARTING_HAND = 4
SET_AMOUNT_FIRST_TURN = 1
SET_AMOUNT = 2
DOUBLE_CRASH_WALLS = 2


# ============================================================================
# Mana
# ============================================================================

def available_mana(player: PlayerState) -> list[InPlayCard]:
    """Untapped, face-up magic cards."""
    return [m for m in player.magic_zone if not m.tapped and not m.face_down]


def magic_count(player: PlayerState, color: CardColor) -> int:
    """Face-up magic of a color, tapped or not. Used by resource thresholds."""
    return sum(1 for m in player.magic_zone if not m.face_down and m.card.color == color)


def needs_color(card: CardDefinition) -> bool:
    return card.cost > 0 and card.color != CardColor.COLORLESS


def check_affordable(player: PlayerState, card: CardDefinition) -> None:
    """Raise IllegalActionError unless `player` can pay for `card` right now."""
    mana = available_mana(player)
    if len(mana) < card.cost:
        raise IllegalActionError("Not enough magic!")
    if needs_color(card) and not any(m.card.color == card.color for m in mana):
        raise IllegalActionError(f"You need at least one {card.color.value} magic!")


def can_afford(player: PlayerState, card: CardDefinition) -> bool:
    try:
        check_affordable(player, card)
    except IllegalActionError:
        return False
    return True


def select_payment(player: PlayerState, card: CardDefinition) -> list[InPlayCard]:
    """
    Pick the magic cards that pay for `card`.

    One mana of the card's color first, then any untapped mana in zone
    order until the cost is covered.
    """
    mana = available_mana(player)
    chosen: list[InPlayCard] = []
    if needs_color(card):
        for m in mana:
            if m.card.color == card.color:
                chosen.append(m)
                break
    for m in mana:
        if len(chosen) >= card.cost:
            break
        if all(m.instance_id != c.instance_id for c in chosen):
            chosen.append(m)
    return chosen


# ============================================================================
# Placement
# ============================================================================

def check_monster_placement(player: PlayerState, card: CardDefinition, lane_index: int | None) -> None:
    if lane_index is None or not 0 <= lane_index < LANE_COUNT:
        raise IllegalActionError("Choose a lane for the monster.")
    if card.has(Keyword.BIG_DEMON) and lane_index != CENTER_LANE:
        raise IllegalActionError("【大怪魔】 can only be played in the center lane.")
    occupant = player.lanes[lane_index]
    if occupant is not None and occupant.tapped:
        raise IllegalActionError("Cannot replace a tapped monster.")


def placeable_lanes(player: PlayerState, card: CardDefinition) -> list[int]:
    """Lanes a monster may legally be played into."""
    lanes = []
    for i in range(LANE_COUNT):
        try:
            check_monster_placement(player, card, i)
        except IllegalActionError:
            continue
        lanes.append(i)
    return lanes


def check_attachment_target(player: PlayerState, target_instance_id: str | None) -> InPlayCard:
    target = player.find_lane_card(target_instance_id) if target_instance_id else None
    if target is None:
        raise IllegalActionError("Invalid target for attachment.")
    return target


# ============================================================================
# Stats
# ============================================================================

# Card id -> (color, threshold, bonus) for printed "while you have N magic" bonuses
STATIC_BONUSES: dict[str, tuple[CardColor, int, int]] = {
    "g001": (CardColor.GREEN, 4, 200),
}


def static_bonus(owner: PlayerState, monster: InPlayCard) -> int:
    bonus_rule = STATIC_BONUSES.get(monster.card.id)
    if bonus_rule is None:
        return 0
    color, threshold, bonus = bonus_rule
    return bonus if magic_count(owner, color) >= threshold else 0


def total_ap(owner: PlayerState, monster: InPlayCard) -> int:
    """Base AP + temporary modifier + attachment AP modifiers (+ static bonus)."""
    return (
        (monster.card.ap or 0)
        + monster.temp_ap_modifier
        + sum(a.card.ap_modifier or 0 for a in monster.attachments)
        + static_bonus(owner, monster)
    )


def total_hp(owner: PlayerState, monster: InPlayCard) -> int:
    """Base HP + attachment HP modifiers + temporary modifier (+ static bonus)."""
    return (
        (monster.card.hp or 0)
        + sum(a.card.hp_modifier or 0 for a in monster.attachments)
        + monster.temp_ap_modifier
        + static_bonus(owner, monster)
    )


def is_lethal(owner: PlayerState, monster: InPlayCard) -> bool:
    return monster.damage >= total_hp(owner, monster)


# ============================================================================
# Attacks
# ============================================================================

def check_attack(state: GameState, attacker: InPlayCard, target: str) -> None:
    """
    Raise IllegalActionError if `attacker` may not attack `target`.

    `target` is an enemy instance id or PLAYER_TARGET. Existence of an
    enemy target is not checked here.
    """
    if attacker.tapped:
        raise IllegalActionError(f"{attacker.card.name} is tapped.")
    if target != PLAYER_TARGET:
        return
    if state.turn == 1:
        raise IllegalActionError("Cannot attack players on the first turn.")
    if attacker.card.has(Keyword.TIMID):
        raise IllegalActionError(f"{attacker.card.name} cannot attack players directly.")
    player = state.current_player
    opponent = state.opponent_of(player.player_id)
    guard = opponent.lanes[CENTER_LANE]
    if guard is not None and guard.card.has(Keyword.BIG_DEMON):
        if player.lane_index_of(attacker.instance_id) != CENTER_LANE:
            raise IllegalActionError("Cannot attack player directly while opponent has a Daikaima.")


def can_attack(state: GameState, attacker: InPlayCard, target: str) -> bool:
    try:
        check_attack(state, attacker, target)
    except IllegalActionError:
        return False
    return True


def attack_targets(state: GameState, attacker: InPlayCard) -> list[str]:
    """Every target `attacker` may legally be declared against."""
    if attacker.tapped:
        return []
    opponent = state.opponent_of(state.current_player_id)
    targets = [c.instance_id for c in opponent.monsters()]
    if can_attack(state, attacker, PLAYER_TARGET):
        targets.append(PLAYER_TARGET)
    return targets
