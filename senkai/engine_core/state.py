"""
Game State - The aggregate the reducer operates on.

Design principles:
- Mutated only inside the reducer, on a deep copy of the previous state
- Published states are never changed afterwards
- Catalog definitions are shared, not copied
- Serializable: plain dataclasses and enums
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
from typing import Iterator
import itertools
import uuid

from ..catalog.cards import CardDefinition
from .pending import PendingAction

LANE_COUNT = 3


class GamePhase(Enum):
    """Fixed per-turn phase cycle plus setup and the terminal state."""
    SETUP = "Setup"
    UPKEEP = "Upkeep"
    DRAW = "Draw"
    SET = "Set"
    MAIN = "Main"
    END = "End"
    GAME_OVER = "GameOver"


class GameMode(Enum):
    PVP = "PvP"
    PVCPU = "PvCPU"


@dataclass
class AttachedCard:
    """An attachment owned by a lane monster. Attachments never nest."""
    card: CardDefinition
    instance_id: str


@dataclass
class InPlayCard:
    """
    A catalog card instantiated onto a lane or into the magic zone.

    `damage` only grows during a turn and is reset in End.
    """
    card: CardDefinition
    instance_id: str
    tapped: bool = False
    damage: int = 0
    attachments: list[AttachedCard] = field(default_factory=list)
    temp_ap_modifier: int = 0
    face_down: bool = False

    @property
    def card_id(self) -> str:
        return self.card.id

    @property
    def name(self) -> str:
        return self.card.name


@dataclass
class PlayerState:
    """
    State for a single seat.

    Decks are stacks: the last element is the top card.
    """
    player_id: int
    name: str
    main_deck: list[CardDefinition] = field(default_factory=list)
    magic_deck: list[CardDefinition] = field(default_factory=list)
    hand: list[CardDefinition] = field(default_factory=list)
    discard: list[CardDefinition] = field(default_factory=list)
    magic_zone: list[InPlayCard] = field(default_factory=list)
    lanes: list[InPlayCard | None] = field(default_factory=lambda: [None] * LANE_COUNT)
    walls: list[CardDefinition] = field(default_factory=list)
    has_won: bool = False

    def monsters(self) -> Iterator[InPlayCard]:
        return (c for c in self.lanes if c is not None)

    def find_lane_card(self, instance_id: str | None) -> InPlayCard | None:
        for c in self.lanes:
            if c is not None and c.instance_id == instance_id:
                return c
        return None

    def lane_index_of(self, instance_id: str) -> int | None:
        for i, c in enumerate(self.lanes):
            if c is not None and c.instance_id == instance_id:
                return i
        return None

    def find_magic(self, instance_id: str | None) -> InPlayCard | None:
        for m in self.magic_zone:
            if m.instance_id == instance_id:
                return m
        return None

    def draw(self) -> CardDefinition | None:
        """Move the top main-deck card to hand. An empty deck is not a loss."""
        if not self.main_deck:
            return None
        card = self.main_deck.pop()
        self.hand.append(card)
        return card

    def card_count(self) -> int:
        """Every card this seat owns, across all zones."""
        board = sum(1 + len(c.attachments) for c in self.monsters())
        return (
            len(self.main_deck) + len(self.magic_deck) + len(self.hand)
            + len(self.discard) + len(self.magic_zone) + len(self.walls) + board
        )


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    `current_player_id` is the active seat for phase purposes. The seat that
    must answer a pending effect can differ (see responding_player_id).
    """
    players: list[PlayerState] = field(default_factory=list)
    current_player_id: int = 0
    phase: GamePhase = GamePhase.SETUP
    turn: int = 0
    message: str = "Game is setting up..."

    selected_hand_index: int | None = None
    selected_lane_instance_id: str | None = None

    game_mode: GameMode = GameMode.PVP
    starting_player_id: int = 0
    pending_action: PendingAction | None = None
    is_draw: bool = False

    @classmethod
    def initial(cls) -> GameState:
        return cls(players=[PlayerState(0, "P1"), PlayerState(1, "P2")])

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_id]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def winner_id(self) -> int | None:
        for p in self.players:
            if p.has_won:
                return p.player_id
        return None

    def get_player(self, player_id: int) -> PlayerState:
        return self.players[player_id]

    def opponent_of(self, player_id: int) -> PlayerState:
        return self.players[(player_id + 1) % 2]

    def owner_of_lane_card(self, instance_id: str) -> PlayerState | None:
        for p in self.players:
            if p.find_lane_card(instance_id) is not None:
                return p
        return None

    def owner_of_instance(self, instance_id: str) -> PlayerState | None:
        """Owner of a lane card or magic-zone card."""
        for p in self.players:
            if p.find_lane_card(instance_id) is not None or p.find_magic(instance_id) is not None:
                return p
        return None

    def clear_selection(self) -> None:
        self.selected_hand_index = None
        self.selected_lane_instance_id = None

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)

    def with_message(self, message: str) -> GameState:
        """Copy with only the status message replaced."""
        new_state = self.clone()
        new_state.message = message
        return new_state


class SequentialIds:
    """Deterministic instance-id factory for tests and replays."""

    def __init__(self, prefix: str = "c"):
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


def uuid_ids() -> str:
    return uuid.uuid4().hex
