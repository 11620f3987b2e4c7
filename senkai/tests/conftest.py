"""
Pytest fixtures for Senkai tests.
"""

import random

import pytest

from ..catalog import CardCatalog, CardDefinition, Deck, STARTER_DECKS, default_catalog
from ..engine_core.state import (
    GameState, GamePhase, GameMode, InPlayCard, AttachedCard, SequentialIds,
)
from ..engine_core.action import Action
from ..engine_core.reducer import Reducer

MAGIC_IDS = {"Blue": "b_magic", "Green": "g_magic", "Red": "r_magic"}


class BoardBuilder:
    """
    Builds a mid-game state directly, without playing up to it.

    Defaults: Main phase of turn 2, seat 0 to act, four plain walls and a
    few cards in each main deck so no draw game triggers.
    """

    def __init__(self, catalog: CardCatalog):
        self.catalog = catalog
        self.ids = SequentialIds("t")
        self.state = GameState.initial()
        self.state.phase = GamePhase.MAIN
        self.state.turn = 2
        for player in self.state.players:
            player.walls = [self.card("g004") for _ in range(4)]
            player.main_deck = [self.card("b004"), self.card("r004"), self.card("g002")]

    def card(self, card_id: str) -> CardDefinition:
        return self.catalog.require(card_id)

    def magic(self, player_id: int, color: str, count: int = 1, tapped: bool = False,
              card_id: str | None = None) -> list[InPlayCard]:
        """Put `count` face-up magic cards of a color ("Blue", "Red", ...) into the zone."""
        made = [
            InPlayCard(card=self.card(card_id or MAGIC_IDS[color]), instance_id=self.ids(), tapped=tapped)
            for _ in range(count)
        ]
        self.state.players[player_id].magic_zone.extend(made)
        return made

    def lane(self, player_id: int, lane: int, card_id: str, *attachments: str, **fields) -> InPlayCard:
        monster = InPlayCard(card=self.card(card_id), instance_id=self.ids(), **fields)
        monster.attachments = [AttachedCard(card=self.card(a), instance_id=self.ids()) for a in attachments]
        self.state.players[player_id].lanes[lane] = monster
        return monster

    def hand(self, player_id: int, *card_ids: str) -> None:
        self.state.players[player_id].hand = [self.card(c) for c in card_ids]

    def deck(self, player_id: int, *card_ids: str) -> None:
        self.state.players[player_id].main_deck = [self.card(c) for c in card_ids]

    def walls(self, player_id: int, *card_ids: str) -> None:
        self.state.players[player_id].walls = [self.card(c) for c in card_ids]

    def build(self, **fields) -> GameState:
        for key, value in fields.items():
            setattr(self.state, key, value)
        return self.state


@pytest.fixture
def catalog() -> CardCatalog:
    return default_catalog()


@pytest.fixture
def reducer(catalog) -> Reducer:
    """Seeded reducer with readable instance ids."""
    return Reducer(catalog=catalog, rng=random.Random(7), id_factory=SequentialIds())


@pytest.fixture
def board(catalog) -> BoardBuilder:
    return BoardBuilder(catalog)


@pytest.fixture
def blue_deck() -> Deck:
    return STARTER_DECKS["blue"]


@pytest.fixture
def red_deck() -> Deck:
    return STARTER_DECKS["red"]


@pytest.fixture
def started_state(reducer, blue_deck, red_deck) -> GameState:
    """A PvP game just started, seat 0 in its first Upkeep."""
    result = reducer.apply(
        GameState.initial(),
        Action.start_game(blue_deck, red_deck, GameMode.PVP, starting_player_id=0),
    )
    assert result.success, result.error
    return result.new_state


def apply_ok(reducer: Reducer, state: GameState, action: Action) -> GameState:
    result = reducer.apply(state, action)
    assert result.success, result.error
    return result.new_state


@pytest.fixture
def play():
    """Apply an action and assert it succeeded; returns the new state."""
    return apply_ok
