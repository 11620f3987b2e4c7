"""
Card definitions - immutable catalog entries.

A CardDefinition is the read-only description of a card. Runtime copies
on the board wrap a definition (see engine_core.state.InPlayCard); cards in
decks, hands, discard piles and walls are the definitions themselves.

Keywords are recognised by containment of bracketed tokens in the rules
text and stored as capability flags when the catalog is loaded, so rule
code never scans text.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class CardType(Enum):
    MONSTER = "Monster"
    SPELL = "Spell"
    ATTACHMENT = "Attachment"
    MAGIC = "Magic"


class CardColor(Enum):
    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"
    COLORLESS = "Colorless"


class Rarity(Enum):
    SR = "SR"  # Super Rare
    R = "R"
    N = "N"


class Keyword(Enum):
    """Capability flags derived from rules text."""
    BIG_DEMON = "big_demon"  # center lane only, shields the player from side lanes
    DOUBLE_CRASHER = "double_crasher"  # destroys 2 walls per direct hit
    TIMID = "timid"  # may never attack a player
    VANISH = "vanish"  # attachment discarded at its owner's next Upkeep
    AWAKENED = "awakened"  # magic card that can rescue a destroyed wall
    PHOENIX = "phoenix"  # may be saved to hand by discarding a card


# Verbatim tokens as printed on the cards
KEYWORD_TOKENS: dict[str, Keyword] = {
    "【大怪魔】": Keyword.BIG_DEMON,
    "【ダブルクラッシャー】": Keyword.DOUBLE_CRASHER,
    "【ひるむ】": Keyword.TIMID,
    "【消滅】": Keyword.VANISH,
    "《覚醒魔力》": Keyword.AWAKENED,
}


def parse_keywords(text: str) -> frozenset[Keyword]:
    """Return the keywords whose token appears anywhere in the text."""
    return frozenset(kw for token, kw in KEYWORD_TOKENS.items() if token in text)


@dataclass(frozen=True)
class CardDefinition:
    """
    A card as printed.

    Note: ap/hp are only set for monsters and ap_modifier/hp_modifier only
    for attachments.
    """
    id: str
    name: str
    type: CardType
    color: CardColor
    cost: int
    rarity: Rarity
    text: str = ""
    ap: int | None = None
    hp: int | None = None
    ap_modifier: int | None = None
    hp_modifier: int | None = None
    image_url: str = ""
    keywords: frozenset[Keyword] = field(default_factory=frozenset)

    def __deepcopy__(self, memo):
        # Definitions are shared by every state snapshot
        return self

    def has(self, keyword: Keyword) -> bool:
        return keyword in self.keywords

    @property
    def is_monster(self) -> bool:
        return self.type == CardType.MONSTER


@dataclass(frozen=True)
class Deck:
    """
    A deck as handed to START_GAME: ordered card ids.

    Legality (20 main, 10 magic, at most 2 copies) belongs to the deck
    builder; the engine plays whatever it is given.
    """
    name: str
    main_deck: tuple[str, ...]
    magic_deck: tuple[str, ...]

    @classmethod
    def from_lists(cls, name: str, main_deck: list[str], magic_deck: list[str]) -> Deck:
        return cls(name=name, main_deck=tuple(main_deck), magic_deck=tuple(magic_deck))
