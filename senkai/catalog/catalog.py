"""
Card Catalog - Read-only lookup from card id to definition.

Keyword flags are computed here, once, when definitions are loaded.
"""

from __future__ import annotations
from dataclasses import replace
from functools import lru_cache
from typing import Any, Iterable, Iterator

from .cards import CardDefinition, CardType, CardColor, Rarity, Keyword, parse_keywords
from ..errors import UnknownCardError


class CardCatalog:
    """
    Immutable mapping of card id -> CardDefinition.

    Usage:
        catalog = default_catalog()
        card = catalog.require("r001")
        card.has(Keyword.BIG_DEMON)  # True
    """

    def __init__(
        self,
        definitions: Iterable[CardDefinition],
        extra_keywords: dict[str, frozenset[Keyword]] | None = None,
    ):
        extra_keywords = extra_keywords or {}
        cards: dict[str, CardDefinition] = {}
        for card in definitions:
            keywords = parse_keywords(card.text) | extra_keywords.get(card.id, frozenset())
            cards[card.id] = replace(card, keywords=frozenset(keywords))
        self._cards = cards

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict[str, Any]],
        extra_keywords: dict[str, frozenset[Keyword]] | None = None,
    ) -> CardCatalog:
        """
        Build a catalog from plain records as produced by an external loader.

        Records use camelCase field names (imageUrl, apModifier, ...).
        """
        definitions = [
            CardDefinition(
                id=r["id"],
                name=r["name"],
                type=CardType(r["type"]),
                color=CardColor(r["color"]),
                cost=int(r["cost"]),
                rarity=Rarity(r["rarity"]),
                text=r.get("text", ""),
                ap=r.get("ap"),
                hp=r.get("hp"),
                ap_modifier=r.get("apModifier"),
                hp_modifier=r.get("hpModifier"),
                image_url=r.get("imageUrl", ""),
            )
            for r in records
        ]
        return cls(definitions, extra_keywords=extra_keywords)

    def get(self, card_id: str) -> CardDefinition | None:
        return self._cards.get(card_id)

    def require(self, card_id: str) -> CardDefinition:
        """Get a card or raise UnknownCardError."""
        card = self._cards.get(card_id)
        if card is None:
            raise UnknownCardError(card_id)
        return card

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __iter__(self) -> Iterator[CardDefinition]:
        return iter(self._cards.values())

    def __len__(self) -> int:
        return len(self._cards)


@lru_cache(maxsize=1)
def default_catalog() -> CardCatalog:
    """The built-in base set."""
    from .base_set import BASE_SET, EXTRA_KEYWORDS
    return CardCatalog(BASE_SET, extra_keywords=EXTRA_KEYWORDS)
