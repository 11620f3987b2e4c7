"""
Catalog - Card definitions, keyword flags and starter decks.

The engine consumes the catalog as a read-only lookup service.
"""

from .cards import (
    CardDefinition,
    CardType,
    CardColor,
    Rarity,
    Keyword,
    Deck,
    parse_keywords,
)
from .catalog import CardCatalog, default_catalog
from .base_set import STARTER_DECKS

__all__ = [
    "CardDefinition",
    "CardType",
    "CardColor",
    "Rarity",
    "Keyword",
    "Deck",
    "parse_keywords",
    "CardCatalog",
    "default_catalog",
    "STARTER_DECKS",
]
