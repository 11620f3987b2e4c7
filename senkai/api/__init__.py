"""
API Module - Client interface.

Exposes the engine via REST API. A client:
1. Lists the catalog and starter decks
2. Creates a game session (PvP or against the CPU)
3. Reads the state and the legal actions
4. Submits actions; bot seats answer before the response returns

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ActionRequest,
    DeckRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    LegalActionsResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    PlayerView,
    PendingInfo,
    ActionInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ActionRequest",
    "DeckRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "ActionResponse",
    "LegalActionsResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "PlayerView",
    "PendingInfo",
    "ActionInfo",
    # Service
    "APIService",
    "create_app",
]
