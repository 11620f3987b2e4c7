"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_DECK: Deck name unknown or a deck names an unknown card
- INVALID_ACTION: Action request is malformed (missing fields, bad type)
- VALIDATION_ERROR: Request body failed validation
- INTERNAL_ERROR: Unexpected server failure

Rejected game actions are NOT errors at the HTTP level: they come back as
ActionResponse(success=false) with the engine's error code.
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    YOUR_TURN = "your_turn"
    WAITING_RESPONSE = "waiting_response"
    STALLED = "stalled"
    GAME_OVER = "game_over"


class GameModeName(str, Enum):
    """Seat configuration of a session."""
    PVP = "PvP"
    PVCPU = "PvCPU"


class ActionTypeName(str, Enum):
    """Actions a client may submit."""
    NEXT_PHASE = "NEXT_PHASE"
    SELECT_HAND_CARD = "SELECT_HAND_CARD"
    SELECT_LANE_CARD = "SELECT_LANE_CARD"
    PLAY_CARD = "PLAY_CARD"
    DECLARE_ATTACK = "DECLARE_ATTACK"
    DISCARD_CARD = "DISCARD_CARD"
    CHOOSE_TARGET = "CHOOSE_TARGET"
    RESPOND_TO_CHOICE = "RESPOND_TO_CHOICE"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_DECK = "INVALID_DECK"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str
    name: str
    card_type: str = Field(description="Monster, Spell, Attachment, Magic")
    color: str
    cost: int
    rarity: str
    text: str = ""
    ap: Optional[int] = None
    hp: Optional[int] = None
    ap_modifier: Optional[int] = None
    hp_modifier: Optional[int] = None
    keywords: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class AttachmentInfo(BaseModel):
    """An attachment stacked under a lane card."""
    instance_id: str
    card: CardInfo


class InPlayCardInfo(BaseModel):
    """A card in a lane or in the magic zone."""
    instance_id: str
    card: CardInfo
    tapped: bool = False
    face_down: bool = False
    damage: int = 0
    total_ap: Optional[int] = Field(None, description="AP with attachments and modifiers")
    total_hp: Optional[int] = Field(None, description="HP with attachments and modifiers")
    attachments: list[AttachmentInfo] = Field(default_factory=list)


class PlayerView(BaseModel):
    """
    One seat as seen by the client.

    `hand` is only filled for seats without a bot; `hand_count` is always set.
    """
    player_id: int
    name: str
    is_bot: bool = False
    is_current_turn: bool = False
    hand: Optional[list[CardInfo]] = None
    hand_count: int = 0
    main_deck_count: int = 0
    magic_deck_count: int = 0
    wall_count: int = 0
    discard: list[CardInfo] = Field(default_factory=list)
    magic_zone: list[InPlayCardInfo] = Field(default_factory=list)
    lanes: list[Optional[InPlayCardInfo]] = Field(default_factory=list)
    available_mana: int = 0
    has_won: bool = False


class PendingInfo(BaseModel):
    """A suspended effect waiting for a response."""
    kind: str = Field(description="discard, select_target, choose_effect")
    responding_player_id: int
    expected_action: ActionTypeName
    effect: Optional[str] = None
    count: Optional[int] = None
    valid_targets: list[str] = Field(default_factory=list)
    instance_id: Optional[str] = None
    prompt: Optional[str] = None


class ActionInfo(BaseModel):
    """A fully specified action, as accepted by POST /actions."""
    action_type: ActionTypeName
    card_index: Optional[int] = None
    instance_id: Optional[str] = None
    lane_index: Optional[int] = None
    target_instance_id: Optional[str] = None
    choice: Optional[bool] = None
    description: Optional[str] = None


class DeckInfo(BaseModel):
    """A starter deck."""
    deck_id: str
    name: str
    main_deck: list[str]
    magic_deck: list[str]
    main_deck_count: int = 0
    magic_deck_count: int = 0


# =============================================================================
# Request Models
# =============================================================================

class DeckRequest(BaseModel):
    """An explicit deck given as card id lists."""
    name: str = Field("custom", description="Display name for the deck")
    main_deck: list[str] = Field(..., description="Main deck card ids")
    magic_deck: list[str] = Field(..., description="Magic deck card ids")


class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    p1_deck: str = Field("blue", description="Starter deck for seat 0")
    p2_deck: str = Field("red", description="Starter deck for seat 1")
    p1_custom_deck: Optional[DeckRequest] = Field(None, description="Overrides p1_deck")
    p2_custom_deck: Optional[DeckRequest] = Field(None, description="Overrides p2_deck")
    game_mode: GameModeName = Field(GameModeName.PVCPU, description="PvCPU puts the CPU on seat 1")
    starting_player_id: Optional[int] = Field(None, ge=0, le=1, description="Random if omitted")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")


class ActionRequest(BaseModel):
    """An action submitted by a human seat."""
    action_type: ActionTypeName
    player_id: Optional[int] = Field(None, ge=0, le=1, description="Submitting seat, checked if given")
    card_index: Optional[int] = Field(None, ge=0)
    instance_id: Optional[str] = None
    lane_index: Optional[int] = Field(None, ge=0, le=2)
    target_instance_id: Optional[str] = Field(None, description="Instance id or 'player'")
    choice: Optional[bool] = None


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    turn_number: int
    phase: str
    message: str
    game_mode: GameModeName
    current_turn_player_id: int
    starting_player_id: int
    players: list[PlayerView] = Field(default_factory=list)
    selected_hand_index: Optional[int] = None
    selected_lane_instance_id: Optional[str] = None
    pending: Optional[PendingInfo] = None
    winner_id: Optional[int] = None
    is_draw: bool = False
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    game_mode: GameModeName
    deck_names: list[str] = Field(default_factory=list)
    bot_seats: list[int] = Field(default_factory=list)
    turn_number: int = 0
    phase: str = ""
    current_turn_player_id: int = 0
    seed: Optional[int] = None
    created_at: float = 0.0
    bot_actions: list[str] = Field(default_factory=list, description="What bots did before returning")
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Outcome of a submitted action plus everything the bots did after it."""
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    changes: list[str] = Field(default_factory=list)
    bot_actions: list[str] = Field(default_factory=list)
    state: GameStateResponse
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """Actions the responding seat may take right now."""
    session_id: str
    responding_player_id: int
    actions: list[ActionInfo] = Field(default_factory=list)
    count: int = 0
    api_version: str = "v1"


class CardListResponse(BaseModel):
    """The card catalog."""
    cards: list[CardInfo]
    count: int


class DeckListResponse(BaseModel):
    """The starter decks."""
    decks: list[DeckInfo]
    count: int


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
