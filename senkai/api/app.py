"""
FastAPI Application - REST API for game clients.

Endpoints:
    POST   /api/v1/sessions                      Create game session
    GET    /api/v1/sessions                      List active sessions
    GET    /api/v1/sessions/{id}                 Get session status
    DELETE /api/v1/sessions/{id}                 End session
    GET    /api/v1/sessions/{id}/state           Get game state
    POST   /api/v1/sessions/{id}/actions         Submit an action
    GET    /api/v1/sessions/{id}/legal-actions   List legal actions
    GET    /api/v1/cards                         Card catalog
    GET    /api/v1/decks                         Starter decks

Bot Execution Flow:
    1. A human seat submits an action
    2. The game loop applies it, then auto-advances Upkeep/Draw/Set/End
       and plays every bot seat until a human must act again
    3. The response carries the new state and what the bots did

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import UnknownCardError
from ..logging_config import setup_logging
from .service import APIService
from .schemas import (
    # Request models
    CreateSessionRequest,
    ActionRequest,
    # Response models
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    LegalActionsResponse,
    CardListResponse,
    DeckListResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

# Environment configuration
SENKAI_ENV = os.getenv("SENKAI_ENV", "development")
SENKAI_LOG_LEVEL = os.getenv("SENKAI_LOG_LEVEL", "INFO")
SENKAI_MAX_LOOP_STEPS = int(os.getenv("SENKAI_MAX_LOOP_STEPS", "500"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    setup_logging(SENKAI_LOG_LEVEL)

    app = FastAPI(
        title="Senkai Engine API",
        description="""
Three-lane card battle engine with a CPU opponent.

## Playing

1. `POST /sessions` with two starter decks (or explicit card lists)
2. Read `GET /sessions/{id}/state`; `GET /legal-actions` lists every move
3. `POST /sessions/{id}/actions`; bots answer before the response returns

Rejected moves come back with `success=false` and an engine error code
(`ILLEGAL_ACTION`, `WRONG_PHASE`, `PENDING_ACTION`, ...).

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_DECK` | Unknown deck name or card id |
| `INVALID_ACTION` | Action request is missing a required field |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(max_loop_steps=SENKAI_MAX_LOOP_STEPS)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found(response: ErrorResponse) -> JSONResponse:
        return make_error_response(response.error_code, response.error, status_code=404)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown deck or card id"},
        },
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(request: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session.

        Use a starter deck name (`blue`, `green`, `red`) per seat, or pass
        explicit card lists. In PvCPU the CPU sits on seat 1 and plays
        before this call returns if it goes first.
        """
        try:
            return api_service.create_session(request)
        except UnknownCardError as e:
            return make_error_response(ErrorCode.INVALID_DECK, str(e), details={"card_id": e.card_id})
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_DECK, str(e))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a game session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Gameplay Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Get the game state. Bot hands are shown as a count only."""
        response = api_service.get_state(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Malformed action"},
            404: {"model": ErrorResponse},
        },
        tags=["Game"],
        summary="Submit an action for a human seat",
    )
    async def submit_action(
        session_id: str,
        request: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Submit an action.

        The action is applied, then automatic phases and bot seats run until
        a human must act again. A rule violation is returned with
        `success=false`; the state is unchanged apart from its message.
        """
        try:
            response = api_service.submit_action(session_id, request)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_ACTION, str(e))
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List legal actions",
    )
    async def get_legal_actions(session_id: str) -> Union[LegalActionsResponse, JSONResponse]:
        """Every action the responding seat may submit right now."""
        response = api_service.get_legal_actions(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    # =========================================================================
    # Catalog Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/cards",
        response_model=CardListResponse,
        tags=["Catalog"],
        summary="List all cards",
    )
    async def list_cards() -> CardListResponse:
        return api_service.list_cards()

    @app.get(
        "/api/v1/decks",
        response_model=DeckListResponse,
        tags=["Catalog"],
        summary="List starter decks",
    )
    async def list_decks() -> DeckListResponse:
        return api_service.list_decks()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="senkai-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Senkai Engine API",
            "version": __version__,
            "environment": SENKAI_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.info("API created (env=%s, max_loop_steps=%d)", SENKAI_ENV, api_service.max_loop_steps)
    return app


# For running directly: uvicorn senkai.api.app:app
app = create_app()
