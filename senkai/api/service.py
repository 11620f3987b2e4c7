"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions and their game loops
3. Formats engine state into client views

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

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
    CardListResponse,
    DeckListResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    AttachmentInfo,
    InPlayCardInfo,
    PlayerView,
    PendingInfo,
    ActionInfo,
    DeckInfo,
    # Enums
    SessionStatus,
    GameModeName,
    ActionTypeName,
    ErrorCode,
)
from ..catalog import CardDefinition, Deck, STARTER_DECKS
from ..engine_core import (
    Action,
    ActionType,
    DiscardPending,
    GameMode,
    GameState,
    InPlayCard,
    PlayerState,
    legal_actions,
    responding_player_id,
)
from ..engine_core.effect_resolver import expected_response
from ..engine_core import rules
from ..session import SessionManager, Session, GameLoop, LoopState
from ..session.game_loop import DEFAULT_MAX_STEPS

logger = logging.getLogger(__name__)


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session not found: {session_id}",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session (the CPU moves first if it starts)
        session_response = service.create_session(CreateSessionRequest())

        # Play
        response = service.submit_action(session_id, ActionRequest(action_type="NEXT_PHASE"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    max_loop_steps: int = DEFAULT_MAX_STEPS

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new game session and run bots until a human must act.

        Raises:
            ValueError: unknown starter deck name
            UnknownCardError: a custom deck names an unknown card
        """
        p1_deck = self._resolve_deck(request.p1_deck, request.p1_custom_deck)
        p2_deck = self._resolve_deck(request.p2_deck, request.p2_custom_deck)

        session = self.session_manager.create_session(
            p1_deck,
            p2_deck,
            game_mode=GameMode(request.game_mode.value),
            starting_player_id=request.starting_player_id,
            seed=request.random_seed,
        )

        game_loop = GameLoop(session, max_steps=self.max_loop_steps)
        self._game_loops[session.session_id] = game_loop
        result = game_loop.run_until_input()
        if result.loop_state == LoopState.STALLED:
            logger.warning("Session %s stalled at creation: %s", session.session_id, result.errors)

        response = self._session_to_response(session)
        response.bot_actions = result.bot_actions
        return response

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session and drop its game loop."""
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Gameplay
    # =========================================================================

    def get_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Get the client view of a session's game state."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._state_to_response(session)

    def submit_action(self, session_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        """
        Apply a human action, then let bots and automatic phases run.

        A rejected action is a normal response with success=False.

        Raises:
            ValueError: the request is missing a field its action type needs
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        action = self._request_to_action(request)
        game_loop = self._loop_for(session)
        result = game_loop.submit(action)

        return ActionResponse(
            success=result.success,
            error=result.errors[0] if result.errors else None,
            error_code=result.error_code,
            changes=result.changes,
            bot_actions=result.bot_actions,
            state=self._state_to_response(session),
        )

    def get_legal_actions(self, session_id: str) -> LegalActionsResponse | ErrorResponse:
        """List every legal action for the seat that must act next."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        state = session.game_state
        actions = [self._action_to_info(a) for a in legal_actions(state)]
        return LegalActionsResponse(
            session_id=session_id,
            responding_player_id=responding_player_id(state),
            actions=actions,
            count=len(actions),
        )

    # =========================================================================
    # Catalog
    # =========================================================================

    def list_cards(self) -> CardListResponse:
        cards = [self._card_to_info(card) for card in self.session_manager.catalog]
        return CardListResponse(cards=cards, count=len(cards))

    def list_decks(self) -> DeckListResponse:
        decks = [
            DeckInfo(
                deck_id=deck_id,
                name=deck.name,
                main_deck=list(deck.main_deck),
                magic_deck=list(deck.magic_deck),
                main_deck_count=len(deck.main_deck),
                magic_deck_count=len(deck.magic_deck),
            )
            for deck_id, deck in STARTER_DECKS.items()
        ]
        return DeckListResponse(decks=decks, count=len(decks))

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _loop_for(self, session: Session) -> GameLoop:
        game_loop = self._game_loops.get(session.session_id)
        if game_loop is None:
            game_loop = GameLoop(session, max_steps=self.max_loop_steps)
            self._game_loops[session.session_id] = game_loop
        return game_loop

    @staticmethod
    def _resolve_deck(deck_id: str, custom: DeckRequest | None) -> Deck:
        if custom is not None:
            return Deck.from_lists(custom.name, custom.main_deck, custom.magic_deck)
        if deck_id not in STARTER_DECKS:
            raise ValueError(f"Unknown deck: {deck_id}. Choose from {sorted(STARTER_DECKS)}")
        return STARTER_DECKS[deck_id]

    @staticmethod
    def _request_to_action(request: ActionRequest) -> Action:
        """Convert an ActionRequest to an engine Action."""
        kind = ActionType(request.action_type.value)
        pid = request.player_id

        def need(value, name):
            if value is None:
                raise ValueError(f"{kind.value} requires {name}")
            return value

        if kind == ActionType.NEXT_PHASE:
            return Action.next_phase(player_id=pid)
        if kind == ActionType.SELECT_HAND_CARD:
            return Action.select_hand_card(need(request.card_index, "card_index"), player_id=pid)
        if kind == ActionType.SELECT_LANE_CARD:
            return Action.select_lane_card(need(request.instance_id, "instance_id"), player_id=pid)
        if kind == ActionType.PLAY_CARD:
            return Action.play_card(
                lane_index=request.lane_index,
                target_instance_id=request.target_instance_id,
                player_id=pid,
            )
        if kind == ActionType.DECLARE_ATTACK:
            return Action.declare_attack(need(request.target_instance_id, "target_instance_id"), player_id=pid)
        if kind == ActionType.DISCARD_CARD:
            return Action.discard_card(need(request.card_index, "card_index"), player_id=pid)
        if kind == ActionType.CHOOSE_TARGET:
            return Action.choose_target(need(request.target_instance_id, "target_instance_id"), player_id=pid)
        return Action.respond_to_choice(need(request.choice, "choice"), player_id=pid)

    @staticmethod
    def _action_to_info(action: Action) -> ActionInfo:
        p = action.payload
        return ActionInfo(
            action_type=ActionTypeName(action.action_type.value),
            card_index=p.card_index,
            instance_id=p.instance_id,
            lane_index=p.lane_index,
            target_instance_id=p.target_instance_id,
            choice=p.choice,
            description=action.describe(),
        )

    @staticmethod
    def _card_to_info(card: CardDefinition) -> CardInfo:
        return CardInfo(
            card_id=card.id,
            name=card.name,
            card_type=card.type.value,
            color=card.color.value,
            cost=card.cost,
            rarity=card.rarity.value,
            text=card.text,
            ap=card.ap,
            hp=card.hp,
            ap_modifier=card.ap_modifier,
            hp_modifier=card.hp_modifier,
            keywords=sorted(k.value for k in card.keywords),
            image_url=card.image_url or None,
        )

    def _in_play_to_info(self, owner: PlayerState, card: InPlayCard, in_lane: bool) -> InPlayCardInfo:
        return InPlayCardInfo(
            instance_id=card.instance_id,
            card=self._card_to_info(card.card),
            tapped=card.tapped,
            face_down=card.face_down,
            damage=card.damage,
            total_ap=rules.total_ap(owner, card) if in_lane else None,
            total_hp=rules.total_hp(owner, card) if in_lane else None,
            attachments=[
                AttachmentInfo(instance_id=a.instance_id, card=self._card_to_info(a.card))
                for a in card.attachments
            ],
        )

    def _player_to_view(self, session: Session, player: PlayerState) -> PlayerView:
        is_bot = session.is_bot_seat(player.player_id)
        return PlayerView(
            player_id=player.player_id,
            name=player.name,
            is_bot=is_bot,
            is_current_turn=player.player_id == session.game_state.current_player_id,
            hand=None if is_bot else [self._card_to_info(c) for c in player.hand],
            hand_count=len(player.hand),
            main_deck_count=len(player.main_deck),
            magic_deck_count=len(player.magic_deck),
            wall_count=len(player.walls),
            discard=[self._card_to_info(c) for c in player.discard],
            magic_zone=[self._in_play_to_info(player, m, in_lane=False) for m in player.magic_zone],
            lanes=[
                self._in_play_to_info(player, c, in_lane=True) if c is not None else None
                for c in player.lanes
            ],
            available_mana=len(rules.available_mana(player)),
            has_won=player.has_won,
        )

    @staticmethod
    def _pending_to_info(state: GameState) -> PendingInfo | None:
        pending = state.pending_action
        if pending is None:
            return None
        effect = pending.reason if isinstance(pending, DiscardPending) else pending.effect
        return PendingInfo(
            kind=pending.kind,
            responding_player_id=responding_player_id(state),
            expected_action=ActionTypeName(expected_response(pending).value),
            effect=effect.value,
            count=getattr(pending, "count", None),
            valid_targets=list(getattr(pending, "valid_targets", ())),
            instance_id=getattr(pending, "instance_id", None),
            prompt=state.message,
        )

    def _status(self, session: Session) -> SessionStatus:
        """Derive the client-facing status from the current state."""
        state = session.game_state
        if state.is_over:
            return SessionStatus.GAME_OVER
        seat = responding_player_id(state)
        if session.is_bot_seat(seat):
            # The loop only hands control back on a bot seat when it stalled
            return SessionStatus.STALLED
        if state.pending_action is not None:
            return SessionStatus.WAITING_RESPONSE
        return SessionStatus.YOUR_TURN

    def _state_to_response(self, session: Session) -> GameStateResponse:
        state = session.game_state
        return GameStateResponse(
            session_id=session.session_id,
            status=self._status(session),
            turn_number=state.turn,
            phase=state.phase.value,
            message=state.message,
            game_mode=GameModeName(state.game_mode.value),
            current_turn_player_id=state.current_player_id,
            starting_player_id=state.starting_player_id,
            players=[self._player_to_view(session, p) for p in state.players],
            selected_hand_index=state.selected_hand_index,
            selected_lane_instance_id=state.selected_lane_instance_id,
            pending=self._pending_to_info(state),
            winner_id=state.winner_id,
            is_draw=state.is_draw,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        state = session.game_state
        return SessionResponse(
            session_id=session.session_id,
            status=self._status(session),
            game_mode=GameModeName(session.game_mode.value),
            deck_names=list(session.deck_names),
            bot_seats=sorted(session.bots),
            turn_number=state.turn,
            phase=state.phase.value,
            current_turn_player_id=state.current_player_id,
            seed=session.seed,
            created_at=session.created_at,
        )
