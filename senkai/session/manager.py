"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Client picks two decks and a mode -> session created, START_GAME applied
2. During game:
   - Human seats submit actions
   - Bot seats are driven by the GameLoop until human input is needed
3. Game ends or client leaves -> session destroyed, ALL state deleted

PERSISTENCE RULES:
- NO database for gameplay
- Game state is ephemeral (session-scoped only)
- One session is driven by one caller at a time
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time
import uuid

from ..catalog import CardCatalog, Deck, default_catalog
from ..engine_core.state import GameState, GameMode
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..bots import BotPolicy, CpuPolicy

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # User quit


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The reducer (with its seeded rng and id source)
    - Current canonical game state
    - Bots keyed by seat
    - A log of human-readable changes

    The session is destroyed when the game ends.
    State is NOT persisted.
    """
    session_id: str
    reducer: Reducer
    game_state: GameState
    created_at: float
    game_mode: GameMode = GameMode.PVP
    deck_names: tuple[str, str] = ("", "")
    seed: int | None = None

    state: SessionState = SessionState.ACTIVE
    bots: dict[int, BotPolicy] = field(default_factory=dict)
    log: list[str] = field(default_factory=list)

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state == SessionState.ACTIVE

    def is_bot_seat(self, player_id: int) -> bool:
        return player_id in self.bots

    def record(self, result: ActionResult, actor: str) -> None:
        """Publish a result's state and log its changes."""
        if result.new_state is not None:
            self.game_state = result.new_state
        for change in result.state_changes:
            self.log.append(f"{actor}: {change}")
        if self.game_state.is_over:
            self.state = SessionState.GAME_OVER

    def apply(self, action: Action, actor: str) -> ActionResult:
        result = self.reducer.apply(self.game_state, action)
        self.record(result, actor)
        return result


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions from two decks
    - Track active sessions
    - Clean up completed sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, catalog: CardCatalog | None = None):
        self.catalog = catalog or default_catalog()
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        p1_deck: Deck,
        p2_deck: Deck,
        game_mode: GameMode = GameMode.PVCPU,
        starting_player_id: int | None = None,
        seed: int | None = None,
        bots: dict[int, BotPolicy] | None = None,
    ) -> Session:
        """
        Create a new game session and start the game.

        Args:
            p1_deck, p2_deck: Decks for seats 0 and 1
            game_mode: PvCPU puts a CpuPolicy on seat 1 unless `bots` is given
            starting_player_id: Seat that goes first (random if None)
            seed: Seed for shuffles and the random starting seat
            bots: Explicit bot seats, overriding the mode default

        Raises:
            UnknownCardError: a deck names a card the catalog doesn't have
        """
        for deck in (p1_deck, p2_deck):
            for card_id in deck.main_deck + deck.magic_deck:
                self.catalog.require(card_id)

        session_id = str(uuid.uuid4())
        reducer = Reducer(catalog=self.catalog, rng=random.Random(seed))
        if bots is None:
            bots = {1: CpuPolicy(player_id=1)} if game_mode == GameMode.PVCPU else {}

        session = Session(
            session_id=session_id,
            reducer=reducer,
            game_state=GameState.initial(),
            created_at=time.time(),
            game_mode=game_mode,
            deck_names=(p1_deck.name, p2_deck.name),
            seed=seed,
            bots=bots,
        )
        result = session.apply(
            Action.start_game(p1_deck, p2_deck, game_mode, starting_player_id),
            actor="system",
        )
        if not result.success:
            raise ValueError(result.error)

        self._sessions[session_id] = session
        logger.info("Session %s created (%s, seed=%s)", session_id, game_mode.value, seed)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and clean up.

        The session is removed from memory. Returns False if it didn't exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if reason == "completed" or session.game_state.is_over:
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        session.log.clear()
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Clean up finished sessions older than max_age.

        Called periodically to free memory.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
