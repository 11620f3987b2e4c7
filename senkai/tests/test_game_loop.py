"""
Tests for sessions and the game loop driver.
"""

import pytest

from ..catalog import Deck, STARTER_DECKS
from ..engine_core.state import GamePhase, GameMode
from ..engine_core.action import Action, ActionType
from ..errors import UnknownCardError
from ..bots import CpuPolicy, FirstLegalPolicy
from ..session import SessionManager, SessionState, GameLoop, LoopState


@pytest.fixture
def manager(catalog):
    return SessionManager(catalog)


def _pvp(manager, seed=11):
    return manager.create_session(
        STARTER_DECKS["blue"], STARTER_DECKS["red"],
        game_mode=GameMode.PVP, starting_player_id=0, seed=seed,
    )


class TestSessionManager:

    def test_create_starts_game(self, manager):
        session = _pvp(manager)
        assert session.is_active()
        assert session.game_state.phase == GamePhase.UPKEEP
        assert session.bots == {}
        assert session.deck_names == ("deck_name_blue", "deck_name_red")
        assert manager.get_session(session.session_id) is session

    def test_pvcpu_puts_cpu_on_seat_one(self, manager):
        session = manager.create_session(STARTER_DECKS["green"], STARTER_DECKS["red"], seed=1)
        assert isinstance(session.bots[1], CpuPolicy)
        assert session.is_bot_seat(1)
        assert not session.is_bot_seat(0)

    def test_unknown_card_rejected(self, manager):
        bad = Deck.from_lists("bad", ["b001"] * 19 + ["nope"], ["b_magic"] * 10)
        with pytest.raises(UnknownCardError):
            manager.create_session(bad, STARTER_DECKS["red"])
        assert manager.list_sessions() == []

    def test_same_seed_same_opening(self, manager):
        a, b = _pvp(manager, seed=5), _pvp(manager, seed=5)
        assert [c.id for c in a.game_state.players[0].hand] == [c.id for c in b.game_state.players[0].hand]

    def test_end_session(self, manager):
        session = _pvp(manager)
        assert manager.end_session(session.session_id, reason="user_ended")
        assert session.state == SessionState.ABANDONED
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_cleanup_keeps_active_sessions(self, manager):
        session = _pvp(manager)
        assert manager.cleanup_stale_sessions(max_age_seconds=-1) == 0
        assert manager.list_active_sessions() == [session.session_id]


class TestGameLoop:

    def test_human_seat_auto_advances_to_main(self, manager):
        session = _pvp(manager)
        result = GameLoop(session).run_until_input()
        assert result.success
        assert result.loop_state == LoopState.WAITING_HUMAN_ACTION
        assert session.game_state.phase == GamePhase.MAIN
        assert result.steps == 3

    def test_submit_then_cpu_plays_its_turn(self, manager):
        session = manager.create_session(
            STARTER_DECKS["blue"], STARTER_DECKS["red"],
            game_mode=GameMode.PVCPU, starting_player_id=0, seed=3,
        )
        loop = GameLoop(session)
        loop.run_until_input()
        result = loop.submit(Action.next_phase())

        state = session.game_state
        assert result.success
        assert state.current_player_id == 0
        assert state.phase == GamePhase.MAIN
        assert any(line.startswith("CPU: ") for line in result.bot_actions)
        assert len(state.get_player(1).magic_zone) == 2

    def test_rejected_human_action(self, manager):
        session = _pvp(manager)
        loop = GameLoop(session)
        loop.run_until_input()
        result = loop.submit(Action.declare_attack("player"))
        assert not result.success
        assert result.error_code == "ILLEGAL_ACTION"
        assert session.game_state.message == result.errors[0]

    def test_cannot_act_for_a_bot(self, manager):
        session = manager.create_session(
            STARTER_DECKS["blue"], STARTER_DECKS["red"], starting_player_id=1, seed=2,
        )
        result = GameLoop(session).submit(Action.next_phase())
        assert result.error_code == "NOT_YOUR_TURN"

    def test_start_game_not_accepted(self, manager):
        session = _pvp(manager)
        result = GameLoop(session).submit(Action.start_game(STARTER_DECKS["red"], STARTER_DECKS["red"]))
        assert result.error_code == "INVALID_ACTION"

    def test_step_limit_stalls(self, manager):
        session = manager.create_session(
            STARTER_DECKS["blue"], STARTER_DECKS["red"], seed=4,
            bots={0: FirstLegalPolicy(0), 1: FirstLegalPolicy(1)},
        )
        result = GameLoop(session, max_steps=10).run_until_input()
        assert result.loop_state == LoopState.STALLED
        assert result.steps == 10

    @pytest.mark.parametrize("seed", [1, 2, 3])
    @pytest.mark.parametrize("decks", [("blue", "red"), ("green", "blue"), ("red", "green")])
    def test_cpu_vs_cpu_finishes(self, manager, seed, decks):
        session = manager.create_session(
            STARTER_DECKS[decks[0]], STARTER_DECKS[decks[1]], seed=seed,
            bots={0: CpuPolicy(player_id=0), 1: CpuPolicy(player_id=1)},
        )
        result = GameLoop(session, max_steps=5000).run_until_input()
        state = session.game_state

        assert result.loop_state == LoopState.GAME_OVER, result.errors
        assert state.is_over
        assert session.state == SessionState.GAME_OVER
        assert result.is_draw or result.winner in (0, 1)
        assert [p.card_count() for p in state.players] == [30, 30]
        assert session.log

    def test_passing_bots_reach_a_draw(self, manager):
        session = manager.create_session(
            STARTER_DECKS["blue"], STARTER_DECKS["red"], seed=9,
            bots={0: FirstLegalPolicy(0), 1: FirstLegalPolicy(1)},
        )
        result = GameLoop(session, max_steps=1000).run_until_input()
        assert result.loop_state == LoopState.GAME_OVER
        assert result.is_draw
        assert all(not p.main_deck for p in session.game_state.players)
        assert session.game_state.is_over

    def test_game_over_submit(self, manager):
        session = manager.create_session(
            STARTER_DECKS["blue"], STARTER_DECKS["red"], seed=9,
            bots={0: FirstLegalPolicy(0), 1: FirstLegalPolicy(1)},
        )
        GameLoop(session, max_steps=1000).run_until_input()
        # Both seats are bots, but the game is over so NEXT_PHASE is a harmless no-op
        result = GameLoop(session).submit(Action.next_phase())
        assert result.loop_state == LoopState.GAME_OVER
        assert result.success
