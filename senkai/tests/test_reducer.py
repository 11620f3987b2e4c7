"""
Tests for the reducer.

Tests:
- START_GAME setup
- Phase cycle and turn hand-over
- Validation order and error codes
- Selection, mana and placement rules for PLAY_CARD
- Suspension on a pending effect
"""

import random

import pytest

from ..catalog import CardCatalog, Deck, default_catalog
from ..engine_core.state import GameState, GamePhase, GameMode, SequentialIds
from ..engine_core.action import Action
from ..engine_core.pending import DiscardPending
from ..engine_core.reducer import Reducer, apply_action
from .conftest import BoardBuilder


def _hand_ids(state, player_id):
    return [c.id for c in state.get_player(player_id).hand]


def _catalog_with_test_spells():
    """Base set plus spells the base set lacks: free Red, Colorless and a 1-cost Red."""
    extra = CardCatalog.from_records([
        {"id": "x_free_red", "name": "Free Spark", "type": "Spell", "color": "Red", "cost": 0, "rarity": "N"},
        {"id": "x_colorless", "name": "Plain Charm", "type": "Spell", "color": "Colorless", "cost": 2, "rarity": "N"},
        {"id": "x_red", "name": "Small Spark", "type": "Spell", "color": "Red", "cost": 1, "rarity": "N"},
    ])
    return CardCatalog(list(default_catalog()) + list(extra))


class TestStartGame:
    """START_GAME builds both seats from their decks."""

    def test_setup_zones(self, started_state):
        state = started_state
        assert state.phase == GamePhase.UPKEEP
        assert state.turn == 1
        assert state.current_player_id == 0
        assert state.starting_player_id == 0
        for player in state.players:
            assert len(player.walls) == 4
            assert len(player.hand) == 4
            assert len(player.main_deck) == 12
            assert len(player.magic_deck) == 10
            assert player.magic_zone == []
            assert player.lanes == [None, None, None]
            assert player.card_count() == 30
        assert state.message == "Turn 1 - P1's Upkeep Phase."

    def test_same_seed_same_game(self, catalog, blue_deck, red_deck):
        states = []
        for _ in range(2):
            reducer = Reducer(catalog=catalog, rng=random.Random(42), id_factory=SequentialIds())
            result = reducer.apply(GameState.initial(), Action.start_game(blue_deck, red_deck))
            states.append(result.new_state)
        a, b = states
        assert a.starting_player_id == b.starting_player_id
        for pid in (0, 1):
            assert _hand_ids(a, pid) == _hand_ids(b, pid)
            assert [c.id for c in a.get_player(pid).walls] == [c.id for c in b.get_player(pid).walls]

    def test_random_starting_player(self, reducer, blue_deck, red_deck):
        state = reducer.apply(GameState.initial(), Action.start_game(blue_deck, red_deck)).new_state
        assert state.starting_player_id in (0, 1)
        assert state.current_player_id == state.starting_player_id

    def test_pvcpu_names_the_cpu_seat(self, reducer, blue_deck, red_deck):
        state = reducer.apply(
            GameState.initial(),
            Action.start_game(blue_deck, red_deck, GameMode.PVCPU, starting_player_id=1),
        ).new_state
        assert state.game_mode == GameMode.PVCPU
        assert state.get_player(1).name == "CPU"
        assert state.message == "Turn 1 - CPU's Upkeep Phase."

    def test_unknown_card_rejected(self, reducer, blue_deck):
        bad = Deck.from_lists("bad", ["nope"] * 20, ["b_magic"] * 10)
        initial = GameState.initial()
        result = reducer.apply(initial, Action.start_game(blue_deck, bad))
        assert not result.success
        assert result.error_code == "UNKNOWN_CARD"
        assert result.new_state.phase == GamePhase.SETUP

    def test_restart_replaces_game(self, reducer, started_state, blue_deck, red_deck):
        result = reducer.apply(started_state, Action.start_game(red_deck, blue_deck, starting_player_id=1))
        assert result.success
        assert result.new_state.current_player_id == 1
        assert result.new_state.get_player(0).hand[0].color.value == "Red"


class TestPhaseCycle:
    """NEXT_PHASE walks Upkeep -> Draw -> Set -> Main -> End -> next seat."""

    def test_full_round(self, reducer, started_state, play):
        state = play(reducer, started_state, Action.next_phase())
        assert state.phase == GamePhase.DRAW
        assert len(state.get_player(0).hand) == 5
        assert len(state.get_player(0).main_deck) == 11

        state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.SET
        assert len(state.get_player(0).magic_zone) == 1  # starting seat's first turn
        assert len(state.get_player(0).magic_deck) == 9

        state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.MAIN
        state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.END

        state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.UPKEEP
        assert state.current_player_id == 1
        assert state.turn == 1

        for _ in range(2):
            state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.SET
        assert len(state.get_player(1).magic_zone) == 2

        for _ in range(3):
            state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.UPKEEP
        assert state.current_player_id == 0
        assert state.turn == 2
        assert state.message == "Turn 2 - P1's Upkeep Phase."

    def test_upkeep_untaps(self, reducer, board, play):
        monster = board.lane(0, 0, "b003", tapped=True)
        magic = board.magic(0, "Blue", 2, tapped=True)
        state = board.build(phase=GamePhase.END, current_player_id=1)
        state = play(reducer, state, Action.next_phase())
        player = state.get_player(0)
        assert state.phase == GamePhase.UPKEEP
        assert not player.find_lane_card(monster.instance_id).tapped
        assert not any(m.tapped for m in player.magic_zone)
        assert len(player.magic_zone) == len(magic)

    def test_draw_from_empty_deck_is_not_a_loss(self, reducer, board, play):
        board.deck(0)
        state = board.build(phase=GamePhase.UPKEEP)
        state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.DRAW
        assert state.get_player(0).hand == []

    def test_end_phase_clears_damage_and_temp_ap(self, reducer, board, play):
        mine = board.lane(0, 0, "g008", temp_ap_modifier=200, damage=100)
        theirs = board.lane(1, 2, "r003", damage=200)
        state = board.build(phase=GamePhase.END)
        state = play(reducer, state, Action.next_phase())
        assert state.get_player(0).find_lane_card(mine.instance_id).temp_ap_modifier == 0
        assert state.get_player(0).find_lane_card(mine.instance_id).damage == 0
        assert state.get_player(1).find_lane_card(theirs.instance_id).damage == 0

    def test_both_decks_empty_is_a_draw(self, reducer, board, play):
        board.deck(0)
        board.deck(1)
        state = board.build(phase=GamePhase.END)
        state = play(reducer, state, Action.next_phase())
        assert state.phase == GamePhase.GAME_OVER
        assert state.is_draw
        assert state.winner_id is None

    def test_next_phase_after_game_over_is_a_no_op(self, reducer, board, play):
        state = board.build(phase=GamePhase.GAME_OVER)
        after = play(reducer, state, Action.next_phase())
        assert after.phase == GamePhase.GAME_OVER


class TestValidation:
    """Rejected actions return the previous state with a new message."""

    def test_actions_before_start(self, reducer):
        result = reducer.apply(GameState.initial(), Action.next_phase())
        assert not result.success
        assert result.error_code == "WRONG_PHASE"

    def test_main_action_outside_main(self, reducer, started_state):
        result = reducer.apply(started_state, Action.select_hand_card(0))
        assert result.error_code == "WRONG_PHASE"

    def test_response_without_pending(self, reducer, board):
        result = reducer.apply(board.build(), Action.respond_to_choice(True))
        assert result.error_code == "NO_PENDING_ACTION"

    def test_wrong_seat(self, reducer, started_state):
        result = reducer.apply(started_state, Action.next_phase(player_id=1))
        assert result.error_code == "NOT_YOUR_TURN"

    def test_game_over_rejects_moves(self, reducer, board):
        board.hand(0, "b004")
        result = reducer.apply(board.build(phase=GamePhase.GAME_OVER), Action.select_hand_card(0))
        assert result.error_code == "GAME_OVER"

    def test_failure_keeps_state_and_sets_message(self, reducer, started_state):
        result = reducer.apply(started_state, Action.select_hand_card(0))
        assert not result.success
        assert result.new_state.message == result.error
        assert result.new_state.phase == started_state.phase
        assert started_state.message == "Turn 1 - P1's Upkeep Phase."

    def test_input_state_never_mutated(self, reducer, started_state):
        hand_before = _hand_ids(started_state, 0)
        reducer.apply(started_state, Action.next_phase())
        assert started_state.phase == GamePhase.UPKEEP
        assert _hand_ids(started_state, 0) == hand_before

    def test_apply_action_helper(self, started_state):
        assert apply_action(started_state, Action.next_phase()).new_state.phase == GamePhase.DRAW


class TestSelection:

    def test_hand_selection_toggles(self, reducer, board, play):
        board.hand(0, "b004", "b003")
        state = play(reducer, board.build(), Action.select_hand_card(1))
        assert state.selected_hand_index == 1
        state = play(reducer, state, Action.select_hand_card(1))
        assert state.selected_hand_index is None

    def test_hand_selection_out_of_range(self, reducer, board):
        board.hand(0, "b004")
        result = reducer.apply(board.build(), Action.select_hand_card(3))
        assert result.error_code == "ILLEGAL_ACTION"

    def test_selecting_one_clears_the_other(self, reducer, board, play):
        board.hand(0, "b004")
        monster = board.lane(0, 0, "b003")
        state = play(reducer, board.build(), Action.select_hand_card(0))
        state = play(reducer, state, Action.select_lane_card(monster.instance_id))
        assert state.selected_lane_instance_id == monster.instance_id
        assert state.selected_hand_index is None

    def test_enemy_lane_card_cannot_be_selected(self, reducer, board):
        enemy = board.lane(1, 0, "r003")
        result = reducer.apply(board.build(), Action.select_lane_card(enemy.instance_id))
        assert result.error_code == "STALE_REFERENCE"


class TestPlayCard:
    """Mana, placement and resolution of PLAY_CARD."""

    def test_requires_selection(self, reducer, board):
        result = reducer.apply(board.build(), Action.play_card(lane_index=0))
        assert result.error_code == "ILLEGAL_ACTION"

    def test_not_enough_magic(self, reducer, board):
        board.hand(0, "b002")
        board.magic(0, "Blue", 3)
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert result.error == "Not enough magic!"
        assert not any(m.tapped for m in result.new_state.get_player(0).magic_zone)

    def test_needs_one_magic_of_its_color(self, reducer, board):
        board.hand(0, "r003")
        board.magic(0, "Blue", 3)
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert result.error == "You need at least one Red magic!"

    def test_tapped_and_face_down_magic_do_not_pay(self, reducer, board):
        board.hand(0, "b004")
        board.magic(0, "Blue", 1, tapped=True)
        board.magic(0, "Blue", 1)[0].face_down = True
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert result.error == "Not enough magic!"

    def test_payment_takes_color_first_then_zone_order(self, reducer, board, play):
        board.hand(0, "r004")
        blue = board.magic(0, "Blue")[0]
        red1, red2 = board.magic(0, "Red", 2)
        state = play(reducer, board.build(selected_hand_index=0), Action.play_card(lane_index=2))
        tapped = {m.instance_id for m in state.get_player(0).magic_zone if m.tapped}
        assert tapped == {red1.instance_id, blue.instance_id}

    @pytest.mark.parametrize("card_id,paid", [("x_free_red", 0), ("x_colorless", 2)])
    def test_free_and_colorless_cards_skip_color_check(self, reducer, play, card_id, paid):
        board = BoardBuilder(_catalog_with_test_spells())
        board.hand(0, card_id)
        board.magic(0, "Blue", 2)
        state = play(reducer, board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        player = state.get_player(0)
        assert [c.id for c in player.discard] == [card_id]
        assert sum(m.tapped for m in player.magic_zone) == paid

    def test_costed_red_spell_still_needs_red(self, reducer):
        board = BoardBuilder(_catalog_with_test_spells())
        board.hand(0, "x_red")
        board.magic(0, "Blue", 2)
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert result.error == "You need at least one Red magic!"
        assert not any(m.tapped for m in result.new_state.get_player(0).magic_zone)

    def test_monster_enters_lane_untapped(self, reducer, board, play):
        board.hand(0, "b003", "b004")
        board.magic(0, "Blue", 3)
        state = play(reducer, board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        player = state.get_player(0)
        assert player.lanes[0].card_id == "b003"
        assert not player.lanes[0].tapped
        assert _hand_ids(state, 0) == ["b004"]
        assert state.selected_hand_index is None
        assert state.message == "Played 河童!"

    def test_big_demon_center_only(self, reducer, board, play):
        board.hand(0, "b007")
        board.magic(0, "Blue", 7)
        state = board.build(selected_hand_index=0)
        result = reducer.apply(state, Action.play_card(lane_index=0))
        assert result.error_code == "ILLEGAL_ACTION"
        state = play(reducer, state, Action.play_card(lane_index=1))
        assert state.get_player(0).lanes[1].card_id == "b007"

    def test_missing_lane_rejected(self, reducer, board):
        board.hand(0, "b004")
        board.magic(0, "Blue", 2)
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card())
        assert result.error == "Choose a lane for the monster."

    def test_replacing_sends_occupant_and_attachments_to_discard(self, reducer, board, play):
        board.lane(0, 0, "b004", "b006")
        board.hand(0, "b003")
        board.magic(0, "Blue", 3)
        state = play(reducer, board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        player = state.get_player(0)
        assert player.lanes[0].card_id == "b003"
        assert sorted(c.id for c in player.discard) == ["b004", "b006"]

    def test_cannot_replace_tapped_monster(self, reducer, board):
        board.lane(0, 0, "b004", tapped=True)
        board.hand(0, "b003")
        board.magic(0, "Blue", 3)
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert result.error == "Cannot replace a tapped monster."

    def test_attachment(self, reducer, board, play):
        monster = board.lane(0, 1, "b003")
        board.hand(0, "b006")
        board.magic(0, "Blue", 1)
        state = board.build(selected_hand_index=0)
        assert reducer.apply(state, Action.play_card()).error == "Invalid target for attachment."

        state = play(reducer, state, Action.play_card(target_instance_id=monster.instance_id))
        target = state.get_player(0).lanes[1]
        assert [a.card.id for a in target.attachments] == ["b006"]
        assert state.get_player(0).hand == []

    def test_magic_cannot_be_played(self, reducer, board):
        board.hand(0, "b_magic")
        result = reducer.apply(board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert result.error == "Magic cards cannot be played from hand."

    def test_spell_goes_to_discard(self, reducer, board, play):
        board.hand(0, "g005")
        board.magic(0, "Green", 2)
        state = play(reducer, board.build(selected_hand_index=0), Action.play_card(lane_index=0))
        assert [c.id for c in state.get_player(0).discard] == ["g005"]


class TestSuspension:
    """A pending effect blocks every other action."""

    @pytest.fixture
    def suspended(self, reducer, board, play):
        board.hand(0, "b008", "b010")
        board.magic(0, "Blue", 3)
        return play(reducer, board.build(selected_hand_index=0), Action.play_card(lane_index=0))

    def test_pending_installed(self, suspended):
        pending = suspended.pending_action
        assert isinstance(pending, DiscardPending)
        assert pending.player_id == 0
        assert pending.count == 1

    def test_other_actions_rejected(self, reducer, suspended):
        for action in (Action.next_phase(), Action.select_hand_card(0), Action.choose_target("x")):
            result = reducer.apply(suspended, action)
            assert result.error_code == "PENDING_ACTION"
            assert result.new_state.pending_action == suspended.pending_action
            assert result.new_state.phase == suspended.phase

    def test_resolving_clears_pending(self, reducer, suspended, play):
        state = play(reducer, suspended, Action.discard_card(0))
        assert state.pending_action is None
        assert state.get_player(0).discard[-1].id == "b010"
        assert play(reducer, state, Action.next_phase()).phase == GamePhase.END

    def test_bad_discard_index(self, reducer, suspended):
        result = reducer.apply(suspended, Action.discard_card(9))
        assert result.error_code == "ILLEGAL_ACTION"
