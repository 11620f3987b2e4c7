"""
Tests for attacks: legality, damage, walls and the prompts combat can raise.
"""

import pytest

from ..engine_core.state import GamePhase
from ..engine_core.action import Action, PLAYER_TARGET
from ..engine_core.pending import ChooseEffectPending, ChoiceEffect, DiscardPending, DiscardReason
from ..engine_core.effect_resolver import responding_player_id
from ..engine_core import rules


def attack(reducer, state, attacker, target, play):
    state = play(reducer, state, Action.select_lane_card(attacker.instance_id))
    return play(reducer, state, Action.declare_attack(target))


class TestAttackLegality:

    def test_attack_taps_and_clears_selection(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        defender = board.lane(1, 0, "g009")
        state = attack(reducer, board.build(), attacker, defender.instance_id, play)
        assert state.get_player(0).lanes[0].tapped
        assert state.selected_lane_instance_id is None

    def test_tapped_monster_cannot_attack(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003", tapped=True)
        state = play(reducer, board.build(), Action.select_lane_card(attacker.instance_id))
        result = reducer.apply(state, Action.declare_attack(PLAYER_TARGET))
        assert result.error_code == "ILLEGAL_ACTION"

    def test_attack_needs_selected_attacker(self, reducer, board):
        result = reducer.apply(board.build(), Action.declare_attack(PLAYER_TARGET))
        assert result.error == "Select one of your monsters to attack with."

    def test_no_player_attacks_on_turn_one(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        state = play(reducer, board.build(turn=1), Action.select_lane_card(attacker.instance_id))
        result = reducer.apply(state, Action.declare_attack(PLAYER_TARGET))
        assert result.error == "Cannot attack players on the first turn."

    def test_timid_cannot_attack_players(self, reducer, board, play):
        attacker = board.lane(0, 0, "b010")
        enemy = board.lane(1, 0, "r004")
        state = play(reducer, board.build(), Action.select_lane_card(attacker.instance_id))
        assert reducer.apply(state, Action.declare_attack(PLAYER_TARGET)).error_code == "ILLEGAL_ACTION"
        assert reducer.apply(state, Action.declare_attack(enemy.instance_id)).success

    def test_big_demon_shields_from_side_lanes(self, reducer, board, play):
        side = board.lane(0, 0, "b003")
        center = board.lane(0, 1, "b002")
        board.lane(1, 1, "r001")
        state = board.build()

        selected = play(reducer, state, Action.select_lane_card(side.instance_id))
        result = reducer.apply(selected, Action.declare_attack(PLAYER_TARGET))
        assert result.error == "Cannot attack player directly while opponent has a Daikaima."

        after = attack(reducer, state, center, PLAYER_TARGET, play)
        assert len(after.get_player(1).walls) == 3

    def test_missing_target_leaves_attacker_tapped(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        state = attack(reducer, board.build(), attacker, "gone", play)
        assert state.get_player(0).lanes[0].tapped
        assert state.message == "河童 found no target."


class TestMonsterCombat:

    @pytest.mark.parametrize("preset, destroyed", [(99, False), (100, True)])
    def test_lethal_boundary(self, reducer, board, play, preset, destroyed):
        # 200 AP into 300 HP
        attacker = board.lane(0, 0, "b004")
        defender = board.lane(1, 2, "r003", damage=preset)
        state = attack(reducer, board.build(), attacker, defender.instance_id, play)
        enemy = state.get_player(1)
        if destroyed:
            assert enemy.lanes[2] is None
            assert [c.id for c in enemy.discard] == ["r003"]
        else:
            assert enemy.lanes[2].damage == 299

    def test_attachments_count_on_both_sides(self, reducer, board, play):
        # 300 base + 300 claws = 600 into 500 base + 300 bracelet = 800 HP
        attacker = board.lane(0, 0, "b003", "b006")
        defender = board.lane(1, 0, "r002", "r006")
        state = attack(reducer, board.build(), attacker, defender.instance_id, play)
        assert state.get_player(1).lanes[0].damage == 600

    def test_destroyed_attachments_go_to_discard(self, reducer, board, play):
        attacker = board.lane(0, 0, "b001")
        defender = board.lane(1, 0, "r004", "r006")
        state = attack(reducer, board.build(), attacker, defender.instance_id, play)
        assert sorted(c.id for c in state.get_player(1).discard) == ["r004", "r006"]

    def test_defender_never_strikes_back(self, reducer, board, play):
        attacker = board.lane(0, 0, "b004")
        defender = board.lane(1, 0, "r008")
        state = attack(reducer, board.build(), attacker, defender.instance_id, play)
        assert state.get_player(0).lanes[0].damage == 0


class TestWalls:

    def test_direct_attack_destroys_top_wall(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.walls(1, "r002", "r003", "r004", "r008")
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        defender = state.get_player(1)
        assert [c.id for c in defender.walls] == ["r002", "r003", "r004"]
        assert [c.id for c in defender.discard] == ["r008"]
        assert state.phase == GamePhase.MAIN

    def test_double_crasher_destroys_two(self, reducer, board, play):
        attacker = board.lane(0, 1, "b007")
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        assert len(state.get_player(1).walls) == 2

    def test_attack_with_no_walls_wins(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.walls(1)
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        assert state.phase == GamePhase.GAME_OVER
        assert state.winner_id == 0
        assert state.get_player(0).has_won

    def test_destroying_last_wall_wins(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.walls(1, "r004")
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        assert state.is_over
        assert state.winner_id == 0

    def test_no_actions_after_win(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.walls(1)
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        assert reducer.apply(state, Action.select_lane_card(attacker.instance_id)).error_code == "GAME_OVER"


class TestAwakenedMagic:
    """A destroyed wall of the magic's color can be rescued to hand."""

    @pytest.fixture
    def prompted(self, reducer, board, play):
        attacker = board.lane(0, 1, "r001")  # DoubleCrasher
        board.walls(1, "b002", "b003", "b004", "b010")
        board.magic(1, "Blue", card_id="b_magic_awakened")
        return attack(reducer, board.build(), attacker, PLAYER_TARGET, play)

    def test_prompt_after_first_wall(self, prompted):
        pending = prompted.pending_action
        assert isinstance(pending, ChooseEffectPending)
        assert pending.effect == ChoiceEffect.AWAKENED_MAGIC
        assert pending.wall_card_id == "b010"
        assert pending.walls_remaining == 1
        assert responding_player_id(prompted) == 1
        assert len(prompted.get_player(1).walls) == 3

    def test_attacker_cannot_answer(self, reducer, prompted):
        result = reducer.apply(prompted, Action.respond_to_choice(True, player_id=0))
        assert result.error_code == "NOT_YOUR_TURN"

    def test_accept_rescues_wall_then_attack_continues(self, reducer, prompted, play):
        state = play(reducer, prompted, Action.respond_to_choice(True, player_id=1))
        defender = state.get_player(1)
        assert [c.id for c in defender.hand] == ["b010"]
        assert defender.magic_zone[0].face_down
        assert [c.id for c in defender.walls] == ["b002", "b003"]
        assert [c.id for c in defender.discard] == ["b004"]
        assert state.pending_action is None
        assert state.current_player_id == 0

    def test_face_down_magic_gives_no_mana(self, reducer, prompted, play):
        state = play(reducer, prompted, Action.respond_to_choice(True))
        assert rules.available_mana(state.get_player(1)) == []

    def test_decline_prompts_again_for_second_wall(self, reducer, prompted, play):
        state = play(reducer, prompted, Action.respond_to_choice(False))
        pending = state.pending_action
        assert pending.effect == ChoiceEffect.AWAKENED_MAGIC
        assert pending.wall_card_id == "b004"
        assert pending.walls_remaining == 0

        state = play(reducer, state, Action.respond_to_choice(False))
        defender = state.get_player(1)
        assert state.pending_action is None
        assert [c.id for c in defender.discard] == ["b010", "b004"]
        assert defender.hand == []

    def test_other_color_wall_not_prompted(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.walls(1, "r004", "r003")
        board.magic(1, "Blue", card_id="b_magic_awakened")
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        assert state.pending_action is None

    def test_rescuing_last_wall_still_loses(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.walls(1, "b004")
        board.magic(1, "Blue", card_id="b_magic_awakened")
        state = attack(reducer, board.build(), attacker, PLAYER_TARGET, play)
        assert not state.is_over

        saved = play(reducer, state, Action.respond_to_choice(True))
        assert saved.is_over  # rescued to hand, but no walls remain
        assert saved.winner_id == 0


class TestPhoenix:

    @pytest.fixture
    def prompted(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        board.lane(1, 2, "r007")
        board.hand(1, "r004")
        state = board.build()
        target = state.get_player(1).lanes[2].instance_id
        return attack(reducer, state, attacker, target, play)

    def test_lethal_hit_prompts_owner(self, prompted):
        pending = prompted.pending_action
        assert pending.effect == ChoiceEffect.SAVE_PHOENIX
        assert responding_player_id(prompted) == 1
        assert prompted.get_player(1).lanes[2] is not None

    def test_accept_then_discard_returns_to_hand(self, reducer, prompted, play):
        state = play(reducer, prompted, Action.respond_to_choice(True))
        pending = state.pending_action
        assert isinstance(pending, DiscardPending)
        assert pending.reason == DiscardReason.SAVE_PHOENIX
        assert pending.player_id == 1

        state = play(reducer, state, Action.discard_card(0, player_id=1))
        defender = state.get_player(1)
        assert defender.lanes[2] is None
        assert [c.id for c in defender.hand] == ["r007"]
        assert [c.id for c in defender.discard] == ["r004"]
        assert state.current_player_id == 0
        assert state.pending_action is None

    def test_decline_destroys(self, reducer, prompted, play):
        state = play(reducer, prompted, Action.respond_to_choice(False))
        defender = state.get_player(1)
        assert defender.lanes[2] is None
        assert [c.id for c in defender.discard] == ["r007"]
        assert [c.id for c in defender.hand] == ["r004"]

    def test_empty_hand_means_no_prompt(self, reducer, board, play):
        attacker = board.lane(0, 0, "b003")
        phoenix = board.lane(1, 2, "r007")
        state = attack(reducer, board.build(), attacker, phoenix.instance_id, play)
        assert state.pending_action is None
        assert [c.id for c in state.get_player(1).discard] == ["r007"]
