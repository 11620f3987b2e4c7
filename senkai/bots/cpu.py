"""
CPU Bot - Single-ply greedy opponent.

Priority order:
1. Answer a pending effect addressed to this seat
2. Attack with the selected lane card (or deselect it)
3. Play the selected hand card (or deselect it)
4. Select something: an affordable spell, else the most expensive
   affordable monster that fits, else the strongest ready attacker
5. Pass (None) so the driver advances the phase

The bot does NOT look ahead or simulate; every choice reads only the
current state.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..catalog.cards import CardType, Keyword
from ..engine_core.state import GameState, GamePhase, PlayerState
from ..engine_core.action import Action, PLAYER_TARGET
from ..engine_core.pending import DiscardPending, SelectTargetPending, ChooseEffectPending
from ..engine_core.effect_resolver import responding_player_id
from ..engine_core import rules
from .policy import BotPolicy, BotDecision


@dataclass
class CpuPolicy(BotPolicy):
    """
    Heuristic CPU opponent for one seat.

    Usage:
        cpu = CpuPolicy(player_id=1)
        decision = cpu.select_action(state)
        if decision:
            result = reducer.apply(state, decision.action)
    """
    player_id: int = 1

    def select_action(self, state: GameState) -> BotDecision | None:
        if state.phase in (GamePhase.SETUP, GamePhase.GAME_OVER):
            return None

        if state.pending_action is not None:
            if responding_player_id(state) != self.player_id:
                return None
            return self._respond(state)

        if state.current_player_id != self.player_id or state.phase != GamePhase.MAIN:
            return None

        player = state.current_player
        if state.selected_lane_instance_id is not None:
            attacker = player.find_lane_card(state.selected_lane_instance_id)
            if attacker is not None:
                return self._attack(state, player, attacker)

        if state.selected_hand_index is not None:
            return self._play_selected(state, player)

        return self._select(state, player)

    def _decide(self, action: Action, explanation: str) -> BotDecision:
        action.payload.player_id = self.player_id
        return BotDecision(action=action, explanation=explanation)

    # ------------------------------------------------------------------
    # Pending effects
    # ------------------------------------------------------------------

    def _respond(self, state: GameState) -> BotDecision | None:
        pending = state.pending_action

        if isinstance(pending, DiscardPending):
            hand = state.get_player(pending.player_id).hand
            if not hand:
                return None
            index = min(range(len(hand)), key=lambda i: hand[i].cost)
            return self._decide(Action.discard_card(index), f"Discard cheapest card {hand[index].name}")

        if isinstance(pending, SelectTargetPending):
            enemy = state.opponent_of(pending.player_id)
            candidates = [c for c in enemy.monsters() if c.instance_id in pending.valid_targets]
            if candidates:
                best = max(candidates, key=lambda c: rules.total_ap(enemy, c))
                return self._decide(Action.choose_target(best.instance_id), f"Target strongest {best.name}")
            return self._decide(Action.choose_target(pending.valid_targets[0]), "Target first valid")

        if isinstance(pending, ChooseEffectPending):
            return self._decide(Action.respond_to_choice(True), f"Accept {pending.effect.value}")

        return None

    # ------------------------------------------------------------------
    # Main phase
    # ------------------------------------------------------------------

    def _attack(self, state, player, attacker) -> BotDecision:
        opponent = state.opponent_of(player.player_id)
        enemies = list(opponent.monsters())
        if enemies and not attacker.tapped:
            target = max(enemies, key=lambda c: rules.total_ap(opponent, c))
            return self._decide(
                Action.declare_attack(target.instance_id),
                f"{attacker.name} attacks strongest enemy {target.name}",
            )
        if state.turn > 1 and rules.can_attack(state, attacker, PLAYER_TARGET):
            return self._decide(Action.declare_attack(PLAYER_TARGET), f"{attacker.name} attacks the player")
        return self._decide(Action.select_lane_card(attacker.instance_id), f"Deselect {attacker.name}")

    def _play_selected(self, state: GameState, player: PlayerState) -> BotDecision:
        index = state.selected_hand_index
        card = player.hand[index] if index < len(player.hand) else None
        if card is not None and card.type == CardType.MONSTER:
            lane = self._lane_for(player, card)
            if lane is not None:
                return self._decide(Action.play_card(lane_index=lane), f"Play {card.name} in lane {lane}")
        elif card is not None and card.type == CardType.SPELL:
            return self._decide(Action.play_card(lane_index=0), f"Cast {card.name}")
        return self._decide(Action.select_hand_card(index), "Deselect hand card")

    @staticmethod
    def _lane_for(player: PlayerState, card) -> int | None:
        """Empty lane for a monster: the center for a BigDemon, else the first empty one."""
        if card.has(Keyword.BIG_DEMON):
            return rules.CENTER_LANE if player.lanes[rules.CENTER_LANE] is None else None
        for i, occupant in enumerate(player.lanes):
            if occupant is None:
                return i
        return None

    def _select(self, state: GameState, player: PlayerState) -> BotDecision | None:
        hand = player.hand

        for i, card in enumerate(hand):
            if card.type == CardType.SPELL and rules.can_afford(player, card):
                return self._decide(Action.select_hand_card(i), f"Select spell {card.name}")

        best_index = None
        for i, card in enumerate(hand):
            if card.type != CardType.MONSTER or not rules.can_afford(player, card):
                continue
            if self._lane_for(player, card) is None:
                continue
            if best_index is None or card.cost > hand[best_index].cost:
                best_index = i
        if best_index is not None:
            return self._decide(Action.select_hand_card(best_index), f"Select monster {hand[best_index].name}")

        attackers = [m for m in player.monsters() if rules.attack_targets(state, m)]
        if attackers:
            best = max(attackers, key=lambda m: rules.total_ap(player, m))
            return self._decide(Action.select_lane_card(best.instance_id), f"Select attacker {best.name}")

        return None
