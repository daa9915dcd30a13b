# poker/rules.py
from typing import List, Optional

from .errors import RoundErrorKind, RoundException
from .model import Act, ActType, Phase, Player, Round


class ActValidator:
    """Decides which acts a player may make. Never touches the round."""

    def _check_turn(self, rnd: Round, player_id: int) -> Player:
        player = rnd.player(player_id)
        if player is None:
            raise RoundException(RoundErrorKind.PLAYER_NOT_FOUND,
                                 f"player {player_id} is not seated in round {rnd.id}")
        if rnd.closed:
            raise RoundException(RoundErrorKind.ROUND_CLOSED, f"round {rnd.id} is closed")
        current = rnd.to_act_player
        if current is None or current.id != player_id:
            raise RoundException(RoundErrorKind.NOT_PLAYERS_TURN,
                                 f"it is not player {player_id}'s turn")
        return player

    def possible_acts(self, rnd: Round, player_id: int) -> List[ActType]:
        player = self._check_turn(rnd, player_id)
        call = rnd.call_amount(player)

        acts = {ActType.FOLD}
        if call == 0:
            acts.add(ActType.CHECK)
        elif player.stack >= call:
            acts.add(ActType.CALL)
        # stack == call: calling empties the stack, nothing left to raise with
        if player.stack > call:
            acts.add(ActType.RAISE)
        if player.stack > 0:
            acts.add(ActType.ALL_IN)
        return [t for t in ActType if t in acts]

    @staticmethod
    def min_raise_amount(rnd: Round, player: Player) -> int:
        return min(rnd.call_amount(player) + rnd.min_raise, player.stack)

    def validate_act(self, rnd: Round, player_id: int, act_type: ActType,
                     phase: Optional[Phase] = None, bet: int = 0) -> Act:
        """Re-check a submitted act against the current state.

        Returns the act as it will be applied: FOLD/CHECK/CALL carry no
        bet, ALL_IN always carries the whole stack.
        """
        allowed = self.possible_acts(rnd, player_id)
        player = rnd.player(player_id)

        if phase is not None and phase != rnd.phase:
            raise RoundException(RoundErrorKind.INVALID_ACT,
                                 f"act made in {phase.value}, round is in {rnd.phase.value}")
        if act_type not in allowed:
            raise RoundException(RoundErrorKind.INVALID_ACT,
                                 f"{act_type.value} is not allowed, possible: "
                                 + ", ".join(t.value for t in allowed))

        bet = bet or 0
        if act_type == ActType.RAISE:
            low = self.min_raise_amount(rnd, player)
            if bet < low or bet > player.stack:
                raise RoundException(RoundErrorKind.INVALID_AMOUNT,
                                     f"raise must be between {low} and {player.stack}, got {bet}")
        elif act_type == ActType.ALL_IN:
            if bet not in (0, player.stack):
                raise RoundException(RoundErrorKind.INVALID_AMOUNT,
                                     f"all in moves the whole stack ({player.stack}), got {bet}")
            bet = player.stack
        elif act_type == ActType.CALL:
            bet = rnd.call_amount(player)
        else:
            bet = 0

        return Act(player_id=player_id, type=act_type, phase=rnd.phase, bet=bet)
