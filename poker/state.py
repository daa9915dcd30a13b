# poker/state.py
import copy
import logging
from typing import Optional

from .model import Act, ActType, Phase, Round, tz_now

logger = logging.getLogger(__name__)


def new_round(round_id, players, min_raise: int) -> Round:
    rnd = Round(id=round_id, players=players, min_raise=min_raise, base_raise=min_raise,
                opened_at=tz_now())
    _start_phase(rnd, Phase.PRE_FLOP)
    return rnd


def apply_act(rnd: Round, act: Act) -> Round:
    """Return the round after `act`. `rnd` itself is left as it was.

    The act is expected to have gone through ActValidator.validate_act.
    """
    rnd = copy.deepcopy(rnd)
    seat = rnd.seat_of(act.player_id)
    player = rnd.players[seat]

    if act.type == ActType.FOLD:
        player.folded = True
        moved = 0
    elif act.type in (ActType.CHECK, ActType.CALL):
        moved = rnd.call_amount(player)
    else:
        moved = act.bet

    if moved:
        player.stack -= moved
        player.bet += moved
        rnd.pot += moved
        if player.stack == 0:
            player.all_in = True

    if player.bet > rnd.highest_bet:
        increment = player.bet - rnd.highest_bet
        if increment >= rnd.min_raise:
            rnd.min_raise = increment
        rnd.highest_bet = player.bet
        # re-raise: everybody else who can still bet owes an answer
        rnd.pending = [p.id for p in rnd.players if p.can_bet and p.id != player.id]
    elif player.id in rnd.pending:
        rnd.pending.remove(player.id)

    rnd.acts.append(Act(player_id=act.player_id, type=act.type, phase=rnd.phase,
                        bet=moved, created_at=act.created_at or tz_now()))
    rnd.version += 1

    in_hand = rnd.in_hand()
    if len(in_hand) == 1:
        rnd.winner_id = in_hand[0].id
        _close(rnd)
    elif not rnd.pending:
        _start_phase(rnd, rnd.phase.next())
    else:
        rnd.to_act = _next_pending(rnd, seat)
    return rnd


def _next_pending(rnd: Round, seat: int) -> Optional[int]:
    n = len(rnd.players)
    for step in range(1, n + 1):
        i = (seat + step) % n
        p = rnd.players[i]
        if p.can_bet and p.id in rnd.pending:
            return i
    return None


def _start_phase(rnd: Round, phase: Phase) -> None:
    # nobody left to bet against: deal the rest out
    while phase != Phase.SHOWDOWN and len(rnd.betting()) < 2:
        phase = phase.next()

    if phase != rnd.phase:
        logger.info("round %s: %s -> %s (pot %s)", rnd.id, rnd.phase.value, phase.value, rnd.pot)
    rnd.phase = phase
    if phase == Phase.SHOWDOWN:
        _close(rnd)
        return

    rnd.min_raise = rnd.base_raise
    rnd.pending = [p.id for p in rnd.betting()]
    rnd.to_act = rnd.seat_of(rnd.pending[0])


def _close(rnd: Round) -> None:
    rnd.phase = Phase.SHOWDOWN
    rnd.to_act = None
    rnd.pending = []
    rnd.closed_at = tz_now()
    logger.info("round %s closed, pot %s, winner %s", rnd.id, rnd.pot, rnd.winner_id)
