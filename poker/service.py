# poker/service.py
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Tuple

from util.config import MAX_PLAYERS, MIN_RAISE
from .errors import RoundErrorKind, RoundException
from .model import Act, ActType, Phase, Player, Round
from .rules import ActValidator
from .state import apply_act, new_round
from .store import RoundStore

logger = logging.getLogger(__name__)


class RoundEngine:
    """Validates and applies acts for poker rounds kept in a RoundStore.

    Acts on one round are applied one at a time; reads don't wait for
    writers and may see the state from just before an act in flight.
    """

    def __init__(self, store: RoundStore, validator: Optional[ActValidator] = None):
        self._store = store
        self._validator = validator or ActValidator()
        # round id -> [lock, threads holding or waiting on it]
        self._locks: Dict[int, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _round_lock(self, round_id: int):
        with self._locks_guard:
            entry = self._locks.setdefault(round_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[round_id]

    def create_round(self, players: Iterable[Tuple[int, int]],
                     min_raise: Optional[int] = None) -> Round:
        """Open a round for (player_id, stack) pairs, seated in the given order."""
        seats = [Player(id=int(pid), stack=int(stack)) for pid, stack in players]
        if not 2 <= len(seats) <= MAX_PLAYERS:
            raise RoundException(RoundErrorKind.INVALID_ROUND,
                                 f"a round needs 2 to {MAX_PLAYERS} players, got {len(seats)}")
        if len({p.id for p in seats}) != len(seats):
            raise RoundException(RoundErrorKind.INVALID_ROUND, "player ids must be unique")
        if any(p.stack <= 0 for p in seats):
            raise RoundException(RoundErrorKind.INVALID_ROUND, "every player needs chips")
        min_raise = MIN_RAISE if min_raise is None else min_raise
        if min_raise <= 0:
            raise RoundException(RoundErrorKind.INVALID_ROUND, "min raise must be positive")

        rnd = self._store.create_round(new_round(None, seats, min_raise))
        logger.info("round %s opened for players %s", rnd.id, [p.id for p in rnd.players])
        return rnd

    def get_round(self, round_id: int) -> Round:
        rnd = self._store.load_round(round_id)
        if rnd is None:
            raise RoundException(RoundErrorKind.ROUND_NOT_FOUND, f"round {round_id} not found")
        return rnd

    def get_acts(self, round_id: int) -> List[Act]:
        return list(self.get_round(round_id).acts)

    def get_possible_acts(self, round_id: int, player_id: int) -> List[ActType]:
        return self._validator.possible_acts(self.get_round(round_id), player_id)

    def _validate(self, rnd: Round, player_id: int, act_type: ActType,
                  phase: Optional[Phase], bet: int) -> Act:
        try:
            return self._validator.validate_act(rnd, player_id, act_type, phase, bet)
        except RoundException as e:
            logger.info("round %s: rejected %s from player %s (%s: %s)",
                        rnd.id, act_type.value, player_id, e.kind.value, e.message)
            raise

    def save_act(self, round_id: int, player_id: int, act_type: ActType,
                 phase: Optional[Phase] = None, bet: int = 0) -> Round:
        # missing and closed rounds are turned away before taking a lock
        rnd = self.get_round(round_id)
        if rnd.closed:
            self._validate(rnd, player_id, act_type, phase, bet)

        with self._round_lock(round_id):
            rnd = self.get_round(round_id)
            act = self._validate(rnd, player_id, act_type, phase, bet)

            updated = apply_act(rnd, act)
            self._store.save_round(updated)

        logger.info("round %s: player %s %s %s -> %s, pot %s",
                    round_id, player_id, act.type.value, act.bet,
                    updated.phase.value, updated.pot)
        return updated
