# poker/store.py
import copy
import itertools
import threading
from typing import Dict, Optional, Protocol

from .model import Round


class RoundStore(Protocol):
    def create_round(self, rnd: Round) -> Round: ...

    def load_round(self, round_id: int) -> Optional[Round]: ...

    def save_round(self, rnd: Round) -> None: ...


class MemoryRoundStore:
    """Keeps rounds in process. Hands out copies so nothing outside can
    change a stored round without going through save_round."""

    def __init__(self):
        self._rounds: Dict[int, Round] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_round(self, rnd: Round) -> Round:
        with self._lock:
            rnd = copy.deepcopy(rnd)
            rnd.id = next(self._ids)
            self._rounds[rnd.id] = rnd
            return copy.deepcopy(rnd)

    def load_round(self, round_id: int) -> Optional[Round]:
        with self._lock:
            rnd = self._rounds.get(round_id)
            return copy.deepcopy(rnd) if rnd is not None else None

    def save_round(self, rnd: Round) -> None:
        with self._lock:
            self._rounds[rnd.id] = copy.deepcopy(rnd)
