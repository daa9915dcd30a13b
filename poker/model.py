# poker/model.py
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import pytz

from util.config import TZ_NAME

TZ = pytz.timezone(TZ_NAME)


def tz_now() -> datetime:
    return datetime.now(TZ)


class ActType(str, enum.Enum):
    # declaration order == order of possible acts handed to clients
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


class Phase(str, enum.Enum):
    PRE_FLOP = "PRE_FLOP"  # no cards on the table
    FLOP = "FLOP"          # three cards
    TURN = "TURN"          # four cards
    RIVER = "RIVER"        # five cards
    SHOWDOWN = "SHOWDOWN"  # the end

    def next(self) -> "Phase":
        order = list(Phase)
        i = order.index(self)
        return order[min(i + 1, len(order) - 1)]


@dataclass
class Player:
    id: int
    stack: int               # chips still behind
    bet: int = 0             # chips committed this round
    folded: bool = False
    all_in: bool = False

    @property
    def can_bet(self) -> bool:
        return not self.folded and not self.all_in


@dataclass(frozen=True)
class Act:
    player_id: int
    type: ActType
    phase: Phase
    bet: int = 0             # chips this act moved into the pot
    created_at: Optional[datetime] = None


@dataclass
class Round:
    id: Optional[int]
    players: List[Player]
    phase: Phase = Phase.PRE_FLOP
    pot: int = 0
    highest_bet: int = 0
    min_raise: int = 0                   # smallest raise increment right now
    base_raise: int = 0                  # min_raise at the start of every phase
    to_act: Optional[int] = 0            # seat index, None once closed
    pending: List[int] = field(default_factory=list)
    acts: List[Act] = field(default_factory=list)
    winner_id: Optional[int] = None
    version: int = 0
    opened_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @property
    def closed(self) -> bool:
        return self.phase == Phase.SHOWDOWN

    def player(self, player_id: int) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def seat_of(self, player_id: int) -> int:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        raise KeyError(player_id)

    @property
    def to_act_player(self) -> Optional[Player]:
        if self.to_act is None:
            return None
        return self.players[self.to_act]

    def in_hand(self) -> List[Player]:
        return [p for p in self.players if not p.folded]

    def betting(self) -> List[Player]:
        return [p for p in self.players if p.can_bet]

    def call_amount(self, player: Player) -> int:
        return max(0, self.highest_bet - player.bet)
