# poker/schema.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .model import Act, ActType, Phase, Player, Round


class ActDTO(BaseModel):
    type: ActType
    phase: Optional[Phase] = None   # omitted -> whatever phase the round is in
    bet: int = Field(0, ge=0)


class ActView(BaseModel):
    player_id: int
    type: ActType
    phase: Phase
    bet: int
    created_at: Optional[datetime] = None


class SeatReq(BaseModel):
    id: int
    stack: int = Field(..., ge=1)


class CreateRoundReq(BaseModel):
    players: List[SeatReq] = Field(..., min_length=2)
    min_raise: Optional[int] = Field(None, ge=1)


class PlayerView(BaseModel):
    id: int
    stack: int
    bet: int
    folded: bool
    all_in: bool


class RoundView(BaseModel):
    id: int
    phase: Phase
    pot: int
    highest_bet: int
    min_raise: int
    to_act: Optional[int]        # player id
    players: List[PlayerView]
    winner_id: Optional[int] = None
    closed: bool
    opened_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


# ---- domain <-> dto ----

def player_view(p: Player) -> PlayerView:
    return PlayerView(id=p.id, stack=p.stack, bet=p.bet, folded=p.folded, all_in=p.all_in)


def act_view(a: Act) -> ActView:
    return ActView(player_id=a.player_id, type=a.type, phase=a.phase,
                   bet=a.bet, created_at=a.created_at)


def round_view(rnd: Round) -> RoundView:
    current = rnd.to_act_player
    return RoundView(
        id=rnd.id,
        phase=rnd.phase,
        pot=rnd.pot,
        highest_bet=rnd.highest_bet,
        min_raise=rnd.min_raise,
        to_act=current.id if current else None,
        players=[player_view(p) for p in rnd.players],
        winner_id=rnd.winner_id,
        closed=rnd.closed,
        opened_at=rnd.opened_at,
        closed_at=rnd.closed_at,
    )
