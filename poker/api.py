# poker/api.py
from typing import List

from fastapi import APIRouter, Depends, Request, status

from auth.security import ROLE_ADMIN, ROLE_USER, Principal, require_role
from .model import ActType
from .schema import ActDTO, ActView, CreateRoundReq, RoundView, act_view, round_view
from .service import RoundEngine

router = APIRouter()

player_only = require_role(ROLE_USER)
admin_only = require_role(ROLE_ADMIN)
anyone = require_role(ROLE_USER, ROLE_ADMIN)


def get_engine(request: Request) -> RoundEngine:
    return request.app.state.engine


@router.get("/rounds/{round_id}/players/{player_id}/possible-acts")
def possible_acts(
    round_id: int,
    player_id: int,
    engine: RoundEngine = Depends(get_engine),
    _: Principal = Depends(player_only),
) -> List[ActType]:
    return engine.get_possible_acts(round_id, player_id)


@router.post("/rounds/{round_id}/players/{player_id}/acts", status_code=status.HTTP_201_CREATED)
def do_act(
    body: ActDTO,
    round_id: int,
    player_id: int,
    engine: RoundEngine = Depends(get_engine),
    _: Principal = Depends(player_only),
) -> ActDTO:
    """
    Last check happens in the engine; an accepted act is echoed back.
    """
    engine.save_act(round_id, player_id, body.type, body.phase, body.bet)
    return body


# ====== rounds ======

@router.post("/rounds", status_code=status.HTTP_201_CREATED)
def create_round(
    body: CreateRoundReq,
    engine: RoundEngine = Depends(get_engine),
    _: Principal = Depends(admin_only),
) -> RoundView:
    rnd = engine.create_round([(s.id, s.stack) for s in body.players], body.min_raise)
    return round_view(rnd)


@router.get("/rounds/{round_id}")
def get_round(
    round_id: int,
    engine: RoundEngine = Depends(get_engine),
    _: Principal = Depends(anyone),
) -> RoundView:
    return round_view(engine.get_round(round_id))


@router.get("/rounds/{round_id}/acts")
def get_acts(
    round_id: int,
    engine: RoundEngine = Depends(get_engine),
    _: Principal = Depends(anyone),
) -> List[ActView]:
    return [act_view(a) for a in engine.get_acts(round_id)]
