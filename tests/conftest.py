"""Pytest fixtures for the poker round service."""

import jwt
import pytest
from fastapi.testclient import TestClient

from poker.model import Phase, Player, Round
from poker.rules import ActValidator
from poker.service import RoundEngine
from poker.store import MemoryRoundStore
from util import config


def make_round(players, highest_bet=None, to_act=0, min_raise=2, phase=Phase.PRE_FLOP, pending=None):
    """Build a round directly from (id, stack, bet) tuples."""
    seats = [Player(id=pid, stack=stack, bet=bet) for pid, stack, bet in players]
    if highest_bet is None:
        highest_bet = max(p.bet for p in seats)
    if pending is None:
        pending = [p.id for p in seats]
    return Round(
        id=1,
        players=seats,
        phase=phase,
        pot=sum(p.bet for p in seats),
        highest_bet=highest_bet,
        min_raise=min_raise,
        base_raise=min_raise,
        to_act=to_act,
        pending=pending,
    )


@pytest.fixture
def validator():
    return ActValidator()


@pytest.fixture
def engine():
    return RoundEngine(MemoryRoundStore())


@pytest.fixture
def client(engine):
    from app import create_app

    with TestClient(create_app(engine=engine)) as c:
        yield c


def bearer(uid=1, roles=("ROLE_USER",)):
    token = jwt.encode({"uid": uid, "roles": list(roles)}, config.SECRET_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    return bearer(uid=1)


@pytest.fixture
def admin_headers():
    return bearer(uid=99, roles=("ROLE_ADMIN",))
