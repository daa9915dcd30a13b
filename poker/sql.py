# poker/sql.py
import logging
from typing import Optional

from psycopg.types.json import Jsonb

from util.db import db
from .errors import RoundErrorKind, RoundException
from .model import Act, ActType, Phase, Player, Round

logger = logging.getLogger(__name__)


def ensure_schema(dsn: Optional[str] = None):
    with db(dsn) as conn, conn.cursor() as cur:
        cur.execute("""
        CREATE TABLE IF NOT EXISTS poker_rounds (
          id BIGSERIAL PRIMARY KEY,
          phase TEXT NOT NULL,            -- PRE_FLOP | FLOP | TURN | RIVER | SHOWDOWN
          pot BIGINT NOT NULL DEFAULT 0,
          highest_bet BIGINT NOT NULL DEFAULT 0,
          min_raise BIGINT NOT NULL,       -- current phase
          base_raise BIGINT NOT NULL,      -- min_raise when a phase opens
          to_act INT,                     -- seat index, NULL once closed
          pending JSONB NOT NULL DEFAULT '[]',
          players JSONB NOT NULL,         -- seat order: [{id, stack, bet, folded, all_in}]
          winner_id BIGINT,
          version INT NOT NULL DEFAULT 0,
          opened_at TIMESTAMPTZ DEFAULT now(),
          closed_at TIMESTAMPTZ
        );
        """)
        cur.execute("""
        CREATE TABLE IF NOT EXISTS poker_acts (
          id BIGSERIAL PRIMARY KEY,
          round_id BIGINT NOT NULL REFERENCES poker_rounds(id) ON DELETE CASCADE,
          seq INT NOT NULL,
          player_id BIGINT NOT NULL,
          type TEXT NOT NULL,             -- FOLD | CHECK | CALL | RAISE | ALL_IN
          phase TEXT NOT NULL,
          bet BIGINT NOT NULL DEFAULT 0,
          created_at TIMESTAMPTZ DEFAULT now()
        );
        """)
        cur.execute("ALTER TABLE poker_rounds ADD COLUMN IF NOT EXISTS base_raise BIGINT NOT NULL DEFAULT 0;")
        cur.execute("UPDATE poker_rounds SET base_raise=min_raise WHERE base_raise=0;")
        cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS uniq_poker_act ON poker_acts (round_id, seq);")
        conn.commit()


def _players_json(rnd: Round):
    return Jsonb([
        {"id": p.id, "stack": p.stack, "bet": p.bet, "folded": p.folded, "all_in": p.all_in}
        for p in rnd.players
    ])


def _row_to_round(row, act_rows) -> Round:
    return Round(
        id=int(row["id"]),
        players=[
            Player(id=p["id"], stack=p["stack"], bet=p["bet"],
                   folded=p["folded"], all_in=p["all_in"])
            for p in row["players"]
        ],
        phase=Phase(row["phase"]),
        pot=int(row["pot"]),
        highest_bet=int(row["highest_bet"]),
        min_raise=int(row["min_raise"]),
        base_raise=int(row["base_raise"]),
        to_act=row["to_act"],
        pending=list(row["pending"] or []),
        acts=[
            Act(player_id=int(a["player_id"]), type=ActType(a["type"]), phase=Phase(a["phase"]),
                bet=int(a["bet"]), created_at=a["created_at"])
            for a in act_rows
        ],
        winner_id=row["winner_id"],
        version=row["version"],
        opened_at=row["opened_at"],
        closed_at=row["closed_at"],
    )


def _insert_acts(cur, round_id: int, acts, start: int):
    for seq, a in enumerate(acts[start:], start=start):
        cur.execute("""
          INSERT INTO poker_acts (round_id, seq, player_id, type, phase, bet, created_at)
          VALUES (%s, %s, %s, %s, %s, %s, %s);
        """, (round_id, seq, a.player_id, a.type.value, a.phase.value, a.bet, a.created_at))


class PostgresRoundStore:
    def __init__(self, dsn: Optional[str] = None):
        self._dsn = dsn

    def create_round(self, rnd: Round) -> Round:
        with db(self._dsn) as conn, conn.cursor() as cur:
            cur.execute("""
              INSERT INTO poker_rounds (phase, pot, highest_bet, min_raise, base_raise, to_act, pending,
                                        players, winner_id, version, opened_at, closed_at)
              VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
              RETURNING id;
            """, (rnd.phase.value, rnd.pot, rnd.highest_bet, rnd.min_raise, rnd.base_raise, rnd.to_act,
                  Jsonb(rnd.pending), _players_json(rnd), rnd.winner_id, rnd.version,
                  rnd.opened_at, rnd.closed_at))
            round_id = int(cur.fetchone()["id"])
            _insert_acts(cur, round_id, rnd.acts, 0)
            conn.commit()
        return self.load_round(round_id)

    def load_round(self, round_id: int) -> Optional[Round]:
        with db(self._dsn) as conn, conn.cursor() as cur:
            cur.execute("SELECT * FROM poker_rounds WHERE id=%s;", (round_id,))
            row = cur.fetchone()
            if not row:
                return None
            cur.execute("""
              SELECT player_id, type, phase, bet, created_at
              FROM poker_acts
              WHERE round_id=%s
              ORDER BY seq;
            """, (round_id,))
            return _row_to_round(row, cur.fetchall())

    def save_round(self, rnd: Round) -> None:
        """Write one accepted act's worth of changes.

        The stored version must be exactly one behind `rnd.version`,
        otherwise another writer got there first.
        """
        with db(self._dsn) as conn, conn.cursor() as cur:
            # serialise writers across instances for this round
            cur.execute("SELECT pg_advisory_xact_lock(%s);", (rnd.id,))
            cur.execute("SELECT version FROM poker_rounds WHERE id=%s FOR UPDATE;", (rnd.id,))
            row = cur.fetchone()
            if not row:
                raise RoundException(RoundErrorKind.ROUND_NOT_FOUND, f"round {rnd.id} not found")
            if row["version"] != rnd.version - 1:
                conn.rollback()
                logger.warning("round %s: stale write (stored v%s, writing v%s)",
                               rnd.id, row["version"], rnd.version)
                raise RoundException(RoundErrorKind.CONFLICT,
                                     f"round {rnd.id} changed meanwhile, fetch it again")

            cur.execute("SELECT COUNT(*) AS n FROM poker_acts WHERE round_id=%s;", (rnd.id,))
            stored_acts = int(cur.fetchone()["n"])

            cur.execute("""
              UPDATE poker_rounds
              SET phase=%s, pot=%s, highest_bet=%s, min_raise=%s, base_raise=%s, to_act=%s,
                  pending=%s, players=%s, winner_id=%s, version=%s, closed_at=%s
              WHERE id=%s;
            """, (rnd.phase.value, rnd.pot, rnd.highest_bet, rnd.min_raise, rnd.base_raise, rnd.to_act,
                  Jsonb(rnd.pending), _players_json(rnd), rnd.winner_id, rnd.version,
                  rnd.closed_at, rnd.id))
            _insert_acts(cur, rnd.id, rnd.acts, stored_acts)
            conn.commit()
