# util/db.py
import psycopg
from psycopg.rows import dict_row

from util.config import DATABASE_URL


def db(dsn: str | None = None):
    dsn = dsn or DATABASE_URL
    if not dsn:
        raise RuntimeError("DATABASE_URL not set")
    return psycopg.connect(dsn, row_factory=dict_row)
