# app.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from util import config
from poker.api import router as poker_router
from poker.errors import RoundException
from poker.service import RoundEngine
from poker.store import MemoryRoundStore

APP_NAME = "Poker Game Service"

logger = logging.getLogger("app")


# ===== engine / store =====
def default_engine() -> RoundEngine:
    if config.DATABASE_URL:
        from poker.sql import PostgresRoundStore
        return RoundEngine(PostgresRoundStore(config.DATABASE_URL))
    logger.warning("DATABASE_URL not set, rounds are kept in memory only")
    return RoundEngine(MemoryRoundStore())


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.DATABASE_URL and app.state.bootstrap_schema:
        from poker.sql import ensure_schema
        ensure_schema(config.DATABASE_URL)
        logger.info("schema ready")
    yield


# ===== FastAPI =====
def create_app(engine: Optional[RoundEngine] = None) -> FastAPI:
    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials="*" not in config.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.bootstrap_schema = engine is None
    app.state.engine = engine or default_engine()

    @app.exception_handler(RoundException)
    async def round_exception_handler(request: Request, exc: RoundException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "kind": exc.kind.value},
        )

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(poker_router, prefix="/api")
    return app


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(), host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
