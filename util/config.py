# util/config.py
import os

DATABASE_URL = os.getenv("DATABASE_URL")
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")

TZ_NAME = os.getenv("POKER_TZ", "UTC")
MIN_RAISE = int(os.getenv("POKER_MIN_RAISE", "2"))
MAX_PLAYERS = int(os.getenv("POKER_MAX_PLAYERS", "10"))

# comma separated; "*" allows everything
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "8000"))
