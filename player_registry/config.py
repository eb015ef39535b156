"""
Single place for registry configuration.
Values are read once from the environment (a local .env file is loaded first).
Database settings live in api/database.py, auth settings in api/auth.py.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Public player ids: <prefix><sequence, 2+ digits><ddmmyyyy>
PLAYER_ID_PREFIX = os.environ.get("PLAYER_ID_PREFIX", "IDSC").strip().upper()
if len(PLAYER_ID_PREFIX) != 4 or not PLAYER_ID_PREFIX.isalpha():
    raise RuntimeError(f"PLAYER_ID_PREFIX must be exactly 4 letters, got {PLAYER_ID_PREFIX!r}")

# Key of the singleton counter row that feeds player sequence numbers
SEQUENCE_COUNTER_KEY = "player_sequence"

# Collision retries when generating internal user ids
USER_ID_MAX_ATTEMPTS = int(os.environ.get("USER_ID_MAX_ATTEMPTS", "5"))

MIN_AGE = 10
MAX_AGE = 65

DEFAULT_COUNTRY = "India"
DEFAULT_PRIMARY_SPORT = "Cricket"

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://127.0.0.1:5500,http://localhost:8080",
    ).split(",")
    if origin.strip()
]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "console").lower()  # console | json

# Development only: include exception text in 500 responses
EXPOSE_ERROR_DETAILS = _env_bool("EXPOSE_ERROR_DETAILS")
