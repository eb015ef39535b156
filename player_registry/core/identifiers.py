"""
Player and user identifier formatting.

Player ids are public: prefix + sequence number (at least 2 digits) + the
generation date as ddmmyyyy, all uppercase, e.g. IDSC0104102025. The date is
the server's local date when the id is generated, not the day the counter
started, so ids are not sortable by registration order across days.

User ids are internal and opaque: USER_<epoch millis>_<random token>.
"""

import secrets
import string
import time
from datetime import date
from typing import Callable

from player_registry import config
from player_registry.core.errors import IdGenerationError

# Base-36 alphabet for user id tokens
TOKEN_CHARS = string.digits + string.ascii_lowercase
TOKEN_LENGTH = 6


def format_player_id(sequence_number: int, on_date: date, prefix: str = config.PLAYER_ID_PREFIX) -> str:
    """Build the public player id for an allocated sequence number."""
    if sequence_number < 1:
        raise ValueError(f"Sequence numbers start at 1, got {sequence_number}")
    return f"{prefix}{sequence_number:02d}{on_date:%d%m%Y}".upper()


def preview_player_id(current_sequence: int, on_date: date) -> str:
    """Id the next allocation would get today. Does not allocate anything."""
    return format_player_id(current_sequence + 1, on_date)


def random_token(length: int = TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(TOKEN_CHARS) for _ in range(length))


def format_user_id(timestamp_ms: int, token: str) -> str:
    return f"USER_{timestamp_ms}_{token}".upper()


def generate_user_id(
    exists: Callable[[str], bool],
    max_attempts: int = config.USER_ID_MAX_ATTEMPTS,
    clock: Callable[[], float] = time.time,
) -> str:
    """
    Generate a user id that `exists` reports as unused.
    Raises IdGenerationError when no free id is found within max_attempts.
    """
    for _ in range(max_attempts):
        candidate = format_user_id(int(clock() * 1000), random_token())
        if not exists(candidate):
            return candidate
    raise IdGenerationError("Failed to generate unique User ID")


def split_player_id(player_id: str) -> tuple[str, str, str]:
    """Split a player id into (prefix, sequence digits, ddmmyyyy)."""
    prefix_len = len(config.PLAYER_ID_PREFIX)
    return player_id[:prefix_len], player_id[prefix_len:-8], player_id[-8:]
