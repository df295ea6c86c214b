"""Generation of entity IDs.

IDs are opaque strings. The prefix only helps a human tell a board ID from
a card ID; nothing may parse or depend on the format.
"""

import secrets
import string
import time
from collections.abc import Callable
from datetime import datetime, timezone

ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase

EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc).timestamp()
TICK_MILLIS = 10
RANDOM_CHARS = 3

PREFIXES = {
    "card": "a_",
    "board": "b_",
    "comment": "c_",
    "project": "p_",
}


def encode_base62(n: int) -> str:
    """Encode a non-negative integer, e.g. 0 → "0", 62 → "10"."""
    if n == 0:
        return ALPHABET[0]
    digits = []
    while n:
        n, rem = divmod(n, len(ALPHABET))
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def token(now: float | None = None) -> str:
    """Base62 count of 10ms ticks since 2026-01-01 plus random characters."""
    now = time.time() if now is None else now
    ticks = max(0, int((now - EPOCH) * 1000) // TICK_MILLIS)
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(RANDOM_CHARS))
    return encode_base62(ticks) + suffix


def new_id(entity: str, exists: Callable[[str], bool] | None = None) -> str:
    """Generate an ID for entity ("card", "board", "comment", "project").

    If exists is given, keep generating until it reports the ID as unused.
    """
    prefix = PREFIXES[entity]
    while True:
        candidate = prefix + token()
        if exists is None or not exists(candidate):
            return candidate
