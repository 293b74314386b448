"""Human-readable order number generation."""

import random
import secrets
import time
from typing import Optional

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
SUFFIX_LENGTH = 4


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_order_number(
    prefix: str = "NVZ",
    now_ms: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Generate an order number such as ``NVZ-LZ4K2M1Q-7F3A``.

    The middle segment is the creation time in milliseconds and the suffix is
    random, so numbers sort roughly by creation time while two orders in the
    same millisecond still differ. Uniqueness is ultimately enforced by the
    database; the caller retries on conflict.

    Args:
        prefix: Leading segment, upper-cased
        now_ms: Timestamp override in milliseconds
        rng: Random source override

    Returns:
        Order number string
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    if rng is None:
        suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(SUFFIX_LENGTH))
    else:
        suffix = "".join(rng.choice(BASE36_ALPHABET) for _ in range(SUFFIX_LENGTH))

    clean_prefix = (prefix or "NVZ").strip().upper() or "NVZ"
    return f"{clean_prefix}-{to_base36(now_ms)}-{suffix}"
