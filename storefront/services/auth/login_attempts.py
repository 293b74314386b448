"""
Admin login attempt tracking.

Counts failed logins per caller key (the client address) and blocks the
caller once the limit is reached. The counter is forgotten after an idle
window with no new failures, or immediately on a successful login.

Two stores are available: a process-local in-memory store (default, not
shared between instances) and a Redis store for deployments running several
workers.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from storefront.core.config import get_settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

REDIS_KEY_PREFIX = "novaatoz:login_attempts:"


class AttemptStore(Protocol):
    """Storage for per-key failure counters with an idle expiry."""

    async def get(self, key: str) -> int:
        ...

    async def increment(self, key: str, window_seconds: int) -> int:
        ...

    async def reset(self, key: str) -> None:
        ...


@dataclass
class _Entry:
    count: int
    last_failure: float


class InMemoryAttemptStore:
    """
    Process-local attempt store.

    Every failure refreshes the idle window. ``clock`` returns monotonic
    seconds and can be replaced in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._window_seconds: dict[str, int] = {}

    def _expired(self, key: str, entry: _Entry, now: float) -> bool:
        return now - entry.last_failure >= self._window_seconds.get(key, 0)

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(key, entry, self._clock()):
            self._entries.pop(key, None)
            self._window_seconds.pop(key, None)
            return None
        return entry

    def _sweep(self, now: float) -> None:
        """Drop every expired entry, including callers that never came back."""
        expired = [
            key for key, entry in self._entries.items() if self._expired(key, entry, now)
        ]
        for key in expired:
            del self._entries[key]
            self._window_seconds.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> int:
        entry = self._live_entry(key)
        return entry.count if entry else 0

    async def increment(self, key: str, window_seconds: int) -> int:
        now = self._clock()
        self._sweep(now)
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(count=0, last_failure=now)
            self._entries[key] = entry
        entry.count += 1
        entry.last_failure = now
        self._window_seconds[key] = window_seconds
        return entry.count

    async def reset(self, key: str) -> None:
        self._entries.pop(key, None)
        self._window_seconds.pop(key, None)


class RedisAttemptStore:
    """Attempt store shared across workers; counters expire via Redis TTL."""

    def __init__(self, client: Redis, prefix: str = REDIS_KEY_PREFIX):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisAttemptStore":
        return cls(Redis.from_url(url, decode_responses=True))

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> int:
        value = await self.client.get(self._key(key))
        return int(value) if value else 0

    async def increment(self, key: str, window_seconds: int) -> int:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(self._key(key))
            pipe.expire(self._key(key), window_seconds)
            count, _ = await pipe.execute()
        return int(count)

    async def reset(self, key: str) -> None:
        await self.client.delete(self._key(key))


class LoginAttemptTracker:
    """
    Failed admin login throttle.

    Attributes:
        store: Counter storage
        max_attempts: Failures allowed before the caller is blocked
        window_seconds: Idle window after which failures are forgotten
    """

    def __init__(
        self,
        store: AttemptStore,
        max_attempts: int = 5,
        window_seconds: int = 15 * 60,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    async def is_blocked(self, key: str) -> bool:
        try:
            return await self.store.get(key) >= self.max_attempts
        except RedisError as e:
            # A throttle outage must not lock every admin out.
            logger.error("Login attempt store unavailable", error=str(e))
            return False

    async def register_failure(self, key: str) -> int:
        try:
            count = await self.store.increment(key, self.window_seconds)
        except RedisError as e:
            logger.error("Login attempt store unavailable", error=str(e))
            return 0
        logger.warning(
            "Failed admin login",
            caller=key,
            attempts=count,
            max_attempts=self.max_attempts,
        )
        return count

    async def reset(self, key: str) -> None:
        try:
            await self.store.reset(key)
        except RedisError as e:
            logger.error("Login attempt store unavailable", error=str(e))


_tracker: Optional[LoginAttemptTracker] = None


def get_login_tracker() -> LoginAttemptTracker:
    """Get the process-wide tracker configured from settings."""
    global _tracker
    if _tracker is None:
        settings = get_settings()
        if settings.login_attempt_backend == "redis":
            store: AttemptStore = RedisAttemptStore.from_url(settings.redis_url)
        else:
            store = InMemoryAttemptStore()
        _tracker = LoginAttemptTracker(
            store,
            max_attempts=settings.login_max_attempts,
            window_seconds=settings.login_window_minutes * 60,
        )
        logger.info(
            "Login attempt tracker initialized",
            backend=settings.login_attempt_backend,
            max_attempts=settings.login_max_attempts,
            window_minutes=settings.login_window_minutes,
        )
    return _tracker


def reset_login_tracker() -> None:
    global _tracker
    _tracker = None
