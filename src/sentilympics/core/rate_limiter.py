"""Sliding-window request counter with durable storage.

Every operation key keeps the millisecond timestamps of its accepted requests
inside the trailing window. Old entries are pruned lazily on each check, and a
rejected attempt is never recorded, so ``reset_time`` on rejection is exactly
the moment the oldest counted request leaves the window.

The read-modify-write cycle is not locked. Concurrent writers may lose an
update and overshoot the quota slightly; this is an advisory client-side
guard, not a security boundary.
"""

import json
import logging
import math
import time
from typing import Callable, List, Optional

from .config import settings
from .constants import RateLimitConstants
from .models import RateLimitStatus
from .storage import DiskStore, KeyValueStore

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def _parse_timestamps(value: Optional[str]) -> List[float]:
    """Decode a stored record; anything other than a JSON array of finite numbers is empty."""
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse rate-limit timestamps: {e}")
        return []
    if isinstance(parsed, list) and all(
        isinstance(item, (int, float)) and not isinstance(item, bool) and math.isfinite(item)
        for item in parsed
    ):
        return parsed
    logger.warning("Ignoring malformed rate-limit record")
    return []


class RateLimiter:
    """Sliding-window limiter keyed by operation name."""

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    @staticmethod
    def storage_key(key: str) -> str:
        return f"{RateLimitConstants.STORAGE_PREFIX}{key}"

    def _load(self, key: str) -> List[float]:
        try:
            raw = self.store.get(self.storage_key(key))
        except Exception as e:
            logger.warning(f"Rate-limit store read failed for '{key}': {e}")
            return []
        return _parse_timestamps(raw)

    def _save(self, key: str, timestamps: List[float]) -> None:
        try:
            self.store.set(self.storage_key(key), json.dumps(timestamps))
        except Exception as e:
            logger.warning(f"Rate-limit store write failed for '{key}': {e}")

    def check(self, key: str, max_requests: int, window_ms: int) -> RateLimitStatus:
        """Count one request against ``key`` if the window has room for it."""
        if max_requests <= 0 or window_ms <= 0:
            raise ValueError("max_requests and window_ms must be positive")

        now = self.clock()
        timestamps = [ts for ts in self._load(key) if now - ts < window_ms]

        if len(timestamps) >= max_requests:
            oldest = min(timestamps)
            reset_time = int(oldest + window_ms)
            logger.warning(f"Rate limit reached for '{key}' ({len(timestamps)}/{max_requests}), resets at {reset_time}")
            return RateLimitStatus(allowed=False, remaining=0, reset_time=reset_time)

        timestamps.append(now)
        self._save(key, timestamps)
        return RateLimitStatus(
            allowed=True,
            remaining=max_requests - len(timestamps),
            reset_time=now + window_ms,
        )


_default_limiter: Optional[RateLimiter] = None


def get_default_limiter() -> RateLimiter:
    """Limiter backed by the on-disk store from settings, created on first use."""
    global _default_limiter
    if _default_limiter is None:
        _default_limiter = RateLimiter(DiskStore(settings.rate_limit_dir))
    return _default_limiter


def check_rate_limit(key: str, max_requests: int, window_ms: int) -> RateLimitStatus:
    return get_default_limiter().check(key, max_requests, window_ms)


def get_wait_time_minutes(reset_time: int, now: Optional[int] = None) -> str:
    """Minutes until ``reset_time``, rounded up: ``"1 minute"``, ``"3 minutes"``."""
    if now is None:
        now = now_ms()
    remaining_ms = max(reset_time - now, 0)
    minutes = math.ceil(remaining_ms / RateLimitConstants.MS_PER_MINUTE)
    return f"{minutes} minute{'s' if minutes > 1 else ''}"
