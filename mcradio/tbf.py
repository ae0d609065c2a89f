"""Token-bucket rate limiter with discrete, periodic refills."""

from __future__ import annotations

import threading
import time

TBF_MAX = 1024

_registry_lock = threading.Lock()
_active = 0


class TokenBucketError(Exception):
    """Raised when a bucket cannot be created or has been closed."""


def _acquire_slot() -> None:
    global _active
    with _registry_lock:
        if _active >= TBF_MAX:
            raise TokenBucketError(f"no more than {TBF_MAX} token buckets at once")
        _active += 1


def _release_slot() -> None:
    global _active
    with _registry_lock:
        _active -= 1


class TokenBucket:
    """Adds `cps` tokens every `interval` seconds, capped at `burst`."""

    def __init__(self, cps: int, burst: int, interval: float = 1.0):
        if cps <= 0:
            raise ValueError("cps must be positive")
        if burst <= 0:
            raise ValueError("burst must be positive")
        if interval <= 0:
            raise ValueError("interval must be positive")
        _acquire_slot()
        self.cps = cps
        self.burst = burst
        self.interval = interval
        self._tokens = 0
        self._cond = threading.Condition()
        self._last = time.monotonic()
        self._closed = False

    def _refill(self, now: float) -> None:
        ticks = int((now - self._last) // self.interval)
        if ticks > 0:
            self._tokens = min(self.burst, self._tokens + ticks * self.cps)
            self._last += ticks * self.interval

    @property
    def tokens(self) -> int:
        """Tokens currently available."""
        with self._cond:
            self._refill(time.monotonic())
            return self._tokens

    @property
    def closed(self) -> bool:
        return self._closed

    def fetch(self, ntokens: int) -> None:
        """Block until `ntokens` tokens are available, then take them."""
        if ntokens <= 0:
            raise ValueError("ntokens must be positive")
        if ntokens > self.burst:
            raise ValueError(f"cannot fetch {ntokens} tokens from a burst of {self.burst}")
        with self._cond:
            while True:
                if self._closed:
                    raise TokenBucketError("token bucket is closed")
                now = time.monotonic()
                self._refill(now)
                if self._tokens >= ntokens:
                    self._tokens -= ntokens
                    return
                self._cond.wait(max(self._last + self.interval - now, 0.0))

    def close(self) -> None:
        """Release the bucket; waiting fetches fail with TokenBucketError."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        _release_slot()

    def __enter__(self) -> "TokenBucket":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()