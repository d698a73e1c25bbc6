from __future__ import annotations

from collections import deque
from threading import Lock
import time
from typing import Deque

from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import RateLimitError

SWEEP_INTERVAL_SECONDS = 60.0


class SlidingWindowLimiter:
    """Per-key request log kept in process memory; one instance per worker.

    Keys that stop receiving traffic are dropped by a periodic sweep once
    their newest entry falls outside the widest window seen so far.
    """

    def __init__(self, sweep_interval: float = SWEEP_INTERVAL_SECONDS) -> None:
        self._buckets: dict[str, Deque[float]] = {}
        self._lock = Lock()
        self._sweep_interval = sweep_interval
        self._max_window = 0.0
        self._last_sweep = time.monotonic()

    def __len__(self) -> int:
        return len(self._buckets)

    def hit(self, key: str, *, limit: int, window_seconds: int) -> int | None:
        """Record a request; return ``None`` when allowed, else seconds to wait."""
        now = time.monotonic()
        earliest = now - window_seconds
        with self._lock:
            self._max_window = max(self._max_window, float(window_seconds))
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            bucket = self._buckets.get(key)
            if bucket is not None:
                while bucket and bucket[0] <= earliest:
                    bucket.popleft()
                if len(bucket) >= limit:
                    return max(1, int(bucket[0] + window_seconds - now))
            else:
                bucket = self._buckets[key] = deque()
            bucket.append(now)
        return None

    def _sweep(self, now: float) -> None:
        horizon = now - self._max_window
        stale = [key for key, bucket in self._buckets.items() if not bucket or bucket[-1] <= horizon]
        for key in stale:
            del self._buckets[key]
        self._last_sweep = now

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()
            self._max_window = 0.0


_limiter = SlidingWindowLimiter()


def client_ip(request: Request, *, trust_forwarded: bool = False) -> str:
    # Forwarded headers are client-controlled unless a proxy rewrites them.
    if trust_forwarded:
        for header in ("x-forwarded-for", "x-real-ip"):
            value = request.headers.get(header, "")
            if value:
                return value.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(
    *,
    request: Request,
    scope: str,
    limit: int,
    window_seconds: int,
    identity: str | None = None,
    identity_limit: int | None = None,
) -> None:
    """Apply the per-address budget, then the per-identity budget if given.

    The identity budget is keyed without the client address, so rotating
    addresses does not reset it.
    """
    window_seconds = max(1, window_seconds)
    normalized = (identity or "").strip().lower()
    ip = client_ip(request, trust_forwarded=get_settings().trust_forwarded_headers)

    retry_after = _limiter.hit(f"{scope}|{ip}|{normalized}", limit=max(1, limit), window_seconds=window_seconds)
    if retry_after is None and normalized and identity_limit is not None:
        retry_after = _limiter.hit(
            f"{scope}|*|{normalized}",
            limit=max(1, identity_limit),
            window_seconds=window_seconds,
        )
    if retry_after is not None:
        raise RateLimitError(scope, retry_after)


def clear_rate_limiter() -> None:
    _limiter.clear()
