"""
Per-listing mutex used to serialize booking acceptance.

Redis ``SET NX EX`` is the primary backend so that multiple API workers
share the lock. Each lease carries a token so a worker only releases
the key it set. When Redis is disabled or unreachable a process-local lock
keyed by listing id is used instead; the conditional status update in the
booking repository still guards cross-process races in that mode.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Dict, Iterator, NamedTuple, Optional

from redis import Redis
import ulid

from evenlyo.core.config import settings
from evenlyo.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

_LOCAL_LOCKS: Dict[str, "_LocalEntry"] = {}
_LOCAL_LOCKS_GUARD = threading.Lock()

_POLL_INTERVAL_S = 0.05

# Delete the key only while it still holds our token
RELEASE_LUA = r"""
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


class ListingLease(NamedTuple):
    listing_id: str
    backend: str
    token: str = ""


class _LocalEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        # Holders plus waiters; the entry is dropped when this reaches zero
        self.users = 0


def _lock_key(listing_id: str) -> str:
    return f"evenlyo:lock:listing:{listing_id}:accept"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if settings.listing_lock_backend != "redis":
        return None
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=1,
            )
            client.ping()
        except Exception as exc:
            logger.warning("listing_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def _checkout_local(listing_id: str) -> _LocalEntry:
    with _LOCAL_LOCKS_GUARD:
        entry = _LOCAL_LOCKS.get(listing_id)
        if entry is None:
            entry = _LOCAL_LOCKS[listing_id] = _LocalEntry()
        entry.users += 1
        return entry


def _return_local(listing_id: str, entry: _LocalEntry) -> None:
    with _LOCAL_LOCKS_GUARD:
        entry.users -= 1
        if entry.users <= 0 and _LOCAL_LOCKS.get(listing_id) is entry:
            del _LOCAL_LOCKS[listing_id]


def _acquire_redis(client: Redis, listing_id: str, token: str, ttl_s: int, wait_s: float) -> bool:
    deadline = time.monotonic() + wait_s
    while True:
        if client.set(_lock_key(listing_id), token, nx=True, ex=ttl_s):
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(_POLL_INTERVAL_S)


def acquire_listing_lock(
    listing_id: str, ttl_s: Optional[int] = None, wait_s: float = 2.0
) -> Optional[ListingLease]:
    """
    Try to take the accept lock for ``listing_id``.

    Returns a lease naming the backend that granted the lock (``"redis"`` or
    ``"local"``), or ``None`` when the lock is held elsewhere.
    """
    ttl = ttl_s or settings.listing_lock_ttl_seconds
    client = _get_sync_redis()
    if client is not None:
        token = str(ulid.ULID())
        try:
            if _acquire_redis(client, listing_id, token, ttl, wait_s):
                prometheus_metrics.record_listing_lock("acquire", "success")
                return ListingLease(listing_id, "redis", token)
            prometheus_metrics.record_listing_lock("acquire", "blocked")
            return None
        except Exception as exc:
            prometheus_metrics.record_listing_lock("acquire", "error")
            logger.warning(
                "listing_lock_redis_acquire_failed",
                extra={
                    "listing_id": listing_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )

    entry = _checkout_local(listing_id)
    if entry.lock.acquire(timeout=wait_s):
        prometheus_metrics.record_listing_lock("acquire", "local")
        return ListingLease(listing_id, "local")
    _return_local(listing_id, entry)
    prometheus_metrics.record_listing_lock("acquire", "blocked")
    return None


def release_listing_lock(lease: ListingLease) -> None:
    if lease.backend == "local":
        with _LOCAL_LOCKS_GUARD:
            entry = _LOCAL_LOCKS.get(lease.listing_id)
        if entry is None or not entry.lock.locked():
            prometheus_metrics.record_listing_lock("release", "not_found")
            return
        entry.lock.release()
        _return_local(lease.listing_id, entry)
        prometheus_metrics.record_listing_lock("release", "local")
        return

    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_listing_lock("release", "redis_unavailable")
        return
    try:
        deleted = client.eval(RELEASE_LUA, 1, _lock_key(lease.listing_id), lease.token)
        # Zero means the TTL expired and another worker may own the key now
        prometheus_metrics.record_listing_lock("release", "success" if deleted else "not_owner")
    except Exception as exc:
        prometheus_metrics.record_listing_lock("release", "error")
        logger.warning(
            "listing_lock_redis_release_failed",
            extra={
                "listing_id": lease.listing_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def listing_lock(listing_id: str, ttl_s: Optional[int] = None, wait_s: float = 2.0) -> Iterator[bool]:
    lease = acquire_listing_lock(listing_id, ttl_s=ttl_s, wait_s=wait_s)
    try:
        yield lease is not None
    finally:
        if lease is not None:
            release_listing_lock(lease)
