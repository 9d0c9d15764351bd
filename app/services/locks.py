import logging
from contextlib import contextmanager
from typing import Iterator

import redis

from app.core.config import get_redis_url, settings
from app.services.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


def event_lock_key(event_id: int) -> str:
    return f"event_lock:{event_id}"


@contextmanager
def event_lock(event_id: int) -> Iterator[None]:
    """
    Hold the per-event Redis lock for the enclosed read-check-write sequence.
    Only one worker at a time may change an event's admissions or capacity.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        event_lock_key(event_id),
        timeout=settings.LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.LOCK_BLOCKING_TIMEOUT_SECONDS,
    )

    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis unavailable while locking event {event_id}: {e}")
        raise StorageUnavailableError("Lock service unavailable, please try again.") from e

    if not acquired:
        raise StorageUnavailableError(f"Could not acquire lock for event {event_id}, please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # the lock expired while held; the transaction has already finished
            logger.warning(f"Lock for event {event_id} expired before release")
