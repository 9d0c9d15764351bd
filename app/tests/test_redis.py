"""
Test Redis integration and the per-event lock.
"""
import pytest
import redis

from app.core.config import settings
from app.services.exceptions import StorageUnavailableError
from app.services.locks import event_lock, event_lock_key


class TestRedisIntegration:
    """Test Redis functionality."""

    def test_redis_connection(self, fake_redis):
        """Test basic Redis connection and operations."""
        fake_redis.set("test_key", "test_value")

        assert fake_redis.get("test_key") == "test_value"

    def test_redis_lock_blocking(self, fake_redis):
        """Test that a lock cannot be acquired twice."""
        lock1 = fake_redis.lock("resource_lock", timeout=10)
        lock2 = fake_redis.lock("resource_lock", timeout=10)

        assert lock1.acquire(blocking=False) is True
        assert lock2.acquire(blocking=False) is False

        lock1.release()

        assert lock2.acquire(blocking=False) is True
        lock2.release()


class TestEventLock:
    """Test the event_lock context manager."""

    def test_lock_key(self):
        assert event_lock_key(42) == "event_lock:42"

    def test_lock_held_inside_block(self, fake_redis):
        with event_lock(1):
            other = fake_redis.lock(event_lock_key(1), timeout=5)
            assert other.acquire(blocking=False) is False

        assert other.acquire(blocking=False) is True
        other.release()

    def test_locks_are_per_event(self, fake_redis):
        with event_lock(1):
            other = fake_redis.lock(event_lock_key(2), timeout=5)
            assert other.acquire(blocking=False) is True
            other.release()

    def test_released_on_error(self, fake_redis):
        with pytest.raises(RuntimeError):
            with event_lock(3):
                raise RuntimeError("boom")

        assert fake_redis.get(event_lock_key(3)) is None

    def test_contention_raises_storage_unavailable(self, fake_redis, monkeypatch):
        monkeypatch.setattr(settings, "LOCK_BLOCKING_TIMEOUT_SECONDS", 0.2)
        held = fake_redis.lock(event_lock_key(4), timeout=10)
        assert held.acquire(blocking=False)

        with pytest.raises(StorageUnavailableError) as exc_info:
            with event_lock(4):
                pass

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 503
        held.release()

    def test_redis_down_raises_storage_unavailable(self, monkeypatch):
        class DownClient:
            def lock(self, *args, **kwargs):
                return self

            def acquire(self, *args, **kwargs):
                raise redis.exceptions.ConnectionError("connection refused")

        monkeypatch.setattr("app.services.locks.get_redis_client", lambda: DownClient())

        with pytest.raises(StorageUnavailableError):
            with event_lock(5):
                pass

    def test_expired_lock_release_is_logged(self, fake_redis, caplog):
        with event_lock(6):
            fake_redis.delete(event_lock_key(6))

        assert "expired" in caplog.text
