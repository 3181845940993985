from unittest.mock import MagicMock

import pytest
import redis

from commsgate.connections.redis_wrapper import RedisJSONWrapper
from commsgate.services.otp_store import InMemoryOTPStore, RedisOTPStore


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now


class TestInMemoryOTPStore:

    def test_put_then_get(self):
        store = InMemoryOTPStore()
        assert store.put("OTP_+15551234567", "123456", 300) is True
        assert store.get("OTP_+15551234567") == "123456"

    def test_put_replaces_previous_value(self):
        store = InMemoryOTPStore()
        store.put("k", "111111", 300)
        store.put("k", "222222", 300)
        assert store.get("k") == "222222"

    def test_record_expires_after_ttl(self):
        clock = FakeClock(100.0)
        store = InMemoryOTPStore(clock=clock)
        store.put("k", "123456", 300)

        clock.now = 399.0
        assert store.get("k") == "123456"
        clock.now = 400.0
        assert store.get("k") is None

    def test_zero_ttl_never_expires(self):
        clock = FakeClock()
        store = InMemoryOTPStore(clock=clock)
        store.put("k", "123456", 0)
        clock.now = 10 ** 9
        assert store.get("k") == "123456"

    def test_delete(self):
        store = InMemoryOTPStore()
        store.put("k", "123456", 300)
        assert store.delete("k") is True
        assert store.delete("k") is False
        assert store.get("k") is None

    def test_clear(self):
        store = InMemoryOTPStore()
        store.put("a", "1", 300)
        store.put("b", "2", 300)
        store.clear()
        assert store.get("a") is None
        assert store.get("b") is None


class TestRedisOTPStore:

    @pytest.fixture
    def redis_client(self):
        return MagicMock()

    @pytest.fixture
    def store(self, redis_client):
        return RedisOTPStore(RedisJSONWrapper(client=redis_client))

    def test_put_uses_setex(self, store, redis_client):
        assert store.put("OTP_+15551234567", "012345", 300) is True
        redis_client.setex.assert_called_once_with("OTP_+15551234567", 300, '"012345"')

    def test_get_returns_string_with_leading_zero(self, store, redis_client):
        redis_client.get.return_value = b'"012345"'
        assert store.get("OTP_+15551234567") == "012345"

    def test_get_missing_key(self, store, redis_client):
        redis_client.get.return_value = None
        assert store.get("OTP_+15551234567") is None

    def test_put_error_returns_false(self, store, redis_client):
        redis_client.setex.side_effect = redis.exceptions.ConnectionError("down")
        assert store.put("k", "123456", 300) is False

    def test_get_error_returns_none(self, store, redis_client):
        redis_client.get.side_effect = redis.exceptions.TimeoutError("slow")
        assert store.get("k") is None

    def test_delete(self, store, redis_client):
        redis_client.delete.return_value = 1
        assert store.delete("k") is True
        redis_client.delete.return_value = 0
        assert store.delete("k") is False

    def test_unreachable_server_makes_store_unavailable(self, monkeypatch):
        wrapper = RedisJSONWrapper(client=MagicMock())
        wrapper.connected = False
        unreachable = MagicMock()
        unreachable.connected = False
        monkeypatch.setattr(
            "commsgate.services.otp_store.RedisJSONWrapper",
            lambda *args, **kwargs: unreachable,
        )
        store = RedisOTPStore(wrapper)

        assert store.put("k", "123456", 300) is False
        assert store.get("k") is None
        assert store.delete("k") is False


def test_put_drops_every_expired_record():
    clock = FakeClock(0.0)
    store = InMemoryOTPStore(clock=clock)
    for i in range(1000):
        store.put(f"OTP_+1555000{i:04d}", "123456", 300)

    clock.now = 10000.0
    store.put("OTP_+15559999999", "654321", 300)

    assert len(store._records) == 1
    assert store.get("OTP_+15559999999") == "654321"


def test_put_keeps_live_records():
    clock = FakeClock(0.0)
    store = InMemoryOTPStore(clock=clock)
    store.put("old", "1", 100)
    store.put("fresh", "2", 500)

    clock.now = 200.0
    store.put("new", "3", 300)

    assert store.get("old") is None
    assert store.get("fresh") == "2"
    assert store.get("new") == "3"
