"""
OTP storage backends.

The OTP flow only reads and writes through a key; record lifetime (expiry)
belongs to the store.
"""
import threading
import time
from abc import ABC, abstractmethod
from typing import Optional

from commsgate.config.settings import GatewayConfigs
from commsgate.connections.redis_wrapper import RedisJSONWrapper
from commsgate.logging.utils import get_app_logger

logger = get_app_logger(__name__)
configs = GatewayConfigs()


class OTPStore(ABC):
    """Key/value store for issued codes"""

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Write value under key, replacing any previous one. Returns False if the store is unavailable."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Current value for key, or None when missing, expired or unavailable."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was deleted."""


class InMemoryOTPStore(OTPStore):
    """Process-local store with per-record expiry"""

    def __init__(self, clock=time.monotonic):
        self._lock = threading.Lock()
        self._records: dict[str, tuple[str, Optional[float]]] = {}
        self._clock = clock

    def put(self, key: str, value: str, ttl_seconds: int) -> bool:
        expires_at = self._clock() + ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        with self._lock:
            self._purge_expired()
            self._records[key] = (value, expires_at)
        return True

    def _purge_expired(self) -> None:
        """Drop every expired record; caller holds the lock"""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._records.items() if expires_at is not None and now >= expires_at]
        for k in expired:
            del self._records[k]

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            value, expires_at = record
            if expires_at is not None and self._clock() >= expires_at:
                del self._records[key]
                return None
            return value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._records.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class RedisOTPStore(OTPStore):
    """Redis-backed store; expiry handled by SETEX"""

    def __init__(self, wrapper: RedisJSONWrapper | None = None):
        self._wrapper = wrapper

    def _client(self) -> Optional[RedisJSONWrapper]:
        if self._wrapper is None or not self._wrapper.connected:
            self._wrapper = RedisJSONWrapper(database=configs.REDIS_CACHE_DB)
        if not self._wrapper.connected:
            logger.error("Redis connection unavailable for OTP storage")
            return None
        return self._wrapper

    def put(self, key: str, value: str, ttl_seconds: int) -> bool:
        client = self._client()
        if client is None:
            return False
        try:
            client.set_with_ttl(key, value, ttl_seconds)
            return True
        except Exception as e:
            logger.error(f"Failed to store OTP record: {str(e)}")
            return False

    def get(self, key: str) -> Optional[str]:
        client = self._client()
        if client is None:
            return None
        try:
            value = client.get(key)
        except Exception as e:
            logger.error(f"Failed to read OTP record: {str(e)}")
            return None
        return str(value) if value is not None else None

    def delete(self, key: str) -> bool:
        client = self._client()
        if client is None:
            return False
        try:
            return client.delete(key)
        except Exception as e:
            logger.warning(f"Failed to delete OTP record: {str(e)}")
            return False


_store_instance: Optional[OTPStore] = None


def get_otp_store() -> OTPStore:
    """Return the configured store (OTP_STORE_BACKEND = memory | redis), created once per process."""
    global _store_instance
    if _store_instance is None:
        backend = configs.OTP_STORE_BACKEND
        if backend == "redis":
            _store_instance = RedisOTPStore()
            logger.info("Using Redis OTP store")
        elif backend == "memory":
            _store_instance = InMemoryOTPStore()
            logger.info("Using in-memory OTP store")
        else:
            raise ValueError(f"Unknown OTP store backend: {backend}. Must be one of: memory, redis")
    return _store_instance
