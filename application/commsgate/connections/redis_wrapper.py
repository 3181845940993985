import json
import redis

from commsgate.logging.utils import get_app_logger
logger = get_app_logger("redis_wrapper")

from commsgate.config.settings import GatewayConfigs
configs = GatewayConfigs()

REDIS_URL = configs.REDIS_URL


class RedisJSONWrapper:
    """Thin JSON layer over redis-py; `connected` is False when the server is unreachable"""

    def __init__(self, redis_uri=REDIS_URL, database=None, client=None):
        if client is not None:
            self.redis_client = client
            self.connected = True
            return
        if database is not None:
            redis_uri = f"{redis_uri}/{database}"
        try:
            self.redis_client = redis.from_url(redis_uri)
            self.redis_client.ping()
            self.connected = True
        except redis.exceptions.RedisError as e:
            logger.error(f"Failed to connect to Redis at {redis_uri}: {e}")
            self.redis_client = None
            self.connected = False

    def set_with_ttl(self, key, data, ttl_seconds: int):
        """Store data as JSON under key; a non-positive ttl stores without expiry."""
        value = json.dumps(data)
        if isinstance(ttl_seconds, int) and ttl_seconds > 0:
            # SETEX attaches the expiry atomically with the value
            self.redis_client.setex(key, ttl_seconds, value)
        else:
            self.redis_client.set(key, value)

    def get(self, key):
        data = self.redis_client.get(key)
        if data:
            return json.loads(data)
        return None

    def delete(self, key) -> bool:
        return self.redis_client.delete(key) > 0
