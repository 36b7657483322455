# storefront/services/lock_service.py
import uuid

import redis

from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL

logger = get_logger(__name__)

# compare-and-delete in one Lua call: GET + compare + DEL cannot interleave
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Short per-user checkout lock in Redis.
    SET NX EX to acquire, Lua compare-and-delete to release,
    so a lock that expired and was re-taken is never released by the old holder.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, ttl: int) -> str | None:
        """Token to pass to release, or None when another checkout holds the lock."""
        key = self._key(user_id)
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        # SET checkout:1:lock <token> NX EX <ttl>
        if self.redis.set(name=key, value=token, nx=True, ex=ttl):
            return token
        return None

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
