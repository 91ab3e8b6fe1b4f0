# ivory/services/lock_service.py
import uuid

import redis

from ivory.utils.retry import redis_retry
from ivory.utils.settings import REDIS_URL
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

# GET + compare + DEL as one Lua call, only the holder's token deletes the key
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


def checkout_lock_key(user_id: int) -> str:
    return f"checkout:{user_id}:lock"


class LockService:
    """
    Short-lived per-user checkout lock, so a double-submitted checkout
    cannot open two pending orders at once.
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = checkout_lock_key(user_id)
        # SET checkout:1:lock <token> NX EX 30; expires by itself if the worker dies mid-checkout
        acquired = bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))
        logger.info(f"Acquire {key}: {'ok' if acquired else 'busy'}")
        return acquired

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = checkout_lock_key(user_id)
        released = bool(self.redis.eval(_RELEASE_LUA, 1, key, token))
        logger.info(f"Release {key}: {'ok' if released else 'not held'}")
        return released
