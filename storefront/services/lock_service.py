import redis
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porównaj i usuń, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wciśnie się między GET a DEL


class LockService:
    """
    -blokada na czas przetwarzania jednego payment intentu
    -zwalnianie locka tylko przez właściciela
    -atomowość przy pomocy lua
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(payment_id: str) -> str:
        return f"payment:{payment_id}:lock"

    @redis_retry()
    def acquire_payment_lock(self, payment_id: str, owner: str, ttl: int) -> bool:
        key = self._key(payment_id)
        logger.info(f"Acquire lock {key} for {owner}")
        #SET payment:pi_123:lock "<owner>" NX EX 60
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True, #jeśli klucz istnieje to nic nie rób i None
                ex=ttl, #wygasa sam gdy worker padnie w trakcie
            )
        )

    @redis_retry()
    def release_payment_lock(self, payment_id: str, owner: str) -> bool:
        key = self._key(payment_id)
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
