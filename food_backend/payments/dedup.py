"""
Anti-doublon des webhooks checkout.session.completed.
Stripe livre au moins une fois: on réserve l'id de session avant d'envoyer les e-mails,
une seconde livraison du même événement est acquittée sans renvoi.
Si le traitement échoue après la réservation, elle est libérée (release) pour que
la relivraison de Stripe soit traitée normalement.
- MemoryProcessedStore: par défaut (un seul process)
- RedisProcessedStore: SET NX EX partagé entre instances (DEDUP_REDIS_URL)
"""
import logging
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)

KEY_PREFIX = "webhook:session:"


class MemoryProcessedStore:
    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._claims: Dict[str, float] = {}

    async def claim(self, session_id: str) -> bool:
        """Retourne True si la session n'avait pas encore été réservée."""
        now = self.clock()
        self._claims = {k: t for k, t in self._claims.items() if now - t < self.ttl_seconds}
        if session_id in self._claims:
            return False
        self._claims[session_id] = now
        return True

    async def release(self, session_id: str) -> None:
        self._claims.pop(session_id, None)


class RedisProcessedStore:
    def __init__(self, client, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    async def claim(self, session_id: str) -> bool:
        created = await self.client.set(f"{KEY_PREFIX}{session_id}", "1", nx=True, ex=self.ttl_seconds)
        return bool(created)

    async def release(self, session_id: str) -> None:
        await self.client.delete(f"{KEY_PREFIX}{session_id}")


def build_processed_store(redis_url: str, ttl_seconds: int):
    if not redis_url:
        return MemoryProcessedStore(ttl_seconds)
    import redis.asyncio as aioredis
    logger.info("payments.dedup using redis store")
    return RedisProcessedStore(aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True), ttl_seconds)
