"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Initialise FastAPILimiter (Redis) si RATE_LIMIT_REDIS_URL est défini.
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: limiteur en mémoire (voir utils.rate_limit)
"""
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Configure le rate limiting.
    - En cas d'échec de Redis, le rate limiting est désactivé proprement.
    - Les logs indiquent l'état effectif (enabled/disabled) pour observabilité.
    """
    logger = logging.getLogger("uvicorn.error")
    app.state.rate_limit_enabled = False
    redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1" or not redis_url:
        logger.info("Rate limiting disabled (no RATE_LIMIT_REDIS_URL)")
        yield
        return

    limiter = None
    try:
        import redis.asyncio as aioredis
        from fastapi_limiter import FastAPILimiter

        r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        limiter = FastAPILimiter
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        logger.warning(f"Rate limiting disabled due to init error: {e}")

    yield

    if limiter is not None:
        await limiter.close()
