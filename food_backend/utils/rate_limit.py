from typing import Optional, Dict, Any
from fastapi import Request, Response, HTTPException
from fastapi_limiter.depends import RateLimiter
import os
import time


def _client_key(req: Request) -> str:
    # Pas de session côté storefront: clé = IP (X-Forwarded-For en priorité) + chemin
    forwarded = (req.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip = forwarded or (req.client.host if req.client else "local")
    return f"ip:{ip}:{req.url.path}"


async def _identifier(req: Request) -> str:
    return _client_key(req)


def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request, response: Response):
        # Forcer le fallback mémoire en DEV si demandé
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key(request)
            store = getattr(request.app.state, "_rl_store", {})
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        # Respecter le flag global (lifespan)
        if not getattr(request.app.state, "rate_limit_enabled", False):
            return

        return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled: Optional[bool] = getattr(request.app.state, "rate_limit_enabled", None)
    info: Dict[str, Any] = {
        "enabled": bool(enabled) if enabled is not None else None,
        "fallback": os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1",
    }
    return info
