from fastapi import APIRouter, Request

from food_backend.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root(request: Request):
    return {
        "status": "ok",
        "message": "Serveur opérationnel",
        "rate_limit": rate_limit_health_info(request),
    }
