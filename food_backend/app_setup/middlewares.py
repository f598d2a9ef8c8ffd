"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS (origines du storefront).
- register_security_middleware: en-têtes de sécurité sur toutes les réponses.
Aucun middleware ne lit le corps de la requête: le webhook doit recevoir les octets intacts.
"""
from fastapi import Request, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from food_backend.config import CORS_ORIGINS


def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        return response
