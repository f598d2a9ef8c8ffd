"""
Gestionnaires d'exceptions.
- AppError -> JSON {message} ou {error} avec le status_code de l'erreur.
- SignatureError -> 400 en texte brut (réponse lue par Stripe dans son tableau de bord).
- RequestValidationError (payload mal formé) -> 400 {message}, pas de 422.
Le détail interne (AppError.detail) n'est jamais renvoyé au client.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from food_backend.errors import AppError, SignatureError, ValidationError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SignatureError)
    async def signature_error(request: Request, exc: SignatureError):
        logger.warning("webhook.signature rejected path=%s reason=%s", request.url.path, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(AppError)
    async def app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s path=%s detail=%s", type(exc).__name__, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={exc.body_key: exc.message})

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError):
        logger.info("request.invalid path=%s errors=%s", request.url.path, len(exc.errors()))
        return JSONResponse(status_code=400, content={"message": ValidationError.message})
