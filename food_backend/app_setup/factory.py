"""
Factory d'application utilisée par les entrypoints (food_backend.app, asgi).
Construit les services (passerelle Stripe, dispatcher e-mail, anti-doublon) et les
attache à app.state; les tests passent leurs propres implémentations.
"""
from fastapi import FastAPI

from food_backend import config
from food_backend.notifications.mailer import build_mailer
from food_backend.notifications.service import NotificationDispatcher
from food_backend.payments.dedup import build_processed_store
from food_backend.payments.stripe_client import StripeGateway
from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .routers import register_routers


def default_dispatcher() -> NotificationDispatcher:
    mailer = build_mailer(
        config.MAIL_PROVIDER,
        brevo_api_key=config.BREVO_API_KEY,
        resend_api_key=config.RESEND_API_KEY,
        smtp_host=config.SMTP_HOST,
        smtp_port=config.SMTP_PORT,
        smtp_user=config.SMTP_USER,
        smtp_password=config.SMTP_PASSWORD,
    )
    return NotificationDispatcher(
        mailer,
        sender_email=config.EMAIL_USER,
        admin_email=config.ADMIN_EMAIL,
        sender_name=config.EMAIL_SENDER_NAME,
    )


def create_app(gateway=None, dispatcher=None, processed=None) -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      1) les services injectés (ou ceux construits depuis la config)
      2) middlewares CORS + en-têtes de sécurité
      3) gestionnaires d'exceptions (AppError, SignatureError, payload invalide)
      4) routers (payments, webhook, notifications, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    app = FastAPI(title="Mama Food's API", lifespan=lifespan)
    app.state.gateway = gateway or StripeGateway(config.STRIPE_SECRET_KEY, config.STRIPE_WEBHOOK_SECRET)
    app.state.dispatcher = dispatcher or default_dispatcher()
    app.state.processed = processed or build_processed_store(config.DEDUP_REDIS_URL, config.DEDUP_TTL_SECONDS)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
