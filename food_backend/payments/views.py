import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from food_backend import config
from food_backend.app_setup.routing import RawBodyRoute
from food_backend.errors import AppError, WebhookProcessingError
from food_backend.dependencies import get_dispatcher, get_gateway, get_processed_store
from food_backend.utils.rate_limit import optional_rate_limit
from . import service as payments_service
from .models import CheckoutRequest, CheckoutResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments API"])
# Seule route en corps brut: ne jamais y ajouter d'endpoint JSON
webhook_router = APIRouter(tags=["Payments API"], route_class=RawBodyRoute)


# module food_backend.payments.views
@router.post(
    "/create-checkout-session",
    response_model=CheckoutResponse,
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60))],
)
async def create_checkout_session(checkout: CheckoutRequest, gateway=Depends(get_gateway)):
    """
    Crée une session Checkout Stripe pour le panier reçu.
    - Entrée JSON: {totalAmount, description, delivery, discount, items[], customer*}
    - 400 {message} si panier invalide (aucun appel Stripe)
    - 500 {message} si Stripe échoue (détail journalisé uniquement)
    """
    session = await payments_service.create_checkout_session(
        checkout,
        gateway=gateway,
        frontend_url=config.FRONTEND_URL,
        success_path=config.CHECKOUT_SUCCESS_PATH,
        cancel_path=config.CHECKOUT_CANCEL_PATH,
    )
    return CheckoutResponse(url=session.get("url") or "", id=session.get("id"))


@router.get("/session-status/{session_id}")
async def get_session_status(session_id: str, gateway=Depends(get_gateway)):
    """Statut d'une session (page de succès du front). 404 si Stripe ne la trouve pas."""
    session = await run_in_threadpool(gateway.get_session, session_id)
    return {
        "id": session.id,
        "status": session.status,
        "payment_status": session.payment_status,
        "customer_email": session.customer_email,
        "amount_total": session.amount_total,
    }


@webhook_router.post("/webhook", include_in_schema=False)
async def webhook_stripe(
    request: Request,
    gateway=Depends(get_gateway),
    dispatcher=Depends(get_dispatcher),
    processed=Depends(get_processed_store),
):
    """
    Webhook Stripe.
    - Signature: vérifiée sur request.state.raw_body (RawBodyRoute) + Stripe-Signature
    - Réponses: {"received": true} dès que l'événement est authentifié;
      400 texte si signature invalide; 500 {error} sur erreur inattendue
    """
    try:
        return await payments_service.handle_webhook(
            request.state.raw_body,
            request.headers.get("stripe-signature"),
            gateway=gateway,
            dispatcher=dispatcher,
            processed=processed,
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception("Erreur webhook_stripe")
        raise WebhookProcessingError(detail=str(e)) from e
