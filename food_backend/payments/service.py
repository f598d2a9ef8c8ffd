"""
Cas d'usage 'payments': orchestre metadata, passerelle Stripe et notifications.
- create_checkout_session: panier -> session Stripe hébergée (URL de redirection)
- handle_webhook: événement signé -> e-mails client/admin une seule fois par session
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List

from starlette.concurrency import run_in_threadpool

from food_backend.errors import ValidationError
from . import metadata as meta
from .models import CheckoutRequest, EventKind, PaymentEvent

logger = logging.getLogger(__name__)

PRODUCT_NAME = "Commande Mama Food's"
CURRENCY = "eur"


def to_minor_units(amount: Decimal) -> int:
    """Montant décimal -> centimes, arrondi au plus proche (23.505 -> 2351)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_checkout(checkout: CheckoutRequest) -> None:
    """Soulève ValidationError si le total est absent/nul/négatif ou si le panier est vide."""
    if not checkout.total_amount or checkout.total_amount <= 0 or not checkout.items:
        raise ValidationError()


def build_line_items(checkout: CheckoutRequest) -> List[Dict[str, Any]]:
    """
    Une seule ligne agrégée (quantité 1, prix unitaire = total de la commande).
    Le détail du panier voyage dans les métadonnées.
    """
    product_data: Dict[str, Any] = {"name": PRODUCT_NAME}
    if checkout.description:
        product_data["description"] = checkout.description
    return [{
        "quantity": 1,
        "price_data": {
            "currency": CURRENCY,
            "unit_amount": to_minor_units(checkout.total_amount),
            "product_data": product_data,
        },
    }]


def redirect_urls(frontend_url: str, success_path: str, cancel_path: str) -> Dict[str, str]:
    base = frontend_url.rstrip("/")
    return {"success_url": f"{base}{success_path}", "cancel_url": f"{base}{cancel_path}"}


async def create_checkout_session(
    checkout: CheckoutRequest,
    *,
    gateway,
    frontend_url: str,
    success_path: str,
    cancel_path: str,
) -> Dict[str, Any]:
    """
    Prépare et crée la session Stripe Checkout.
    - ValidationError (400) avant tout appel Stripe si le panier est invalide
    - ProviderError (500) si Stripe échoue (levée par la passerelle)
    Retour: {"id": ..., "url": ...}
    """
    validate_checkout(checkout)
    line_items = build_line_items(checkout)
    metadata = meta.build_session_metadata(checkout)
    session = await run_in_threadpool(
        lambda: gateway.create_session(
            line_items=line_items,
            mode="payment",
            metadata=metadata,
            customer_email=str(checkout.customer_email) if checkout.customer_email else None,
            **redirect_urls(frontend_url, success_path, cancel_path),
        )
    )
    logger.info(
        "payments.checkout session_id=%s amount=%s items=%s",
        session.get("id"), line_items[0]["price_data"]["unit_amount"], len(checkout.items),
    )
    return session


async def handle_completed(event: PaymentEvent, *, dispatcher, processed) -> None:
    session = event.session()
    claimed = bool(session.id) and await processed.claim(session.id)
    if session.id and not claimed:
        logger.info("payments.webhook duplicate session_id=%s event_id=%s", session.id, event.id)
        return
    try:
        order = meta.paid_order_from_session(session)
        logger.info(
            "payments.webhook completed session_id=%s items=%s amount_total=%s",
            order.session_id, len(order.items), order.amount_total,
        )
        result = await dispatcher.dispatch(order)
    except Exception:
        # réponse 500: Stripe relivrera, la session doit rester traitable
        if claimed:
            await processed.release(session.id)
        raise
    for failure in result.failures:
        logger.warning(
            "payments.webhook notification failed session_id=%s role=%s error=%s",
            order.session_id, failure.role, failure.error,
        )


async def handle_webhook(payload: bytes, sig_header, *, gateway, dispatcher, processed) -> Dict[str, Any]:
    """
    Webhook Stripe.
    - Authentification: gateway.parse_event (octets bruts + Stripe-Signature), SignatureError sinon
    - completed: e-mails client puis admin (une seule fois par session)
    - succeeded / failed / autres: journalisés uniquement
    Une fois l'événement authentifié, la réponse est toujours {"received": True},
    même si l'envoi des e-mails échoue (voir DispatchResult).
    """
    event = gateway.parse_event(payload, sig_header)
    kind = event.kind
    if kind is EventKind.COMPLETED:
        await handle_completed(event, dispatcher=dispatcher, processed=processed)
    elif kind is EventKind.SUCCEEDED:
        logger.info("payments.webhook payment_intent succeeded id=%s", event.object.get("id"))
    elif kind is EventKind.FAILED:
        error = (event.object.get("last_payment_error") or {}).get("message")
        logger.info("payments.webhook payment_intent failed id=%s error=%s", event.object.get("id"), error)
    else:
        logger.info("payments.webhook ignored type=%s", event.type)
    return {"received": True}
