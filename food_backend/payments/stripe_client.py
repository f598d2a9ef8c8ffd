"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Une instance StripeGateway est construite au démarrage (factory) et injectée dans
les vues; la clé API est passée à chaque appel plutôt que posée sur le module stripe.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import stripe

from food_backend.errors import ProviderError, SessionNotFoundError, SignatureError
from .models import PaymentEvent, PaymentSession

logger = logging.getLogger(__name__)


# module food_backend.payments.stripe_client
class StripeGateway:
    def __init__(self, secret_key: str, webhook_secret: str, tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def create_session(
        self,
        *,
        line_items: List[Dict[str, Any]],
        mode: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        customer_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Crée une session Stripe Checkout.
        - line_items: lignes Stripe (price_data/quantity)
        - mode: "payment" (paiement unique)
        - success_url / cancel_url: URLs de redirection (placeholder {CHECKOUT_SESSION_ID})
        - metadata: dict str -> str (voir payments.metadata)
        Retour: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."}
        Soulève ProviderError si l'appel échoue.
        """
        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "mode": mode,
            "line_items": line_items,
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email
        try:
            session = stripe.checkout.Session.create(api_key=self.secret_key, **params)
        except Exception as e:
            logger.exception("payments.stripe_client.create_session failed")
            raise ProviderError(detail=str(e)) from e
        return {"id": getattr(session, "id", None), "url": getattr(session, "url", None)}

    def get_session(self, session_id: str) -> PaymentSession:
        """
        Récupère une session Stripe Checkout par son identifiant.
        Soulève SessionNotFoundError (404) si Stripe ne la trouve pas.
        """
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.secret_key)
        except Exception as e:
            logger.warning("payments.stripe_client.get_session failed session_id=%s error=%s", session_id, e)
            raise SessionNotFoundError(detail=str(e)) from e
        return PaymentSession.model_validate(_to_plain(session))

    def parse_event(self, payload: bytes, sig_header: Optional[str]) -> PaymentEvent:
        """
        Authentifie et parse un événement Stripe signé (webhook).
        - payload: octets bruts, exactement tels que signés par Stripe
        - sig_header: en-tête Stripe-Signature
        Soulève SignatureError si l'en-tête manque, si la signature ne correspond pas
        (corps ou en-tête altéré, secret différent, horodatage expiré) ou si le corps n'est pas du JSON.
        """
        if not sig_header:
            raise SignatureError("Webhook Error: missing Stripe-Signature header")
        try:
            text = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(text, sig_header, self.webhook_secret, self.tolerance)
            return PaymentEvent.model_validate(json.loads(text))
        except stripe.SignatureVerificationError as e:
            raise SignatureError(f"Webhook Error: {e.user_message or e}") from e
        except ValueError as e:
            # UnicodeDecodeError, JSONDecodeError et pydantic.ValidationError dérivent de ValueError
            raise SignatureError(f"Webhook Error: invalid payload ({type(e).__name__})") from e


def _to_plain(obj: Any) -> Any:
    """Convertit récursivement un StripeObject (dict-like) en dict/list natifs."""
    if hasattr(obj, "keys"):
        return {k: _to_plain(obj[k]) for k in obj.keys()}
    if isinstance(obj, list):
        return [_to_plain(v) for v in obj]
    return obj
