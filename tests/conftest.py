import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from food_backend.app_setup.factory import create_app
from food_backend.errors import NotificationError, ProviderError, SessionNotFoundError
from food_backend.notifications.service import NotificationDispatcher
from food_backend.payments.dedup import MemoryProcessedStore
from food_backend.payments.models import PaymentSession
from food_backend.payments.stripe_client import StripeGateway

WEBHOOK_SECRET = "whsec_test_secret"
SENDER = "commandes@mamafood.fr"
ADMIN = "admin@mamafood.fr"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway(StripeGateway):
    """Passerelle Stripe sans réseau: create/get simulés, vérification de signature réelle."""

    def __init__(self):
        super().__init__(secret_key="sk_test_fake", webhook_secret=WEBHOOK_SECRET)
        self.create_calls: List[Dict[str, Any]] = []
        self.fail_create = False
        self.sessions: Dict[str, Dict[str, Any]] = {}

    def create_session(self, **kwargs) -> Dict[str, Any]:
        self.create_calls.append(kwargs)
        if self.fail_create:
            raise ProviderError(detail="No API key provided")
        return {"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"}

    def get_session(self, session_id: str) -> PaymentSession:
        if session_id not in self.sessions:
            raise SessionNotFoundError(detail=f"No such checkout.session: {session_id}")
        return PaymentSession.model_validate(self.sessions[session_id])


class FakeMailer:
    """Transport e-mail en mémoire; fail_for: destinataires dont l'envoi échoue."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, message):
        if message.to in self.fail_for:
            raise NotificationError(detail=f"boom for {message.to}")
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


def sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """En-tête Stripe-Signature (schéma v1: HMAC-SHA256 de 't.payload')."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def completed_event(
    *,
    session_id: str = "cs_test_123",
    amount_total: int = 2350,
    metadata: Optional[Dict[str, str]] = None,
    customer_email: Optional[str] = "a@b.com",
    event_type: str = "checkout.session.completed",
) -> bytes:
    event = {
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "amount_total": amount_total,
                "customer_email": customer_email,
                "customer_details": {"email": customer_email, "name": None, "phone": None},
                "metadata": metadata if metadata is not None else {
                    "delivery": "3.00",
                    "discount": "0.00",
                    "items": json.dumps([{"name": "Plat A", "description": "", "quantity": 2}]),
                    "customerName": "Awa Diallo",
                    "customerPhone": "0601020304",
                },
                "payment_status": "paid",
                "status": "complete",
            }
        },
    }
    return json.dumps(event).encode("utf-8")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def dispatcher(mailer) -> NotificationDispatcher:
    return NotificationDispatcher(mailer, sender_email=SENDER, admin_email=ADMIN)


@pytest.fixture
def processed() -> MemoryProcessedStore:
    return MemoryProcessedStore(ttl_seconds=3600)


@pytest.fixture
def app(gateway, dispatcher, processed):
    return create_app(gateway=gateway, dispatcher=dispatcher, processed=processed)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signer():
    return sign


@pytest.fixture
def make_event():
    return completed_event
