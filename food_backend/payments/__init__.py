"""
Module 'payments' (feature-first): point d'entrée public.
Réunit modèles, metadata Stripe, passerelle Stripe, anti-doublon et services.
"""

from .models import CartItem, CheckoutRequest, CustomerInfo, PaymentEvent, PaymentSession, PaidOrder
from .metadata import (
    build_session_metadata,
    serialize_items,
    deserialize_items,
    serialize_customer,
    deserialize_customer,
    paid_order_from_session,
)
from .stripe_client import StripeGateway
from .dedup import MemoryProcessedStore, RedisProcessedStore, build_processed_store
from .service import create_checkout_session, handle_webhook, to_minor_units

__all__ = [
    # models
    "CartItem",
    "CheckoutRequest",
    "CustomerInfo",
    "PaymentEvent",
    "PaymentSession",
    "PaidOrder",
    # metadata
    "build_session_metadata",
    "serialize_items",
    "deserialize_items",
    "serialize_customer",
    "deserialize_customer",
    "paid_order_from_session",
    # stripe
    "StripeGateway",
    # dedup
    "MemoryProcessedStore",
    "RedisProcessedStore",
    "build_processed_store",
    # services
    "create_checkout_session",
    "handle_webhook",
    "to_minor_units",
]
