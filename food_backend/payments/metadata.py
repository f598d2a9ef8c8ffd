"""
Sérialisation/désérialisation des métadonnées Stripe.
Les métadonnées sont le seul canal entre la création de la session et le webhook:
- Stripe n'accepte que des valeurs str (500 caractères max, 50 clés max)
- le panier (JSON) est découpé sur plusieurs clés si nécessaire: items, items_1, items_2...
"""
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence

from food_backend.errors import ValidationError
from .models import CartItem, CheckoutRequest, CustomerAddress, CustomerInfo, PaidOrder, PaymentSession

logger = logging.getLogger(__name__)

# module food_backend.payments.metadata
METADATA_VALUE_MAX = 500
METADATA_KEYS_MAX = 50
ITEMS_KEY = "items"

CUSTOMER_KEYS = {
    "customerName": "full_name",
    "customerEmail": "email",
    "customerPhone": "phone",
}
ADDRESS_KEYS = {
    "customerStreet": "street",
    "customerCity": "city",
    "customerPostalCode": "postal_code",
    "customerCountry": "country",
}

def format_amount(value: Decimal) -> str:
    """Forme décimale exacte d'un montant, sans arrondi: Decimal('3.125') -> '3.125'."""
    return str(Decimal(value))


def parse_amount(raw: Optional[str]) -> Decimal:
    """Inverse de format_amount, tolérant: valeur absente, illisible ou non finie -> 0."""
    try:
        amount = Decimal(raw or "0")
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning("payments.metadata invalid amount=%r", raw)
        return Decimal("0")
    return amount


def serialize_items(items: Sequence[CartItem]) -> Dict[str, str]:
    """
    Sérialise le panier en une ou plusieurs clés de métadonnées.
    - JSON compact, unicode conservé (la limite Stripe porte sur les caractères)
    - découpage en morceaux de 500 caractères: items, items_1, items_2...
    """
    payload = json.dumps(
        [{"name": it.name, "description": it.description, "quantity": it.quantity} for it in items],
        ensure_ascii=False,
        separators=(",", ":"),
    )
    chunks = [payload[i:i + METADATA_VALUE_MAX] for i in range(0, len(payload), METADATA_VALUE_MAX)] or ["[]"]
    out: Dict[str, str] = {}
    for idx, chunk in enumerate(chunks):
        out[ITEMS_KEY if idx == 0 else f"{ITEMS_KEY}_{idx}"] = chunk
    return out


def deserialize_items(metadata: Mapping[str, str]) -> List[CartItem]:
    """
    Reconstruit le panier depuis les métadonnées (recolle items, items_1, ...).
    - Tolérant aux erreurs: retourne [] si le JSON est absent ou illisible.
    """
    parts: List[str] = []
    key = ITEMS_KEY
    idx = 0
    while key in metadata:
        parts.append(metadata[key])
        idx += 1
        key = f"{ITEMS_KEY}_{idx}"
    if not parts:
        return []
    try:
        raw_items = json.loads("".join(parts))
        return [CartItem.model_validate(it) for it in raw_items]
    except (ValueError, TypeError):
        # JSONDecodeError et pydantic.ValidationError dérivent de ValueError
        logger.warning("payments.metadata unreadable items chunks=%s", len(parts))
        return []


def serialize_customer(customer: CustomerInfo) -> Dict[str, str]:
    """Aplatit CustomerInfo en clés customer*; les champs vides ne sont pas envoyés."""
    out: Dict[str, str] = {}
    for key, attr in CUSTOMER_KEYS.items():
        value = getattr(customer, attr)
        if value:
            out[key] = value[:METADATA_VALUE_MAX]
    for key, attr in ADDRESS_KEYS.items():
        value = getattr(customer.address, attr)
        if value:
            out[key] = value[:METADATA_VALUE_MAX]
    return out


def deserialize_customer(metadata: Mapping[str, str], session: Optional[PaymentSession] = None) -> CustomerInfo:
    """
    Reconstruit CustomerInfo depuis les métadonnées.
    Repli sur les champs saisis par Stripe (customer_details puis customer_email)
    lorsqu'une clé est absente.
    """
    values: Dict[str, Any] = {attr: metadata.get(key) or "" for key, attr in CUSTOMER_KEYS.items()}
    if session is not None:
        details = session.customer_details
        if details:
            values["full_name"] = values["full_name"] or details.name or ""
            values["email"] = values["email"] or details.email or ""
            values["phone"] = values["phone"] or details.phone or ""
        values["email"] = values["email"] or session.customer_email or ""
    address = CustomerAddress(**{attr: metadata.get(key) or "" for key, attr in ADDRESS_KEYS.items()})
    return CustomerInfo(address=address, **values)


def customer_from_checkout(checkout: CheckoutRequest) -> CustomerInfo:
    return CustomerInfo(
        full_name=checkout.customer_name,
        email=str(checkout.customer_email or ""),
        phone=checkout.customer_phone,
        address=checkout.customer_address,
    )


def build_session_metadata(checkout: CheckoutRequest) -> Dict[str, str]:
    """
    Métadonnées Stripe associées à la session:
    - delivery / discount: montants décimaux exacts en str ("3.00", "3.125")
    - items (+ items_N): panier JSON
    - customer*: nom, e-mail, téléphone, adresse
    Soulève ValidationError si le panier dépasse la capacité des métadonnées Stripe.
    """
    metadata: Dict[str, str] = {
        "delivery": format_amount(checkout.delivery),
        "discount": format_amount(checkout.discount),
    }
    metadata.update(serialize_items(checkout.items))
    metadata.update(serialize_customer(customer_from_checkout(checkout)))
    if len(metadata) > METADATA_KEYS_MAX:
        raise ValidationError("Panier trop volumineux")
    return metadata


def paid_order_from_session(session: PaymentSession) -> PaidOrder:
    """Reconstruit la commande payée (éphémère) à partir d'une session complétée."""
    meta = session.metadata or {}
    return PaidOrder(
        session_id=session.id,
        items=deserialize_items(meta),
        delivery=parse_amount(meta.get("delivery")),
        discount=parse_amount(meta.get("discount")),
        amount_total=session.amount_total or 0,
        customer=deserialize_customer(meta, session),
    )
