"""
Modèles pydantic de la feature 'payments'.
- CheckoutRequest: payload JSON du front (champs camelCase via alias).
- PaymentSession / PaymentEvent: vues typées des objets Stripe reçus.
- PaidOrder: commande reconstruite au webhook, éphémère.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CartItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    quantity: int = Field(gt=0)

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, v):
        # le front envoie description: null pour les plats sans description
        return "" if v is None else v


class CustomerAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    street: str = ""
    city: str = ""
    postal_code: str = Field(default="", alias="postalCode")
    country: str = ""

    def is_empty(self) -> bool:
        return not any((self.street, self.city, self.postal_code, self.country))


class CustomerInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_name: str = ""
    email: str = ""
    phone: str = ""
    address: CustomerAddress = CustomerAddress()


class CheckoutRequest(BaseModel):
    """
    Panier envoyé par le front.
    total_amount et items sont optionnels au parsing: leur absence est rejetée par
    le service (ValidationError -> 400 {message}) et non par FastAPI (422).
    """
    model_config = ConfigDict(populate_by_name=True)

    total_amount: Optional[Decimal] = Field(default=None, alias="totalAmount")
    description: str = ""
    delivery: Decimal = Decimal("0")
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    items: List[CartItem] = Field(default_factory=list)
    customer_email: Optional[EmailStr] = Field(default=None, alias="customerEmail")
    customer_name: str = Field(default="", alias="customerName")
    customer_phone: str = Field(default="", alias="customerPhone")
    customer_address: CustomerAddress = Field(default_factory=CustomerAddress, alias="customerAddress")


class CheckoutResponse(BaseModel):
    url: str
    id: Optional[str] = None


class CustomerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


class PaymentSession(BaseModel):
    """Sous-ensemble utile d'une session Stripe Checkout."""
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    amount_total: Optional[int] = None
    customer_email: Optional[str] = None
    customer_details: Optional[CustomerDetails] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    payment_status: Optional[str] = None
    status: Optional[str] = None


class EventKind(str, Enum):
    COMPLETED = "completed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    OTHER = "other"


EVENT_KINDS = {
    "checkout.session.completed": EventKind.COMPLETED,
    "payment_intent.succeeded": EventKind.SUCCEEDED,
    "payment_intent.payment_failed": EventKind.FAILED,
}


class PaymentEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> EventKind:
        return EVENT_KINDS.get(self.type, EventKind.OTHER)

    @property
    def object(self) -> Dict[str, Any]:
        return self.data.get("object") or {}

    def session(self) -> PaymentSession:
        return PaymentSession.model_validate(self.object)


class PaidOrder(BaseModel):
    session_id: str
    items: List[CartItem]
    delivery: Decimal
    discount: Decimal
    amount_total: int
    customer: CustomerInfo

    @property
    def total(self) -> Decimal:
        # montant réellement débité par Stripe, jamais recalculé
        return (Decimal(self.amount_total) / 100).quantize(Decimal("0.01"))
