"""
Cas d'usage 'notifications': e-mail de confirmation client + notification admin.
Le dispatcher ne lève jamais: chaque envoi est isolé et son résultat est rapporté
dans un DispatchResult, le webhook décide ensuite quoi en faire.
"""
import logging
from typing import List, Literal, Optional

from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from food_backend.errors import NotificationError
from food_backend.payments.models import PaidOrder
from . import templates
from .mailer import EmailMessage

logger = logging.getLogger(__name__)

CUSTOMER_SUBJECT = "✅ Confirmation de commande - Mama Food's"
TEST_SUBJECT = "🚀 Test e-mail réussi"


class DeliveryOutcome(BaseModel):
    role: Literal["customer", "admin"]
    recipient: str = ""
    status: Literal["sent", "failed", "skipped"]
    message_id: Optional[str] = None
    error: Optional[str] = None


class DispatchResult(BaseModel):
    outcomes: List[DeliveryOutcome] = []

    @property
    def ok(self) -> bool:
        return all(o.status != "failed" for o in self.outcomes)

    @property
    def failures(self) -> List[DeliveryOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]


def admin_subject(order: PaidOrder) -> str:
    return f"🔔 Nouvelle commande - {order.total:.2f}€"


# module food_backend.notifications.service
class NotificationDispatcher:
    def __init__(self, mailer, sender_email: str, admin_email: str, sender_name: str = "Mama Food's"):
        self.mailer = mailer
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.admin_email = admin_email

    def _message(self, to: str, subject: str, html: str) -> EmailMessage:
        return EmailMessage(
            sender_name=self.sender_name,
            sender_email=self.sender_email,
            to=to,
            subject=subject,
            html=html,
        )

    async def _deliver(self, role: str, to: str, subject: str, html: str) -> DeliveryOutcome:
        if not to:
            logger.warning("notifications.%s skipped: aucun destinataire", role)
            return DeliveryOutcome(role=role, status="skipped")
        try:
            message_id = await run_in_threadpool(self.mailer.send, self._message(to, subject, html))
        except Exception as e:
            detail = getattr(e, "detail", None) or str(e)
            logger.warning("notifications.%s failed to=%s error=%s", role, to, detail)
            return DeliveryOutcome(role=role, recipient=to, status="failed", error=detail)
        logger.info("notifications.%s sent to=%s message_id=%s", role, to, message_id)
        return DeliveryOutcome(role=role, recipient=to, status="sent", message_id=message_id)

    async def dispatch(self, order: PaidOrder) -> DispatchResult:
        """
        Rend les deux gabarits et envoie, dans cet ordre:
        1) la confirmation au client (ignorée si aucun e-mail connu)
        2) la notification à l'admin
        Le second envoi attend la fin du premier.
        """
        args = (order.customer, order.items, order.delivery, order.discount, order.total)
        customer = await self._deliver(
            "customer", order.customer.email, CUSTOMER_SUBJECT, templates.render_customer_email(*args)
        )
        admin = await self._deliver(
            "admin", self.admin_email, admin_subject(order), templates.render_admin_email(*args)
        )
        return DispatchResult(outcomes=[customer, admin])

    async def send_test_email(self) -> Optional[str]:
        """Envoie un e-mail de diagnostic à l'admin; lève NotificationError en cas d'échec."""
        if not self.admin_email:
            raise NotificationError("ADMIN_EMAIL manquant")
        message = self._message(self.admin_email, TEST_SUBJECT, templates.render_test_email())
        try:
            return await run_in_threadpool(self.mailer.send, message)
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(detail=str(e)) from e
