import asyncio
from decimal import Decimal

import pytest

from food_backend.errors import NotificationError
from food_backend.notifications.service import CUSTOMER_SUBJECT, NotificationDispatcher
from food_backend.payments.models import CartItem, CustomerInfo, PaidOrder


def _order(email="a@b.com", amount_total=2350, discount="0"):
    return PaidOrder(
        session_id="cs_test_1",
        items=[CartItem(name="Plat A", quantity=2)],
        delivery=Decimal("3.00"),
        discount=Decimal(discount),
        amount_total=amount_total,
        customer=CustomerInfo(full_name="Awa", email=email),
    )


def test_dispatch_sends_customer_then_admin(dispatcher, mailer):
    result = asyncio.run(dispatcher.dispatch(_order()))

    assert result.ok
    assert [o.status for o in result.outcomes] == ["sent", "sent"]
    assert [m.to for m in mailer.sent] == ["a@b.com", "admin@mamafood.fr"]
    customer_mail, admin_mail = mailer.sent
    assert customer_mail.subject == CUSTOMER_SUBJECT
    assert admin_mail.subject == "🔔 Nouvelle commande - 23.50€"
    assert customer_mail.sender_email == "commandes@mamafood.fr"
    assert "23.50€" in customer_mail.html


def test_customer_failure_does_not_block_admin(dispatcher, mailer):
    mailer.fail_for.add("a@b.com")
    result = asyncio.run(dispatcher.dispatch(_order()))

    assert not result.ok
    assert [o.status for o in result.outcomes] == ["failed", "sent"]
    assert result.failures[0].role == "customer"
    assert "boom" in result.failures[0].error
    assert [m.to for m in mailer.sent] == ["admin@mamafood.fr"]


def test_unexpected_exception_is_contained():
    class _Broken:
        def send(self, message):
            raise RuntimeError("connexion refusée")

    dispatcher = NotificationDispatcher(_Broken(), sender_email="s@b.com", admin_email="admin@b.com")
    result = asyncio.run(dispatcher.dispatch(_order()))
    assert [o.status for o in result.outcomes] == ["failed", "failed"]


def test_missing_customer_email_is_skipped(dispatcher, mailer):
    result = asyncio.run(dispatcher.dispatch(_order(email="")))
    assert result.ok
    assert [o.status for o in result.outcomes] == ["skipped", "sent"]
    assert [m.to for m in mailer.sent] == ["admin@mamafood.fr"]


def test_total_is_provider_amount_not_recomputed(dispatcher, mailer):
    asyncio.run(dispatcher.dispatch(_order(amount_total=3000, discount="5.00")))
    for message in mailer.sent:
        assert "30.00€" in message.html
        assert "-5.00€" in message.html


def test_send_test_email(dispatcher, mailer):
    assert asyncio.run(dispatcher.send_test_email()) == "msg-1"
    assert mailer.sent[0].to == "admin@mamafood.fr"


def test_send_test_email_raises_on_failure(dispatcher, mailer):
    mailer.fail_for.add("admin@mamafood.fr")
    with pytest.raises(NotificationError):
        asyncio.run(dispatcher.send_test_email())


def test_send_test_email_requires_admin(mailer):
    dispatcher = NotificationDispatcher(mailer, sender_email="s@b.com", admin_email="")
    with pytest.raises(NotificationError):
        asyncio.run(dispatcher.send_test_email())
