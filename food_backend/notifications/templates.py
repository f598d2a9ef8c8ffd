"""
Gabarits HTML des e-mails de commande (client et admin).
Fonctions pures: mêmes entrées -> même HTML, aucune date ni valeur aléatoire.
Toutes les valeurs saisies par le client sont échappées.
"""
from decimal import Decimal
from html import escape
from typing import Sequence

from food_backend.payments.models import CartItem, CustomerInfo

NOT_PROVIDED = "Non renseigné"

_DOCUMENT = """<!DOCTYPE html>
<html lang="fr">
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
</head>
<body style="margin:0;padding:20px;font-family:Arial,sans-serif;color:#333;background-color:#fff;">
  <div style="max-width:600px;margin:0 auto;">
{body}
  </div>
</body>
</html>
"""


def _money(value: Decimal) -> str:
    return f"{Decimal(value):.2f}€"


def _or_placeholder(value: str) -> str:
    return escape(value) if value else NOT_PROVIDED


def _customer_rows(items: Sequence[CartItem]) -> str:
    rows = []
    for item in items:
        description = f"<br><small>{escape(item.description)}</small>" if item.description else ""
        rows.append(
            "      <tr>\n"
            f'        <td style="padding:10px;border-bottom:1px solid #eee;"><strong>{escape(item.name)}</strong>{description}</td>\n'
            f'        <td style="padding:10px;text-align:center;border-bottom:1px solid #eee;">{item.quantity}</td>\n'
            "      </tr>"
        )
    return "\n".join(rows)


def _admin_rows(items: Sequence[CartItem]) -> str:
    return "\n".join(
        "      <tr>\n"
        f"        <td><strong>{escape(item.name)}</strong></td>\n"
        f'        <td style="text-align:center;">{item.quantity}</td>\n'
        "      </tr>"
        for item in items
    )


def _items_table(rows: str) -> str:
    return (
        '    <table style="width:100%;border-collapse:collapse;">\n'
        "      <tr><th style=\"text-align:left;\">Article</th><th>Quantité</th></tr>\n"
        f"{rows}\n"
        "    </table>"
    )


def _discount_line(discount: Decimal) -> str:
    if Decimal(discount) > 0:
        return f"    <p>Réduction: -{_money(discount)}</p>\n"
    return ""


def _address(customer: CustomerInfo) -> str:
    addr = customer.address
    if addr.is_empty():
        return NOT_PROVIDED
    city_line = " ".join(p for p in (addr.postal_code, addr.city) if p)
    return ", ".join(escape(p) for p in (addr.street, city_line, addr.country) if p)


def render_customer_email(
    customer: CustomerInfo,
    items: Sequence[CartItem],
    delivery: Decimal,
    discount: Decimal,
    total: Decimal,
) -> str:
    greeting = f"Bonjour {escape(customer.full_name)}," if customer.full_name else "Bonjour,"
    body = (
        "    <h2>Merci pour votre commande chez Mama Food's 🎉</h2>\n"
        f"    <p>{greeting}</p>\n"
        "    <p>Votre commande a été confirmée avec succès.</p>\n"
        f"{_items_table(_customer_rows(items))}\n"
        f"    <p>Frais de livraison: {_money(delivery)}</p>\n"
        f"{_discount_line(discount)}"
        f"    <p><strong>Total payé:</strong> {_money(total)}</p>\n"
        "    <hr>\n"
        "    <p><small>Cet e-mail est automatique, merci de ne pas y répondre.</small></p>"
    )
    return _DOCUMENT.format(title="Confirmation de commande", body=body)


def render_admin_email(
    customer: CustomerInfo,
    items: Sequence[CartItem],
    delivery: Decimal,
    discount: Decimal,
    total: Decimal,
) -> str:
    body = (
        "    <h2>Nouvelle commande reçue 🍽️</h2>\n"
        f"    <p><strong>Client:</strong> {_or_placeholder(customer.full_name)}</p>\n"
        f"    <p><strong>Téléphone:</strong> {_or_placeholder(customer.phone)}</p>\n"
        f"    <p><strong>Email:</strong> {_or_placeholder(customer.email)}</p>\n"
        f"    <p><strong>Adresse:</strong> {_address(customer)}</p>\n"
        f"{_items_table(_admin_rows(items))}\n"
        f"    <p>Livraison: {_money(delivery)}</p>\n"
        f"{_discount_line(discount)}"
        f"    <p><strong>Total:</strong> {_money(total)}</p>"
    )
    return _DOCUMENT.format(title="Nouvelle commande", body=body)


def render_test_email() -> str:
    return _DOCUMENT.format(title="Test", body="    <h1>✅ Configuration e-mail opérationnelle !</h1>")
