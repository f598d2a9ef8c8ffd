"""
Module 'notifications': gabarits HTML, transports e-mail et dispatcher.
"""

from .templates import render_customer_email, render_admin_email
from .mailer import EmailMessage, BrevoMailer, ResendMailer, SmtpMailer, build_mailer
from .service import NotificationDispatcher, DispatchResult, DeliveryOutcome

__all__ = [
    # templates
    "render_customer_email",
    "render_admin_email",
    # transports
    "EmailMessage",
    "BrevoMailer",
    "ResendMailer",
    "SmtpMailer",
    "build_mailer",
    # dispatcher
    "NotificationDispatcher",
    "DispatchResult",
    "DeliveryOutcome",
]
