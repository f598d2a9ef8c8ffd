"""
Transports e-mail interchangeables.
- BrevoMailer: API transactionnelle Brevo (httpx)
- ResendMailer: API Resend (SDK resend)
- SmtpMailer: relais SMTP (smtplib), avec presets gmail / brevo-smtp
Chaque transport expose send(message) -> id du message et lève NotificationError en cas d'échec.
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr, make_msgid
from typing import Optional

import httpx
import resend
from pydantic import BaseModel

from food_backend.errors import NotificationError

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"

# host, port, TLS implicite (SMTPS) ou STARTTLS
SMTP_PRESETS = {
    "gmail": ("smtp.gmail.com", 465, True),
    "brevo-smtp": ("smtp-relay.brevo.com", 587, False),
}


class EmailMessage(BaseModel):
    sender_name: str
    sender_email: str
    to: str
    subject: str
    html: str


class BrevoMailer:
    name = "brevo"

    def __init__(self, api_key: str, timeout: float = 10):
        self.api_key = api_key
        self.timeout = timeout

    def send(self, message: EmailMessage) -> Optional[str]:
        payload = {
            "sender": {"name": message.sender_name, "email": message.sender_email},
            "to": [{"email": message.to}],
            "subject": message.subject,
            "htmlContent": message.html,
        }
        headers = {"api-key": self.api_key, "accept": "application/json"}
        try:
            resp = httpx.post(BREVO_API_URL, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("notifications.mailer brevo status=%s body=%s", e.response.status_code, e.response.text)
            raise NotificationError(detail=f"brevo status={e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise NotificationError(detail=f"brevo {type(e).__name__}: {e}") from e
        return (resp.json() or {}).get("messageId")


class ResendMailer:
    name = "resend"

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message: EmailMessage) -> Optional[str]:
        resend.api_key = self.api_key
        params = {
            "from": formataddr((message.sender_name, message.sender_email)),
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        try:
            result = resend.Emails.send(params)
        except Exception as e:
            raise NotificationError(detail=f"resend {type(e).__name__}: {e}") from e
        if not result or "id" not in result:
            raise NotificationError(detail="resend: réponse sans id")
        return result["id"]


class SmtpMailer:
    name = "smtp"

    def __init__(self, host: str, port: int, username: str = "", password: str = "", use_ssl: bool = False, timeout: float = 10):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.timeout = timeout

    def _build(self, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime["From"] = formataddr((message.sender_name, message.sender_email))
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime["Message-ID"] = make_msgid()
        mime.set_content("Cet e-mail nécessite un client compatible HTML.")
        mime.add_alternative(message.html, subtype="html")
        return mime

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        conn = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        conn.starttls(context=context)
        return conn

    def send(self, message: EmailMessage) -> Optional[str]:
        mime = self._build(message)
        try:
            with self._connect() as conn:
                if self.username:
                    conn.login(self.username, self.password)
                conn.send_message(mime)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(detail=f"smtp {type(e).__name__}: {e}") from e
        return mime["Message-ID"]


def build_mailer(
    provider: str,
    *,
    brevo_api_key: str = "",
    resend_api_key: str = "",
    smtp_host: str = "",
    smtp_port: int = 587,
    smtp_user: str = "",
    smtp_password: str = "",
):
    """
    Construit le transport configuré par MAIL_PROVIDER.
    - brevo / resend: API HTTP
    - gmail / brevo-smtp: relais SMTP prédéfinis
    - smtp: relais SMTP explicite (SMTP_HOST / SMTP_PORT, TLS implicite si port 465)
    Lève ValueError si le fournisseur est inconnu.
    """
    provider = (provider or "").lower()
    if provider == "brevo":
        return BrevoMailer(brevo_api_key)
    if provider == "resend":
        return ResendMailer(resend_api_key)
    if provider in SMTP_PRESETS:
        host, port, use_ssl = SMTP_PRESETS[provider]
        return SmtpMailer(host, port, smtp_user, smtp_password, use_ssl=use_ssl)
    if provider == "smtp":
        return SmtpMailer(smtp_host, smtp_port, smtp_user, smtp_password, use_ssl=smtp_port == 465)
    raise ValueError(f"MAIL_PROVIDER inconnu: {provider!r}")
