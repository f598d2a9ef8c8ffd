# food_backend.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets Stripe et les identifiants du fournisseur d'e-mail
- Fournit l'origine du front pour les URLs de redirection du checkout
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

# Stripe: clé secrète et secret de signature des webhooks
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Front: origine utilisée pour construire success_url / cancel_url
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:5173").rstrip("/")
CHECKOUT_SUCCESS_PATH = _clean_env(os.getenv("CHECKOUT_SUCCESS_PATH") or "/#/success?session_id={CHECKOUT_SESSION_ID}")
CHECKOUT_CANCEL_PATH = _clean_env(os.getenv("CHECKOUT_CANCEL_PATH") or "/#/cancel")

# E-mails: fournisseur (brevo | resend | smtp | gmail | brevo-smtp) et identifiants
MAIL_PROVIDER = _clean_env(os.getenv("MAIL_PROVIDER") or "brevo").lower()
BREVO_API_KEY = _clean_env(os.getenv("BREVO_API_KEY") or "")
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
SMTP_HOST = _clean_env(os.getenv("SMTP_HOST") or "")
SMTP_PORT = _int_env("SMTP_PORT", 587)
SMTP_USER = _clean_env(os.getenv("SMTP_USER") or os.getenv("EMAIL_USER") or "")
SMTP_PASSWORD = _clean_env(os.getenv("SMTP_PASSWORD") or os.getenv("EMAIL_PASS") or "")

# Expéditeur et destinataire admin
EMAIL_USER = _clean_env(os.getenv("EMAIL_USER") or "")
EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "Mama Food's")
ADMIN_EMAIL = _clean_env(os.getenv("ADMIN_EMAIL") or "")

# Anti-doublon des webhooks (Redis optionnel, sinon mémoire du process)
DEDUP_REDIS_URL = _clean_env(os.getenv("DEDUP_REDIS_URL") or "")
DEDUP_TTL_SECONDS = _int_env("DEDUP_TTL_SECONDS", 7 * 24 * 3600)

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

PORT = _int_env("PORT", 4242)
