"""
Erreurs applicatives.
- Chaque erreur porte un status_code HTTP et un message public (sans détail fournisseur).
- body_key: clé JSON du message dans la réponse ("message" ou "error").
- La conversion en réponse HTTP est faite par food_backend.app_setup.exceptions.
"""


class AppError(Exception):
    status_code = 500
    message = "Erreur interne"
    body_key = "message"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        # détail interne, destiné aux logs uniquement
        self.detail = detail


class ValidationError(AppError):
    """Entrée client invalide (400), aucun appel externe n'a été fait."""
    status_code = 400
    message = "Données panier invalides"


class SignatureError(AppError):
    """Webhook non authentifié (400, corps texte), rejeté avant toute logique métier."""
    status_code = 400
    message = "Webhook Error: signature invalide"


class ProviderError(AppError):
    """Échec d'un appel au fournisseur de paiement (500, message générique)."""
    status_code = 500
    message = "Erreur création session paiement"


class SessionNotFoundError(ProviderError):
    status_code = 404
    message = "Session introuvable"


class NotificationError(AppError):
    """Échec d'envoi d'un e-mail; journalisé, jamais renvoyé à l'appelant du webhook."""
    status_code = 500
    message = "Erreur envoi e-mail"
    body_key = "error"


class WebhookProcessingError(AppError):
    status_code = 500
    message = "Erreur traitement webhook"
    body_key = "error"
