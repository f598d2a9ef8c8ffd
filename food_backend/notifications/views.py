import logging

from fastapi import APIRouter, Depends

from food_backend.dependencies import get_dispatcher

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Notifications"])


# module food_backend.notifications.views
@router.post("/test-email")
async def test_email(dispatcher=Depends(get_dispatcher)):
    """
    Diagnostic: envoie un e-mail de test à ADMIN_EMAIL avec le fournisseur configuré.
    - 200 {message} si l'envoi réussit
    - 500 {error} sinon (NotificationError)
    """
    message_id = await dispatcher.send_test_email()
    logger.info("notifications.test_email sent message_id=%s", message_id)
    return {"message": "Email de test envoyé !"}
