"""
Registre central des routers.
- Payments: checkout (JSON), statut de session (JSON), webhook (corps brut, RawBodyRoute)
- Notifications: e-mail de test
- Health
"""
from fastapi import FastAPI
from food_backend.payments import views as payments_views
from food_backend.notifications import views as notifications_views
from food_backend.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(payments_views.webhook_router)
    app.include_router(notifications_views.router)
    app.include_router(health_router)
