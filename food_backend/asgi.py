"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker) importe
  `food_backend.asgi:app` pour servir l'application FastAPI en mode ASGI.
- Toute la configuration (routes, middlewares, services) est centralisée dans
  food_backend.app_setup.factory, ce fichier ne fait qu'exposer l'instance `app`.
"""

from food_backend.app import app
