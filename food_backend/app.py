# module food_backend.app
from food_backend.app_setup.factory import create_app

# App globale
app = create_app()
