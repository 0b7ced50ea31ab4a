# backend/asgi.py
"""
PATH: backend/asgi.py

ASGI entrypoint (uvicorn / daphne).

Falls back to backend.settings.dev; production deployments set
DJANGO_SETTINGS_MODULE=backend.settings.prod.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
