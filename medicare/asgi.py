"""
ASGI entrypoint: expose `app` pour les process managers (uvicorn, gunicorn -k uvicorn.workers.UvicornWorker).
Toute la configuration est centralisée dans medicare.app_setup.factory.
"""

from medicare.app import app
