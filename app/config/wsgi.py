"""
WSGI config for the chat backend.

Serves the REST API only. The real-time relay needs a websocket-capable
server, so production runs config.asgi under Uvicorn; this entry point is
kept for WSGI-only hosting of the HTTP API and for management tooling.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
