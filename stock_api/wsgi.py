"""WSGI adapter for WSGI-only hosts.

This file exposes a WSGI `application` by adapting the FastAPI ASGI
app using `asgiref.wsgi.AsgiToWsgi`. Point the host's web app
configuration to `stock_api.wsgi:application`.
"""
from __future__ import annotations

from asgiref.wsgi import AsgiToWsgi

from .app import app as asgi_app


application = AsgiToWsgi(asgi_app)
