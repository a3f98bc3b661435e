"""
Transport module - HTTP API (aiohttp)

Provides:
- HTTPTransport: Server lifecycle
- create_app: aiohttp application factory
"""

from .http_transport import HTTPTransport, create_app, CONTEXT_KEY

__all__ = [
    "HTTPTransport",
    "create_app",
    "CONTEXT_KEY",
]
