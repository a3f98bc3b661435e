"""
Chirpy Server

A small HTTP service for short text posts ("chirps"), user accounts and
session tokens, persisted as one JSON file on disk.

CHANGELOG:
[2026-10-19 v0.1.0] Initial release
  - Concurrency-safe JSON document store
  - bcrypt credentials, JWT access/refresh sessions with revocation
  - aiohttp API, static site and admin metrics

ARCHITECTURE:
- Layer 1 : Transport (aiohttp HTTP API)
- Layer 2 : Business logic (accounts, sessions, chirps)
- Layer 3 : Persistence (document store, JSON codec, file gateway)

SECURITY NOTES:
- Passwords hashed with bcrypt, never logged
- Refresh tokens revocable and checked on every refresh
- Database file written atomically with 0600 permissions
"""

__version__ = "0.1.0"

# Export main classes
from .core.chirpy_server import ChirpyServer
from .core.config import ServerConfig

__all__ = [
    "ChirpyServer",
    "ServerConfig",
]
