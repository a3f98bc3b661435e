"""
Constants for Chirpy Server

Module: core.constants
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial constants definition
  - Server identity and network defaults
  - Token issuers and lifetimes
  - Chirp validation and censoring constants
  - Persistence defaults

SECURITY NOTES:
- Access tokens are short-lived, refresh tokens are revocable
- Issuer claim is the token kind discriminator
- bcrypt cost factor defaults to 10
"""

from datetime import timedelta
from typing import Final, FrozenSet, Dict

# ============================================================================
# Server Configuration
# ============================================================================

SERVER_NAME: Final[str] = "Chirpy"
SERVER_VERSION: Final[str] = "0.1.0"

DEFAULT_HOST: Final[str] = "0.0.0.0"
DEFAULT_PORT: Final[int] = 8080
DEFAULT_STATIC_ROOT: Final[str] = "."
DEFAULT_LOG_LEVEL: Final[str] = "INFO"

# Development-only fallback, a warning is logged when it is used
DEV_JWT_SECRET: Final[str] = "changeme-32-chars-minimum-for-development-only!!!!"

# ============================================================================
# Persistence
# ============================================================================

DEFAULT_DB_PATH: Final[str] = "./database.json"

COLLECTION_USERS: Final[str] = "users"
COLLECTION_CHIRPS: Final[str] = "chirps"
COLLECTION_REVOCATIONS: Final[str] = "revocations"
NEXT_IDS_KEY: Final[str] = "next_ids"

# ============================================================================
# Authentication
# ============================================================================

JWT_ALGORITHM: Final[str] = "HS256"
MIN_SECRET_LENGTH: Final[int] = 32

ACCESS_TOKEN_ISSUER: Final[str] = "chirpy-access"
REFRESH_TOKEN_ISSUER: Final[str] = "chirpy-refresh"

ACCESS_TOKEN_TTL: Final[timedelta] = timedelta(hours=1)
REFRESH_TOKEN_TTL: Final[timedelta] = timedelta(days=60)

DEFAULT_BCRYPT_ROUNDS: Final[int] = 10

TOKEN_TYPE_BEARER: Final[str] = "Bearer"
AUTH_SCHEME_BEARER: Final[str] = "Bearer"
AUTH_SCHEME_API_KEY: Final[str] = "ApiKey"

# ============================================================================
# Chirps
# ============================================================================

MAX_CHIRP_LENGTH: Final[int] = 140
PROFANE_WORDS: Final[FrozenSet[str]] = frozenset({"kerfuffle", "sharbert", "fornax"})
CENSOR_REPLACEMENT: Final[str] = "****"

# ============================================================================
# Webhooks
# ============================================================================

POLKA_EVENT_USER_UPGRADED: Final[str] = "user.upgraded"

# ============================================================================
# HTTP
# ============================================================================

CORS_HEADERS: Final[Dict[str, str]] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS, PUT, DELETE",
    "Access-Control-Allow-Headers": "*",
}

METRICS_PAGE_TEMPLATE: Final[str] = """
<html>
<body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
</body>
</html>
"""
