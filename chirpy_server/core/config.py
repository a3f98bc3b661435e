"""
Server configuration

Module: core.config
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - ServerConfig dataclass
  - Environment loading (JWT_SECRET, POLKA_API_KEY, CHIRPY_*)

Environment variables:
  JWT_SECRET            signing secret (32+ chars)
  POLKA_API_KEY         webhook API key
  CHIRPY_DB_PATH        database file
  CHIRPY_HOST           bind address
  CHIRPY_PORT           bind port
  CHIRPY_STATIC_ROOT    directory served under /app
  CHIRPY_LOG_LEVEL      logging level name
  CHIRPY_BCRYPT_ROUNDS  bcrypt cost factor
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import (
    DEFAULT_BCRYPT_ROUNDS,
    DEFAULT_DB_PATH,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_STATIC_ROOT,
    DEV_JWT_SECRET,
)


class ConfigError(Exception):
    """Invalid configuration value"""
    pass


@dataclass
class ServerConfig:
    """Chirpy Server Configuration"""
    jwt_secret: str = DEV_JWT_SECRET
    polka_api_key: str = ""
    db_path: str = DEFAULT_DB_PATH
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    static_root: str = DEFAULT_STATIC_ROOT
    log_level: str = DEFAULT_LOG_LEVEL
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    reset_database: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Build configuration from environment variables

        Args:
            environ: Mapping to read (defaults to os.environ)

        Raises:
            ConfigError: If a numeric variable is not a number
        """
        env = os.environ if environ is None else environ
        logger = logging.getLogger("core.config")

        jwt_secret = env.get("JWT_SECRET", "")
        if not jwt_secret:
            logger.warning("JWT_SECRET not set, using development secret")
            jwt_secret = DEV_JWT_SECRET

        return cls(
            jwt_secret=jwt_secret,
            polka_api_key=env.get("POLKA_API_KEY", ""),
            db_path=env.get("CHIRPY_DB_PATH", DEFAULT_DB_PATH),
            host=env.get("CHIRPY_HOST", DEFAULT_HOST),
            port=_int_var(env, "CHIRPY_PORT", DEFAULT_PORT),
            static_root=env.get("CHIRPY_STATIC_ROOT", DEFAULT_STATIC_ROOT),
            log_level=env.get("CHIRPY_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            bcrypt_rounds=_int_var(env, "CHIRPY_BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
        )


def _int_var(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
