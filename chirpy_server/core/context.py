"""
Service context shared by all request handlers

Module: core.context
Date: 2026-10-19
Version: 0.1.0

Created once at startup by ChirpyServer and attached to the aiohttp
application. Replaces process-wide globals (config, hit counter).
"""

import threading
from dataclasses import dataclass, field

from .config import ServerConfig
from ..content.post_manager import PostManager
from ..persistence.document_store import DocumentStore
from ..security.authentication.account_manager import AccountManager
from ..security.authentication.jwt_handler import JWTHandler


@dataclass
class ServiceContext:
    """Configuration, core services and the /app hit counter"""
    config: ServerConfig
    documents: DocumentStore
    accounts: AccountManager
    tokens: JWTHandler
    posts: PostManager
    _hits: int = field(default=0, init=False)
    _hits_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def register_hit(self) -> None:
        with self._hits_lock:
            self._hits += 1

    @property
    def hit_count(self) -> int:
        with self._hits_lock:
            return self._hits

    def reset_hits(self) -> None:
        with self._hits_lock:
            self._hits = 0
