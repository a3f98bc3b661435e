"""
Chirpy Server - Main server orchestrator

Module: core.chirpy_server
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Builds store, account manager, JWT handler and post manager
  - Owns the ServiceContext and the HTTP transport
  - Startup (ensure database) and graceful shutdown

ARCHITECTURE:
ChirpyServer wires the layers bottom-up:
1. JSONStore (file gateway) and DocumentStore (entities)
2. AccountManager and JWTHandler (authentication)
3. PostManager (chirp rules)
4. ServiceContext handed to the HTTP transport

Typical usage:
    server = ChirpyServer(ServerConfig.from_env())
    await server.run()
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import ServerConfig
from .constants import SERVER_NAME, SERVER_VERSION
from .context import ServiceContext
from ..content.post_manager import PostManager
from ..persistence.document_store import DocumentStore
from ..persistence.json_store import JSONStore
from ..security.authentication.account_manager import AccountManager
from ..security.authentication.jwt_handler import JWTHandler
from ..transport.http_transport import HTTPTransport


class ChirpyServer:
    """
    Main Chirpy Server

    Builds the core services once and runs the HTTP transport.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize Chirpy Server

        Args:
            config: Server configuration (defaults to ServerConfig())
        """
        self.logger = logging.getLogger("core.chirpy_server")
        self.config = config or ServerConfig()

        self.json_store = JSONStore(self.config.db_path)
        self.documents = DocumentStore(self.json_store)

        self.context = ServiceContext(
            config=self.config,
            documents=self.documents,
            accounts=AccountManager(self.documents, bcrypt_rounds=self.config.bcrypt_rounds),
            tokens=JWTHandler(self.config.jwt_secret, self.documents),
            posts=PostManager(self.documents),
        )
        self.transport = HTTPTransport(self.context)

        self._is_running = False
        self._startup_time: Optional[datetime] = None

        self.logger.info(f"Server initialized: {SERVER_NAME} v{SERVER_VERSION}")
        self.logger.info(f"Database: {self.config.db_path}")

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def uptime_seconds(self) -> float:
        if self._startup_time is None:
            return 0.0
        return (datetime.now(timezone.utc) - self._startup_time).total_seconds()

    async def start(self) -> None:
        """
        Prepare the database and start serving

        Raises:
            StoreInitError: If the database file cannot be created
        """
        if self.config.reset_database:
            Path(self.config.db_path).unlink(missing_ok=True)
            self.logger.warning(f"Debug mode: removed database {self.config.db_path}")

        self.json_store.ensure()
        await self.transport.start()

        self._is_running = True
        self._startup_time = datetime.now(timezone.utc)
        self.logger.info("Server started")

    async def stop(self) -> None:
        """Gracefully stop the server"""
        if not self._is_running:
            return

        await self.transport.stop()
        self._is_running = False
        self.logger.info(f"Server stopped after {self.uptime_seconds:.0f}s")

    async def run(self) -> None:
        """Start and serve until cancelled"""
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()
