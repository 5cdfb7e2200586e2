"""
Service Container - Centralized dependency injection container

Single source of truth for wiring config -> session -> gateway, shared by
every transport mode (stdio, HTTP). Each container owns exactly one
SessionManager; there is no module-level session state.
"""

import logging
from typing import Any, Optional, Tuple

from config import ServerConfig
from database import PoolFactory, SessionManager
from gateway import DatabaseGateway
from handlers import dispatch
from utils.errors import ToolError

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for the session and gateway with attribute access.
    """
    def __init__(self, config: ServerConfig, pool_factory: Optional[PoolFactory] = None):
        self.config = config
        self.session = SessionManager(config, pool_factory=pool_factory)
        self.gateway = DatabaseGateway(self.session)

    async def call_tool(self, name: str, arguments: Optional[Any]) -> Tuple[Any, bool]:
        return await dispatch(self.gateway, name, arguments)

    async def startup(self) -> bool:
        """
        Authenticate with the configured credentials, if any.

        A failure is logged and the server keeps running unauthenticated;
        callers can still authenticate through the tool.
        """
        if not self.config.has_startup_credentials:
            logger.info("No startup credentials configured; waiting for authenticate")
            return False

        try:
            await self.session.authenticate(
                user=self.config.user,
                password=self.config.password,
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
                tls=self.config.tls,
            )
        except ToolError as e:
            logger.error(f"Startup authentication failed: {e.message}")
            return False
        return True

    async def shutdown(self):
        await self.session.close()
