"""
MySQL session management
Async MySQL operations using aiomysql

A SessionManager owns at most one authenticated connection pool plus the
metadata describing it. The session exists if and only if the pool is open.
"""

import asyncio
import logging
import ssl
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

import aiomysql

from config import ServerConfig
from query.builder import SCHEMA_EXISTS_SQL
from query.identifiers import validate_identifier
from utils.errors import ApiError, AuthError
from utils.serialization import serialize_value

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Not authenticated. Call authenticate first."

PoolFactory = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class Session:
    """Public metadata of the live session. Never holds the password."""

    host: str
    port: int
    user: str
    database: Optional[str]
    tls: bool

    def summary(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "database": self.database,
            "tls": self.tls,
        }


def bind_params(params: Optional[Sequence[Any]]) -> Optional[tuple]:
    # None keeps PyMySQL from %-formatting statements that carry no parameters
    return tuple(params) if params else None


class SessionManager:
    """
    Manages the single authenticated MySQL connection pool

    Session-mutating operations (authenticate, logout, set_active_database)
    are serialised by one lock. Closing a pool waits for connections already
    checked out to be released.
    """

    def __init__(self, config: ServerConfig, pool_factory: Optional[PoolFactory] = None):
        self.config = config
        self._pool_factory = pool_factory or aiomysql.create_pool
        self.pool = None
        self.session: Optional[Session] = None
        self._lock = asyncio.Lock()

    @property
    def is_authenticated(self) -> bool:
        return self.pool is not None

    async def authenticate(
        self,
        user: str,
        password: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        tls: bool = False,
    ) -> Dict[str, Any]:
        """
        Replace the current session with a freshly authenticated one.

        The previous pool is closed first. On any failure, including an
        invalid database name, no session remains installed.
        """
        host = host or self.config.host
        port = port or self.config.port

        async with self._lock:
            await self._close_pool()

            if database is not None:
                validate_identifier(database, "database")

            pool = None
            try:
                pool = await self._pool_factory(
                    host=host,
                    port=port,
                    user=user,
                    password=password,
                    db=database,
                    ssl=ssl.create_default_context() if tls else None,
                    minsize=1,
                    maxsize=self.config.pool_size,
                    connect_timeout=self.config.connect_timeout,
                    charset="utf8mb4",
                    autocommit=True,
                )
                # Liveness probe
                async with pool.acquire() as conn:
                    async with conn.cursor() as cursor:
                        await cursor.execute("SELECT 1")
                        await cursor.fetchall()
            except Exception as e:
                if pool is not None:
                    await self._discard_pool(pool)
                self.pool = None
                self.session = None
                logger.warning(f"❌ MySQL authentication failed for {user}@{host}:{port}: {e}")
                raise AuthError(f"MySQL authentication failed: {e}") from e

            self.pool = pool
            self.session = Session(host=host, port=port, user=user, database=database, tls=bool(tls))
            logger.info(f"✅ Authenticated to MySQL at {host}:{port} as {user}")

        return {"authenticated": True, **self.session.summary()}

    def status(self) -> Dict[str, Any]:
        """Current auth state; no side effects."""
        return {
            "authenticated": self.is_authenticated,
            "session": self.session.summary() if self.session else None,
        }

    async def logout(self) -> Dict[str, Any]:
        """Close the pool if any. Logging out twice is not an error."""
        async with self._lock:
            await self._close_pool()
        return {
            "message": "MySQL session cleared",
            "authenticated": False,
        }

    def require_pool(self):
        if self.pool is None:
            raise AuthError(NOT_AUTHENTICATED)
        return self.pool

    def require_session(self) -> Session:
        if self.pool is None or self.session is None:
            raise AuthError(NOT_AUTHENTICATED)
        return self.session

    @property
    def active_database(self) -> Optional[str]:
        return self.session.database if self.session else None

    async def set_active_database(self, name: str) -> str:
        """
        Make `name` the session's default database.

        The name is checked against information_schema first; the active
        database is never set to a schema that does not exist.
        """
        self.require_session()
        validate_identifier(name, "database")

        async with self._lock:
            rows = await self.fetch_all(SCHEMA_EXISTS_SQL, [name])
            if not rows:
                raise ApiError(f"Database not found: {name}")

            # The session may have been cleared while the lookup ran
            session = self.require_session()
            self.session = replace(session, database=name)

        logger.info(f"Default database set to {name}")
        return name

    @asynccontextmanager
    async def acquire(self, discard: bool = False):
        """
        Acquire a dedicated connection from the pool.

        Usage:
            async with session.acquire() as conn:
                async with conn.cursor(aiomysql.DictCursor) as cursor:
                    await cursor.execute("SELECT 1")

        The connection goes back to the pool on every exit path. With
        discard=True it is closed first, so the pool drops it and opens a
        fresh one on demand.
        """
        pool = self.require_pool()
        async with pool.acquire() as connection:
            try:
                yield connection
            finally:
                if discard:
                    connection.close()

    async def fetch_all(
        self,
        query: str,
        params: Optional[Sequence[Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch all rows as dicts

        Args:
            query: SQL query with %s placeholders
            params: Bound parameters

        Returns:
            List of rows
        """
        logger.debug(f"SQL: {' '.join(query.split())}")
        async with self.acquire() as conn:
            async with conn.cursor(aiomysql.DictCursor) as cursor:
                await cursor.execute(query, bind_params(params))
                return list(await cursor.fetchall())

    async def execute(
        self,
        query: str,
        params: Optional[Sequence[Any]] = None,
    ) -> Tuple[int, int]:
        """
        Execute a statement without returning rows

        Returns:
            (affected row count, last insert id)
        """
        logger.debug(f"SQL: {' '.join(query.split())}")
        async with self.acquire() as conn:
            async with conn.cursor() as cursor:
                await cursor.execute(query, bind_params(params))
                return cursor.rowcount, cursor.lastrowid or 0

    async def health(self) -> Dict[str, Any]:
        """Connection health; unauthenticated is reported, not raised."""
        if self.pool is None:
            return {
                "ok": False,
                "authenticated": False,
                "message": "Not authenticated",
            }

        rows = await self.fetch_all("SELECT NOW() AS serverTime")
        server_time = rows[0].get("serverTime") if rows else None
        return {
            "ok": True,
            "authenticated": True,
            "message": "MySQL connection is healthy",
            "serverTime": "" if server_time is None else serialize_value(server_time),
            "pool": self.get_pool_stats(),
        }

    def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get connection pool statistics for monitoring.

        Returns:
            Dictionary with pool stats (size, free connections, etc.)
        """
        if self.pool is None:
            return {
                'status': 'disconnected',
                'size': 0,
                'freesize': 0
            }

        return {
            'status': 'connected',
            'size': self.pool.size,
            'freesize': self.pool.freesize,
            'maxsize': self.pool.maxsize,
        }

    async def close(self):
        """Close the session on shutdown"""
        async with self._lock:
            await self._close_pool()

    async def _close_pool(self):
        pool, self.pool, self.session = self.pool, None, None
        if pool is not None:
            await self._discard_pool(pool)
            logger.info("MySQL connection pool closed")

    async def _discard_pool(self, pool):
        pool.close()
        await pool.wait_closed()
