"""
Session Handlers
Handles: authenticate, status, logout, use_database, health
"""

from typing import Any

from models import AuthenticateArgs, EmptyArgs, UseDatabaseArgs


async def handle_authenticate(gateway, args: AuthenticateArgs) -> dict[str, Any]:
    """Open a new session, replacing any current one"""
    return await gateway.session.authenticate(
        user=args.user,
        password=args.password,
        host=args.host,
        port=args.port,
        database=args.database,
        tls=args.tls,
    )


async def handle_status(gateway, args: EmptyArgs) -> dict[str, Any]:
    return gateway.session.status()


async def handle_logout(gateway, args: EmptyArgs) -> dict[str, Any]:
    return await gateway.session.logout()


async def handle_use_database(gateway, args: UseDatabaseArgs) -> dict[str, Any]:
    """Switch the session's default database after checking it exists"""
    return await gateway.use_database(args.database)


async def handle_health(gateway, args: EmptyArgs) -> dict[str, Any]:
    return await gateway.health()
