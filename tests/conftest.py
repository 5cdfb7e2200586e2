"""
Pytest configuration and shared fixtures for MySQL MCP Server tests

APPROACH: unit tests run against a scripted FakePool injected through the
SessionManager's pool factory, so the real routing (dispatcher -> gateway ->
session) is exercised without a MySQL server. Tests that need a live server
live in test_integration_mysql.py and skip unless MYSQL_TEST_USER is set.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import ServerConfig
from container import ServiceContainer
from tests.handler_test_utils import FakePool, FakePoolFactory, HandlerTestHelper


@pytest.fixture
def server_config():
    return ServerConfig()


@pytest.fixture
def pool():
    """Scripted pool handed out by the first authenticate call"""
    return FakePool()


@pytest.fixture
def pool_factory(pool):
    return FakePoolFactory(pool)


@pytest.fixture
def services(server_config, pool_factory):
    return ServiceContainer(server_config, pool_factory=pool_factory)


@pytest.fixture
def helper(services):
    return HandlerTestHelper(services)


@pytest.fixture
async def authed(services, pool):
    """
    Services with a live session on database `shop`.

    Yields the container; the pool fixture is the session's pool.
    """
    await services.session.authenticate(user="app", password="secret", database="shop")
    yield services
    await services.shutdown()
