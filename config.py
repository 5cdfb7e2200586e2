"""
Server configuration for the MySQL MCP Server
Environment-aware configuration based on APP_ENV
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Literal
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3306
DEFAULT_POOL_SIZE = 5


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists. Never prints: stdout carries the MCP stream.
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    base_path = Path(__file__).parent
    env_file = base_path / f'.env.{mode}'

    if env_file.exists():
        logger.info(f"Loading config from {env_file}")
        # override=False lets variables from the host process win over the file
        load_dotenv(env_file, override=False)
    else:
        logger.debug(f"No config file found for mode '{mode}' at {env_file}")

    return mode


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _bool_from_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes")


@dataclass
class ServerConfig:
    """MySQL MCP server configuration"""

    # Defaults applied to authenticate calls that omit host/port
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    # Optional startup credentials
    user: Optional[str] = None
    password: str = ""
    database: Optional[str] = None
    tls: bool = False

    # Connection pool settings
    pool_size: int = DEFAULT_POOL_SIZE
    connect_timeout: int = 10  # seconds

    log_level: str = "INFO"

    @property
    def has_startup_credentials(self) -> bool:
        """True when the environment carries credentials to authenticate with at startup"""
        return bool(self.user)

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'ServerConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - MYSQL_HOST: Default host (default: 127.0.0.1)
        - MYSQL_PORT: Default port (default: 3306)
        - MYSQL_USER / MYSQL_PASSWORD: Startup credentials (optional)
        - MYSQL_DATABASE: Startup default database (optional)
        - MYSQL_TLS: Enable TLS for the startup connection
        - MYSQL_POOL_SIZE: Max concurrent connections per session (default: 5)
        - MYSQL_CONNECT_TIMEOUT: Connect timeout in seconds (default: 10)
        - LOG_LEVEL: Logging level (default: INFO)

        Args:
            mode: Override environment mode (default: reads from APP_ENV)
        """
        load_app_environment(mode)

        config = cls(
            host=os.getenv('MYSQL_HOST', DEFAULT_HOST),
            port=_int_from_env('MYSQL_PORT', DEFAULT_PORT),
            user=os.getenv('MYSQL_USER') or None,
            password=os.getenv('MYSQL_PASSWORD', ''),
            database=os.getenv('MYSQL_DATABASE') or None,
            tls=_bool_from_env('MYSQL_TLS'),
            pool_size=_int_from_env('MYSQL_POOL_SIZE', DEFAULT_POOL_SIZE),
            connect_timeout=_int_from_env('MYSQL_CONNECT_TIMEOUT', 10),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )

        config.validate()

        return config

    def validate(self):
        """Reject values the pool could never work with"""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"MYSQL_PORT must be between 1 and 65535, got {self.port}")
        if self.pool_size < 1:
            raise ValueError(f"MYSQL_POOL_SIZE must be at least 1, got {self.pool_size}")
        if self.connect_timeout < 1:
            raise ValueError(f"MYSQL_CONNECT_TIMEOUT must be at least 1, got {self.connect_timeout}")


def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in ('development', 'test', 'production'):
        mode = 'development'
    return mode  # type: ignore


# Example .env file content
ENV_TEMPLATE = """
# Application Environment
# Options: development, test, production
APP_ENV=development

# Defaults for authenticate calls that omit host/port
MYSQL_HOST=127.0.0.1
MYSQL_PORT=3306

# Optional: authenticate automatically at startup
# MYSQL_USER=app
# MYSQL_PASSWORD=your_password_here
# MYSQL_DATABASE=shop
# MYSQL_TLS=false

# Connection Pool Settings
MYSQL_POOL_SIZE=5
MYSQL_CONNECT_TIMEOUT=10

LOG_LEVEL=INFO
"""


def create_env_file(filepath: str = ".env.development"):
    """Create a template .env file"""
    with open(filepath, 'w') as f:
        f.write(ENV_TEMPLATE)
    logger.info(f"Created template env file at {filepath}")
