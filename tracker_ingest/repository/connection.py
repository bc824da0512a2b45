"""Direct connection management for Lambda (no pooling).

RDS Proxy handles connection pooling at the infrastructure level,
so we use direct connections per request to avoid redundant pooling.
"""

import asyncpg
import asyncio
import logging
from typing import Any, Dict

from ..config import LambdaConfig
from .iam_auth import generate_iam_auth_token

logger = logging.getLogger(__name__)


def _endpoint_for_logging(config: LambdaConfig) -> str:
    # Never log the password part of the DSN
    url = config.database_url or ""
    return url.split('@')[-1] if '@' in url else f"{config.db_host}:{config.db_port}/{config.db_name}"


def connect_kwargs(config: LambdaConfig) -> Dict[str, Any]:
    """Build asyncpg connection arguments from configuration.

    Shared by direct connections and the connection pool.
    """
    if config.use_iam_auth:
        return {
            "host": config.db_host,
            "port": config.db_port,
            "user": config.db_user,
            "database": config.db_name,
            # asyncpg calls this for every new connection, so pooled
            # connections pick up a fresh token
            "password": lambda: generate_iam_auth_token(
                endpoint=config.db_host,
                port=config.db_port,
                db_user=config.db_user,
                region=config.aws_region,
            ),
            "ssl": "require",
            "command_timeout": config.command_timeout,
        }
    if not config.database_url:
        raise ValueError("Database URL is required")
    return {
        "dsn": config.database_url,
        "command_timeout": config.command_timeout,
    }


async def get_connection(config: LambdaConfig) -> asyncpg.Connection:
    """
    Get a direct database connection (no pooling).

    Args:
        config: Lambda configuration object

    Returns:
        asyncpg.Connection: Direct database connection

    Raises:
        ConnectionError: If connection establishment exceeds the connect timeout
        Exception: Other connection errors
    """
    endpoint = _endpoint_for_logging(config)
    kwargs = connect_kwargs(config)

    try:
        conn = await asyncio.wait_for(
            asyncpg.connect(**kwargs),
            timeout=config.connect_timeout,
        )
        logger.debug(f"Direct connection created to {endpoint}")
        return conn
    except asyncio.TimeoutError:
        logger.error(f"Connection timeout after {config.connect_timeout}s to {endpoint}")
        raise ConnectionError(
            f"Connection timeout: Unable to connect to database within {config.connect_timeout} seconds"
        )
    except Exception as e:
        logger.error(f"Failed to create direct connection to {endpoint}: {e}", exc_info=True)
        raise
