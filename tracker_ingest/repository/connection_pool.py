"""Connection pool management for the FastAPI server.

The pool is created once at application startup and closed at shutdown;
its owner passes it to the service explicitly.
"""

import asyncpg
import logging

from ..config import LambdaConfig
from .connection import connect_kwargs, _endpoint_for_logging

logger = logging.getLogger(__name__)


async def create_connection_pool(config: LambdaConfig) -> asyncpg.Pool:
    """Create a connection pool bound to the running event loop.

    Args:
        config: Lambda configuration object

    Returns:
        asyncpg.Pool: Connection pool
    """
    endpoint = _endpoint_for_logging(config)
    logger.info(
        f"Creating connection pool for {endpoint} "
        f"(min_size={config.pool_min_size}, max_size={config.pool_max_size})"
    )
    try:
        pool = await asyncpg.create_pool(
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
            timeout=config.connect_timeout,
            **connect_kwargs(config),
        )
    except Exception as e:
        logger.error(f"Failed to create connection pool: {e}", exc_info=True)
        raise
    logger.info(f"Connection pool created successfully for {endpoint}")
    return pool


async def close_connection_pool(pool: asyncpg.Pool) -> None:
    """Close the connection pool."""
    logger.info("Closing connection pool")
    try:
        await pool.close()
    except Exception as e:
        logger.warning(f"Error closing connection pool: {e}")
