"""Database connection pool management."""

import logging
from pathlib import Path
from typing import Optional

import asyncpg

from ..config import db_config

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / 'schema.sql'

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Get the shared connection pool, creating it on first use."""
    global _pool
    if _pool is None:
        _pool = await asyncpg.create_pool(
            user=db_config.user,
            password=db_config.password,
            database=db_config.database,
            host=db_config.host,
            port=db_config.port,
            min_size=db_config.min_pool_size,
            max_size=db_config.max_pool_size,
        )
        logger.debug("Created connection pool for %s@%s/%s", db_config.user, db_config.host, db_config.database)
    return _pool


async def close_pool():
    """Close the shared connection pool if it is open."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


async def test_connection() -> bool:
    """Check that the database answers a trivial query."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval('SELECT 1') == 1
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("Database connection failed: %s", e)
        return False


async def init_schema():
    """Create the documents table and its indexes."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_PATH.read_text())
