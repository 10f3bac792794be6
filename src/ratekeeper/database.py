"""
Ratekeeper Database Connection

asyncpg pool lifecycle and schema bootstrap for the exchange_rate table.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg
from asyncpg import Connection, Pool

from ratekeeper.config import Settings

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS exchange_rate (
    id BIGSERIAL PRIMARY KEY,
    date DATE NOT NULL,
    currency VARCHAR(10) NOT NULL,
    base_currency VARCHAR(10) NOT NULL,
    rate NUMERIC(20, 8) NOT NULL,
    provider_id SMALLINT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE UNIQUE INDEX IF NOT EXISTS exchange_rate_unique
    ON exchange_rate (date, currency, base_currency, provider_id);
CREATE INDEX IF NOT EXISTS exchange_rate_lookup
    ON exchange_rate (provider_id, base_currency, currency, date DESC);
"""

# Global connection pool
_pool: Pool | None = None


async def create_pool(settings: Settings) -> Pool:
    """Create database connection pool."""
    pool = await asyncpg.create_pool(
        host=settings.database_host,
        port=settings.database_port,
        database=settings.database_name,
        user=settings.database_user,
        password=settings.database_password,
        min_size=2,
        max_size=10,
        command_timeout=30,
        ssl=settings.database_ssl_mode,
    )

    logger.info(
        f"Database pool created: {settings.database_host}:{settings.database_port}"
        f"/{settings.database_name}"
    )
    return pool


async def get_pool(settings: Settings) -> Pool:
    """Get or create database connection pool."""
    global _pool
    if _pool is None:
        _pool = await create_pool(settings)
    return _pool


async def close_pool() -> None:
    """Close database connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


@asynccontextmanager
async def get_connection(pool: Pool) -> AsyncGenerator[Connection, None]:
    """Get database connection from pool."""
    async with pool.acquire() as connection:
        yield connection


async def ensure_schema(pool: Pool) -> None:
    """Create the rate table and its indexes if missing."""
    async with get_connection(pool) as conn:
        await conn.execute(SCHEMA)
    logger.info("Database schema ready")
