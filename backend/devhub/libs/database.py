"""Database connection helper."""

import logging
from typing import Optional

import asyncpg

from devhub.config import Settings

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL,
    tags TEXT[] NOT NULL DEFAULT '{}',
    image_url TEXT NOT NULL DEFAULT '',
    demo_url TEXT,
    repo_url TEXT,
    featured BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


async def get_db_connection(database_url: Optional[str] = None):
    """Get database connection."""
    return await asyncpg.connect(database_url or Settings.from_env().database_url)


async def ensure_schema(database_url: Optional[str] = None) -> bool:
    """Create the projects table if it is missing. Never raises."""
    try:
        conn = await get_db_connection(database_url)
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.warning("Record store unreachable, schema not checked: %s", e)
        return False
    try:
        await conn.execute(SCHEMA_SQL)
        return True
    except asyncpg.PostgresError as e:
        logger.warning("Could not create projects table: %s", e)
        return False
    finally:
        await conn.close()
