"""PostgreSQL client for the email store."""

from typing import Any

import psycopg
from loguru import logger

from inboxstream.infrastructure.settings import Settings, get_settings

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS emails (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id TEXT NOT NULL,
        message_id TEXT NOT NULL,
        thread_id TEXT,
        subject TEXT,
        body TEXT,
        received_time TIMESTAMPTZ NOT NULL,
        is_unread BOOLEAN DEFAULT TRUE,
        importance BOOLEAN DEFAULT FALSE,
        from_address TEXT,
        UNIQUE(user_id, message_id)
    );

    CREATE INDEX IF NOT EXISTS idx_emails_user_time ON emails(user_id, received_time DESC);
    CREATE INDEX IF NOT EXISTS idx_emails_user_unread ON emails(user_id) WHERE is_unread = TRUE;
"""


class PostgresClientWrapper:
    """Wrapper around a single async PostgreSQL connection."""

    def __init__(self, settings: Settings | None = None):
        """Initialize PostgreSQL client wrapper."""
        self.settings = settings or get_settings()
        self._connection: psycopg.AsyncConnection | None = None

    async def connect(self) -> psycopg.AsyncConnection:
        """Establish connection to PostgreSQL."""
        if self._connection is None or self._connection.closed:
            logger.info(f"Connecting to PostgreSQL at {self.settings.postgres_host}:{self.settings.postgres_port}")
            self._connection = await psycopg.AsyncConnection.connect(
                self.settings.postgres_dsn, autocommit=True
            )
            logger.info("PostgreSQL connection established")
        return self._connection

    async def disconnect(self) -> None:
        """Close PostgreSQL connection."""
        if self._connection is not None and not self._connection.closed:
            await self._connection.close()
            self._connection = None
            logger.info("PostgreSQL connection closed")

    async def health_check(self) -> dict[str, Any]:
        """Check PostgreSQL connection health."""
        try:
            conn = await self.connect()
            async with conn.cursor() as cur:
                await cur.execute("SELECT version()")
                row = await cur.fetchone()
            return {
                "status": "healthy",
                "host": self.settings.postgres_host,
                "port": self.settings.postgres_port,
                "database": self.settings.postgres_db,
                "version": row[0] if row else "unknown",
            }
        except Exception as e:
            logger.error(f"PostgreSQL health check failed: {e}")
            return {
                "status": "unhealthy",
                "host": self.settings.postgres_host,
                "port": self.settings.postgres_port,
                "database": self.settings.postgres_db,
                "error": str(e),
            }

    async def setup_schema(self) -> None:
        """Create the emails table and its indexes."""
        conn = await self.connect()
        async with conn.cursor() as cur:
            await cur.execute(SCHEMA_SQL)
        logger.info("Database schema setup complete")


# Singleton instance
_postgres_client: PostgresClientWrapper | None = None


def get_postgres_client() -> PostgresClientWrapper:
    """Get singleton PostgreSQL client instance."""
    global _postgres_client
    if _postgres_client is None:
        _postgres_client = PostgresClientWrapper()
    return _postgres_client

