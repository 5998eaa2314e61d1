# src/inboxstream/infrastructure/__init__.py
"""Infrastructure layer - external services, databases, and configuration."""

from inboxstream.infrastructure.postgres_client import (
    PostgresClientWrapper,
    get_postgres_client,
)
from inboxstream.infrastructure.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Postgres
    "PostgresClientWrapper",
    "get_postgres_client",
]
