"""Store implementations."""

from inboxstream.infrastructure.stores.postgres_email_store import PostgresEmailStore

__all__ = [
    "PostgresEmailStore",
]
