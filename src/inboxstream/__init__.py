"""inboxstream - streaming chat delivery and background mailbox ingestion."""

__version__ = "0.1.0"
