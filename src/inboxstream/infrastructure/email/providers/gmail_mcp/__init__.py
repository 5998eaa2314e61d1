from inboxstream.infrastructure.email.providers.gmail_mcp.client import GmailMcpMailSource
from inboxstream.infrastructure.email.providers.gmail_mcp.mapper import gmail_to_email_record

__all__ = ["GmailMcpMailSource", "gmail_to_email_record"]
