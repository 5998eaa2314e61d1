"""MCP server registry and client."""

from inboxstream.infrastructure.mcp.client import McpClient, McpError
from inboxstream.infrastructure.mcp.registry import (
    GOOGLE_ASSISTANT,
    McpConfigurationError,
    McpServerConfig,
    McpServerRegistry,
    build_mcp_registry,
    get_mcp_registry,
)

__all__ = [
    "GOOGLE_ASSISTANT",
    "McpClient",
    "McpError",
    "McpConfigurationError",
    "McpServerConfig",
    "McpServerRegistry",
    "build_mcp_registry",
    "get_mcp_registry",
]
