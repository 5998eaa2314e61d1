"""Registry of named MCP server endpoints, built once at startup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from inboxstream.infrastructure.settings import Settings, get_settings

GOOGLE_ASSISTANT = "google-assistant"


class McpConfigurationError(LookupError):
    pass


@dataclass(frozen=True)
class McpServerConfig:
    name: str
    url: str
    health_url: str
    enabled: bool = True


class McpServerRegistry:
    """Ordered, read-only list of MCP server configs."""

    def __init__(self, servers: list[McpServerConfig]) -> None:
        names = [s.name for s in servers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate MCP server names: {names}")
        self._servers = tuple(servers)

    def __iter__(self) -> Iterator[McpServerConfig]:
        return iter(self._servers)

    def __len__(self) -> int:
        return len(self._servers)

    def find(self, name: str) -> McpServerConfig | None:
        return next((s for s in self._servers if s.name == name), None)

    def get(self, name: str) -> McpServerConfig:
        """Return an enabled server by name."""
        server = self.find(name)
        if server is None:
            raise McpConfigurationError(f"MCP server configuration not found: {name}")
        if not server.enabled:
            raise McpConfigurationError(f"MCP server is disabled: {name}")
        return server

    def enabled(self) -> list[McpServerConfig]:
        return [s for s in self._servers if s.enabled]


def build_mcp_registry(settings: Settings | None = None) -> McpServerRegistry:
    settings = settings or get_settings()
    return McpServerRegistry(
        [
            McpServerConfig(
                name=GOOGLE_ASSISTANT,
                url=settings.google_assistant_mcp_url,
                health_url=settings.google_assistant_mcp_health_url,
                enabled=settings.google_assistant_mcp_enabled,
            ),
            McpServerConfig(
                name="restaurant-booking",
                url=settings.restaurant_booking_mcp_url,
                health_url=settings.restaurant_booking_mcp_health_url,
                enabled=settings.restaurant_booking_mcp_enabled,
            ),
            McpServerConfig(
                name="time",
                url=settings.time_mcp_url,
                health_url=settings.time_mcp_health_url,
                enabled=settings.time_mcp_enabled,
            ),
        ]
    )


_registry: McpServerRegistry | None = None


def get_mcp_registry() -> McpServerRegistry:
    """Get the process-wide registry, built from settings on first use."""
    global _registry
    if _registry is None:
        _registry = build_mcp_registry()
    return _registry
