"""Minimal MCP client over streamable HTTP (JSON-RPC 2.0)."""

from __future__ import annotations

import itertools
import json
from typing import Any

import httpx
from loguru import logger

from inboxstream.infrastructure.mcp.registry import McpServerConfig

PROTOCOL_VERSION = "2025-03-26"
SESSION_HEADER = "mcp-session-id"


class McpError(RuntimeError):
    """The MCP server rejected a request or returned a tool error."""


class McpClient:
    """Calls tools on one MCP server on behalf of one access token."""

    def __init__(
        self,
        config: McpServerConfig,
        access_token: str | None = None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.access_token = access_token
        self.timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None
        self._session_id: str | None = None
        self._ids = itertools.count(1)
        self.initialized = False

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if self._session_id:
            headers[SESSION_HEADER] = self._session_id
        return headers

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        response = await self._client().post(self.config.url, headers=self._headers(), json=payload)
        if response.status_code >= 400:
            raise McpError(
                f"{self.config.name} returned HTTP {response.status_code}: {response.text[:200]}"
            )
        return response

    async def _request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        request_id = next(self._ids)
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            payload["params"] = params

        response = await self._post(payload)
        session_id = response.headers.get(SESSION_HEADER)
        if session_id:
            self._session_id = session_id

        message = _parse_jsonrpc_body(response, request_id)
        if "error" in message:
            error = message["error"] or {}
            raise McpError(f"{self.config.name} {method} failed: {error.get('message', error)}")
        return message.get("result") or {}

    async def initialize(self) -> dict[str, Any]:
        """Run the MCP initialize handshake."""
        logger.info(f"Initializing MCP client for {self.config.name} at {self.config.url}")
        result = await self._request(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "inboxstream", "version": "0.1.0"},
            },
        )
        await self._post({"jsonrpc": "2.0", "method": "notifications/initialized"})
        self.initialized = True
        server_info = result.get("serverInfo", {})
        logger.debug(f"MCP server {self.config.name} ready: {server_info.get('name', 'unknown')}")
        return result

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        """Call a tool and return its structured (or JSON text) content."""
        if not self.initialized:
            raise McpError(f"MCP client for {self.config.name} is not initialized")

        result = await self._request("tools/call", {"name": name, "arguments": arguments or {}})
        if result.get("isError"):
            raise McpError(f"Tool {name} failed: {_first_text(result) or 'unknown error'}")

        if result.get("structuredContent") is not None:
            return result["structuredContent"]

        text = _first_text(result)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text

    async def close(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "McpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def _first_text(result: dict[str, Any]) -> str | None:
    for item in result.get("content") or []:
        if item.get("type") == "text":
            return item.get("text")
    return None


def _parse_jsonrpc_body(response: httpx.Response, request_id: int) -> dict[str, Any]:
    """Return the JSON-RPC response for ``request_id`` from a JSON or SSE body."""
    content_type = response.headers.get("content-type", "")
    if "text/event-stream" not in content_type:
        return response.json()

    for line in response.text.splitlines():
        if not line.startswith("data:"):
            continue
        message = json.loads(line[len("data:"):].strip())
        if message.get("id") == request_id:
            return message
    raise McpError(f"No response for request {request_id} in event stream")
