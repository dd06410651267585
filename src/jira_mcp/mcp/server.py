"""
FastMCP server initialization and configuration.

Main server class that handles MCP protocol communication, configuration,
and tool registration. Supports stdio, streamable HTTP and SSE transports.
"""

import logging
import socket
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_headers
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import Field

from jira_mcp.mcp.session.context import JiraSession
from jira_mcp.mcp.tools.dispatcher import TOOLS, ToolDispatcher

logger = logging.getLogger(__name__)

SERVER_NAME = "jira-mcp"
SERVER_INSTRUCTIONS = """Jira tools for searching, creating and commenting on issues.

- list-issues: search with JQL (empty query returns all issues), paginate with startAt/maxResults
- create-issue: projectKey, issueType and summary are required
- add-comment: issueKey and body are required
"""


class DispatchedTool(Tool):
    """
    FastMCP tool that forwards raw arguments to the ToolDispatcher.

    The advertised input schema is the tool's own JSON schema; argument
    validation happens in the tool handlers.
    """

    dispatcher: Any = Field(exclude=True)

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        response = await self.dispatcher.call(
            self.name, arguments, headers=get_http_headers()
        )
        if response.is_error:
            raise ToolError(response.text)
        return ToolResult(content=[TextContent(type="text", text=response.text)])


class UnknownToolMiddleware(Middleware):
    """Answers calls to unregistered tool names with the dispatcher's error envelope."""

    def __init__(self, dispatcher: ToolDispatcher):
        self.dispatcher = dispatcher

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        name = context.message.name
        if name not in TOOLS:
            response = await self.dispatcher.call(
                name, context.message.arguments, headers=get_http_headers()
            )
            raise ToolError(response.text)
        return await call_next(context)


@dataclass
class JiraMCPServer:
    """
    Main MCP server instance for the Jira tools.

    Attributes:
        host: Server bind address (default: "127.0.0.1")
        port: Server port (default: 8000, HTTP/SSE only)
        transport: Transport mode ("stdio", "http" or "sse")
        path: HTTP endpoint path (default: "/mcp")
        client_scope: "process" or "request" (default: derived from transport)
        session: Jira session (default: built from client_scope)
    """

    host: str = "127.0.0.1"
    port: int = 8000
    transport: Literal["stdio", "http", "sse"] = "stdio"
    path: str = "/mcp"
    client_scope: Optional[Literal["process", "request"]] = None
    session: Optional[JiraSession] = None
    dispatcher: Optional[ToolDispatcher] = field(default=None, init=False, repr=False)
    _app: Optional[FastMCP] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Validate configuration and build the FastMCP app."""
        if self.transport not in ("stdio", "http", "sse"):
            raise ValueError(
                f"Invalid transport '{self.transport}'. "
                "Must be 'stdio', 'http' or 'sse'."
            )

        if self.session is None:
            scope = self.client_scope or ("process" if self.transport == "stdio" else "request")
            self.session = JiraSession(scope=scope)

        self.dispatcher = ToolDispatcher(self.session)
        self._app = FastMCP(
            SERVER_NAME,
            instructions=SERVER_INSTRUCTIONS,
            lifespan=self._lifespan,
        )
        self._app.add_middleware(UnknownToolMiddleware(self.dispatcher))
        self._register_tools()

    @property
    def app(self) -> FastMCP:
        """The FastMCP application."""
        if not self._app:
            raise RuntimeError("FastMCP app not initialized")
        return self._app

    @asynccontextmanager
    async def _lifespan(self, app: FastMCP):
        """Connect the process-scope Jira client when the server starts."""
        await self.session.initialize()
        yield {}

    def _register_tools(self):
        """Register all Jira tools with the server."""
        for definition in self.dispatcher.list_definitions():
            self.app.add_tool(
                DispatchedTool(
                    name=definition["name"],
                    description=definition["description"],
                    parameters=definition["inputSchema"],
                    dispatcher=self.dispatcher,
                )
            )
            logger.debug(f"Registered {definition['name']} tool with MCP server")

    def _check_port_available(self, host: str, port: int) -> bool:
        """
        Check if port is available for binding.

        Args:
            host: Host address to check
            port: Port number to check

        Returns:
            True if port is available, False otherwise
        """
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((host, port))
                return True
        except OSError:
            return False

    def start(self):
        """
        Start the MCP server with configured transport.

        Raises:
            RuntimeError: If port unavailable (HTTP/SSE) or FastMCP fails to start
        """
        if self.transport == "stdio":
            # Stdin/stdout carry JSON-RPC messages; host/port are ignored
            try:
                self.app.run()
            except Exception as e:
                raise RuntimeError(f"Failed to start MCP server with stdio transport: {e}") from e
            return

        if not self._check_port_available(self.host, self.port):
            raise RuntimeError(
                f"Port {self.port} already in use. "
                f"Choose a different port or stop the conflicting service."
            )

        try:
            if self.transport == "http":
                self.app.run(transport="http", host=self.host, port=self.port, path=self.path)
            else:
                self.app.run(transport="sse", host=self.host, port=self.port)
        except Exception as e:
            raise RuntimeError(
                f"Failed to start MCP server on {self.host}:{self.port}: {e}"
            ) from e
