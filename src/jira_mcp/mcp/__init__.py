"""
MCP (Model Context Protocol) server implementation for Jira.

Exposes Jira issue search, issue creation and commenting to AI assistants
as MCP tools.

Architecture:
- server.py: FastMCP server initialization and tool registration
- config.py: Server configuration (jira-mcp.yaml + environment)
- errors.py: Connection / authentication / validation error taxonomy
- validation.py: Tool argument validation
- tools/: Tool handlers and the dispatcher
- adapters/: Jira client adapter (wraps the `jira` library)
- session/: Jira client lifecycle and per-call context
- auth/: Jira credentials from environment or request headers
"""

__all__ = ["JiraMCPServer", "MCPConfig"]

from .config import MCPConfig
from .server import JiraMCPServer
