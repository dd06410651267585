"""Routes MCP tool calls to the Jira tool handlers."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from jira_mcp.mcp.adapters import ToolResponse
from jira_mcp.mcp.errors import JiraError
from jira_mcp.mcp.session.context import JiraSession, ToolContext

from .add_comment import AddCommentTool
from .create_issue import CreateIssueTool
from .list_issues import ListIssuesTool

logger = logging.getLogger(__name__)

TOOLS = {
    tool.name: tool
    for tool in (ListIssuesTool, CreateIssueTool, AddCommentTool)
}


class ToolDispatcher:
    """
    Looks up a tool by name, runs it and wraps the outcome.

    Every failure becomes an error response; nothing raised by a tool
    stops the server.
    """

    def __init__(self, session: JiraSession):
        self.session = session

    def list_definitions(self) -> List[Dict[str, Any]]:
        """Return the definitions of all available tools."""
        return [tool.get_definition() for tool in TOOLS.values()]

    async def call(
        self,
        name: str,
        arguments: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ToolResponse:
        """
        Execute a tool call.

        Args:
            name: Tool name (e.g., "list-issues")
            arguments: Raw tool arguments
            headers: Request headers, for per-request Jira credentials

        Returns:
            ToolResponse with pretty-printed JSON or "Error: <message>"
        """
        tool_class = TOOLS.get(name)
        if tool_class is None:
            return ToolResponse.error(f"Unknown tool: {name}")

        context = ToolContext(session=self.session, headers=dict(headers or {}))

        try:
            result = await tool_class(context).execute(arguments)
        except JiraError as e:
            logger.warning(f"Tool {name} failed: {e.message}")
            return ToolResponse.error(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return ToolResponse.error(str(e) or "Unknown error occurred")

        return ToolResponse.success(result)
