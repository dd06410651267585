"""MCP tool for commenting on Jira issues."""

from typing import Any, Dict

from jira_mcp.mcp.adapters.jira_adapter import error_message
from jira_mcp.mcp.errors import JiraConnectionError, JiraError
from jira_mcp.mcp.session.context import ToolContext
from jira_mcp.mcp.validation import parse_add_comment_args

ADD_COMMENT_SCHEMA = {
    "type": "object",
    "required": ["issueKey", "body"],
    "properties": {
        "issueKey": {
            "type": "string",
            "description": 'The key of the issue to comment on (e.g., "PROJ-123")',
        },
        "body": {
            "type": "string",
            "description": "The comment text to add",
        },
    },
    "additionalProperties": False,
}


class AddCommentTool:
    """Add a comment to a Jira issue."""

    name = "add-comment"
    description = "Add a comment to a Jira issue"

    def __init__(self, context: ToolContext):
        self.context = context

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        return {
            "name": cls.name,
            "description": cls.description,
            "inputSchema": ADD_COMMENT_SCHEMA,
        }

    async def execute(self, arguments: Any) -> Dict[str, Any]:
        """Add the comment and return the created comment record."""
        try:
            params = parse_add_comment_args(arguments)
            client = await self.context.client()
            return await client.add_comment(params.issue_key, params.body)
        except JiraError as e:
            raise e.with_context("Failed to add comment") from e
        except Exception as e:
            raise JiraConnectionError(
                f"Failed to add comment: {error_message(e)}", cause=e
            ) from e
