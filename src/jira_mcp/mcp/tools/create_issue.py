"""MCP tool for creating Jira issues."""

from typing import Any, Dict

from jira_mcp.mcp.adapters.jira_adapter import error_message
from jira_mcp.mcp.errors import JiraConnectionError, JiraError
from jira_mcp.mcp.session.context import ToolContext
from jira_mcp.mcp.validation import MAX_SUMMARY_LENGTH, parse_create_issue_args

# JSON Schema for create-issue parameters
CREATE_ISSUE_SCHEMA = {
    "type": "object",
    "required": ["projectKey", "issueType", "summary"],
    "properties": {
        "projectKey": {
            "type": "string",
            "description": 'The project key where the issue will be created (e.g., "PROJ", "DEV")',
            "pattern": "^[A-Z][A-Z0-9]*$",
        },
        "issueType": {
            "type": "string",
            "description": 'The type of issue to create (e.g., "Bug", "Task", "Story", "Epic")',
        },
        "summary": {
            "type": "string",
            "description": f"Brief summary of the issue (required, max {MAX_SUMMARY_LENGTH} characters)",
            "maxLength": MAX_SUMMARY_LENGTH,
        },
        "description": {
            "type": "string",
            "description": "Detailed description of the issue (optional)",
        },
        "priority": {
            "type": "string",
            "description": 'Priority level (e.g., "High", "Medium", "Low", "Critical", "Blocker")',
        },
        "assignee": {
            "type": "string",
            "description": "Username or email of the person to assign the issue to",
        },
        "labels": {
            "type": "array",
            "description": "Array of labels to add to the issue",
            "items": {"type": "string"},
        },
        "customFields": {
            "type": "object",
            "description": (
                "Custom field values as key-value pairs "
                "(field names should be in customfield_xxxxx format)"
            ),
            "additionalProperties": True,
        },
    },
    "additionalProperties": False,
}


class CreateIssueTool:
    """Create a Jira issue with field validation."""

    name = "create-issue"
    description = "Create a new Jira issue with proper field validation"

    def __init__(self, context: ToolContext):
        self.context = context

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Return the MCP tool definition (name, description, input schema)."""
        return {
            "name": cls.name,
            "description": cls.description,
            "inputSchema": CREATE_ISSUE_SCHEMA,
        }

    async def execute(self, arguments: Any) -> Dict[str, Any]:
        """
        Create an issue and return it with creation metadata.

        Returns:
            Full issue record plus "metadata" with created, url and message

        Raises:
            JiraError: Any validation or Jira failure, prefixed with
                "Failed to create issue"
        """
        try:
            params = parse_create_issue_args(arguments)
            client = await self.context.client()
            issue = await client.create_issue(params)

            key = issue["key"]
            return {
                **issue,
                "metadata": {
                    "created": True,
                    "url": client.config.browse_url(key),
                    "message": f"Issue {key} created successfully",
                },
            }
        except JiraError as e:
            raise e.with_context("Failed to create issue") from e
        except Exception as e:
            raise JiraConnectionError(
                f"Failed to create issue: {error_message(e)}", cause=e
            ) from e
