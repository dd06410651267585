"""MCP tool for searching Jira issues with JQL."""

from typing import Any, Dict

from jira_mcp.mcp.adapters.jira_adapter import error_message
from jira_mcp.mcp.errors import JiraConnectionError, JiraError
from jira_mcp.mcp.session.context import ToolContext
from jira_mcp.mcp.validation import MAX_RESULTS_LIMIT, parse_list_issues_args

NO_QUERY = "No JQL query (returning all issues)"

# JSON Schema for list-issues parameters
LIST_ISSUES_SCHEMA = {
    "type": "object",
    "properties": {
        "jql": {
            "type": "string",
            "description": (
                "JQL (Jira Query Language) query string to filter issues. Examples: "
                '"assignee = currentUser()", "project = PROJ AND status = Open"'
            ),
        },
        "maxResults": {
            "type": "number",
            "description": f"Maximum number of results to return (default: 50, max: {MAX_RESULTS_LIMIT})",
            "minimum": 1,
            "maximum": MAX_RESULTS_LIMIT,
            "default": 50,
        },
        "startAt": {
            "type": "number",
            "description": "Starting index for pagination (default: 0)",
            "minimum": 0,
            "default": 0,
        },
        "fields": {
            "type": "string",
            "description": (
                "Comma-separated list of fields to include in results "
                '(e.g., "summary,status,assignee,priority"). If not specified, returns all fields.'
            ),
        },
    },
    "additionalProperties": False,
}


class ListIssuesTool:
    """Search and retrieve Jira issues."""

    name = "list-issues"
    description = "Search and retrieve Jira issues with filtering capabilities"

    def __init__(self, context: ToolContext):
        self.context = context

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Return the MCP tool definition (name, description, input schema)."""
        return {
            "name": cls.name,
            "description": cls.description,
            "inputSchema": LIST_ISSUES_SCHEMA,
        }

    async def execute(self, arguments: Any) -> Dict[str, Any]:
        """
        Run a JQL search and add pagination metadata.

        Args:
            arguments: Raw tool arguments

        Returns:
            Search result plus a "metadata" block with query, returnedCount,
            totalAvailable, hasMore and nextStartAt

        Raises:
            JiraError: Any validation or Jira failure, prefixed with
                "Failed to list issues"
        """
        try:
            params = parse_list_issues_args(arguments)
            client = await self.context.client()
            result = await client.search_issues(params)

            returned = len(result["issues"])
            next_start = result["startAt"] + returned

            return {
                **result,
                "metadata": {
                    "query": params.jql or NO_QUERY,
                    "returnedCount": returned,
                    "totalAvailable": result["total"],
                    "hasMore": next_start < result["total"],
                    "nextStartAt": next_start,
                },
            }
        except JiraError as e:
            raise e.with_context("Failed to list issues") from e
        except Exception as e:
            raise JiraConnectionError(
                f"Failed to list issues: {error_message(e)}", cause=e
            ) from e
