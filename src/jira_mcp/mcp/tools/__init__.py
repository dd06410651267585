"""
MCP tool handlers for Jira operations.

Each tool validates its arguments, calls the Jira client from its context
and enriches the result. The dispatcher routes calls by name and wraps
results in the response envelope.
"""

from .add_comment import ADD_COMMENT_SCHEMA, AddCommentTool
from .create_issue import CREATE_ISSUE_SCHEMA, CreateIssueTool
from .dispatcher import TOOLS, ToolDispatcher
from .list_issues import LIST_ISSUES_SCHEMA, ListIssuesTool

__all__ = [
    "ADD_COMMENT_SCHEMA",
    "AddCommentTool",
    "CREATE_ISSUE_SCHEMA",
    "CreateIssueTool",
    "LIST_ISSUES_SCHEMA",
    "ListIssuesTool",
    "TOOLS",
    "ToolDispatcher",
]
