"""
Jira adapter layer for MCP tool integration.

Provides the capability interface MCP tools use to talk to Jira, the
production adapter over the `jira` library, an in-memory variant for
tests, and the uniform response envelope returned to MCP clients.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ToolResponse:
    """Uniform response envelope for MCP tool calls."""

    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the MCP CallToolResult shape."""
        response: Dict[str, Any] = {
            "content": [{"type": "text", "text": self.text}],
        }
        if self.is_error:
            response["isError"] = True
        return response

    @classmethod
    def success(cls, result: Any) -> "ToolResponse":
        """Create success response with pretty-printed JSON."""
        return cls(text=json.dumps(result, indent=2, default=str))

    @classmethod
    def error(cls, message: str) -> "ToolResponse":
        """Create error response."""
        return cls(text=f"Error: {message}", is_error=True)


from .jira_adapter import (
    JiraClient,
    JiraClientAdapter,
    classify_error,
    error_message,
)
from .memory import InMemoryJiraClient

__all__ = [
    "ToolResponse",
    "JiraClient",
    "JiraClientAdapter",
    "InMemoryJiraClient",
    "classify_error",
    "error_message",
]
