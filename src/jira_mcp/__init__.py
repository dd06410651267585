"""Jira MCP server: Jira issue tools for AI assistants."""

__version__ = "1.0.0"
