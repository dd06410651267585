"""Command-line interface for the Jira MCP server."""
