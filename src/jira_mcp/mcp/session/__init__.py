"""Jira session and per-call context for MCP tools."""

from .context import JiraSession, ToolContext

__all__ = ["JiraSession", "ToolContext"]
