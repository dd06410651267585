"""
Integration tests for the MCP server with all tools.

Runs the FastMCP app in-process through fastmcp's Client, with the Jira
backend replaced by InMemoryJiraClient.
"""

import json

import pytest
from fastmcp.client import Client

from jira_mcp.mcp.adapters import InMemoryJiraClient
from jira_mcp.mcp.server import JiraMCPServer
from jira_mcp.mcp.session import JiraSession


@pytest.fixture
def jira():
    """In-memory Jira backend seeded with two issues."""
    client = InMemoryJiraClient()
    client.add_issue("PROJ", "Login fails")
    client.add_issue("PROJ", "Logout is slow")
    return client


@pytest.fixture
def mcp_server(jira):
    """Create an MCP server instance backed by the in-memory Jira."""
    return JiraMCPServer(transport="stdio", session=JiraSession.for_client(jira))


def _text(result):
    return result.content[0].text


class TestMCPServerIntegration:
    """Integration tests for the complete MCP server."""

    @pytest.mark.asyncio
    async def test_list_tools(self, mcp_server):
        """Test that all three tools are advertised with their schemas."""
        async with Client(mcp_server.app) as client:
            tools = await client.list_tools()

        by_name = {tool.name: tool for tool in tools}
        assert set(by_name) == {"list-issues", "create-issue", "add-comment"}
        assert by_name["add-comment"].inputSchema["required"] == ["issueKey", "body"]
        assert by_name["list-issues"].description == (
            "Search and retrieve Jira issues with filtering capabilities"
        )

    @pytest.mark.asyncio
    async def test_list_issues(self, mcp_server):
        """Test a search returns pretty-printed JSON with metadata."""
        async with Client(mcp_server.app) as client:
            result = await client.call_tool_mcp("list-issues", {"maxResults": 1})

        assert result.isError is False
        payload = json.loads(_text(result))
        assert payload["total"] == 2
        assert payload["metadata"]["hasMore"] is True
        assert payload["metadata"]["nextStartAt"] == 1

    @pytest.mark.asyncio
    async def test_create_then_comment(self, mcp_server, jira):
        """Test creating an issue and commenting on it."""
        async with Client(mcp_server.app) as client:
            created = await client.call_tool_mcp(
                "create-issue",
                {"projectKey": "PROJ", "issueType": "Task", "summary": "Write docs"},
            )
            issue = json.loads(_text(created))

            commented = await client.call_tool_mcp(
                "add-comment", {"issueKey": issue["key"], "body": "Started"}
            )

        assert created.isError is False
        assert issue["key"] == "PROJ-3"
        assert issue["metadata"]["url"] == "https://jira.example.com/browse/PROJ-3"
        assert commented.isError is False
        assert json.loads(_text(commented))["body"] == "Started"
        assert len(jira.comments["PROJ-3"]) == 1

    @pytest.mark.asyncio
    async def test_backend_error_is_error_result(self, mcp_server, jira):
        """Test tool failures come back flagged as errors, not as exceptions."""
        jira.fail("search", {"statusCode": 401, "message": "Unauthorized"})

        async with Client(mcp_server.app) as client:
            failed = await client.call_tool_mcp("list-issues", {})
            recovered = await client.call_tool_mcp("list-issues", {})

        assert failed.isError is True
        assert "Error: Failed to list issues: Failed to search issues: Unauthorized" in _text(failed)
        assert recovered.isError is False

    @pytest.mark.asyncio
    async def test_validation_error_is_error_result(self, mcp_server):
        """Test handler validation errors are flagged as errors."""
        async with Client(mcp_server.app) as client:
            result = await client.call_tool_mcp(
                "add-comment", {"issueKey": "PROJ-1", "body": "   "}
            )

        assert result.isError is True
        assert "body is required and must be a string" in _text(result)

    @pytest.mark.asyncio
    async def test_unknown_tool_is_error_envelope(self, mcp_server):
        """Test unknown tool names get the same error envelope as tool failures."""
        async with Client(mcp_server.app) as client:
            result = await client.call_tool_mcp("delete-issue", {})

        assert result.isError is True
        assert _text(result) == "Error: Unknown tool: delete-issue"
