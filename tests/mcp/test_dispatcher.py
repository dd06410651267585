"""
Tests for tool dispatch and the response envelope.

Every outcome of a tool call, including unknown tools and unexpected
exceptions, must come back as a ToolResponse.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from jira_mcp.mcp.adapters import InMemoryJiraClient, ToolResponse
from jira_mcp.mcp.session import JiraSession
from jira_mcp.mcp.tools import TOOLS, ToolDispatcher


@pytest.fixture
def jira():
    return InMemoryJiraClient()


@pytest.fixture
def dispatcher(jira):
    return ToolDispatcher(JiraSession.for_client(jira))


class TestToolResponse:
    """Test the response envelope."""

    def test_success(self):
        response = ToolResponse.success({"key": "PROJ-1"})

        assert response.is_error is False
        assert response.to_dict() == {
            "content": [{"type": "text", "text": '{\n  "key": "PROJ-1"\n}'}],
        }

    def test_error(self):
        response = ToolResponse.error("Something failed")

        assert response.to_dict() == {
            "content": [{"type": "text", "text": "Error: Something failed"}],
            "isError": True,
        }


class TestToolDispatcher:
    """Test routing and error wrapping."""

    def test_list_definitions(self, dispatcher):
        names = [d["name"] for d in dispatcher.list_definitions()]
        assert names == ["list-issues", "create-issue", "add-comment"]
        assert set(names) == set(TOOLS)

    @pytest.mark.asyncio
    async def test_success_is_pretty_json(self, jira, dispatcher):
        """Test results are returned as indented JSON text."""
        jira.add_issue("PROJ", "First")

        response = await dispatcher.call("list-issues", {"maxResults": 10})

        assert response.is_error is False
        assert response.text.startswith("{\n  ")
        payload = json.loads(response.text)
        assert payload["total"] == 1
        assert payload["metadata"]["returnedCount"] == 1

    @pytest.mark.asyncio
    async def test_unknown_tool(self, dispatcher):
        response = await dispatcher.call("delete-issue", {})

        assert response.is_error is True
        assert response.text == "Error: Unknown tool: delete-issue"

    @pytest.mark.asyncio
    async def test_validation_error(self, dispatcher):
        """Test validation errors become error responses."""
        response = await dispatcher.call("add-comment", {"issueKey": "PROJ-1", "body": ""})

        assert response.is_error is True
        assert response.text == (
            "Error: Failed to add comment: body is required and must be a string"
        )

    @pytest.mark.asyncio
    async def test_authentication_error(self, jira, dispatcher):
        """Test backend errors become error responses."""
        jira.fail("search", {"statusCode": 401, "message": "Unauthorized"})

        response = await dispatcher.call("list-issues")

        assert response.is_error is True
        assert response.text == (
            "Error: Failed to list issues: Failed to search issues: Unauthorized"
        )

    @pytest.mark.asyncio
    async def test_keeps_serving_after_error(self, jira, dispatcher):
        """Test a failed call does not affect the next one."""
        jira.fail("search", "socket hang up")

        failed = await dispatcher.call("list-issues")
        succeeded = await dispatcher.call("list-issues")

        assert failed.is_error is True
        assert succeeded.is_error is False

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, dispatcher):
        """Test non-Jira exceptions are wrapped too."""
        with patch(
            "jira_mcp.mcp.tools.list_issues.ListIssuesTool.execute",
            new=AsyncMock(side_effect=KeyError()),
        ):
            response = await dispatcher.call("list-issues", {})

        assert response.is_error is True
        assert response.text == "Error: Unknown error occurred"

    @pytest.mark.asyncio
    async def test_headers_reach_session(self):
        """Test request headers are forwarded to the session."""
        session = JiraSession(scope="request")
        session.acquire = AsyncMock(return_value=InMemoryJiraClient())
        dispatcher = ToolDispatcher(session)

        await dispatcher.call("list-issues", {}, headers={"x-jira-host": "h"})

        session.acquire.assert_awaited_once_with({"x-jira-host": "h"})
