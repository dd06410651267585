"""
Tests for the Jira tool handlers.

Handlers run against InMemoryJiraClient through a ToolContext, so every
test gets a fresh fake backend.
"""

from unittest.mock import AsyncMock

import pytest

from jira_mcp.mcp.adapters import InMemoryJiraClient
from jira_mcp.mcp.errors import (
    JiraAuthenticationError,
    JiraConnectionError,
    JiraValidationError,
)
from jira_mcp.mcp.session import JiraSession, ToolContext
from jira_mcp.mcp.tools import AddCommentTool, CreateIssueTool, ListIssuesTool
from jira_mcp.mcp.validation import SearchParams


@pytest.fixture
def jira():
    """Fresh in-memory Jira backend."""
    return InMemoryJiraClient()


@pytest.fixture
def context(jira):
    """Tool context around the in-memory backend."""
    return ToolContext(session=JiraSession.for_client(jira))


class TestToolDefinitions:
    """Test tool discovery metadata."""

    def test_names(self):
        assert ListIssuesTool.get_definition()["name"] == "list-issues"
        assert CreateIssueTool.get_definition()["name"] == "create-issue"
        assert AddCommentTool.get_definition()["name"] == "add-comment"

    def test_required_arguments(self):
        """Test required arguments advertised in each schema."""
        assert "required" not in ListIssuesTool.get_definition()["inputSchema"]
        assert CreateIssueTool.get_definition()["inputSchema"]["required"] == [
            "projectKey",
            "issueType",
            "summary",
        ]
        assert AddCommentTool.get_definition()["inputSchema"]["required"] == ["issueKey", "body"]

    def test_schemas_reject_extra_properties(self):
        for tool in (ListIssuesTool, CreateIssueTool, AddCommentTool):
            assert tool.get_definition()["inputSchema"]["additionalProperties"] is False


class TestListIssuesTool:
    """Test list-issues."""

    @pytest.mark.asyncio
    async def test_no_arguments(self, jira, context):
        """Test an empty call searches all issues with default pagination."""
        jira.add_issue("PROJ", "First")

        result = await ListIssuesTool(context).execute(None)

        assert jira.searches == [SearchParams()]
        assert result["startAt"] == 0
        assert result["maxResults"] == 50
        assert result["metadata"]["query"] == "No JQL query (returning all issues)"

    @pytest.mark.asyncio
    async def test_pagination_metadata(self, jira, context):
        """Test metadata is derived from the page returned."""
        for n in range(5):
            jira.add_issue("PROJ", f"Issue {n}")

        result = await ListIssuesTool(context).execute(
            {"jql": "project = PROJ", "maxResults": 2, "startAt": 1}
        )

        assert [issue["key"] for issue in result["issues"]] == ["PROJ-2", "PROJ-3"]
        assert result["metadata"] == {
            "query": "project = PROJ",
            "returnedCount": 2,
            "totalAvailable": 5,
            "hasMore": True,
            "nextStartAt": 3,
        }

    @pytest.mark.asyncio
    async def test_last_page(self, jira, context):
        """Test hasMore is False on the final page."""
        for n in range(3):
            jira.add_issue("PROJ", f"Issue {n}")

        result = await ListIssuesTool(context).execute({"startAt": 2})

        assert result["metadata"]["hasMore"] is False
        assert result["metadata"]["nextStartAt"] == 3

    @pytest.mark.asyncio
    async def test_validation_error_prefixed(self, jira, context):
        """Test validation failures carry the handler prefix and skip the backend."""
        with pytest.raises(JiraValidationError) as exc_info:
            await ListIssuesTool(context).execute({"maxResults": 5000})

        assert exc_info.value.message == (
            "Failed to list issues: maxResults must be a number between 1 and 1000"
        )
        assert jira.searches == []

    @pytest.mark.asyncio
    async def test_backend_error_keeps_kind(self, jira, context):
        """Test backend failures keep their kind under the prefix."""
        jira.fail("search", {"statusCode": 401, "message": "Unauthorized"})

        with pytest.raises(JiraAuthenticationError) as exc_info:
            await ListIssuesTool(context).execute({})

        assert exc_info.value.message == (
            "Failed to list issues: Failed to search issues: Unauthorized"
        )


class TestCreateIssueTool:
    """Test create-issue."""

    @pytest.mark.asyncio
    async def test_create(self, jira, context):
        """Test the created issue carries creation metadata."""
        result = await CreateIssueTool(context).execute(
            {
                "projectKey": "proj",
                "issueType": "Bug",
                "summary": "  Login fails  ",
                "labels": ["", "  ", "bug"],
                "priority": "High",
            }
        )

        assert result["key"] == "PROJ-1"
        assert result["fields"]["summary"] == "Login fails"
        assert result["fields"]["labels"] == ["bug"]
        assert result["fields"]["priority"] == {"name": "High"}
        assert result["metadata"] == {
            "created": True,
            "url": "https://jira.example.com/browse/PROJ-1",
            "message": "Issue PROJ-1 created successfully",
        }
        assert "PROJ-1" in jira.issues

    @pytest.mark.asyncio
    async def test_invalid_project_key(self, jira, context):
        """Test invalid keys fail before reaching the backend."""
        with pytest.raises(JiraValidationError, match="^Failed to create issue: projectKey"):
            await CreateIssueTool(context).execute(
                {"projectKey": "1PROJ", "issueType": "Bug", "summary": "x"}
            )

        assert jira.issues == {}

    @pytest.mark.asyncio
    async def test_backend_validation_error(self, jira, context):
        """Test a 400 from Jira surfaces as a validation error."""
        jira.fail("create", {"statusCode": 400, "errors": {"issuetype": "Issue type is invalid"}})

        with pytest.raises(JiraValidationError, match="Issue type is invalid"):
            await CreateIssueTool(context).execute(
                {"projectKey": "PROJ", "issueType": "Nope", "summary": "x"}
            )


class TestAddCommentTool:
    """Test add-comment."""

    @pytest.mark.asyncio
    async def test_add_comment(self, jira, context):
        """Test the comment record is returned unchanged."""
        jira.add_issue("PROJ", "First")

        result = await AddCommentTool(context).execute({"issueKey": "PROJ-1", "body": "On it"})

        assert result["body"] == "On it"
        assert "metadata" not in result
        assert jira.comments["PROJ-1"] == [result]

    @pytest.mark.asyncio
    async def test_empty_body(self, jira, context):
        """Test an empty body is rejected."""
        jira.add_issue("PROJ", "First")

        with pytest.raises(JiraValidationError) as exc_info:
            await AddCommentTool(context).execute({"issueKey": "PROJ-1", "body": ""})

        assert exc_info.value.message == (
            "Failed to add comment: body is required and must be a string"
        )
        assert jira.comments == {}

    @pytest.mark.asyncio
    async def test_unknown_issue(self, context):
        """Test commenting on a missing issue."""
        with pytest.raises(JiraConnectionError, match="Issue does not exist"):
            await AddCommentTool(context).execute({"issueKey": "NOPE-1", "body": "hi"})

    @pytest.mark.asyncio
    async def test_connection_failure(self, jira, context):
        """Test an unreachable Jira surfaces as a connection error."""
        jira.fail("connect", "getaddrinfo ENOTFOUND jira.example.com")

        with pytest.raises(JiraConnectionError, match="^Failed to add comment: Failed to connect to Jira"):
            await AddCommentTool(context).execute({"issueKey": "PROJ-1", "body": "hi"})


class TestUnexpectedBackendResults:
    """Test malformed backend results keep the handler prefix."""

    @pytest.mark.asyncio
    async def test_issue_without_key(self, jira, context):
        """Test a created issue lacking a key fails with the create prefix."""
        jira.create_issue = AsyncMock(return_value={"id": "10001"})

        with pytest.raises(JiraConnectionError) as exc_info:
            await CreateIssueTool(context).execute(
                {"projectKey": "PROJ", "issueType": "Bug", "summary": "x"}
            )

        assert exc_info.value.message == "Failed to create issue: 'key'"
        assert isinstance(exc_info.value.cause, KeyError)

    @pytest.mark.asyncio
    async def test_search_without_issues(self, jira, context):
        """Test a search result lacking issues fails with the list prefix."""
        jira.search_issues = AsyncMock(return_value={"startAt": 0, "total": 0})

        with pytest.raises(JiraConnectionError, match="^Failed to list issues: 'issues'$"):
            await ListIssuesTool(context).execute({})

    @pytest.mark.asyncio
    async def test_comment_backend_crash(self, jira, context):
        """Test a non-Jira exception while commenting fails with the comment prefix."""
        jira.add_comment = AsyncMock(side_effect=RuntimeError("socket closed"))

        with pytest.raises(JiraConnectionError, match="^Failed to add comment: socket closed$"):
            await AddCommentTool(context).execute({"issueKey": "PROJ-1", "body": "hi"})
