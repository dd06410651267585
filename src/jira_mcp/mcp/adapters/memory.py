"""In-memory Jira client used as a test double for the tool handlers."""

import itertools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from jira_mcp.mcp.auth.credentials import BasicAuth, JiraConfig
from jira_mcp.mcp.errors import JiraConnectionError
from jira_mcp.mcp.validation import CreateIssueParams, SearchParams

from .jira_adapter import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_START_AT,
    NOT_CONNECTED,
    build_issue_fields,
    classify_error,
    error_message,
    is_authentication_error,
    require_comment_args,
    validate_create_issue_params,
)


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000+0000")


class InMemoryJiraClient:
    """
    Jira client keeping issues and comments in dictionaries.

    Behaves like JiraClientAdapter for connection state, pagination and
    error mapping. Failures can be injected per operation with `fail()`;
    injected failures go through the same classification as real ones.

    Example:
        client = InMemoryJiraClient()
        client.fail("search", {"statusCode": 401, "message": "Unauthorized"})
    """

    def __init__(self, config: Optional[JiraConfig] = None):
        self.config = config or JiraConfig(
            host="jira.example.com",
            auth=BasicAuth(username="tester", password="secret"),
        )
        self.issues: Dict[str, Dict[str, Any]] = {}
        self.comments: Dict[str, List[Dict[str, Any]]] = {}
        self.searches: List[SearchParams] = []
        self.connect_calls = 0
        self._failures: Dict[str, Any] = {}
        self._connected = False
        self._ids = itertools.count(10000)
        self._issue_numbers: Dict[str, itertools.count] = {}

    @property
    def connected(self) -> bool:
        return self._connected

    def fail(self, operation: str, error: Any) -> None:
        """Make the next call to an operation fail with `error`."""
        self._failures[operation] = error

    def add_issue(self, project_key: str, summary: str, **fields: Any) -> Dict[str, Any]:
        """Seed an issue directly, bypassing validation."""
        numbers = self._issue_numbers.setdefault(project_key, itertools.count(1))
        issue_id = str(next(self._ids))
        key = f"{project_key}-{next(numbers)}"
        issue = {
            "id": issue_id,
            "key": key,
            "self": f"{self.config.server_url}/rest/api/{self.config.api_version}/issue/{issue_id}",
            "fields": {
                "summary": summary,
                "status": {"name": "To Do", "id": "1"},
                "labels": [],
                "created": _now(),
                "updated": _now(),
                **fields,
            },
        }
        self.issues[key] = issue
        return issue

    def _raise_injected(self, operation: str, name: str) -> None:
        error = self._failures.pop(name, None)
        if error is not None:
            raise classify_error(error, operation)

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise JiraConnectionError(NOT_CONNECTED)

    async def connect(self) -> None:
        self.connect_calls += 1
        self._connected = False
        error = self._failures.pop("connect", None)
        if error is not None:
            if is_authentication_error(error):
                raise classify_error(error, "connect to Jira")
            raise JiraConnectionError(
                f"Failed to connect to Jira: {error_message(error)}", cause=error
            )
        self._connected = True

    async def test_connection(self) -> bool:
        if not self._connected:
            return False
        self._raise_injected("test connection", "test_connection")
        return True

    async def search_issues(self, params: SearchParams) -> Dict[str, Any]:
        self._ensure_connected()
        self._raise_injected("search issues", "search")
        self.searches.append(params)

        start_at = params.start_at if params.start_at is not None else DEFAULT_START_AT
        max_results = (
            params.max_results if params.max_results is not None else DEFAULT_MAX_RESULTS
        )
        matching = list(self.issues.values())

        return {
            "expand": "",
            "startAt": start_at,
            "maxResults": max_results,
            "total": len(matching),
            "issues": matching[start_at:start_at + max_results],
        }

    async def create_issue(self, params: CreateIssueParams) -> Dict[str, Any]:
        self._ensure_connected()
        validate_create_issue_params(params)
        self._raise_injected("create issue", "create")

        fields = build_issue_fields(params)
        fields.pop("summary")
        fields.pop("project")
        issue = self.add_issue(params.project_key, params.summary, **fields)
        issue["fields"]["project"] = {"key": params.project_key}
        return issue

    async def add_comment(self, issue_key: str, body: str) -> Dict[str, Any]:
        require_comment_args(issue_key, body)
        self._ensure_connected()
        self._raise_injected("add comment", "comment")

        if issue_key not in self.issues:
            raise classify_error(
                {"statusCode": 404, "errorMessages": ["Issue does not exist or you do not have permission to see it."]},
                "add comment",
            )

        comment = {
            "id": str(next(self._ids)),
            "body": body,
            "author": {"displayName": "In-Memory User"},
            "created": _now(),
            "updated": _now(),
        }
        self.comments.setdefault(issue_key, []).append(comment)
        return comment


__all__ = ["InMemoryJiraClient"]
