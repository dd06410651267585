"""Jira client adapter for MCP tool invocation."""

import asyncio
import logging
from functools import wraps
from typing import Any, Dict, Mapping, Optional, Protocol

from jira import JIRA

from jira_mcp.mcp.auth.credentials import BasicAuth, JiraConfig, OAuthAuth, TokenAuth
from jira_mcp.mcp.errors import (
    JiraAuthenticationError,
    JiraConnectionError,
    JiraError,
    JiraValidationError,
)
from jira_mcp.mcp.validation import MAX_SUMMARY_LENGTH, CreateIssueParams, SearchParams

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50
DEFAULT_START_AT = 0
UNKNOWN_ERROR = "Unknown error occurred"
NOT_CONNECTED = "Jira client is not connected. Call connect() first."


class JiraClient(Protocol):
    """Capabilities the tool handlers need from a Jira backend."""

    config: JiraConfig
    connected: bool

    async def connect(self) -> None: ...

    async def search_issues(self, params: SearchParams) -> Dict[str, Any]: ...

    async def create_issue(self, params: CreateIssueParams) -> Dict[str, Any]: ...

    async def add_comment(self, issue_key: str, body: str) -> Dict[str, Any]: ...

    async def test_connection(self) -> bool: ...


# ============================================================================
# Error classification
# ============================================================================

def _get(error: Any, name: str) -> Any:
    """Read a field from a mapping-shaped or object-shaped failure."""
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def error_message(error: Any) -> str:
    """
    Extract a human-readable message from a failure.

    Precedence: plain string, then a "message" (or jira's "text") field,
    then an "errorMessages" list, then an "errors" mapping, then the
    exception's own text.

    Args:
        error: Exception, response body or string

    Returns:
        Message text, or "Unknown error occurred"
    """
    if isinstance(error, str):
        return error

    for name in ("message", "text"):
        message = _get(error, name)
        if isinstance(message, str) and message:
            return message

    error_messages = _get(error, "errorMessages")
    if isinstance(error_messages, (list, tuple)) and error_messages:
        return ", ".join(str(m) for m in error_messages)

    errors = _get(error, "errors")
    if isinstance(errors, Mapping) and errors:
        return ", ".join(str(v) for v in errors.values())

    if isinstance(error, BaseException) and str(error):
        return str(error)

    return UNKNOWN_ERROR


def _status(error: Any) -> Optional[int]:
    for name in ("status_code", "statusCode", "status"):
        status = _get(error, name)
        if isinstance(status, int):
            return status
    return None


def is_authentication_error(error: Any) -> bool:
    """Check if a failure is an authentication failure (401/unauthorized)."""
    if _status(error) == 401:
        return True
    return "unauthorized" in error_message(error).lower()


def is_validation_error(error: Any) -> bool:
    """Check if a failure is a validation failure (400/validation/invalid)."""
    if _status(error) == 400:
        return True
    message = error_message(error).lower()
    return "validation" in message or "invalid" in message


def classify_error(error: Any, operation: str) -> JiraError:
    """
    Map a backend failure onto the error taxonomy.

    Args:
        error: Caught failure
        operation: Operation name (e.g., "search issues")

    Returns:
        JiraAuthenticationError, JiraValidationError or JiraConnectionError
        with message "Failed to <operation>: <message>" and the original
        failure as cause
    """
    message = f"Failed to {operation}: {error_message(error)}"

    if is_authentication_error(error):
        return JiraAuthenticationError(message, cause=error)
    if is_validation_error(error):
        return JiraValidationError(message, cause=error)
    return JiraConnectionError(message, cause=error)


def handle_jira_errors(operation: str):
    """Decorator to map backend exceptions onto the error taxonomy."""
    def decorator(method):
        @wraps(method)
        async def wrapper(*args, **kwargs):
            try:
                return await method(*args, **kwargs)
            except JiraError:
                raise
            except Exception as e:
                logger.warning(f"Jira call failed during {operation}: {error_message(e)}")
                raise classify_error(e, operation) from e
        return wrapper
    return decorator


# ============================================================================
# Payload helpers shared by client implementations
# ============================================================================

def validate_create_issue_params(params: CreateIssueParams) -> None:
    """
    Check the fields Jira requires to create an issue.

    Raises:
        JiraValidationError: If project key, issue type or summary is invalid
    """
    if not params.project_key:
        raise JiraValidationError("Project key is required", field="projectKey")

    if not params.issue_type:
        raise JiraValidationError("Issue type is required", field="issueType")

    if not params.summary or not params.summary.strip():
        raise JiraValidationError(
            "Summary is required and cannot be empty", field="summary"
        )

    if len(params.summary) > MAX_SUMMARY_LENGTH:
        raise JiraValidationError(
            f"Summary cannot exceed {MAX_SUMMARY_LENGTH} characters", field="summary"
        )


def build_issue_fields(params: CreateIssueParams) -> Dict[str, Any]:
    """
    Build the Jira "fields" payload for issue creation.

    Custom fields are merged last and may overwrite standard fields.
    """
    fields: Dict[str, Any] = {
        "project": {"key": params.project_key},
        "issuetype": {"name": params.issue_type},
        "summary": params.summary,
    }

    if params.description:
        fields["description"] = params.description

    if params.priority:
        fields["priority"] = {"name": params.priority}

    if params.assignee:
        fields["assignee"] = {"name": params.assignee}

    if params.labels:
        fields["labels"] = list(params.labels)

    if params.custom_fields:
        fields.update(params.custom_fields)

    return fields


def require_comment_args(issue_key: Any, body: Any) -> None:
    """
    Check add-comment arguments.

    Raises:
        JiraValidationError: If issue key or body is empty or not a string
    """
    if not issue_key or not isinstance(issue_key, str):
        raise JiraValidationError(
            "issueKey is required and must be a string", field="issueKey"
        )
    if not body or not isinstance(body, str):
        raise JiraValidationError(
            "body is required and must be a string", field="body"
        )


# ============================================================================
# Production adapter
# ============================================================================

class JiraClientAdapter:
    """
    Wraps the `jira` library client behind the JiraClient capabilities.

    The library is blocking; each call runs in a worker thread so tool
    handlers stay asynchronous. One adapter owns one client handle.
    """

    def __init__(self, config: JiraConfig):
        """Initialize adapter with Jira configuration."""
        self.config = config
        self._client: Optional[JIRA] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        """Whether connect() has succeeded."""
        return self._connected

    def _build_client(self) -> JIRA:
        """Create the library client for the active authentication method."""
        auth = self.config.auth
        kwargs: Dict[str, Any] = {
            "server": self.config.server_url,
            "options": {
                "rest_api_version": self.config.api_version,
                "verify": self.config.protocol == "https",
            },
            "get_server_info": False,
            "max_retries": 0,
        }

        if isinstance(auth, BasicAuth):
            kwargs["basic_auth"] = (auth.username, auth.password)
        elif isinstance(auth, TokenAuth):
            kwargs["basic_auth"] = (auth.email, auth.api_token)
        elif isinstance(auth, OAuthAuth):
            kwargs["oauth"] = {
                "access_token": auth.token,
                "access_token_secret": auth.token_secret,
                "consumer_key": auth.consumer_key,
                "key_cert": auth.private_key,
            }
        else:
            raise JiraValidationError("Unsupported authentication type")

        return JIRA(**kwargs)

    def _ensure_connected(self) -> JIRA:
        if not self._connected or self._client is None:
            raise JiraConnectionError(NOT_CONNECTED)
        return self._client

    async def connect(self) -> None:
        """
        Create the Jira client and probe the connection.

        Raises:
            JiraAuthenticationError: If Jira rejects the credentials
            JiraConnectionError: If Jira cannot be reached
        """
        self._connected = False
        try:
            self._client = await asyncio.to_thread(self._build_client)
            await self.test_connection()
        except JiraAuthenticationError:
            raise
        except JiraError as e:
            raise JiraConnectionError(
                f"Failed to connect to Jira: {e.message}", cause=e
            ) from e
        except Exception as e:
            raise JiraConnectionError(
                f"Failed to connect to Jira: {error_message(e)}", cause=e
            ) from e

        self._connected = True
        logger.info(f"Connected to Jira at {self.config.server_url}")

    async def test_connection(self) -> bool:
        """
        Probe Jira by fetching the current user.

        Returns:
            True if the probe succeeds, False if no client exists yet

        Raises:
            JiraAuthenticationError: If the probe is rejected as unauthorized
            JiraConnectionError: On any other probe failure
        """
        if self._client is None:
            return False

        try:
            await asyncio.to_thread(self._client.myself)
        except Exception as e:
            message = f"Failed to test connection: {error_message(e)}"
            if is_authentication_error(e):
                raise JiraAuthenticationError(message, cause=e) from e
            raise JiraConnectionError(message, cause=e) from e
        return True

    async def current_user(self) -> Dict[str, Any]:
        """Return the authenticated user record."""
        client = self._ensure_connected()
        try:
            return await asyncio.to_thread(client.myself)
        except Exception as e:
            raise classify_error(e, "fetch current user") from e

    @handle_jira_errors("search issues")
    async def search_issues(self, params: SearchParams) -> Dict[str, Any]:
        """
        Search issues with JQL.

        An empty query returns all issues visible to the user.

        Args:
            params: Validated search parameters

        Returns:
            Search result with expand, startAt, maxResults, total, issues
        """
        client = self._ensure_connected()

        start_at = params.start_at if params.start_at is not None else DEFAULT_START_AT
        max_results = (
            params.max_results if params.max_results is not None else DEFAULT_MAX_RESULTS
        )

        result = await asyncio.to_thread(
            client.search_issues,
            params.jql or "",
            startAt=start_at,
            maxResults=max_results,
            fields=list(params.fields) if params.fields else None,
            json_result=True,
        )

        return {
            "expand": result.get("expand") or "",
            "startAt": result.get("startAt", start_at),
            "maxResults": result.get("maxResults", max_results),
            "total": result.get("total", 0),
            "issues": result.get("issues") or [],
        }

    @handle_jira_errors("create issue")
    async def create_issue(self, params: CreateIssueParams) -> Dict[str, Any]:
        """
        Create an issue and return the full issue record.

        The creation response only carries id and key, so the issue is
        fetched again before returning.

        Raises:
            JiraValidationError: If required fields are missing
        """
        client = self._ensure_connected()
        validate_create_issue_params(params)

        created = await asyncio.to_thread(
            client.create_issue, fields=build_issue_fields(params), prefetch=False
        )
        issue = await asyncio.to_thread(client.issue, created.key)
        return issue.raw

    @handle_jira_errors("add comment")
    async def add_comment(self, issue_key: str, body: str) -> Dict[str, Any]:
        """
        Add a comment to an issue.

        Raises:
            JiraValidationError: If issue key or body is empty
        """
        require_comment_args(issue_key, body)
        client = self._ensure_connected()

        comment = await asyncio.to_thread(client.add_comment, issue_key, body)
        return comment.raw
