"""
Argument validation for the Jira MCP tools.

Turns the untyped argument bags sent by MCP clients into validated
parameter objects. Validators never modify their input: strings are
trimmed and numbers floored into new objects. Any problem raises
JiraValidationError before a network call is attempted.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from jira_mcp.mcp.errors import JiraValidationError

logger = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 1000
MAX_SUMMARY_LENGTH = 255

PROJECT_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9]*$")
FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)*$")
CUSTOM_FIELD_KEY_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
CUSTOM_FIELD_PREFIX = "customfield_"

LIST_ISSUES_ARGS = ("jql", "maxResults", "startAt", "fields")
CREATE_ISSUE_ARGS = (
    "projectKey",
    "issueType",
    "summary",
    "description",
    "priority",
    "assignee",
    "labels",
    "customFields",
)
ADD_COMMENT_ARGS = ("issueKey", "body")


@dataclass(frozen=True)
class SearchParams:
    """
    Validated list-issues parameters.

    Unset pagination values are defaulted by the client (startAt=0,
    maxResults=50); an unset query means "all issues".
    """

    jql: Optional[str] = None
    max_results: Optional[int] = None
    start_at: Optional[int] = None
    fields: Optional[List[str]] = None


@dataclass(frozen=True)
class CreateIssueParams:
    """Validated create-issue parameters."""

    project_key: str
    issue_type: str
    summary: str
    description: Optional[str] = None
    priority: Optional[str] = None
    assignee: Optional[str] = None
    labels: Optional[List[str]] = None
    custom_fields: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class AddCommentParams:
    """Validated add-comment parameters."""

    issue_key: str
    body: str


# ============================================================================
# Shared checks
# ============================================================================

def _reject_unknown(args: Mapping[str, Any], allowed: Iterable[str]) -> None:
    unknown = sorted(str(key) for key in args if key not in allowed)
    if unknown:
        raise JiraValidationError(f"Unknown argument(s): {', '.join(unknown)}")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _optional_string(args: Mapping[str, Any], name: str) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise JiraValidationError(f"{name} must be a string", field=name)
    return value.strip()


def _required_string(args: Mapping[str, Any], name: str) -> str:
    value = args.get(name)
    if not value or not isinstance(value, str):
        raise JiraValidationError(f"{name} is required and must be a string", field=name)
    return value


# ============================================================================
# list-issues
# ============================================================================

def _parse_fields(value: Any) -> Optional[List[str]]:
    if not isinstance(value, str):
        raise JiraValidationError("fields parameter must be a string", field="fields")

    fields_string = value.strip()
    if not fields_string:
        return None

    names = [name.strip() for name in fields_string.split(",")]
    invalid = [name or "<empty>" for name in names if not FIELD_NAME_PATTERN.match(name)]
    if invalid:
        raise JiraValidationError(
            f"Invalid field names: {', '.join(invalid)}. Field names must contain "
            "only letters, numbers, and underscores.",
            field="fields",
        )
    return names


def parse_list_issues_args(args: Any) -> SearchParams:
    """
    Validate list-issues arguments.

    Args:
        args: Raw arguments (None means "search everything")

    Returns:
        SearchParams with only the given fields set

    Raises:
        JiraValidationError: If any argument is invalid
    """
    if args is None:
        return SearchParams()
    if not isinstance(args, Mapping):
        raise JiraValidationError("Arguments for listing issues must be an object")

    _reject_unknown(args, LIST_ISSUES_ARGS)

    jql = args.get("jql")
    if jql is not None:
        if not isinstance(jql, str):
            raise JiraValidationError("jql parameter must be a string", field="jql")
        jql = jql.strip()

    max_results = args.get("maxResults")
    if max_results is not None:
        if not _is_number(max_results) or not 1 <= max_results <= MAX_RESULTS_LIMIT:
            raise JiraValidationError(
                f"maxResults must be a number between 1 and {MAX_RESULTS_LIMIT}",
                field="maxResults",
            )
        max_results = math.floor(max_results)

    start_at = args.get("startAt")
    if start_at is not None:
        if not _is_number(start_at) or start_at < 0:
            raise JiraValidationError(
                "startAt must be a non-negative number", field="startAt"
            )
        start_at = math.floor(start_at)

    fields = args.get("fields")
    if fields is not None:
        fields = _parse_fields(fields)

    return SearchParams(
        jql=jql,
        max_results=max_results,
        start_at=start_at,
        fields=fields,
    )


# ============================================================================
# create-issue
# ============================================================================

def _parse_labels(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        raise JiraValidationError("labels must be an array", field="labels")

    labels = []
    for label in value:
        if not isinstance(label, str):
            raise JiraValidationError("all labels must be strings", field="labels")
        if label.strip():
            labels.append(label.strip())
    return labels or None


def _parse_custom_fields(value: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(value, Mapping):
        raise JiraValidationError("customFields must be an object", field="customFields")

    custom_fields: Dict[str, Any] = {}
    for key, field_value in value.items():
        if not isinstance(key, str) or not key.strip():
            raise JiraValidationError(
                "custom field keys must be non-empty strings", field="customFields"
            )
        if not key.startswith(CUSTOM_FIELD_PREFIX) and not CUSTOM_FIELD_KEY_PATTERN.match(key):
            logger.warning(
                f'Custom field key "{key}" may not be valid. '
                f"Consider using {CUSTOM_FIELD_PREFIX}xxxxx format."
            )
        custom_fields[key] = field_value
    return custom_fields or None


def parse_create_issue_args(args: Any) -> CreateIssueParams:
    """
    Validate create-issue arguments.

    The project key is upper-cased and every string trimmed. Blank labels
    are dropped; unusual custom field keys are logged but accepted.

    Args:
        args: Raw arguments

    Returns:
        CreateIssueParams with only the given optional fields set

    Raises:
        JiraValidationError: If any argument is invalid
    """
    if not isinstance(args, Mapping):
        raise JiraValidationError("Arguments are required for creating an issue")

    _reject_unknown(args, CREATE_ISSUE_ARGS)

    project_key = _required_string(args, "projectKey").strip().upper()
    issue_type = _required_string(args, "issueType").strip()
    summary = _required_string(args, "summary").strip()

    if not PROJECT_KEY_PATTERN.match(project_key):
        raise JiraValidationError(
            "projectKey must contain only uppercase letters and numbers, "
            "starting with a letter",
            field="projectKey",
        )

    if not issue_type:
        raise JiraValidationError("issueType cannot be empty", field="issueType")

    if not summary:
        raise JiraValidationError("summary cannot be empty", field="summary")

    if len(summary) > MAX_SUMMARY_LENGTH:
        raise JiraValidationError(
            f"summary cannot exceed {MAX_SUMMARY_LENGTH} characters", field="summary"
        )

    labels = args.get("labels")
    custom_fields = args.get("customFields")

    return CreateIssueParams(
        project_key=project_key,
        issue_type=issue_type,
        summary=summary,
        description=_optional_string(args, "description"),
        priority=_optional_string(args, "priority"),
        assignee=_optional_string(args, "assignee"),
        labels=_parse_labels(labels) if labels is not None else None,
        custom_fields=_parse_custom_fields(custom_fields) if custom_fields is not None else None,
    )


# ============================================================================
# add-comment
# ============================================================================

def parse_add_comment_args(args: Any) -> AddCommentParams:
    """
    Validate add-comment arguments.

    Empty or whitespace-only values are rejected.

    Raises:
        JiraValidationError: If issueKey or body is missing, empty or not a string
    """
    if not isinstance(args, Mapping):
        raise JiraValidationError("Arguments are required for adding a comment")

    _reject_unknown(args, ADD_COMMENT_ARGS)

    issue_key = _required_string(args, "issueKey").strip()
    if not issue_key:
        raise JiraValidationError("issueKey is required and must be a string", field="issueKey")

    body = _required_string(args, "body").strip()
    if not body:
        raise JiraValidationError("body is required and must be a string", field="body")

    return AddCommentParams(issue_key=issue_key, body=body)
