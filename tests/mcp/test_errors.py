"""
Tests for the error taxonomy and backend failure classification.

Tests cover:
- Context prefixes keep the error kind
- Message extraction precedence
- Status and message based classification
"""

from unittest.mock import MagicMock

import pytest
from jira import JIRAError

from jira_mcp.mcp.adapters import classify_error, error_message
from jira_mcp.mcp.errors import (
    JiraAuthenticationError,
    JiraConnectionError,
    JiraError,
    JiraValidationError,
)


class TestJiraError:
    """Test JiraError behaviour."""

    def test_attributes(self):
        """Test message, cause and field are kept."""
        cause = RuntimeError("boom")
        error = JiraValidationError("bad input", cause=cause, field="summary")

        assert str(error) == "bad input"
        assert error.message == "bad input"
        assert error.cause is cause
        assert error.field == "summary"

    @pytest.mark.parametrize(
        "error_class", [JiraConnectionError, JiraAuthenticationError, JiraValidationError]
    )
    def test_with_context_keeps_kind(self, error_class):
        """Test a context prefix never reclassifies the error."""
        original = error_class("something broke", field="body")
        wrapped = original.with_context("Failed to add comment")

        assert type(wrapped) is error_class
        assert isinstance(wrapped, JiraError)
        assert wrapped.message == "Failed to add comment: something broke"
        assert wrapped.field == "body"
        assert wrapped.cause is original


class TestErrorMessage:
    """Test message extraction precedence."""

    def test_plain_string(self):
        assert error_message("socket hang up") == "socket hang up"

    def test_message_field(self):
        assert error_message({"message": "Bad things", "errorMessages": ["x"]}) == "Bad things"

    def test_error_messages_joined(self):
        body = {"errorMessages": ["Field A invalid", "Field B missing"]}
        assert error_message(body) == "Field A invalid, Field B missing"

    def test_errors_mapping_joined(self):
        body = {"errors": {"summary": "Summary is required", "project": "Project is required"}}
        assert error_message(body) == "Summary is required, Project is required"

    def test_unknown(self):
        assert error_message({}) == "Unknown error occurred"
        assert error_message(None) == "Unknown error occurred"

    def test_exception_text(self):
        assert error_message(ConnectionRefusedError("refused")) == "refused"

    def test_jira_library_error(self):
        """Test the jira library's error text is used."""
        error = JIRAError(status_code=404, text="Issue does not exist")
        assert error_message(error) == "Issue does not exist"


class TestClassifyError:
    """Test mapping backend failures onto the taxonomy."""

    def test_status_401(self):
        error = classify_error({"statusCode": 401, "message": "Nope"}, "search issues")

        assert isinstance(error, JiraAuthenticationError)
        assert error.message == "Failed to search issues: Nope"

    def test_unauthorized_message(self):
        error = classify_error("Unauthorized (401)", "create issue")
        assert isinstance(error, JiraAuthenticationError)

    def test_status_400(self):
        body = {"statusCode": 400, "errors": {"summary": "Summary is required"}}
        error = classify_error(body, "create issue")

        assert isinstance(error, JiraValidationError)
        assert error.message == "Failed to create issue: Summary is required"

    @pytest.mark.parametrize("message", ["Validation failed", "INVALID issue type"])
    def test_validation_messages(self, message):
        assert isinstance(classify_error(message, "create issue"), JiraValidationError)

    def test_other_failures_are_connection_errors(self):
        error = classify_error({"statusCode": 500, "message": "Server down"}, "add comment")

        assert isinstance(error, JiraConnectionError)
        assert error.message == "Failed to add comment: Server down"

    def test_cause_retained(self):
        failure = JIRAError(status_code=401, text="Unauthorized")
        error = classify_error(failure, "search issues")

        assert isinstance(error, JiraAuthenticationError)
        assert error.cause is failure

    def test_object_status_code(self):
        """Test status is read from attributes as well as mapping keys."""
        failure = MagicMock(spec=["status_code", "text"])
        failure.status_code = 400
        failure.text = "Bad request"

        assert isinstance(classify_error(failure, "search issues"), JiraValidationError)
