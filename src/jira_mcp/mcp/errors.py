"""
Error taxonomy for the Jira MCP server.

Every failure surfaced by the validators, the Jira client adapter and the
tool handlers is one of three kinds. Handlers add context to the message
but never change the kind.
"""

from typing import Any, Optional


class JiraError(Exception):
    """
    Base class for all Jira MCP errors.
    
    Attributes:
        message: Human-readable error message
        field: Offending argument name, if the error concerns one field
        cause: Original failure (library exception, response body, ...)
    """
    
    def __init__(
        self,
        message: str,
        cause: Any = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.field = field
    
    def with_context(self, prefix: str) -> "JiraError":
        """
        Return a copy of this error with a contextual prefix.
        
        The copy keeps the error kind and field; the original error becomes
        its cause.
        
        Args:
            prefix: Context such as "Failed to list issues"
            
        Returns:
            New error of the same class with message "<prefix>: <message>"
        """
        return type(self)(f"{prefix}: {self.message}", cause=self, field=self.field)


class JiraConnectionError(JiraError):
    """Raised on network failures or when the client is not connected."""


class JiraAuthenticationError(JiraError):
    """Raised when credentials are rejected, missing or incomplete."""


class JiraValidationError(JiraError):
    """Raised when input is malformed or rejected by Jira as invalid."""
