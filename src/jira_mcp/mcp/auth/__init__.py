"""
Jira credentials and connection settings.

Provides the authentication variants (basic, API token, OAuth) and the
loaders that build a JiraConfig from the environment or request headers.
"""

from .credentials import (
    BasicAuth,
    JiraAuth,
    JiraConfig,
    OAuthAuth,
    TokenAuth,
    get_config_help_message,
    jira_config_from_headers,
    load_jira_config,
)

__all__ = [
    "BasicAuth",
    "JiraAuth",
    "JiraConfig",
    "OAuthAuth",
    "TokenAuth",
    "get_config_help_message",
    "jira_config_from_headers",
    "load_jira_config",
]
