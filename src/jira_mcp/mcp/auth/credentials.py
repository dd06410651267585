"""
Jira connection settings and credentials.

Credentials are read from the process environment (stdio transport) or from
request headers (HTTP transport). Exactly one authentication method is
active per configuration; the method is chosen once, when the configuration
is built, and never changes afterwards.
"""

import os
from dataclasses import dataclass
from typing import Dict, Literal, Mapping, Optional, Union

from jira_mcp.mcp.errors import JiraAuthenticationError, JiraValidationError


DEFAULT_PROTOCOL = "https"
DEFAULT_API_VERSION = "2"

OAUTH_ENV_VARS = (
    "JIRA_OAUTH_CONSUMER_KEY",
    "JIRA_OAUTH_PRIVATE_KEY",
    "JIRA_OAUTH_TOKEN",
    "JIRA_OAUTH_TOKEN_SECRET",
)
TOKEN_ENV_VARS = ("JIRA_EMAIL", "JIRA_API_TOKEN")
BASIC_ENV_VARS = ("JIRA_USERNAME", "JIRA_PASSWORD")

HOST_HEADER = "x-jira-host"


@dataclass(frozen=True)
class BasicAuth:
    """Username and password authentication."""

    username: str
    password: str
    type: Literal["basic"] = "basic"

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r})"


@dataclass(frozen=True)
class TokenAuth:
    """Atlassian Cloud API token authentication (email + token)."""

    email: str
    api_token: str
    type: Literal["token"] = "token"

    def __repr__(self) -> str:
        return f"TokenAuth(email={self.email!r})"


@dataclass(frozen=True)
class OAuthAuth:
    """OAuth 1.0a authentication with an RSA private key."""

    consumer_key: str
    private_key: str
    token: str
    token_secret: str
    type: Literal["oauth"] = "oauth"

    def __repr__(self) -> str:
        return f"OAuthAuth(consumer_key={self.consumer_key!r})"


JiraAuth = Union[BasicAuth, TokenAuth, OAuthAuth]


@dataclass(frozen=True)
class JiraConfig:
    """
    Settings for one Jira connection.

    Attributes:
        host: Jira host name (e.g., "example.atlassian.net")
        auth: Active authentication method
        protocol: "http" or "https" (default: "https")
        port: Optional port number (1-65535)
        api_version: REST API version (default: "2")
    """

    host: str
    auth: JiraAuth
    protocol: Literal["http", "https"] = DEFAULT_PROTOCOL
    port: Optional[int] = None
    api_version: str = DEFAULT_API_VERSION

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.host:
            raise JiraValidationError("JIRA_HOST is required", field="host")

        if self.protocol not in ("http", "https"):
            raise JiraValidationError(
                "JIRA_PROTOCOL must be http or https", field="protocol"
            )

        if self.port is not None and not 1 <= self.port <= 65535:
            raise JiraValidationError(
                "JIRA_PORT must be between 1 and 65535", field="port"
            )

    @property
    def server_url(self) -> str:
        """Base URL of the Jira instance."""
        if self.port is None:
            return f"{self.protocol}://{self.host}"
        return f"{self.protocol}://{self.host}:{self.port}"

    def browse_url(self, issue_key: str) -> str:
        """URL of the browser page for an issue."""
        return f"{self.server_url}/browse/{issue_key}"


def _parse_port(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise JiraValidationError(f"Invalid port number: {value}", field="port")


def _all_set(source: Mapping[str, str], keys) -> bool:
    return all(source.get(key) for key in keys)


def _auth_from_env(env: Mapping[str, str]) -> JiraAuth:
    """Pick the first fully configured authentication method."""
    if _all_set(env, OAUTH_ENV_VARS):
        return OAuthAuth(
            consumer_key=env["JIRA_OAUTH_CONSUMER_KEY"],
            private_key=env["JIRA_OAUTH_PRIVATE_KEY"],
            token=env["JIRA_OAUTH_TOKEN"],
            token_secret=env["JIRA_OAUTH_TOKEN_SECRET"],
        )

    if _all_set(env, TOKEN_ENV_VARS):
        return TokenAuth(email=env["JIRA_EMAIL"], api_token=env["JIRA_API_TOKEN"])

    if _all_set(env, BASIC_ENV_VARS):
        return BasicAuth(username=env["JIRA_USERNAME"], password=env["JIRA_PASSWORD"])

    raise JiraAuthenticationError(
        "No valid authentication method found. Please provide one of: "
        "OAuth (JIRA_OAUTH_*), API Token (JIRA_EMAIL + JIRA_API_TOKEN), "
        "or Basic Auth (JIRA_USERNAME + JIRA_PASSWORD)"
    )


def load_jira_config(env: Optional[Mapping[str, str]] = None) -> JiraConfig:
    """
    Load Jira configuration from environment variables.

    Authentication precedence is OAuth, then API token, then basic auth;
    the first method with every variable set wins.

    Args:
        env: Variables to read (default: os.environ)

    Returns:
        JiraConfig with the selected authentication method

    Raises:
        JiraValidationError: If JIRA_HOST is missing or a setting is invalid
        JiraAuthenticationError: If no authentication method is complete
    """
    env = os.environ if env is None else env

    host = env.get("JIRA_HOST")
    if not host:
        raise JiraValidationError(
            "Required environment variable JIRA_HOST is not set", field="JIRA_HOST"
        )

    return JiraConfig(
        host=host.strip(),
        protocol=env.get("JIRA_PROTOCOL") or DEFAULT_PROTOCOL,
        port=_parse_port(env.get("JIRA_PORT")),
        api_version=env.get("JIRA_API_VERSION") or DEFAULT_API_VERSION,
        auth=_auth_from_env(env),
    )


def jira_config_from_headers(
    headers: Optional[Mapping[str, str]],
    env: Optional[Mapping[str, str]] = None,
) -> JiraConfig:
    """
    Build a Jira configuration from HTTP request headers.

    Used by the per-request client scope. Header names are matched
    case-insensitively. Requests without an X-Jira-Host header fall back
    to the environment configuration.

    Headers:
        X-Jira-Host: Jira host (required to use header credentials)
        X-Jira-Email + X-Jira-Api-Token: API token authentication
        X-Jira-Username + X-Jira-Password: Basic authentication
        X-Jira-Protocol, X-Jira-Port, X-Jira-Api-Version: Optional settings

    Args:
        headers: Request headers
        env: Environment used when headers carry no Jira host

    Returns:
        JiraConfig built from the headers or the environment

    Raises:
        JiraAuthenticationError: If a host header is given without credentials
    """
    lowered: Dict[str, str] = {
        key.lower(): value for key, value in (headers or {}).items()
    }

    host = lowered.get(HOST_HEADER)
    if not host:
        return load_jira_config(env)

    if _all_set(lowered, ("x-jira-email", "x-jira-api-token")):
        auth: JiraAuth = TokenAuth(
            email=lowered["x-jira-email"],
            api_token=lowered["x-jira-api-token"],
        )
    elif _all_set(lowered, ("x-jira-username", "x-jira-password")):
        auth = BasicAuth(
            username=lowered["x-jira-username"],
            password=lowered["x-jira-password"],
        )
    else:
        raise JiraAuthenticationError(
            "X-Jira-Host header given without credentials. Provide "
            "X-Jira-Email + X-Jira-Api-Token or X-Jira-Username + X-Jira-Password"
        )

    return JiraConfig(
        host=host.strip(),
        protocol=lowered.get("x-jira-protocol") or DEFAULT_PROTOCOL,
        port=_parse_port(lowered.get("x-jira-port")),
        api_version=lowered.get("x-jira-api-version") or DEFAULT_API_VERSION,
        auth=auth,
    )


def get_config_help_message() -> str:
    """Get helpful message about Jira configuration options."""
    return """Jira connection not configured.

Required:
   JIRA_HOST              e.g. your-domain.atlassian.net

Optional:
   JIRA_PROTOCOL          http or https (default: https)
   JIRA_PORT              1-65535
   JIRA_API_VERSION       REST API version (default: 2)

Credentials (first complete set wins):
1. OAuth:
   JIRA_OAUTH_CONSUMER_KEY, JIRA_OAUTH_PRIVATE_KEY,
   JIRA_OAUTH_TOKEN, JIRA_OAUTH_TOKEN_SECRET

2. API token (Jira Cloud):
   JIRA_EMAIL, JIRA_API_TOKEN

3. Basic auth:
   JIRA_USERNAME, JIRA_PASSWORD
"""
