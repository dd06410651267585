"""Jira session management for the MCP server."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Literal, Mapping, Optional

from jira_mcp.mcp.adapters.jira_adapter import JiraClient, JiraClientAdapter
from jira_mcp.mcp.auth.credentials import (
    JiraConfig,
    get_config_help_message,
    jira_config_from_headers,
    load_jira_config,
)
from jira_mcp.mcp.errors import (
    JiraAuthenticationError,
    JiraConnectionError,
    JiraError,
    JiraValidationError,
)

logger = logging.getLogger(__name__)

ClientScope = Literal["process", "request"]
ClientFactory = Callable[[JiraConfig], JiraClient]


class JiraSession:
    """
    Owns the policy for building and connecting Jira clients.

    Two scopes are supported:
    - process: one client per server process, configured from the
      environment and connected once. A failed start-up connection is
      retried on the next tool call.
    - request: a fresh client per tool call, configured from request
      headers (falling back to the environment).

    Concurrent calls share the process-scope client without locking; two
    calls racing on the first connection may both probe Jira.
    """

    def __init__(
        self,
        scope: ClientScope = "process",
        client_factory: ClientFactory = JiraClientAdapter,
        env: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize session.

        Args:
            scope: "process" or "request"
            client_factory: Builds a client from a JiraConfig
            env: Environment to read configuration from (default: os.environ)

        Raises:
            ValueError: If scope is invalid
        """
        if scope not in ("process", "request"):
            raise ValueError(
                f"Invalid client scope '{scope}'. Must be 'process' or 'request'."
            )

        self.scope = scope
        self.client_factory = client_factory
        self.env = env
        self._client: Optional[JiraClient] = None

    @classmethod
    def for_client(cls, client: JiraClient) -> "JiraSession":
        """Create a process-scope session around an existing client."""
        session = cls(scope="process", client_factory=lambda config: client)
        session._client = client
        return session

    async def initialize(self) -> bool:
        """
        Build and connect the process-scope client at start-up.

        Failures are logged with guidance and never raised, so the server
        stays up and later calls can retry.

        Returns:
            True if a connected client is ready, False otherwise
        """
        if self.scope != "process":
            return False

        try:
            await self.acquire()
        except JiraError as e:
            log_initialization_error(e)
            return False
        return True

    async def acquire(self, headers: Optional[Mapping[str, str]] = None) -> JiraClient:
        """
        Return a connected client for one tool call.

        Args:
            headers: Request headers (used by the request scope only)

        Returns:
            Connected JiraClient

        Raises:
            JiraValidationError: If the configuration is invalid
            JiraAuthenticationError: If credentials are missing or rejected
            JiraConnectionError: If Jira cannot be reached
        """
        if self.scope == "request":
            config = jira_config_from_headers(headers, self.env)
            client = self.client_factory(config)
            await client.connect()
            return client

        if self._client is None:
            config = load_jira_config(self.env)
            logger.info(f"Connecting to Jira at {config.server_url}")
            self._client = self.client_factory(config)

        if not self._client.connected:
            await self._client.connect()
        return self._client


@dataclass
class ToolContext:
    """
    Per-call context handed to tool handlers.

    Attributes:
        session: Session that provides Jira clients
        headers: Request headers for the call (empty for stdio)
    """

    session: JiraSession
    headers: Dict[str, str] = field(default_factory=dict)

    async def client(self) -> JiraClient:
        """Return a connected Jira client for this call."""
        return await self.session.acquire(self.headers)


def log_initialization_error(error: JiraError) -> None:
    """Log a start-up failure with actionable guidance."""
    if isinstance(error, JiraValidationError):
        logger.error(f"Configuration error: {error.message}")
        logger.error("Please check your environment variables and try again.")
        logger.error(get_config_help_message())
    elif isinstance(error, JiraAuthenticationError):
        logger.error(f"Authentication error: {error.message}")
        logger.error("Please verify your Jira credentials.")
    elif isinstance(error, JiraConnectionError):
        logger.error(f"Connection error: {error.message}")
        logger.error("Please check your Jira host and network connectivity.")
    else:
        logger.error(f"Unexpected error during initialization: {error.message}")
