"""
MCP server configuration.

Handles server configuration file loading (jira-mcp.yaml) with environment
variable overrides. Jira credentials are not part of this file; they come
from JIRA_* environment variables or request headers.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml

CONFIG_FILE_NAME = "jira-mcp.yaml"

TRANSPORTS = ("stdio", "http", "sse")
CLIENT_SCOPES = ("process", "request")


@dataclass
class MCPConfig:
    """
    MCP server configuration loaded from jira-mcp.yaml.

    Attributes:
        host: Server bind address (default: "127.0.0.1")
        port: Server port for HTTP/SSE transports (default: 8000)
        transport: Transport mode ("stdio", "http" or "sse", default: "stdio")
        path: HTTP endpoint path (default: "/mcp")
        client_scope: When Jira clients are built ("process" or "request").
            Defaults to "process" for stdio and "request" otherwise.
        log_level: Logging level name (default: "INFO")
    """

    host: str = "127.0.0.1"
    port: int = 8000
    transport: Literal["stdio", "http", "sse"] = "stdio"
    path: str = "/mcp"
    client_scope: Optional[Literal["process", "request"]] = None
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.transport not in TRANSPORTS:
            raise ValueError(
                f"Invalid transport '{self.transport}'. "
                "Must be 'stdio', 'http' or 'sse'."
            )

        if self.client_scope is not None and self.client_scope not in CLIENT_SCOPES:
            raise ValueError(
                f"Invalid client scope '{self.client_scope}'. "
                "Must be 'process' or 'request'."
            )

        if not 1 <= int(self.port) <= 65535:
            raise ValueError(f"Invalid port {self.port}. Must be between 1 and 65535.")

    @property
    def effective_client_scope(self) -> str:
        """Client scope, derived from the transport when not set."""
        if self.client_scope:
            return self.client_scope
        return "process" if self.transport == "stdio" else "request"

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "MCPConfig":
        """
        Load MCP configuration from jira-mcp.yaml.

        Falls back to defaults if file doesn't exist. Environment variables
        override config file values.

        Args:
            config_dir: Directory containing jira-mcp.yaml (default: cwd)

        Returns:
            MCPConfig instance with loaded/default values

        Raises:
            ValueError: If config file or an environment value is invalid
        """
        config_file = (config_dir or Path.cwd()) / CONFIG_FILE_NAME
        config_dict: Dict[str, Any] = {}

        # Load from config file if exists
        if config_file.exists():
            try:
                with open(config_file) as f:
                    config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid {CONFIG_FILE_NAME}: {e}") from e

            if not isinstance(config_dict, dict):
                raise ValueError(f"Invalid {CONFIG_FILE_NAME}: expected a mapping")

        # Environment variables override config file
        if "MCP_SERVER_HOST" in os.environ:
            config_dict["host"] = os.environ["MCP_SERVER_HOST"]

        if "MCP_SERVER_PORT" in os.environ:
            try:
                config_dict["port"] = int(os.environ["MCP_SERVER_PORT"])
            except ValueError:
                raise ValueError(
                    f"Invalid MCP_SERVER_PORT: {os.environ['MCP_SERVER_PORT']}. "
                    "Must be an integer."
                )

        if "MCP_SERVER_TRANSPORT" in os.environ:
            config_dict["transport"] = os.environ["MCP_SERVER_TRANSPORT"]

        if "MCP_SERVER_PATH" in os.environ:
            config_dict["path"] = os.environ["MCP_SERVER_PATH"]

        if "MCP_CLIENT_SCOPE" in os.environ:
            config_dict["client_scope"] = os.environ["MCP_CLIENT_SCOPE"]

        if "MCP_LOG_LEVEL" in os.environ:
            config_dict["log_level"] = os.environ["MCP_LOG_LEVEL"]

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    def save(self, config_dir: Optional[Path] = None) -> Path:
        """
        Save MCP configuration to jira-mcp.yaml.

        Args:
            config_dir: Directory to write jira-mcp.yaml into (default: cwd)

        Returns:
            Path of the written file
        """
        config_file = (config_dir or Path.cwd()) / CONFIG_FILE_NAME
        config_file.parent.mkdir(parents=True, exist_ok=True)

        config_dict: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "transport": self.transport,
            "path": self.path,
            "log_level": self.log_level,
        }
        if self.client_scope:
            config_dict["client_scope"] = self.client_scope

        with open(config_file, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

        return config_file
