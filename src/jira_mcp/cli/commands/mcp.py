"""MCP server management commands."""

import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from jira_mcp import __version__
from jira_mcp.mcp.adapters import JiraClientAdapter
from jira_mcp.mcp.auth import get_config_help_message, load_jira_config
from jira_mcp.mcp.config import CONFIG_FILE_NAME, MCPConfig
from jira_mcp.mcp.errors import JiraConnectionError, JiraError
from jira_mcp.mcp.server import JiraMCPServer
from jira_mcp.mcp.tools import TOOLS

app = typer.Typer(help="Jira MCP server")
console = Console()
err_console = Console(stderr=True)


def _setup_logging(level: str) -> None:
    """
    Send log records to stderr through Rich.

    Stdout is reserved for the stdio transport's JSON-RPC messages.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _version_callback(value: bool):
    if value:
        console.print(f"jira-mcp {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Expose Jira issue tools to AI assistants over MCP."""


@app.command()
def start(
    host: str = typer.Option(None, help="Server host (HTTP/SSE only, overrides config)"),
    port: int = typer.Option(None, help="Server port (HTTP/SSE only, overrides config)"),
    transport: str = typer.Option(None, help="Transport: stdio, http or sse (overrides config)"),
    path: str = typer.Option(None, help="HTTP endpoint path (overrides config)"),
    client_scope: str = typer.Option(
        None, help="Jira client scope: process or request (overrides config)"
    ),
    log_level: str = typer.Option(None, help="Log level (overrides config)"),
    config_file: bool = typer.Option(True, help=f"Load from ./{CONFIG_FILE_NAME}"),
):
    """
    Start the MCP server.

    Configuration is loaded from ./jira-mcp.yaml if it exists. Environment
    variables override the config file; command-line options override both.
    Jira credentials always come from JIRA_* environment variables (or
    request headers with the request client scope).

    Examples:
        # Start with stdio transport (uses config or defaults)
        jira-mcp start

        # Serve streamable HTTP on port 3333
        jira-mcp start --transport http --host 0.0.0.0 --port 3333
    """
    try:
        config = MCPConfig.load() if config_file else MCPConfig()

        # Override config with CLI options (if provided)
        overrides = {
            "host": host,
            "port": port,
            "transport": transport,
            "path": path,
            "client_scope": client_scope,
            "log_level": log_level,
        }
        config = replace(config, **{k: v for k, v in overrides.items() if v is not None})

        _setup_logging(config.log_level)

        server = JiraMCPServer(
            host=config.host,
            port=config.port,
            transport=config.transport,
            path=config.path,
            client_scope=config.effective_client_scope,
        )

        # Status goes to stderr: stdout belongs to the stdio transport
        err_console.print("[green]Starting Jira MCP server...[/green]")
        err_console.print(f"Transport: {config.transport}")
        if config.transport != "stdio":
            err_console.print(f"Listening on {config.host}:{config.port}")
        err_console.print(f"Jira client scope: {config.effective_client_scope}")
        err_console.print("\n[dim]Press Ctrl+C to stop server[/dim]\n")

        server.start()
    except ValueError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}", soft_wrap=True)
        raise typer.Exit(1)
    except RuntimeError as e:
        err_console.print(f"[red]Error starting server:[/red] {e}", soft_wrap=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Server stopped by user[/yellow]")
        raise typer.Exit(0)


async def _probe() -> dict:
    adapter = JiraClientAdapter(load_jira_config())
    await adapter.connect()
    return await adapter.current_user()


@app.command()
def check():
    """
    Check Jira connectivity and credentials.

    Loads JIRA_* environment variables, connects and prints the
    authenticated user.

    Examples:
        JIRA_HOST=example.atlassian.net JIRA_EMAIL=me@example.com \\
        JIRA_API_TOKEN=... jira-mcp check
    """
    try:
        user = asyncio.run(_probe())
    except JiraError as e:
        console.print(f"[red]{type(e).__name__}:[/red] {e.message}", soft_wrap=True)
        if not isinstance(e, JiraConnectionError):
            console.print(get_config_help_message())
        raise typer.Exit(1)

    table = Table(title="Jira Connection", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Status", "[green]Connected[/green]")
    table.add_row("User", str(user.get("displayName") or user.get("name") or "-"))
    table.add_row("Email", str(user.get("emailAddress") or "-"))
    console.print(table)


@app.command()
def tools(
    as_json: bool = typer.Option(False, "--json", help="Print raw tool definitions as JSON"),
):
    """
    List the tools exposed by the server.

    Examples:
        jira-mcp tools
        jira-mcp tools --json
    """
    definitions = [tool.get_definition() for tool in TOOLS.values()]

    if as_json:
        console.print_json(json.dumps(definitions))
        return

    table = Table(title="Jira MCP Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Required")
    table.add_column("Description")
    for definition in definitions:
        schema = definition["inputSchema"]
        table.add_row(
            definition["name"],
            ", ".join(schema.get("required", [])) or "-",
            definition["description"],
        )
    console.print(table)


@app.command()
def init(
    directory: Path = typer.Option(Path("."), help="Directory to write jira-mcp.yaml into"),
    transport: str = typer.Option("stdio", help="Transport: stdio, http or sse"),
    port: int = typer.Option(8000, help="Server port (HTTP/SSE only)"),
    force: bool = typer.Option(False, help="Overwrite an existing file"),
):
    """
    Write a jira-mcp.yaml server configuration file.

    Credentials are never written; set JIRA_* environment variables instead.
    """
    target = directory / CONFIG_FILE_NAME
    if target.exists() and not force:
        console.print(
            f"[red]{target} already exists.[/red] Use --force to overwrite.", soft_wrap=True
        )
        raise typer.Exit(1)

    try:
        config = MCPConfig(transport=transport, port=port)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    written = config.save(directory)
    console.print(f"[green]Wrote {written}[/green]", soft_wrap=True)
