"""Allow `python -m jira_mcp`."""

from jira_mcp.cli.commands.mcp import app

if __name__ == "__main__":
    app()
