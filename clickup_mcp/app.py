"""The FastMCP instance shared by every tool module, plus config lookups the tools share."""

from mcp.server.fastmcp import FastMCP

from clickup_mcp.config import ClickUpConfig, get_store, resolve_api_key
from clickup_mcp.errors import NotConfigured


def build_instructions() -> str:
    config = get_store().load()
    instructions = "ClickUp MCP — personal API key integration for task management."
    if resolve_api_key() and config and config.workspace_id:
        instructions += f"\nWorkspace: {config.workspace_name or config.workspace_id}"
        instructions += (
            f"\nDefault list: {config.default_list_name or config.default_list_id or '(not set)'}"
        )
        instructions += f"\nUser: {config.user_name or '?'} ({config.user_email or '?'})"
    else:
        instructions += (
            "\n\nNot configured yet. Run clickup_onboarding with your API key to set up."
            "\nThe user needs to provide their ClickUp personal API token "
            "(Settings > Apps > API Token)."
        )
    return instructions


mcp = FastMCP("clickup-local", instructions=build_instructions())


def load_config() -> ClickUpConfig | None:
    return get_store().load()


def require_workspace(workspace_id: str = "") -> str:
    """Explicit workspace id, else the configured one."""
    if workspace_id:
        return workspace_id
    config = load_config()
    if config is None or not config.workspace_id:
        raise NotConfigured("No workspace configured.")
    return config.workspace_id
