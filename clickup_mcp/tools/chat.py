"""ClickUp Chat tools (API v3). Chat availability varies by plan."""

import logging

from clickup_mcp import api
from clickup_mcp.app import mcp, require_workspace
from clickup_mcp.errors import RemoteCallFailed

logger = logging.getLogger(__name__)


@mcp.tool()
async def clickup_get_chat_channels(workspace_id: str = "") -> str:
    """List chat channels available in the workspace.

    Args:
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    team_id = require_workspace(workspace_id)
    try:
        data = await api.get_chat_channels(team_id)
    except RemoteCallFailed as e:
        logger.info("Chat channels unavailable for workspace %s: %s", team_id, e)
        return (
            f"Chat channels API returned an error: {e}\n\n"
            "Note: the ClickUp Chat API may have limited availability. "
            "Consider using task comments for communication instead."
        )

    channels = data.get("channels") or data.get("data") or []
    if not channels:
        return "No chat channels found in this workspace."
    lines = [f"**Chat channels ({len(channels)}):**", ""]
    lines.extend(
        f"- **{ch.get('name') or ch.get('title') or '(unnamed)'}** (ID: `{ch.get('id')}`)" for ch in channels
    )
    return "\n".join(lines)


@mcp.tool()
async def clickup_send_chat_message(channel_id: str, content: str, workspace_id: str = "") -> str:
    """Send a message to a ClickUp chat channel.

    If the chat API is unavailable, use clickup_create_task_comment instead.

    Args:
        channel_id: The chat channel ID
        content: Message content
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    try:
        data = await api.send_chat_message(require_workspace(workspace_id), channel_id, content)
    except RemoteCallFailed as e:
        raise RemoteCallFailed(
            f"Failed to send message: {e.detail}\n\n"
            "If the chat API is not available, use clickup_create_task_comment instead.",
            status_code=e.status_code,
            api="ClickUp API v3",
        ) from e
    return f"Message sent to channel `{channel_id}`.\n**Message ID:** `{data.get('id', '?')}`"
