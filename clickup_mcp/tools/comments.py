"""Comment and attachment tools."""

import os
from typing import Any

from clickup_mcp import api
from clickup_mcp.app import mcp
from clickup_mcp.formatting import ms_to_iso


def _comment_text(comment: dict) -> str:
    if comment.get("comment_text"):
        return comment["comment_text"]
    parts = "".join(p.get("text", "") for p in comment.get("comment") or [])
    return parts or "(no text)"


@mcp.tool()
async def clickup_get_task_comments(task_id: str) -> str:
    """Get all comments on a task.

    Args:
        task_id: The task ID
    """
    data = await api.get_task_comments(task_id)
    comments = data.get("comments") or []
    if not comments:
        return f"No comments on task `{task_id}`."
    lines = [f"**Comments on task `{task_id}` ({len(comments)}):**", ""]
    for c in comments:
        author = (c.get("user") or {}).get("username") or "unknown"
        lines.append(f"**{author}** ({ms_to_iso(c.get('date'), 'unknown')}):\n{_comment_text(c)}\n\n---\n")
    return "\n".join(lines)


@mcp.tool()
async def clickup_create_task_comment(
    task_id: str,
    comment_text: str,
    notify_all: bool = True,
    assignee: int | None = None,
) -> str:
    """Add a comment to a task.

    Args:
        task_id: The task ID
        comment_text: The comment text
        notify_all: Notify all assignees
        assignee: User ID to assign the comment to
    """
    body: dict[str, Any] = {"comment_text": comment_text, "notify_all": notify_all}
    if assignee:
        body["assignee"] = assignee
    data = await api.create_task_comment(task_id, body)
    return f"Comment added to task `{task_id}`.\n**Comment ID:** `{data.get('id')}`"


@mcp.tool()
async def clickup_attach_task_file(task_id: str, file_path: str, file_name: str = "") -> str:
    """Attach a local file to a task.

    The path is read on the machine running this server and uploaded to ClickUp.

    Args:
        task_id: The task ID
        file_path: Absolute local file path to attach
        file_name: Name to use in ClickUp (defaults to the file's own name)
    """
    try:
        with open(os.path.expanduser(file_path), "rb") as f:
            content = f.read()
    except OSError as e:
        raise ValueError(f"Cannot read file: {e}") from e

    name = file_name or os.path.basename(file_path)
    data = await api.create_task_attachment(task_id, content, name)
    return (
        f"File attached to task `{task_id}`.\n"
        f"**File:** {name}\n"
        f"**URL:** {data.get('url') or '(see task attachments)'}"
    )
