"""Markdown rendering shared by the tools."""

import datetime as _dt
import json
from typing import Any

DESCRIPTION_LIMIT = 2000


def fmt_json(data: Any) -> str:
    """Format an API response as a fenced JSON block."""
    return "```json\n" + json.dumps(data, indent=2, default=str) + "\n```"


def ms_to_iso(value: Any, default: str = "none") -> str:
    """ClickUp timestamps are epoch milliseconds, often sent as strings."""
    if value in (None, ""):
        return default
    try:
        ms = int(value)
    except (TypeError, ValueError):
        return default
    return _dt.datetime.fromtimestamp(ms / 1000, tz=_dt.timezone.utc).isoformat().replace("+00:00", "Z")


def ms_to_hours(value: Any) -> str:
    return f"{int(value or 0) / 3_600_000:.2f}h"


def mask_key(api_key: str | None) -> str:
    if not api_key:
        return "(not set)"
    if len(api_key) <= 12:
        return api_key[:3] + "…"
    return f"{api_key[:7]}…{api_key[-4:]}"


def names(items: list[dict] | None, key: str = "username", default: str = "none") -> str:
    return ", ".join(str(i.get(key, "?")) for i in items or []) or default


def task_line(t: dict) -> str:
    assignees = names(t.get("assignees"), default="unassigned")
    priority = (t.get("priority") or {}).get("priority") or "none"
    status = (t.get("status") or {}).get("status") or "?"
    return (
        f"- **{t.get('name', '')}** (ID: `{t['id']}`) — Status: {status} | "
        f"Assignees: {assignees} | Priority: {priority} | Due: {ms_to_iso(t.get('due_date'))}"
    )


def format_task(task: dict) -> str:
    assignees = ", ".join(f"{a.get('username', '?')} ({a.get('id')})" for a in task.get("assignees") or [])
    time_estimate = task.get("time_estimate")
    lines = [
        f"**{task.get('name', '')}**",
        f"**ID:** `{task['id']}`",
        f"**URL:** {task.get('url', '?')}",
        f"**Status:** {(task.get('status') or {}).get('status') or '?'}",
        f"**List:** {(task.get('list') or {}).get('name') or '?'}",
        f"**Folder:** {(task.get('folder') or {}).get('name') or '?'}",
        f"**Space:** {(task.get('space') or {}).get('id') or '?'}",
        f"**Assignees:** {assignees or 'none'}",
        f"**Priority:** {(task.get('priority') or {}).get('priority') or 'none'}",
        f"**Tags:** {names(task.get('tags'), key='name')}",
        f"**Due date:** {ms_to_iso(task.get('due_date'))}",
        f"**Start date:** {ms_to_iso(task.get('start_date'))}",
        f"**Time estimate:** {round(int(time_estimate) / 3_600_000)}h" if time_estimate else "**Time estimate:** none",
        f"**Subtasks:** {len(task.get('subtasks') or [])}",
        f"**Created:** {ms_to_iso(task.get('date_created'), '?')}",
        f"**Updated:** {ms_to_iso(task.get('date_updated'), '?')}",
    ]

    desc = task.get("markdown_description") or task.get("text_content") or ""
    if desc:
        more = "..." if len(desc) > DESCRIPTION_LIMIT else ""
        lines.append(f"\n**Description:**\n{desc[:DESCRIPTION_LIMIT]}{more}")

    if task.get("subtasks"):
        lines.append("\n**Subtasks:**")
        for st in task["subtasks"]:
            lines.append(f"  - {st.get('name', '')} (`{st['id']}`) — {(st.get('status') or {}).get('status') or '?'}")

    filled = [f for f in task.get("custom_fields") or [] if f.get("value") not in (None, "")]
    if filled:
        lines.append("\n**Custom Fields:**")
        for f in filled:
            value = f["value"]
            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            lines.append(f"  - {f.get('name', '?')}: {value}")

    return "\n".join(lines)
