"""Time tracking tools."""

import time
from typing import Any

from clickup_mcp import api
from clickup_mcp.app import load_config, mcp, require_workspace
from clickup_mcp.errors import NotConfigured
from clickup_mcp.formatting import ms_to_hours, ms_to_iso
from clickup_mcp.task_defaults import to_timestamp


def _now_ms() -> int:
    return int(time.time() * 1000)


@mcp.tool()
async def clickup_get_task_time_entries(task_id: str) -> str:
    """Get all time entries for a task.

    Args:
        task_id: The task ID
    """
    entries = (await api.get_task_time_entries(task_id)).get("data") or []
    if not entries:
        return f"No time entries for task `{task_id}`."

    total = 0
    lines = [f"**Time entries for task `{task_id}` ({len(entries)}):**", ""]
    for e in entries:
        duration = int(e.get("duration") or 0)
        # running timers report a negative duration
        total += max(duration, 0)
        user = (e.get("user") or {}).get("username") or "unknown"
        end = ms_to_iso(e.get("end"), "running")
        lines.append(f"- **{user}** — {ms_to_hours(max(duration, 0))} ({ms_to_iso(e.get('start'), '?')} → {end})")
        if e.get("description"):
            lines.append(f"  _{e['description']}_")
    lines.append(f"\n**Total:** {ms_to_hours(total)}")
    return "\n".join(lines)


@mcp.tool()
async def clickup_start_time_tracking(task_id: str, description: str = "", billable: bool | None = None) -> str:
    """Start a timer on a task. Only one timer can run at a time.

    Args:
        task_id: The task ID to track time on
        description: Description for this time entry
        billable: Whether this time is billable
    """
    body: dict[str, Any] = {"tid": task_id}
    if description:
        body["description"] = description
    if billable is not None:
        body["billable"] = billable
    result = await api.start_time_entry(require_workspace(), body)
    data = result.get("data") or result
    return (
        f"Timer started on task `{task_id}`.\n"
        f"**Timer ID:** `{data.get('id', '?')}`\n"
        f"**Started at:** {ms_to_iso(data.get('start'), 'now')}"
    )


@mcp.tool()
async def clickup_stop_time_tracking() -> str:
    """Stop the currently running timer."""
    result = await api.stop_time_entry(require_workspace())
    data = result.get("data") or result
    duration = ms_to_hours(data["duration"]) if data.get("duration") else "?"
    return (
        "Timer stopped.\n"
        f"**Duration:** {duration}\n"
        f"**Task:** `{(data.get('task') or {}).get('id', '?')}`"
    )


@mcp.tool()
async def clickup_add_time_entry(
    task_id: str,
    duration: int,
    description: str = "",
    start: str = "",
    billable: bool | None = None,
) -> str:
    """Add a manual time entry to a task.

    Args:
        task_id: The task ID
        duration: Duration in milliseconds
        description: Description of the work
        start: Start time (ISO string or timestamp). Defaults to now.
        billable: Whether this time is billable
    """
    start_ms = (to_timestamp(start) if start else None) or _now_ms()
    body: dict[str, Any] = {"tid": task_id, "duration": duration, "start": start_ms}
    if description:
        body["description"] = description
    if billable is not None:
        body["billable"] = billable
    result = await api.add_time_entry(require_workspace(), body)
    data = result.get("data") or result
    return (
        f"Time entry added to task `{task_id}`.\n"
        f"**Duration:** {ms_to_hours(duration)}\n"
        f"**Entry ID:** `{data.get('id', '?')}`"
    )


@mcp.tool()
async def clickup_get_current_time_entry() -> str:
    """Get the timer currently running for the authenticated user."""
    config = load_config()
    if config is None or not config.workspace_id or not config.user_id:
        raise NotConfigured("No workspace/user configured.")

    data = (await api.get_running_time_entry(config.workspace_id, config.user_id)).get("data")
    if not data:
        return "No timer currently running."

    elapsed = ms_to_hours(_now_ms() - int(data["start"])) if data.get("start") else "?"
    task = data.get("task") or {}
    return (
        "**Timer running:**\n"
        f"**Task:** `{task.get('id', '?')}` — {task.get('name', '?')}\n"
        f"**Started:** {ms_to_iso(data.get('start'), '?')}\n"
        f"**Elapsed:** {elapsed}\n"
        f"**Description:** {data.get('description') or '(none)'}"
    )
