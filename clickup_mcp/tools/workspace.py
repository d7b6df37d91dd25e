"""Workspace tools: search, hierarchy, lists, folders, members."""

from typing import Any

from clickup_mcp import api
from clickup_mcp.app import mcp, require_workspace
from clickup_mcp.config import parse_csv
from clickup_mcp.discovery import discover
from clickup_mcp.formatting import fmt_json, task_line

ROLES = {1: "Owner", 2: "Admin", 3: "Member"}


async def _members(workspace_id: str) -> list[dict]:
    data = await api.get_workspace_members(require_workspace(workspace_id))
    return (data.get("team") or {}).get("members") or []


def _matches(member: dict, query: str) -> bool:
    user = member.get("user") or {}
    return query in (user.get("username") or "").lower() or query in (user.get("email") or "").lower()


@mcp.tool()
async def clickup_search(
    query: str,
    list_ids: str = "",
    statuses: str = "",
    assignees: str = "",
    include_closed: bool = False,
    page: int = 0,
) -> str:
    """Search for tasks across the workspace.

    Returns matching tasks with basic details. Use clickup_get_task for full details.

    Args:
        query: Text to look for in task names and descriptions
        list_ids: Comma-separated list IDs to filter by
        statuses: Comma-separated statuses to filter by
        assignees: Comma-separated user IDs to filter by
        include_closed: Include closed tasks
        page: Page number (default 0)
    """
    params: dict[str, Any] = {
        "page": page,
        "include_closed": include_closed,
        "list_ids": parse_csv(list_ids),
        "statuses": parse_csv(statuses),
        "assignees": parse_csv(assignees),
    }
    data = await api.search_tasks(require_workspace(), params)
    # The filtered-team-tasks endpoint has no free-text filter.
    needle = query.lower()
    found = [
        t for t in data.get("tasks") or []
        if any(needle in (t.get(k) or "").lower() for k in ("name", "description", "text_content"))
    ]
    if not found:
        return f'No tasks found matching "{query}".'
    lines = [f"**Found {len(found)} task(s):**", ""]
    lines.extend(task_line(t) for t in found)
    return "\n".join(lines)


@mcp.tool()
async def clickup_get_workspace_hierarchy(workspace_id: str = "") -> str:
    """Get the full workspace hierarchy: spaces → folders → lists.

    Includes personal/private spaces and lists the API key owner can see.

    Args:
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    hierarchy = await discover(require_workspace(workspace_id))
    return f"**Workspace Hierarchy ({len(hierarchy.lists)} lists):**\n{hierarchy.text}"


@mcp.tool()
async def clickup_get_list(list_id: str) -> str:
    """Get details of a specific list by ID.

    Args:
        list_id: The list ID
    """
    return fmt_json(await api.get_list(list_id))


@mcp.tool()
async def clickup_get_folder(folder_id: str) -> str:
    """Get details of a specific folder by ID.

    Args:
        folder_id: The folder ID
    """
    return fmt_json(await api.get_folder(folder_id))


@mcp.tool()
async def clickup_get_workspace_members(workspace_id: str = "") -> str:
    """List all members in the workspace with their IDs, names, and roles.

    Args:
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    members = await _members(workspace_id)
    lines = [f"**Workspace Members ({len(members)}):**", ""]
    for m in members:
        u = m.get("user") or {}
        role = ROLES.get(m.get("role"), "Guest")
        lines.append(f"- **{u.get('username')}** (ID: `{u.get('id')}`) — {u.get('email')} — Role: {role}")
    return "\n".join(lines)


@mcp.tool()
async def clickup_find_member_by_name(name: str, workspace_id: str = "") -> str:
    """Find workspace members by name or email (partial match).

    Args:
        name: Name or partial name to search for
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    query = name.strip().lower()
    matches = [m for m in await _members(workspace_id) if _matches(m, query)]
    if not matches:
        return f'No members found matching "{name}".'
    lines = ["**Matching members:**", ""]
    for m in matches:
        u = m["user"]
        lines.append(f"- **{u.get('username')}** (ID: `{u.get('id')}`) — {u.get('email')}")
    return "\n".join(lines)


@mcp.tool()
async def clickup_resolve_assignees(names: str, workspace_id: str = "") -> str:
    """Resolve assignee names to user IDs, e.g. before creating or updating tasks.

    Args:
        names: Comma-separated names to resolve
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    members = await _members(workspace_id)
    resolved: list[dict] = []
    unresolved: list[str] = []
    for wanted in parse_csv(names) or []:
        match = next((m for m in members if _matches(m, wanted.lower())), None)
        if match:
            resolved.append(match["user"])
        else:
            unresolved.append(wanted)

    lines = ["**Resolved assignees:**"]
    lines.extend(f"- {u.get('username')} → ID: `{u.get('id')}`" for u in resolved)
    if unresolved:
        lines.append(f"\n**Could not resolve:** {', '.join(unresolved)}")
    lines.append(f"\n**User IDs array:** [{', '.join(str(u.get('id')) for u in resolved)}]")
    return "\n".join(lines)
