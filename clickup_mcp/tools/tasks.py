"""Task tools: create, get, update, list, tags."""

from typing import Any, Literal

from clickup_mcp import api
from clickup_mcp.app import load_config, mcp
from clickup_mcp.config import parse_csv
from clickup_mcp.formatting import format_task, ms_to_iso, names, task_line
from clickup_mcp.task_defaults import TaskFields, parse_user_ids, resolve_task_body, to_timestamp


@mcp.tool()
async def clickup_create_task(
    name: str,
    description: str = "",
    list_id: str = "",
    status: str = "",
    priority: Literal[1, 2, 3, 4] | None = None,
    assignees: str = "",
    tags: str = "",
    due_date: str = "",
    start_date: str = "",
    time_estimate: int | None = None,
    parent: str = "",
    notify_all: bool = True,
) -> str:
    """Create a new task in ClickUp.

    Fields left out fall back to the onboarding defaults: the default list,
    auto-assignment to the API key owner, default priority and tags, and a
    due date of today + N days (end of day).

    Priority values: 1=Urgent, 2=High, 3=Normal, 4=Low

    Args:
        name: Task name
        description: Task description (markdown)
        list_id: List ID (uses the configured default if not provided)
        status: Task status name
        priority: 1=Urgent, 2=High, 3=Normal, 4=Low
        assignees: Comma-separated user IDs to assign
        tags: Comma-separated tags (overrides defaults)
        due_date: Due date as ISO string or timestamp
        start_date: Start date as ISO string or timestamp
        time_estimate: Time estimate in milliseconds
        parent: Parent task ID to create this as a subtask
        notify_all: Notify all assignees
    """
    fields = TaskFields(
        name=name,
        description=description or None,
        list_id=list_id or None,
        status=status or None,
        priority=priority,
        assignees=assignees or None,
        tags=tags or None,
        due_date=due_date or None,
        start_date=start_date or None,
        time_estimate=time_estimate,
        parent=parent or None,
        notify_all=notify_all,
    )
    target_list, body = resolve_task_body(fields, load_config())
    task = await api.create_task(target_list, body)
    return "\n".join([
        "Task created successfully!",
        "",
        f"**Name:** {task.get('name')}",
        f"**ID:** `{task['id']}`",
        f"**URL:** {task.get('url')}",
        f"**Status:** {(task.get('status') or {}).get('status')}",
        f"**List:** {(task.get('list') or {}).get('name')}",
        f"**Assignees:** {names(task.get('assignees'))}",
        f"**Priority:** {(task.get('priority') or {}).get('priority') or 'none'}",
        f"**Tags:** {names(task.get('tags'), key='name')}",
        f"**Due date:** {ms_to_iso(task.get('due_date'))}",
    ])


@mcp.tool()
async def clickup_get_task(task_id: str) -> str:
    """Get full details of a task, including subtasks and markdown description.

    Args:
        task_id: The task ID
    """
    return format_task(await api.get_task(task_id))


@mcp.tool()
async def clickup_update_task(
    task_id: str,
    name: str = "",
    description: str = "",
    status: str = "",
    priority: Literal[1, 2, 3, 4] | None = None,
    assignees_add: str = "",
    assignees_remove: str = "",
    due_date: str = "",
    start_date: str = "",
    time_estimate: int | None = None,
    archived: bool | None = None,
    parent: str = "",
) -> str:
    """Update an existing task. Only provide the fields you want to change.

    Args:
        task_id: The task ID to update
        name: New task name
        description: New description (markdown)
        status: New status name
        priority: 1=Urgent, 2=High, 3=Normal, 4=Low
        assignees_add: Comma-separated user IDs to add as assignees
        assignees_remove: Comma-separated user IDs to remove from assignees
        due_date: New due date (ISO or timestamp)
        start_date: New start date (ISO or timestamp)
        time_estimate: Time estimate in milliseconds
        archived: Archive or unarchive the task
        parent: Move the task under a parent (make it a subtask)
    """
    body: dict[str, Any] = {}
    if name:
        body["name"] = name
    if description:
        body["markdown_description"] = description
    if status:
        body["status"] = status
    if priority is not None:
        body["priority"] = priority
    for key, value in (("due_date", due_date), ("start_date", start_date)):
        ts = to_timestamp(value) if value else None
        if ts is not None:
            body[key] = ts
    if time_estimate is not None:
        body["time_estimate"] = time_estimate
    if archived is not None:
        body["archived"] = archived
    if parent:
        body["parent"] = parent

    add = parse_user_ids(assignees_add)
    rem = parse_user_ids(assignees_remove)
    if add or rem:
        body["assignees"] = {"add": add or [], "rem": rem or []}

    if not body:
        return "Nothing to update — provide at least one field."
    task = await api.update_task(task_id, body)
    return "Task updated successfully!\n\n" + format_task(task)


@mcp.tool()
async def clickup_list_tasks(
    list_id: str,
    statuses: str = "",
    assignees: str = "",
    include_closed: bool = False,
    page: int = 0,
) -> str:
    """List tasks in a specific list with optional filters. More reliable than search for known lists.

    Args:
        list_id: The list ID to fetch tasks from
        statuses: Comma-separated statuses to filter by
        assignees: Comma-separated user IDs to filter by
        include_closed: Include closed/completed tasks
        page: Page number (100 tasks per page)
    """
    params: dict[str, Any] = {
        "include_closed": include_closed,
        "page": page,
        "statuses": parse_csv(statuses),
        "assignees": parse_user_ids(assignees),
    }
    data = await api.get_tasks_in_list(list_id, params)
    tasks = data.get("tasks") or []
    if not tasks:
        return f"No tasks found in list `{list_id}`."
    lines = [f"**Tasks in list `{list_id}` — {len(tasks)} found (page {page}):**", ""]
    lines.extend(task_line(t) for t in tasks)
    return "\n".join(lines)


@mcp.tool()
async def clickup_add_tag_to_task(task_id: str, tag_name: str) -> str:
    """Add a tag to a task.

    Args:
        task_id: The task ID
        tag_name: Tag name to add
    """
    await api.add_tag_to_task(task_id, tag_name)
    return f'Tag "{tag_name}" added to task `{task_id}`.'


@mcp.tool()
async def clickup_remove_tag_from_task(task_id: str, tag_name: str) -> str:
    """Remove a tag from a task.

    Args:
        task_id: The task ID
        tag_name: Tag name to remove
    """
    await api.remove_tag_from_task(task_id, tag_name)
    return f'Tag "{tag_name}" removed from task `{task_id}`.'
