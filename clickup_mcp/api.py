"""Thin async client for the ClickUp REST API (v2, plus v3 for Docs and Chat).

Every call resolves the API key at request time, so the onboarding override
and ``CLICKUP_API_KEY`` are honoured without any client state.
"""

import json
import logging
import os
from typing import Any
from urllib.parse import quote

import httpx

from clickup_mcp.config import require_api_key
from clickup_mcp.errors import RemoteCallFailed

logger = logging.getLogger(__name__)

API_URL = os.getenv("CLICKUP_API_URL", "https://api.clickup.com/api/v2")
API_V3_URL = os.getenv("CLICKUP_API_V3_URL", "https://api.clickup.com/api/v3")
TIMEOUT = 30


# ── HTTP helpers ─────────────────────────────────────────────


def _auth_headers() -> dict[str, str]:
    return {"Authorization": require_api_key()}


def _error_detail(r: httpx.Response) -> str:
    """Extract a human-readable error from an HTTP response."""
    try:
        return json.dumps(r.json(), indent=2)
    except ValueError:
        return r.text[:500] if r.text else f"HTTP {r.status_code}"


def _json(r: httpx.Response, api_label: str = "ClickUp API") -> Any:
    """Decode a successful response body; an empty body is ``{}``."""
    if not r.content:
        return {}
    try:
        return r.json()
    except ValueError:
        raise RemoteCallFailed(
            f"Expected JSON, got: {r.text[:500]}", status_code=r.status_code, api=api_label
        ) from None


def _query(params: dict[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten query params; lists become repeated ``key[]`` entries, None is dropped."""
    items: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            items.extend((f"{key}[]", str(v)) for v in value)
        elif isinstance(value, bool):
            items.append((key, "true" if value else "false"))
        else:
            items.append((key, str(value)))
    return items


async def _request(
    method: str,
    path: str,
    body: dict | None = None,
    params: dict[str, Any] | None = None,
    base_url: str = API_URL,
    api_label: str = "ClickUp API",
) -> Any:
    headers = {"Content-Type": "application/json"}
    headers.update(_auth_headers())
    url = f"{base_url}{path}"
    logger.debug("%s %s", method, url)
    try:
        async with httpx.AsyncClient() as c:
            r = await c.request(
                method,
                url,
                params=_query(params),
                json=body if body is not None and method != "GET" else None,
                headers=headers,
                timeout=TIMEOUT,
            )
    except httpx.HTTPError as e:
        raise RemoteCallFailed(f"{type(e).__name__}: {e}", api=api_label) from e
    if not r.is_success:
        raise RemoteCallFailed(_error_detail(r), status_code=r.status_code, api=api_label)
    return _json(r, api_label)


async def _get(path: str, params: dict[str, Any] | None = None) -> Any:
    return await _request("GET", path, params=params)


async def _post(path: str, body: dict | None = None) -> Any:
    return await _request("POST", path, body=body or {})


async def _put(path: str, body: dict | None = None) -> Any:
    return await _request("PUT", path, body=body or {})


async def _delete(path: str) -> Any:
    return await _request("DELETE", path)


async def _v3(method: str, path: str, body: dict | None = None, params: dict | None = None) -> Any:
    return await _request(
        method, path, body=body, params=params, base_url=API_V3_URL, api_label="ClickUp API v3"
    )


async def upload_file(path: str, content: bytes, file_name: str) -> Any:
    """POST a multipart form with a single ``attachment`` part."""
    url = f"{API_URL}{path}"
    logger.debug("POST %s (multipart, %d bytes)", url, len(content))
    files = {"attachment": (file_name, content, "application/octet-stream")}
    try:
        async with httpx.AsyncClient() as c:
            r = await c.post(url, files=files, headers=_auth_headers(), timeout=TIMEOUT)
    except httpx.HTTPError as e:
        raise RemoteCallFailed(f"{type(e).__name__}: {e}") from e
    if not r.is_success:
        raise RemoteCallFailed(_error_detail(r), status_code=r.status_code)
    return _json(r)


# ── Auth / user ──────────────────────────────────────────────


async def get_authorized_user() -> Any:
    return await _get("/user")


async def get_teams() -> Any:
    return await _get("/team")


async def get_workspace_members(team_id: str) -> Any:
    return await _get(f"/team/{team_id}")


# ── Hierarchy ────────────────────────────────────────────────


async def get_spaces(team_id: str) -> Any:
    return await _get(f"/team/{team_id}/space", {"archived": False})


async def get_folders(space_id: str) -> Any:
    return await _get(f"/space/{space_id}/folder", {"archived": False})


async def get_folderless_lists(space_id: str) -> Any:
    return await _get(f"/space/{space_id}/list", {"archived": False})


async def get_lists_in_folder(folder_id: str) -> Any:
    return await _get(f"/folder/{folder_id}/list", {"archived": False})


async def get_list(list_id: str) -> Any:
    return await _get(f"/list/{list_id}")


async def get_folder(folder_id: str) -> Any:
    return await _get(f"/folder/{folder_id}")


# ── Tasks ────────────────────────────────────────────────────


async def create_task(list_id: str, body: dict) -> Any:
    return await _post(f"/list/{list_id}/task", body)


async def get_task(task_id: str) -> Any:
    return await _get(
        f"/task/{task_id}",
        {"include_markdown_description": True, "include_subtasks": True, "custom_fields": True},
    )


async def get_tasks_in_list(list_id: str, params: dict[str, Any] | None = None) -> Any:
    query: dict[str, Any] = {"include_markdown_description": True, "subtasks": True}
    query.update(params or {})
    return await _get(f"/list/{list_id}/task", query)


async def update_task(task_id: str, body: dict) -> Any:
    return await _put(f"/task/{task_id}", body)


async def search_tasks(team_id: str, params: dict[str, Any] | None = None) -> Any:
    return await _get(f"/team/{team_id}/task", params)


async def add_tag_to_task(task_id: str, tag_name: str) -> Any:
    return await _post(f"/task/{task_id}/tag/{quote(tag_name, safe='')}")


async def remove_tag_from_task(task_id: str, tag_name: str) -> Any:
    return await _delete(f"/task/{task_id}/tag/{quote(tag_name, safe='')}")


# ── Comments / attachments ───────────────────────────────────


async def get_task_comments(task_id: str) -> Any:
    return await _get(f"/task/{task_id}/comment")


async def create_task_comment(task_id: str, body: dict) -> Any:
    return await _post(f"/task/{task_id}/comment", body)


async def create_task_attachment(task_id: str, content: bytes, file_name: str) -> Any:
    return await upload_file(f"/task/{task_id}/attachment", content, file_name)


# ── Time tracking ────────────────────────────────────────────


async def get_task_time_entries(task_id: str) -> Any:
    return await _get(f"/task/{task_id}/time")


async def start_time_entry(team_id: str, body: dict) -> Any:
    return await _post(f"/team/{team_id}/time_entries/start", body)


async def stop_time_entry(team_id: str) -> Any:
    return await _post(f"/team/{team_id}/time_entries/stop")


async def add_time_entry(team_id: str, body: dict) -> Any:
    return await _post(f"/team/{team_id}/time_entries", body)


async def get_running_time_entry(team_id: str, assignee: str) -> Any:
    return await _get(f"/team/{team_id}/time_entries/current", {"assignee": assignee})


# ── Docs (v3) ────────────────────────────────────────────────


async def create_doc(workspace_id: str, body: dict) -> Any:
    return await _v3("POST", f"/workspaces/{workspace_id}/docs", body)


async def get_doc_pages(workspace_id: str, doc_id: str) -> Any:
    return await _v3("GET", f"/workspaces/{workspace_id}/docs/{doc_id}/pages")


async def get_doc_page(workspace_id: str, doc_id: str, page_id: str) -> Any:
    return await _v3("GET", f"/workspaces/{workspace_id}/docs/{doc_id}/pages/{page_id}")


async def create_doc_page(workspace_id: str, doc_id: str, body: dict) -> Any:
    return await _v3("POST", f"/workspaces/{workspace_id}/docs/{doc_id}/pages", body)


async def update_doc_page(workspace_id: str, doc_id: str, page_id: str, body: dict) -> Any:
    return await _v3("PUT", f"/workspaces/{workspace_id}/docs/{doc_id}/pages/{page_id}", body)


# ── Chat (v3) ────────────────────────────────────────────────


async def get_chat_channels(workspace_id: str) -> Any:
    return await _v3("GET", f"/workspaces/{workspace_id}/chat/channels")


async def send_chat_message(workspace_id: str, channel_id: str, content: str) -> Any:
    return await _v3(
        "POST",
        f"/workspaces/{workspace_id}/chat/channels/{channel_id}/messages",
        {"content": content},
    )
