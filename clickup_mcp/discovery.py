"""Walk a workspace's spaces, folders and lists.

Private spaces are included since a personal token sees everything its owner
sees. Each sub-fetch (folderless lists, folders, a folder's lists) is isolated:
a failure is logged and recorded, and that branch counts as empty.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable

from clickup_mcp import api

logger = logging.getLogger(__name__)


@dataclass
class ListEntry:
    id: str
    name: str
    space: str
    folder: str | None = None


@dataclass
class Hierarchy:
    text: str
    lists: list[ListEntry] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)


async def _fetch_branch(call: Awaitable[Any], key: str, label: str, failures: list[str]) -> list[dict]:
    try:
        data = await call
    except Exception as e:
        logger.warning("Hierarchy discovery: %s failed: %s", label, e)
        failures.append(f"{label}: {e}")
        return []
    return (data or {}).get(key) or []


async def discover(workspace_id: str) -> Hierarchy:
    """Return the rendered hierarchy and a flat list of every reachable list.

    Order: spaces as the API returns them; within a space the folderless lists
    first, then each folder's lists. Only the space listing itself can fail.
    """
    data = await api.get_spaces(workspace_id)
    lists: list[ListEntry] = []
    failures: list[str] = []
    lines: list[str] = []

    for space in data.get("spaces") or []:
        space_name = space.get("name", "?")
        private = " (Private)" if space.get("private") else ""
        lines.append(f"\n**Space: {space_name}**{private}")

        folderless = await _fetch_branch(
            api.get_folderless_lists(space["id"]), "lists", f"lists of space '{space_name}'", failures
        )
        for lst in folderless:
            lists.append(ListEntry(id=str(lst["id"]), name=lst.get("name", ""), space=space_name))
            lines.append(f"  - {lst.get('name', '')} (ID: `{lst['id']}`)")

        folders = await _fetch_branch(
            api.get_folders(space["id"]), "folders", f"folders of space '{space_name}'", failures
        )
        for folder in folders:
            folder_name = folder.get("name", "?")
            lines.append(f"  **Folder: {folder_name}**")
            folder_lists = await _fetch_branch(
                api.get_lists_in_folder(folder["id"]),
                "lists",
                f"lists of folder '{folder_name}'",
                failures,
            )
            for lst in folder_lists:
                lists.append(
                    ListEntry(
                        id=str(lst["id"]),
                        name=lst.get("name", ""),
                        space=space_name,
                        folder=folder_name,
                    )
                )
                lines.append(f"    - {lst.get('name', '')} (ID: `{lst['id']}`)")

    if failures:
        lines.append("\n_Some branches could not be loaded:_")
        lines.extend(f"  - {f}" for f in failures)

    return Hierarchy(text="\n".join(lines), lists=lists, failures=failures)
