"""ClickUp Docs tools (API v3)."""

from typing import Any, Literal

from clickup_mcp import api
from clickup_mcp.app import mcp, require_workspace

PARENT_TYPES = {"space": 4, "folder": 5, "list": 6}


@mcp.tool()
async def clickup_create_document(
    title: str,
    content: str = "",
    parent_id: str = "",
    parent_type: Literal["list", "folder", "space"] | None = None,
    visibility: Literal["private", "workspace"] | None = None,
    workspace_id: str = "",
) -> str:
    """Create a new ClickUp Doc in the workspace, optionally under a list, folder, or space.

    Args:
        title: Document title
        content: Initial page content (markdown)
        parent_id: ID of the parent list, folder, or space
        parent_type: Type of the parent: list, folder, space
        visibility: private or workspace (default workspace)
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    body: dict[str, Any] = {"title": title}
    if visibility:
        body["visibility"] = visibility
    if parent_id and parent_type:
        body["parent"] = {"id": parent_id, "type": PARENT_TYPES[parent_type]}
    if content:
        body["pages"] = [{"title": title, "content": content}]

    data = await api.create_doc(require_workspace(workspace_id), body)
    return (
        "Document created!\n\n"
        f"**Title:** {data.get('title') or title}\n"
        f"**ID:** `{data.get('id')}`\n"
        f"**URL:** {data.get('url') or '(check ClickUp)'}"
    )


@mcp.tool()
async def clickup_list_document_pages(doc_id: str, workspace_id: str = "") -> str:
    """List all pages in a ClickUp Doc.

    Args:
        doc_id: The document ID
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    data = await api.get_doc_pages(require_workspace(workspace_id), doc_id)
    pages = data.get("pages", []) if isinstance(data, dict) else data
    if not pages:
        return f"No pages found in document `{doc_id}`."
    lines = [f"**Pages in document `{doc_id}`:**", ""]
    lines.extend(f"- **{p.get('title') or '(untitled)'}** (ID: `{p.get('id')}`)" for p in pages)
    return "\n".join(lines)


@mcp.tool()
async def clickup_get_document_pages(doc_id: str, page_id: str, workspace_id: str = "") -> str:
    """Get the content of a page in a ClickUp Doc.

    Args:
        doc_id: The document ID
        page_id: The page ID
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    page = await api.get_doc_page(require_workspace(workspace_id), doc_id, page_id)
    return (
        f"**Page: {page.get('title') or '(untitled)'}**\n"
        f"**ID:** `{page.get('id')}`\n\n"
        f"{page.get('content') or '(no content)'}"
    )


@mcp.tool()
async def clickup_create_document_page(doc_id: str, title: str, content: str = "", workspace_id: str = "") -> str:
    """Create a new page in a ClickUp Doc.

    Args:
        doc_id: The document ID
        title: Page title
        content: Page content (markdown)
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    body: dict[str, Any] = {"title": title}
    if content:
        body["content"] = content
    data = await api.create_doc_page(require_workspace(workspace_id), doc_id, body)
    return (
        f"Page created in document `{doc_id}`.\n"
        f"**Title:** {title}\n"
        f"**Page ID:** `{data.get('id', '?')}`"
    )


@mcp.tool()
async def clickup_update_document_page(
    doc_id: str,
    page_id: str,
    title: str = "",
    content: str = "",
    workspace_id: str = "",
) -> str:
    """Update an existing page in a ClickUp Doc.

    Args:
        doc_id: The document ID
        page_id: The page ID to update
        title: New page title
        content: New page content (markdown)
        workspace_id: Workspace ID (uses the configured one if not provided)
    """
    body: dict[str, Any] = {}
    if title:
        body["title"] = title
    if content:
        body["content"] = content
    if not body:
        return "Nothing to update — provide a title or content."
    await api.update_doc_page(require_workspace(workspace_id), doc_id, page_id, body)
    return f"Page `{page_id}` updated in document `{doc_id}`."
