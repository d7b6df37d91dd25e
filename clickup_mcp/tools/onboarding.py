from typing import Literal

from clickup_mcp import onboarding
from clickup_mcp.app import mcp
from clickup_mcp.config import get_store


@mcp.tool()
async def clickup_onboarding(
    api_key: str = "",
    step: Literal["choose_list", "save", "reconfigure"] | None = None,
    workspace_id: str = "",
    list_id: str = "",
    list_name: str = "",
    priority: Literal[1, 2, 3, 4] | None = None,
    tags: str = "",
    due_date_offset_days: int | None = None,
    assignee_self: bool | None = None,
) -> str:
    """Set up and configure the ClickUp MCP.

    HOW TO USE:
    1. First time? Call with api_key="pk_YOUR_KEY_HERE".
       Validates the key, identifies the user, discovers workspaces and lists
       (personal/private ones included) and saves everything locally.
    2. Pick a default list: step="choose_list" shows every list.
    3. Save it: step="save" list_id="..." list_name="..."
    4. Review the current setup: step="reconfigure"
    5. Change task defaults: step="save" with any of priority, tags,
       due_date_offset_days, assignee_self.

    The API key is at ClickUp > Settings > Apps > API Token and starts with "pk_".

    Args:
        api_key: Personal API token (starts with "pk_"). Required on first setup.
        step: Optional action after initial setup: choose_list, save, reconfigure
        workspace_id: Workspace ID (auto-detected if not provided)
        list_id: Default list ID to save
        list_name: Default list name to save
        priority: Default priority: 1=Urgent, 2=High, 3=Normal, 4=Low
        tags: Comma-separated default tags (e.g. 'via-claude,important')
        due_date_offset_days: Days from today for the default due date
        assignee_self: Auto-assign new tasks to yourself
    """
    req = onboarding.OnboardingRequest(
        api_key=api_key or None,
        step=step,
        workspace_id=workspace_id or None,
        list_id=list_id or None,
        list_name=list_name or None,
        priority=priority,
        tags=tags or None,
        due_date_offset_days=due_date_offset_days,
        assignee_self=assignee_self,
    )
    return await onboarding.run(req, get_store())
