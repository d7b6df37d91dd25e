"""Onboarding: validate a personal API key, discover the workspace, persist defaults.

Main flow (``api_key`` given) does everything in one call. Without a key,
``step`` selects an auxiliary action:

    choose_list   render every list so the user can pick a default
    save          merge the given workspace/list/defaults into the stored config
    reconfigure   show the stored config
"""

import logging
from dataclasses import dataclass

from clickup_mcp import api
from clickup_mcp.config import (
    PRIORITY_LABELS,
    ClickUpConfig,
    ConfigPatch,
    ConfigStore,
    DefaultsPatch,
    TaskDefaults,
    credential_override,
    parse_csv,
    resolve_api_key,
)
from clickup_mcp.discovery import discover
from clickup_mcp.errors import ClickUpError, InvalidCredential, NotConfigured, NoWorkspaces
from clickup_mcp.formatting import mask_key
from clickup_mcp.task_defaults import validate_priority

logger = logging.getLogger(__name__)

STEPS = ("choose_list", "save", "reconfigure")

SETUP_INSTRUCTIONS = """**ClickUp MCP — Setup Required**

To get started, I need your ClickUp personal API token.

**How to get it:**
1. Open ClickUp
2. Click your avatar (bottom-left)
3. Go to **Settings**
4. Click **Apps** in the sidebar
5. Copy your **API Token** (starts with `pk_`)

Then call: `clickup_onboarding` with `api_key="pk_YOUR_TOKEN"`"""

SAVE_LIST_HINT = 'call `clickup_onboarding` with `step="save"` `list_id="<ID>"` `list_name="<name>"`'


@dataclass
class OnboardingRequest:
    api_key: str | None = None
    step: str | None = None
    workspace_id: str | None = None
    list_id: str | None = None
    list_name: str | None = None
    priority: int | None = None
    tags: str | None = None
    due_date_offset_days: int | None = None
    assignee_self: bool | None = None

    def defaults_patch(self) -> DefaultsPatch:
        return DefaultsPatch(
            assignee_self=self.assignee_self,
            priority=validate_priority(self.priority),
            tags=parse_csv(self.tags),
            due_date_offset_days=self.due_date_offset_days,
        )

    def config_patch(self) -> ConfigPatch:
        return ConfigPatch(
            workspace_id=self.workspace_id or None,
            default_list_id=self.list_id or None,
            default_list_name=self.list_name or None,
            defaults=self.defaults_patch(),
        )


def render_defaults(defaults: TaskDefaults) -> list[str]:
    offset = defaults.due_date_offset_days
    return [
        f"  - Auto-assign to me: {defaults.assignee_self}",
        f"  - Priority: {defaults.priority} ({PRIORITY_LABELS[defaults.priority]})",
        f"  - Tags: {', '.join(defaults.tags) or 'none'}",
        f"  - Due date: today + {offset} day(s)" if offset is not None else "  - Due date: none",
    ]


def render_config(config: ClickUpConfig, store: ConfigStore, title: str) -> str:
    list_label = config.default_list_name or config.default_list_id or "(not set)"
    lines = [
        f"**{title}**",
        "",
        f"**API Key:** `{mask_key(config.api_key)}`",
        f"**Workspace:** {config.workspace_name or '?'} (ID: `{config.workspace_id or '?'}`)",
        f"**Default list:** {list_label} (ID: `{config.default_list_id or '?'}`)",
        f"**User:** {config.user_name or '?'} ({config.user_email or '?'})",
        f"**User ID:** `{config.user_id or '?'}`",
        "",
        "**Defaults:**",
        *render_defaults(config.defaults),
        "",
        f"Config file: `{store.path}`",
    ]
    return "\n".join(lines)


# ── Main flow ────────────────────────────────────────────────


async def full_setup(req: OnboardingRequest, store: ConfigStore) -> str:
    """Validate ``req.api_key``, discover its workspace and save a fresh config.

    Nothing is written unless every critical step succeeds.
    """
    api_key = req.api_key
    defaults_patch = req.defaults_patch()
    existing = store.load()

    with credential_override(api_key):
        try:
            user = (await api.get_authorized_user()).get("user") or {}
        except ClickUpError as e:
            logger.info("Onboarding: API key validation failed")
            raise InvalidCredential(str(e)) from e

        teams = (await api.get_teams()).get("teams") or []
        if not teams:
            raise NoWorkspaces()
        workspace = next((t for t in teams if str(t["id"]) == req.workspace_id), teams[0])
        workspace_id = str(workspace["id"])

        hierarchy = await discover(workspace_id)

    keep_list = existing is not None and existing.workspace_id == workspace_id
    config = ClickUpConfig(
        api_key=api_key,
        workspace_id=workspace_id,
        workspace_name=workspace.get("name"),
        default_list_id=req.list_id or (existing.default_list_id if keep_list else None),
        default_list_name=req.list_name or (existing.default_list_name if keep_list else None),
        user_id=str(user["id"]) if user.get("id") is not None else None,
        user_name=user.get("username"),
        user_email=user.get("email"),
        defaults=defaults_patch.apply(existing.defaults if existing else TaskDefaults()),
    )
    store.save(config)
    logger.info(
        "Onboarding complete: workspace %s, %d lists discovered", workspace_id, len(hierarchy.lists)
    )

    lines = [
        "**ClickUp MCP configured successfully!**",
        "",
        f"**API Key:** `{mask_key(api_key)}`",
        f"**User:** {config.user_name} ({config.user_email})",
        f"**User ID:** `{config.user_id}`",
        f"**Workspace:** {config.workspace_name} (ID: `{workspace_id}`)",
    ]
    others = [t for t in teams if str(t["id"]) != workspace_id]
    if others:
        lines.append("\n**Other workspaces available:**")
        lines.extend(f"  - {t.get('name')} (ID: `{t['id']}`)" for t in others)

    lines.append(f"\n---\n**Lists found ({len(hierarchy.lists)}):**{hierarchy.text}")

    if config.default_list_id:
        lines.append(f"\n**Default list:** {config.default_list_name or config.default_list_id}")
    else:
        lines.append(
            "\n---\n**Next step:** Choose a default list.\n"
            f"To set one, {SAVE_LIST_HINT}\n"
            "Or just start using the tools — you can specify list_id per task."
        )

    lines.append("\n**Default task rules:**")
    lines.extend(render_defaults(config.defaults))
    lines.append(f"\nConfig saved at: `{store.path}`")
    return "\n".join(lines)


# ── Auxiliary steps ──────────────────────────────────────────


async def choose_list(workspace_id: str | None, store: ConfigStore) -> str:
    config = store.load()
    team_id = workspace_id or (config.workspace_id if config else None)
    if not team_id:
        raise NotConfigured("No workspace configured.")

    hierarchy = await discover(team_id)
    return (
        f"**All lists (including personal/private):**\n{hierarchy.text}\n\n"
        f"**Total: {len(hierarchy.lists)} lists**\n\n"
        f"To set a default list, {SAVE_LIST_HINT}"
    )


def save(req: OnboardingRequest, store: ConfigStore) -> str:
    config = store.update(req.config_patch())
    logger.info("Onboarding: configuration updated")
    return render_config(config, store, "Configuration updated!")


def reconfigure(store: ConfigStore) -> str:
    config = store.load()
    if config is None:
        raise NotConfigured()
    return (
        render_config(config, store, "Current ClickUp MCP Configuration:")
        + "\n\n**To change:**\n"
        '  - New API key: call with `api_key="pk_..."`\n'
        '  - Change default list: call with `step="save"` `list_id="..."` `list_name="..."`\n'
        '  - Change defaults: call with `step="save"` and any of: '
        "priority, tags, due_date_offset_days, assignee_self"
    )


async def run(req: OnboardingRequest, store: ConfigStore) -> str:
    """Dispatch an onboarding call: full setup when a key is given, else ``req.step``."""
    if req.api_key:
        return await full_setup(req, store)
    if req.step == "choose_list":
        return await choose_list(req.workspace_id, store)
    if req.step == "save":
        return save(req, store)
    if req.step == "reconfigure":
        return reconfigure(store)
    if req.step:
        raise ValueError(f"Unknown step {req.step!r}; expected one of: {', '.join(STEPS)}")
    if resolve_api_key(store):
        return reconfigure(store)
    return SETUP_INSTRUCTIONS
