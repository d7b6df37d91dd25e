"""Tests for the onboarding flow: full setup and the auxiliary steps."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from clickup_mcp import onboarding
from clickup_mcp.config import ClickUpConfig, TaskDefaults, resolve_api_key
from clickup_mcp.discovery import Hierarchy, ListEntry
from clickup_mcp.errors import InvalidCredential, NotConfigured, NoWorkspaces, RemoteCallFailed
from clickup_mcp.onboarding import OnboardingRequest

USER = {"user": {"id": 42, "username": "ana", "email": "ana@example.com"}}
TEAMS = {"teams": [{"id": 1, "name": "First"}, {"id": 2, "name": "Second"}]}
HIERARCHY = Hierarchy(
    text="\n**Space: Eng**\n  - Backlog (ID: `10`)",
    lists=[ListEntry(id="10", name="Backlog", space="Eng")],
)


def _remote(user=USER, teams=TEAMS, hierarchy=HIERARCHY):
    user_mock = AsyncMock(side_effect=user) if isinstance(user, Exception) else AsyncMock(return_value=user)
    return (
        patch("clickup_mcp.api.get_authorized_user", user_mock),
        patch("clickup_mcp.api.get_teams", AsyncMock(return_value=teams)),
        patch("clickup_mcp.onboarding.discover", AsyncMock(return_value=hierarchy)),
    )


async def _run(req, store, **remote):
    p_user, p_teams, p_discover = _remote(**remote)
    with p_user, p_teams, p_discover as discover_mock:
        text = await onboarding.run(req, store)
    return text, discover_mock


class TestFullSetup:
    @pytest.mark.asyncio
    async def test_creates_config_with_fallback_defaults(self, store):
        text, discover_mock = await _run(OnboardingRequest(api_key="pk_live_123456789"), store)

        config = store.load()
        assert config.api_key == "pk_live_123456789"
        assert config.workspace_id == "1"
        assert config.workspace_name == "First"
        assert config.user_id == "42"
        assert config.user_email == "ana@example.com"
        assert config.default_list_id is None
        assert config.defaults.priority == 3
        assert config.defaults.tags == ["via-claude"]
        assert config.defaults.due_date_offset_days == 1
        assert config.defaults.assignee_self is True

        discover_mock.assert_awaited_once_with("1")
        assert "configured successfully" in text
        assert "Second (ID: `2`)" in text
        assert "Lists found (1)" in text
        assert "Next step" in text
        assert "pk_live_123456789" not in text

    @pytest.mark.asyncio
    async def test_override_is_used_during_setup_and_cleared_after(self, store):
        seen = []

        async def whoami():
            seen.append(resolve_api_key(store))
            return USER

        with patch("clickup_mcp.api.get_authorized_user", whoami), \
                patch("clickup_mcp.api.get_teams", AsyncMock(return_value=TEAMS)), \
                patch("clickup_mcp.onboarding.discover", AsyncMock(return_value=HIERARCHY)):
            await onboarding.run(OnboardingRequest(api_key="pk_new"), store)

        assert seen == ["pk_new"]
        # after setup the key comes from the saved file, not the override
        store.save(ClickUpConfig(api_key="pk_other"))
        assert resolve_api_key(store) == "pk_other"

    @pytest.mark.asyncio
    async def test_selects_requested_workspace_and_list(self, store):
        req = OnboardingRequest(api_key="pk_x", workspace_id="2", list_id="10", list_name="Backlog")
        text, discover_mock = await _run(req, store)

        config = store.load()
        assert config.workspace_id == "2"
        assert config.default_list_id == "10"
        discover_mock.assert_awaited_once_with("2")
        assert "**Default list:** Backlog" in text
        assert "Next step" not in text

    @pytest.mark.asyncio
    async def test_unknown_workspace_falls_back_to_first(self, store):
        await _run(OnboardingRequest(api_key="pk_x", workspace_id="999"), store)
        assert store.load().workspace_id == "1"

    @pytest.mark.asyncio
    async def test_caller_defaults_merge_over_existing(self, store, configured):
        store.save(ClickUpConfig(
            api_key="pk_old",
            workspace_id="1",
            default_list_id="L1",
            default_list_name="Inbox",
            defaults=TaskDefaults(priority=2, tags=["mine"], due_date_offset_days=5),
        ))
        req = OnboardingRequest(api_key="pk_new", priority=4, assignee_self=False)
        await _run(req, store)

        config = store.load()
        assert config.api_key == "pk_new"
        assert config.defaults.priority == 4
        assert config.defaults.assignee_self is False
        assert config.defaults.tags == ["mine"]
        assert config.defaults.due_date_offset_days == 5
        # same workspace: the chosen default list survives re-onboarding
        assert config.default_list_id == "L1"

    @pytest.mark.asyncio
    async def test_switching_workspace_drops_old_default_list(self, store, configured):
        await _run(OnboardingRequest(api_key="pk_new"), store)
        config = store.load()
        assert config.workspace_id == "1"
        assert config.default_list_id is None

    @pytest.mark.asyncio
    async def test_invalid_key_writes_nothing(self, store):
        with pytest.raises(InvalidCredential, match="ClickUp API 401"):
            await _run(
                OnboardingRequest(api_key="pk_bad"),
                store,
                user=RemoteCallFailed('{"err": "Token invalid"}', status_code=401),
            )
        assert not store.exists()
        assert resolve_api_key(store) is None

    @pytest.mark.asyncio
    async def test_invalid_key_leaves_prior_file_untouched(self, store, configured):
        with open(store.path) as f:
            before = f.read()
        with pytest.raises(InvalidCredential):
            await _run(
                OnboardingRequest(api_key="pk_bad"),
                store,
                user=RemoteCallFailed("Token invalid", status_code=401),
            )
        with open(store.path) as f:
            assert f.read() == before
        assert resolve_api_key(store) == "pk_stored_0000"

    @pytest.mark.asyncio
    async def test_garbled_user_response_is_an_invalid_credential(self, store):
        garbled = httpx.Response(200, text="<html>login</html>")
        with patch.object(httpx.AsyncClient, "request", AsyncMock(return_value=garbled)):
            with pytest.raises(InvalidCredential, match="Expected JSON"):
                await onboarding.run(OnboardingRequest(api_key="pk_x"), store)
        assert not store.exists()

    @pytest.mark.asyncio
    async def test_no_workspaces(self, store):
        with pytest.raises(NoWorkspaces):
            await _run(OnboardingRequest(api_key="pk_x"), store, teams={"teams": []})
        assert not store.exists()

    @pytest.mark.asyncio
    async def test_discovery_failure_is_fatal(self, store):
        p_user, p_teams, _ = _remote()
        failing = patch(
            "clickup_mcp.onboarding.discover",
            AsyncMock(side_effect=RemoteCallFailed("down", status_code=503)),
        )
        with p_user, p_teams, failing:
            with pytest.raises(RemoteCallFailed):
                await onboarding.run(OnboardingRequest(api_key="pk_x"), store)
        assert not store.exists()


class TestAuxiliarySteps:
    def test_save_without_config_raises_and_creates_nothing(self, store):
        with pytest.raises(NotConfigured):
            onboarding.save(OnboardingRequest(step="save", list_id="L9"), store)
        assert not store.exists()

    def test_save_merges_fields(self, store, configured):
        text = onboarding.save(
            OnboardingRequest(step="save", list_id="L9", list_name="Ops", tags="a, b", due_date_offset_days=0),
            store,
        )
        config = store.load()
        assert config.default_list_id == "L9"
        assert config.default_list_name == "Ops"
        assert config.defaults.tags == ["a", "b"]
        assert config.defaults.due_date_offset_days == 0
        assert config.defaults.priority == 3
        assert config.api_key == "pk_stored_0000"
        assert "Configuration updated!" in text
        assert "Ops" in text

    def test_save_new_list_without_name_drops_old_name(self, store, configured):
        text = onboarding.save(OnboardingRequest(step="save", list_id="L9"), store)
        config = store.load()
        assert config.default_list_id == "L9"
        assert config.default_list_name is None
        assert "Inbox" not in text

    def test_save_new_workspace_drops_default_list(self, store, configured):
        onboarding.save(OnboardingRequest(step="save", workspace_id="77"), store)
        config = store.load()
        assert config.workspace_id == "77"
        assert config.workspace_name is None
        assert config.default_list_id is None

    def test_save_rejects_bad_priority(self, store, configured):
        with pytest.raises(ValueError):
            onboarding.save(OnboardingRequest(step="save", priority=0), store)
        assert store.load() == configured

    def test_reconfigure_renders_record(self, store, configured):
        text = onboarding.reconfigure(store)
        assert "Acme (ID: `9001`)" in text
        assert "Inbox (ID: `L1`)" in text
        assert "Priority: 3 (Normal)" in text
        assert store.path in text
        assert "pk_stored_0000" not in text

    def test_reconfigure_without_config(self, store):
        with pytest.raises(NotConfigured):
            onboarding.reconfigure(store)

    @pytest.mark.asyncio
    async def test_choose_list_uses_persisted_workspace(self, store, configured):
        with patch("clickup_mcp.onboarding.discover", AsyncMock(return_value=HIERARCHY)) as discover_mock:
            text = await onboarding.run(OnboardingRequest(step="choose_list"), store)
        discover_mock.assert_awaited_once_with("9001")
        assert "**Total: 1 lists**" in text

    @pytest.mark.asyncio
    async def test_choose_list_prefers_explicit_workspace(self, store, configured):
        with patch("clickup_mcp.onboarding.discover", AsyncMock(return_value=HIERARCHY)) as discover_mock:
            await onboarding.run(OnboardingRequest(step="choose_list", workspace_id="77"), store)
        discover_mock.assert_awaited_once_with("77")

    @pytest.mark.asyncio
    async def test_choose_list_without_workspace(self, store):
        with pytest.raises(NotConfigured, match="No workspace configured"):
            await onboarding.run(OnboardingRequest(step="choose_list"), store)

    @pytest.mark.asyncio
    async def test_no_step_unconfigured_gives_instructions(self, store):
        text = await onboarding.run(OnboardingRequest(), store)
        assert text == onboarding.SETUP_INSTRUCTIONS

    @pytest.mark.asyncio
    async def test_no_step_configured_behaves_as_reconfigure(self, store, configured):
        text = await onboarding.run(OnboardingRequest(), store)
        assert text.startswith("**Current ClickUp MCP Configuration:**")

    @pytest.mark.asyncio
    async def test_unknown_step(self, store):
        with pytest.raises(ValueError, match="Unknown step"):
            await onboarding.run(OnboardingRequest(step="explode"), store)
