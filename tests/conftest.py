import pytest

from clickup_mcp.config import ClickUpConfig, ConfigStore, TaskDefaults


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the config at a temp file and drop any real API key."""
    monkeypatch.setenv("CLICKUP_MCP_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.delenv("CLICKUP_API_KEY", raising=False)


@pytest.fixture
def store(tmp_path):
    return ConfigStore(str(tmp_path / "config.json"))


@pytest.fixture
def configured(store):
    config = ClickUpConfig(
        api_key="pk_stored_0000",
        workspace_id="9001",
        workspace_name="Acme",
        default_list_id="L1",
        default_list_name="Inbox",
        user_id="42",
        user_name="ana",
        user_email="ana@example.com",
        defaults=TaskDefaults(),
    )
    store.save(config)
    return config
