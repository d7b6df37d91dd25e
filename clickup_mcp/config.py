"""Local configuration: the persisted record, its store, and credential resolution.

The record lives in a single JSON file (``~/.clickup-mcp/config.json`` unless
``CLICKUP_MCP_CONFIG`` points elsewhere). It is always read and written whole;
partial updates go through :class:`ConfigPatch` and :func:`apply_patch`.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Iterator

from clickup_mcp.errors import NotConfigured

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.clickup-mcp/config.json")
API_KEY_ENV = "CLICKUP_API_KEY"
CONFIG_PATH_ENV = "CLICKUP_MCP_CONFIG"

VALID_PRIORITIES = (1, 2, 3, 4)
DEFAULT_PRIORITY = 3
DEFAULT_TAGS = ("via-claude",)
PRIORITY_LABELS = {1: "Urgent", 2: "High", 3: "Normal", 4: "Low"}


def normalize_priority(value: Any) -> int:
    """Coerce a stored priority to 1-4; anything else means normal (3)."""
    if isinstance(value, bool):
        return DEFAULT_PRIORITY
    try:
        priority = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    return priority if priority in VALID_PRIORITIES else DEFAULT_PRIORITY


def parse_csv(value: str | None) -> list[str] | None:
    """Split a comma-separated parameter, dropping blanks. Empty input gives None."""
    if not value:
        return None
    items = [part.strip() for part in value.split(",")]
    items = [item for item in items if item]
    return items or None


# ── Record ───────────────────────────────────────────────────


@dataclass
class TaskDefaults:
    assignee_self: bool = True
    priority: int = DEFAULT_PRIORITY
    tags: list[str] = field(default_factory=lambda: list(DEFAULT_TAGS))
    due_date_offset_days: int | None = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TaskDefaults":
        if not isinstance(data, dict):
            return cls()
        tags = data.get("tags")
        offset = data.get("due_date_offset_days", 1)
        return cls(
            assignee_self=bool(data.get("assignee_self", True)),
            priority=normalize_priority(data.get("priority")),
            tags=[str(t) for t in tags] if isinstance(tags, list) else list(DEFAULT_TAGS),
            due_date_offset_days=int(offset) if isinstance(offset, (int, float)) else None,
        )


@dataclass
class ClickUpConfig:
    api_key: str | None = None
    workspace_id: str | None = None
    workspace_name: str | None = None
    default_list_id: str | None = None
    default_list_name: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    defaults: TaskDefaults = field(default_factory=TaskDefaults)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClickUpConfig":
        def _str(key: str) -> str | None:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            api_key=_str("api_key"),
            workspace_id=_str("workspace_id"),
            workspace_name=_str("workspace_name"),
            default_list_id=_str("default_list_id"),
            default_list_name=_str("default_list_name"),
            user_id=_str("user_id"),
            user_name=_str("user_name"),
            user_email=_str("user_email"),
            defaults=TaskDefaults.from_dict(data.get("defaults")),
        )


# ── Sparse patches ───────────────────────────────────────────


@dataclass
class DefaultsPatch:
    """Field-level overrides for :class:`TaskDefaults`; ``None`` keeps the current value."""

    assignee_self: bool | None = None
    priority: int | None = None
    tags: list[str] | None = None
    due_date_offset_days: int | None = None

    def apply(self, base: TaskDefaults) -> TaskDefaults:
        return TaskDefaults(
            assignee_self=base.assignee_self if self.assignee_self is None else self.assignee_self,
            priority=base.priority if self.priority is None else normalize_priority(self.priority),
            tags=list(base.tags) if not self.tags else list(self.tags),
            due_date_offset_days=(
                base.due_date_offset_days
                if self.due_date_offset_days is None
                else self.due_date_offset_days
            ),
        )


@dataclass
class ConfigPatch:
    """Sparse update of a :class:`ClickUpConfig`; ``None`` keeps the current value.

    Changing ``workspace_id`` without also giving ``workspace_name`` clears the
    stored name, and drops the default list unless a new one is given, since
    both describe the old workspace. Likewise a new ``default_list_id`` without
    ``default_list_name`` clears the stored list name.
    """

    workspace_id: str | None = None
    workspace_name: str | None = None
    default_list_id: str | None = None
    default_list_name: str | None = None
    defaults: DefaultsPatch = field(default_factory=DefaultsPatch)


def apply_patch(config: ClickUpConfig, patch: ConfigPatch) -> ClickUpConfig:
    """Return a new record with every non-None field of ``patch`` merged over ``config``."""
    changes: dict[str, Any] = {}
    if patch.workspace_id is not None:
        changes["workspace_id"] = patch.workspace_id
        if patch.workspace_id != config.workspace_id:
            if patch.workspace_name is None:
                changes["workspace_name"] = None
            if patch.default_list_id is None:
                changes["default_list_id"] = None
                changes["default_list_name"] = None
    if patch.workspace_name is not None:
        changes["workspace_name"] = patch.workspace_name
    if patch.default_list_id is not None:
        changes["default_list_id"] = patch.default_list_id
        if patch.default_list_id != config.default_list_id and patch.default_list_name is None:
            changes["default_list_name"] = None
    if patch.default_list_name is not None:
        changes["default_list_name"] = patch.default_list_name
    changes["defaults"] = patch.defaults.apply(config.defaults)
    return replace(config, **changes)


# ── Store ────────────────────────────────────────────────────


class ConfigStore:
    """Whole-record JSON persistence at a fixed path."""

    def __init__(self, path: str):
        self._path = os.path.abspath(os.path.expanduser(path))

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.isfile(self._path)

    def load(self) -> ClickUpConfig | None:
        """Read the record. Missing, unreadable or malformed files give ``None``."""
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config at %s: %s", self._path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring config at %s: not a JSON object", self._path)
            return None
        return ClickUpConfig.from_dict(data)

    def save(self, config: ClickUpConfig) -> None:
        """Replace the file's content with ``config`` via temp file + rename."""
        directory = os.path.dirname(self._path)
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".config.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
        logger.debug("Saved config to %s", self._path)

    def update(self, patch: ConfigPatch) -> ClickUpConfig:
        """Load, merge ``patch`` and save. Nothing is written when no record exists."""
        existing = self.load()
        if existing is None:
            raise NotConfigured()
        merged = apply_patch(existing, patch)
        self.save(merged)
        return merged


def get_store() -> ConfigStore:
    """Store for the current environment (``CLICKUP_MCP_CONFIG`` or the default path)."""
    return ConfigStore(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)


# ── Credential resolution ────────────────────────────────────

_api_key_override: ContextVar[str | None] = ContextVar("clickup_api_key_override", default=None)


@contextmanager
def credential_override(api_key: str) -> Iterator[None]:
    """Use ``api_key`` for every API call made inside the block.

    The override is never persisted and is reset however the block exits.
    """
    token = _api_key_override.set(api_key)
    try:
        yield
    finally:
        _api_key_override.reset(token)


def resolve_api_key(store: ConfigStore | None = None) -> str | None:
    """Active API key: onboarding override, then ``CLICKUP_API_KEY``, then the config file."""
    override = _api_key_override.get()
    if override:
        return override
    env_key = os.getenv(API_KEY_ENV)
    if env_key:
        return env_key
    config = (store or get_store()).load()
    if config and config.api_key:
        return config.api_key
    return None


def require_api_key(store: ConfigStore | None = None) -> str:
    api_key = resolve_api_key(store)
    if not api_key:
        raise NotConfigured("No API key configured.")
    return api_key
