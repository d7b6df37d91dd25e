"""Merge explicit task-creation fields with the configured defaults."""

import datetime as _dt
import logging
import math
from dataclasses import dataclass
from typing import Any

from clickup_mcp.config import VALID_PRIORITIES, ClickUpConfig, parse_csv
from clickup_mcp.errors import NoListConfigured

logger = logging.getLogger(__name__)

MS_TIMESTAMP_THRESHOLD = 10**12

_DATE_FORMATS = (
    "%Y",
    "%Y%m%d",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
)


def to_timestamp(value: Any) -> int | None:
    """Convert a date input to epoch milliseconds, or ``None`` if it can't be parsed.

    Numbers above 10^12 are epoch milliseconds. Anything else is read as a
    calendar date: ISO 8601 or one of ``_DATE_FORMATS``, so ``"2026"`` and
    ``"20260315"`` are dates, not small timestamps. Naive datetimes are local time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        text = str(int(value))
    else:
        text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        number = None
    if number is not None and math.isfinite(number) and number > MS_TIMESTAMP_THRESHOLD:
        return int(number)
    parsed = _parse_datetime(text)
    return int(parsed.timestamp() * 1000) if parsed else None


def _parse_datetime(text: str) -> _dt.datetime | None:
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _dt.datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return _dt.datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def end_of_day_after(days: int, now: _dt.datetime | None = None) -> int:
    """Epoch ms for 23:59:59.000 local time, ``days`` days from ``now``."""
    now = now or _dt.datetime.now()
    target = (now + _dt.timedelta(days=days)).replace(hour=23, minute=59, second=59, microsecond=0)
    return int(target.timestamp() * 1000)


def parse_user_ids(value: str | None) -> list[int] | None:
    """Comma-separated user ids to a de-duplicated list of ints, keeping input order."""
    ids: list[int] = []
    for part in parse_csv(value) or []:
        try:
            user_id = int(part)
        except ValueError:
            raise ValueError(f"Invalid user ID '{part}': ClickUp user IDs are numeric") from None
        if user_id not in ids:
            ids.append(user_id)
    return ids or None


def validate_priority(priority: int | None) -> int | None:
    if priority is None:
        return None
    if isinstance(priority, bool) or priority not in VALID_PRIORITIES:
        raise ValueError(f"Invalid priority {priority!r}: use 1=Urgent, 2=High, 3=Normal, 4=Low")
    return int(priority)


@dataclass
class TaskFields:
    """What the caller of ``clickup_create_task`` supplied explicitly."""

    name: str
    description: str | None = None
    list_id: str | None = None
    status: str | None = None
    priority: int | None = None
    assignees: str | None = None
    tags: str | None = None
    due_date: str | None = None
    start_date: str | None = None
    time_estimate: int | None = None
    parent: str | None = None
    notify_all: bool | None = None


def resolve_task_body(
    fields: TaskFields,
    config: ClickUpConfig | None,
    now: _dt.datetime | None = None,
) -> tuple[str, dict[str, Any]]:
    """Return ``(list_id, request_body)``; an explicit value always beats a default."""
    list_id = fields.list_id or (config.default_list_id if config else None)
    if not list_id:
        raise NoListConfigured()

    defaults = config.defaults if config else None
    body: dict[str, Any] = {"name": fields.name}

    if fields.description:
        body["markdown_description"] = fields.description

    assignees = parse_user_ids(fields.assignees)
    if assignees is None and defaults and defaults.assignee_self and config.user_id:
        try:
            assignees = parse_user_ids(config.user_id)
        except ValueError:
            logger.warning("Stored user_id %r is not numeric; not self-assigning", config.user_id)
    if assignees:
        body["assignees"] = assignees

    tags = parse_csv(fields.tags)
    if tags is None and defaults and defaults.tags:
        tags = list(defaults.tags)
    if tags:
        body["tags"] = tags

    if fields.status:
        body["status"] = fields.status

    priority = validate_priority(fields.priority)
    if priority is None and defaults:
        priority = defaults.priority
    if priority is not None:
        body["priority"] = priority

    due_date = None
    if fields.due_date:
        due_date = to_timestamp(fields.due_date)
    elif defaults and defaults.due_date_offset_days is not None:
        due_date = end_of_day_after(defaults.due_date_offset_days, now)
    if due_date is not None:
        body["due_date"] = due_date

    if fields.start_date:
        start_date = to_timestamp(fields.start_date)
        if start_date is not None:
            body["start_date"] = start_date
    if fields.time_estimate:
        body["time_estimate"] = fields.time_estimate
    if fields.parent:
        body["parent"] = fields.parent
    body["notify_all"] = True if fields.notify_all is None else fields.notify_all

    return list_id, body
