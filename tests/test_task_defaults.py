import datetime as _dt

import pytest

from clickup_mcp.config import ClickUpConfig, TaskDefaults
from clickup_mcp.errors import NoListConfigured
from clickup_mcp.task_defaults import (
    TaskFields,
    end_of_day_after,
    parse_user_ids,
    resolve_task_body,
    to_timestamp,
)

NOW = _dt.datetime(2026, 3, 10, 15, 30, 12, 345000)


def _config(**overrides):
    values = dict(default_list_id="L1", user_id="42", defaults=TaskDefaults())
    values.update(overrides)
    return ClickUpConfig(**values)


def _ms(dt):
    return int(dt.timestamp() * 1000)


class TestResolveTaskBody:
    def test_defaults_fill_everything(self):
        list_id, body = resolve_task_body(TaskFields(name="Write report"), _config(), now=NOW)
        assert list_id == "L1"
        assert body["priority"] == 3
        assert body["tags"] == ["via-claude"]
        assert body["assignees"] == [42]
        assert body["due_date"] == _ms(_dt.datetime(2026, 3, 11, 23, 59, 59))
        assert body["notify_all"] is True

    def test_explicit_values_win(self):
        _, body = resolve_task_body(
            TaskFields(name="Hotfix", priority=1, tags="urgent,ops", assignees="7, 8,7"),
            _config(defaults=TaskDefaults(priority=4, tags=["x"])),
            now=NOW,
        )
        assert body["priority"] == 1
        assert body["tags"] == ["urgent", "ops"]
        assert body["assignees"] == [7, 8]

    def test_explicit_list_beats_default(self):
        list_id, _ = resolve_task_body(TaskFields(name="t", list_id="L9"), _config(), now=NOW)
        assert list_id == "L9"

    def test_no_list_anywhere(self):
        with pytest.raises(NoListConfigured):
            resolve_task_body(TaskFields(name="t"), _config(default_list_id=None))

    def test_no_config_needs_explicit_list(self):
        with pytest.raises(NoListConfigured):
            resolve_task_body(TaskFields(name="t"), None)

    def test_no_config_sends_only_explicit_fields(self):
        list_id, body = resolve_task_body(TaskFields(name="t", list_id="L5"), None)
        assert list_id == "L5"
        assert body == {"name": "t", "notify_all": True}

    def test_assignee_self_disabled(self):
        _, body = resolve_task_body(
            TaskFields(name="t"), _config(defaults=TaskDefaults(assignee_self=False)), now=NOW
        )
        assert "assignees" not in body

    def test_assignee_self_without_user_id(self):
        _, body = resolve_task_body(TaskFields(name="t"), _config(user_id=None), now=NOW)
        assert "assignees" not in body

    def test_non_numeric_stored_user_id_skips_self_assignment(self, caplog):
        _, body = resolve_task_body(TaskFields(name="t"), _config(user_id="ana"), now=NOW)
        assert "assignees" not in body
        assert "not numeric" in caplog.text

    def test_empty_default_tags_are_omitted(self):
        _, body = resolve_task_body(TaskFields(name="t"), _config(defaults=TaskDefaults(tags=[])), now=NOW)
        assert "tags" not in body

    def test_no_offset_means_no_due_date(self):
        _, body = resolve_task_body(
            TaskFields(name="t"), _config(defaults=TaskDefaults(due_date_offset_days=None)), now=NOW
        )
        assert "due_date" not in body

    def test_explicit_due_date(self):
        _, body = resolve_task_body(TaskFields(name="t", due_date="1767225600000"), _config(), now=NOW)
        assert body["due_date"] == 1767225600000

    def test_basic_iso_due_date_is_not_read_as_epoch_seconds(self):
        _, body = resolve_task_body(TaskFields(name="t", due_date="20260315"), _config(), now=NOW)
        assert body["due_date"] == _ms(_dt.datetime(2026, 3, 15))

    def test_unparseable_due_date_is_omitted(self):
        _, body = resolve_task_body(TaskFields(name="t", due_date="next blue moon"), _config(), now=NOW)
        assert "due_date" not in body

    def test_invalid_explicit_priority(self):
        with pytest.raises(ValueError, match="priority"):
            resolve_task_body(TaskFields(name="t", priority=7), _config())

    def test_optional_fields_pass_through(self):
        _, body = resolve_task_body(
            TaskFields(
                name="t",
                description="**hi**",
                status="in progress",
                start_date="2026-03-01",
                time_estimate=3_600_000,
                parent="abc",
                notify_all=False,
            ),
            _config(),
            now=NOW,
        )
        assert body["markdown_description"] == "**hi**"
        assert body["status"] == "in progress"
        assert body["start_date"] == _ms(_dt.datetime(2026, 3, 1))
        assert body["time_estimate"] == 3_600_000
        assert body["parent"] == "abc"
        assert body["notify_all"] is False


class TestToTimestamp:
    def test_millisecond_values_pass_through(self):
        assert to_timestamp("1767225600000") == 1767225600000
        assert to_timestamp(1767225600000) == 1767225600000

    def test_bare_year_is_a_calendar_date(self):
        assert to_timestamp("2026") == _ms(_dt.datetime(2026, 1, 1))

    def test_basic_iso_date_is_a_calendar_date(self):
        assert to_timestamp("20260315") == _ms(_dt.datetime(2026, 3, 15))
        assert to_timestamp(20260315) == _ms(_dt.datetime(2026, 3, 15))

    def test_small_numbers_are_not_timestamps(self):
        assert to_timestamp("1767225600") is None

    def test_iso_with_zulu(self):
        assert to_timestamp("2026-01-01T00:00:00Z") == 1767225600000

    def test_iso_with_offset(self):
        assert to_timestamp("2026-01-01T03:00:00+03:00") == 1767225600000

    def test_naive_date_is_local_midnight(self):
        assert to_timestamp("2026-03-01") == _ms(_dt.datetime(2026, 3, 1))

    def test_slash_formats(self):
        assert to_timestamp("2026/03/01 09:30") == _ms(_dt.datetime(2026, 3, 1, 9, 30))
        assert to_timestamp("01/03/2026") == _ms(_dt.datetime(2026, 3, 1))

    @pytest.mark.parametrize("value", [None, "", "   ", "soon", True, float("inf")])
    def test_unparseable(self, value):
        assert to_timestamp(value) is None


def test_end_of_day_after():
    assert end_of_day_after(0, now=NOW) == _ms(_dt.datetime(2026, 3, 10, 23, 59, 59))
    assert end_of_day_after(5, now=NOW) == _ms(_dt.datetime(2026, 3, 15, 23, 59, 59))


def test_parse_user_ids_rejects_non_numeric():
    assert parse_user_ids("") is None
    with pytest.raises(ValueError, match="abc"):
        parse_user_ids("1,abc")
