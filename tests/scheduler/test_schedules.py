import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from hyper_backup.errors import ScheduleConfigError
from hyper_backup.schedules import (
    DEFAULT_CRON_EXPRESSION,
    CronSchedule,
    IntervalSchedule,
    build_schedule,
    parse_interval_hours,
    resolve_timezone,
)

TOKYO = ZoneInfo("Asia/Tokyo")


@pytest.mark.parametrize("expression", ["* * * * *", "0 0 * * *", "*/15 2-5 * * 1-5", "30 3 1 * *"])
def test_cron_next_is_strictly_after_now(expression: str) -> None:
    schedule = CronSchedule(expression, TOKYO)
    now = datetime.now(TOKYO)

    next_run = schedule.next(now)

    assert next_run > now
    assert next_run.utcoffset() == timedelta(hours=9)


def test_cron_next_on_boundary_moves_forward() -> None:
    schedule = CronSchedule("0 0 * * *", timezone.utc)
    boundary = datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)

    assert schedule.next(boundary) == datetime(2024, 3, 2, 0, 0, tzinfo=timezone.utc)


def test_cron_is_evaluated_in_governing_zone() -> None:
    schedule = CronSchedule("0 0 * * *", TOKYO)
    # 23:30 in Tokyo
    reference = datetime(2024, 1, 1, 14, 30, tzinfo=timezone.utc)

    next_run = schedule.next(reference)

    assert next_run == datetime(2024, 1, 2, 0, 0, tzinfo=TOKYO)
    assert next_run.hour == 0


def test_cron_accepts_naive_reference_as_local_to_zone() -> None:
    schedule = CronSchedule("30 * * * *", timezone.utc)

    assert schedule.next(datetime(2024, 1, 1, 10, 0)) == datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("expression", ["99 * * *", "* * * * * *", "61 * * * *", "not a cron", "", "0 0 31 2 *"])
def test_malformed_cron_is_rejected(expression: str) -> None:
    with pytest.raises(ScheduleConfigError):
        CronSchedule(expression)


def test_interval_schedule_adds_hours() -> None:
    schedule = IntervalSchedule(6, timezone.utc)
    reference = datetime(2024, 1, 1, 1, 0, tzinfo=timezone.utc)

    assert schedule.next(reference) == datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)
    assert schedule.describe() == "every 6 hour(s)"


@pytest.mark.parametrize("raw, expected", [("6", 6), (" 24 ", 24), ("0", 1), ("-3", 1), ("abc", 1), (None, 1)])
def test_parse_interval_hours(raw, expected: int) -> None:
    assert parse_interval_hours(raw) == expected


def test_invalid_interval_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    parse_interval_hours("soon")
    assert "Invalid BACKUP_INTERVAL_HOURS" in caplog.text


def test_cron_wins_over_interval() -> None:
    schedule = build_schedule("0 3 * * *", "6", timezone.utc)
    assert isinstance(schedule, CronSchedule)
    assert schedule.expression == "0 3 * * *"


def test_interval_used_without_cron() -> None:
    schedule = build_schedule(None, "12", timezone.utc)
    assert isinstance(schedule, IntervalSchedule)
    assert schedule.hours == 12


def test_default_is_daily_at_midnight() -> None:
    schedule = build_schedule(None, None, timezone.utc)
    assert isinstance(schedule, CronSchedule)
    assert schedule.expression == DEFAULT_CRON_EXPRESSION


def test_build_schedule_propagates_malformed_cron() -> None:
    with pytest.raises(ScheduleConfigError):
        build_schedule("99 * * *", "6")


def test_resolve_timezone() -> None:
    assert resolve_timezone("Asia/Tokyo") == TOKYO


def test_invalid_timezone_falls_back_to_host(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    tz = resolve_timezone("Mars/Olympus_Mons")

    assert tz is not None
    assert datetime.now(tz).utcoffset() == datetime.now().astimezone().utcoffset()
    assert "Invalid TZ" in caplog.text


def test_blank_timezone_is_host_default() -> None:
    assert datetime.now(resolve_timezone("")).utcoffset() == datetime.now().astimezone().utcoffset()
