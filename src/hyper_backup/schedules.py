"""
Schedule specifications.

A schedule is anything able to answer "when is the next run after this instant".
Two kinds are provided:

CronSchedule:
    A five-field cron expression (minute, hour, day-of-month, month, day-of-week)
    evaluated with croniter in the governing time zone.

IntervalSchedule:
    A fixed number of hours between runs.

`build_schedule` resolves the configured values into one of them. A cron expression
takes priority over an interval; with neither, backups run daily at midnight.
"""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import CroniterError, croniter

from hyper_backup.errors import ScheduleConfigError

logger = logging.getLogger(__name__)

DEFAULT_CRON_EXPRESSION = "0 0 * * *"
DEFAULT_INTERVAL_HOURS = 1
CRON_FIELD_COUNT = 5


class Schedule(Protocol):
    """
    Protocol class for schedules.
    """
    tz: tzinfo

    def next(self, after: datetime) -> datetime:
        """
        Return the first trigger instant strictly after `after`, in the schedule's time zone.
        """
        ...

    def describe(self) -> str:
        ...


def host_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def resolve_timezone(name: Optional[str], log: Optional[logging.Logger] = None) -> tzinfo:
    """
    Resolve a time zone name, falling back to the host default when it is unknown.

    Args:
        name (Optional[str]): IANA time zone name such as "Europe/Berlin".
        log (logging.Logger): Logger receiving the fallback warning.

    Returns:
        tzinfo: The requested zone, or the host default.
    """
    log = log or logger
    if not name or not name.strip():
        return host_timezone()
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        log.warning("Invalid TZ '%s', using system default: %s", name, e)
        return host_timezone()


def _as_zone(moment: datetime, tz: tzinfo) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


class CronSchedule:
    """
    Cron-expression schedule evaluated with croniter.
    """

    def __init__(self, expression: str, tz: Optional[tzinfo] = None):
        expression = (expression or "").strip()
        fields = expression.split()
        if len(fields) != CRON_FIELD_COUNT:
            raise ScheduleConfigError(
                f"Invalid cron expression '{expression}': expected {CRON_FIELD_COUNT} fields, got {len(fields)}"
            )
        if not croniter.is_valid(expression):
            raise ScheduleConfigError(f"Invalid cron expression '{expression}'")
        self.expression: str = expression
        self.tz: tzinfo = tz or host_timezone()
        try:
            # valid syntax can still never match, e.g. February 31st
            croniter(expression, datetime.now(self.tz)).get_next(datetime)
        except CroniterError as e:
            raise ScheduleConfigError(f"Cron expression '{expression}' never fires: {e}") from e

    def next(self, after: datetime) -> datetime:
        after = _as_zone(after, self.tz)
        cron = croniter(self.expression, after)
        candidate: datetime = cron.get_next(datetime)
        while candidate <= after:
            candidate = cron.get_next(datetime)
        return candidate

    def describe(self) -> str:
        return f"cron \"{self.expression}\""


class IntervalSchedule:
    """
    Fixed-interval schedule counted in whole hours.
    """

    def __init__(self, hours: int, tz: Optional[tzinfo] = None):
        if hours < 1:
            raise ScheduleConfigError(f"Interval must be at least one hour, got {hours}")
        self.hours: int = hours
        self.tz: tzinfo = tz or host_timezone()

    @property
    def period(self) -> timedelta:
        return timedelta(hours=self.hours)

    def next(self, after: datetime) -> datetime:
        return _as_zone(after, self.tz) + self.period

    def describe(self) -> str:
        return f"every {self.hours} hour(s)"


def parse_interval_hours(raw: Optional[str], log: Optional[logging.Logger] = None) -> int:
    """
    Parse an hour count leniently; anything unusable falls back to one hour.
    """
    log = log or logger
    try:
        hours = int(str(raw).strip())
    except (TypeError, ValueError):
        hours = 0
    if hours < 1:
        log.warning(
            "Invalid BACKUP_INTERVAL_HOURS '%s'. Using default %d hour(s)", raw, DEFAULT_INTERVAL_HOURS
        )
        return DEFAULT_INTERVAL_HOURS
    return hours


def build_schedule(
    cron_expression: Optional[str] = None,
    interval_hours: Optional[str] = None,
    tz: Optional[tzinfo] = None,
    log: Optional[logging.Logger] = None,
) -> Schedule:
    """
    Resolve the configured schedule.

    Args:
        cron_expression (Optional[str]): Five-field cron expression, wins over the interval.
        interval_hours (Optional[str]): Hour count as configured, validated leniently.
        tz (Optional[tzinfo]): Governing time zone, the host default when omitted.
        log (logging.Logger): Logger for fallbacks.

    Returns:
        Schedule: The schedule to trigger cycles with.

    Raises:
        ScheduleConfigError: If the cron expression is malformed.
    """
    log = log or logger
    if cron_expression and cron_expression.strip():
        return CronSchedule(cron_expression, tz)
    if interval_hours is not None and str(interval_hours).strip():
        return IntervalSchedule(parse_interval_hours(interval_hours, log), tz)
    log.info("No schedule set. Defaulting to daily at midnight.")
    return CronSchedule(DEFAULT_CRON_EXPRESSION, tz)
