"""
Scheduled Backup Orchestration

This package triggers a fixed, ordered set of independent backup tasks on a cron or
fixed-interval schedule.

Core Concepts:

Service:
    A ServiceDescriptor names one backup task (a database dump, a file archive, a remote
    sync), the configuration keys it needs and a zero-argument callable that performs it.
    Optional services are skipped silently when unconfigured; required ones fail the cycle.

Cycle:
    One pass of the ServiceRunner over every service, in order. A failing or crashing
    service never stops its siblings; all failures are aggregated into one CycleOutcome.

Scheduler:
    The BackupScheduler runs a cycle on startup and then one per schedule tick. A
    SingleFlightGuard makes sure cycles never overlap, and a shutdown request lets the
    in-flight cycle finish before stopping.

Relationships:
    - A Scheduler drives many Cycles, strictly one after the other.
    - A Cycle runs each Service at most once.
"""

from .domain import CycleOutcome, FailureKind, ServiceDescriptor, ServiceFailure, ServiceResult
from .errors import CycleFailedError, HyperBackupError, ScheduleConfigError
from .guard import SingleFlightGuard
from .runner import ServiceRunner
from .scheduler import BackupScheduler, SchedulerState
from .schedules import CronSchedule, IntervalSchedule, Schedule, build_schedule

__all__ = [
    "BackupScheduler",
    "CronSchedule",
    "CycleFailedError",
    "CycleOutcome",
    "FailureKind",
    "HyperBackupError",
    "IntervalSchedule",
    "Schedule",
    "ScheduleConfigError",
    "SchedulerState",
    "ServiceDescriptor",
    "ServiceFailure",
    "ServiceResult",
    "ServiceRunner",
    "SingleFlightGuard",
    "build_schedule",
]
