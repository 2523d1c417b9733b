"""Backup scheduler service.

Runs one backup cycle on startup and then one per schedule tick until SIGINT or
SIGTERM. The schedule is a cron expression (BACKUP_SCHEDULE) or an hour count
(BACKUP_INTERVAL_HOURS); with neither, backups run daily at midnight.

Usage:
    hyper-backup [--schedule CRON] [--interval-hours N] [--tz ZONE] [--once] [--check]
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from hyper_backup.config import Settings, check_configuration
from hyper_backup.errors import ScheduleConfigError
from hyper_backup.logging_config import configure_logging, get_logger
from hyper_backup.scheduler import BackupScheduler
from hyper_backup.schedules import build_schedule, resolve_timezone
from hyper_backup.services import default_registry


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hyper-backup", description="Scheduled backup runner")
    parser.add_argument(
        "--schedule",
        default=settings.schedule,
        help="Five-field cron expression (default: BACKUP_SCHEDULE)",
    )
    parser.add_argument(
        "--interval-hours",
        default=settings.interval_hours,
        help="Hours between backups when no cron expression is set (default: BACKUP_INTERVAL_HOURS)",
    )
    parser.add_argument(
        "--tz",
        default=settings.timezone,
        help="Time zone used to evaluate the schedule (default: TZ, then the host zone)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single backup cycle and exit",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report which services are configured and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point.

    Returns:
        int: Process exit code.
    """

    settings = Settings()
    args = build_parser(settings).parse_args(argv)

    configure_logging(log_level=settings.log_level)
    logger = get_logger("hyper_backup")
    logger.info("Backup process starting")

    tz = resolve_timezone(args.tz, logger)
    try:
        schedule = build_schedule(args.schedule, args.interval_hours, tz, logger)
    except ScheduleConfigError as e:
        logger.error("Invalid BACKUP_SCHEDULE: %s", e)
        return 1

    registry = default_registry(settings.hooks_dir)
    check_configuration(registry.build(), log=logger)
    if args.check:
        return 0

    scheduler = BackupScheduler(schedule, registry, logger=logger)
    if args.once:
        outcome = scheduler.run_once()
        return 0 if outcome is not None and outcome.ok else 1

    asyncio.run(scheduler.run(handle_signals=True))
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
