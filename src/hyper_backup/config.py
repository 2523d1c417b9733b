import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hyper_backup.domain.service import ServiceDescriptor
from hyper_backup.logging_config import log_divider

logger = logging.getLogger(__name__)

REMOTE_SYNC_SERVICES = ("Rclone", "Rsync")


class Settings(BaseSettings):
    """
    Scheduler settings, read once from the environment at startup.
    """
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    schedule: Optional[str] = Field(
        default=None,
        alias="BACKUP_SCHEDULE",
        description="Five-field cron expression; takes priority over the interval",
    )
    interval_hours: Optional[str] = Field(
        default=None,
        alias="BACKUP_INTERVAL_HOURS",
        description="Hours between backups; validated leniently, falls back to 1",
    )
    timezone: Optional[str] = Field(default=None, alias="TZ", description="Time zone override")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    hooks_dir: Optional[str] = Field(
        default=None,
        alias="BACKUP_HOOKS_DIR",
        description="Directory holding the backup-<service> executables; PATH is searched when unset",
    )

    @field_validator("schedule", "interval_hours", "timezone", "hooks_dir")
    def blank_as_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


@dataclass
class ConfigReport:
    configured: List[str] = field(default_factory=list)
    partial: List[str] = field(default_factory=list)
    remote_sync: bool = False

    @property
    def nothing_to_do(self) -> bool:
        return not self.configured


def check_configuration(
    services: Sequence[ServiceDescriptor],
    env: Optional[Mapping[str, str]] = None,
    log: Optional[logging.Logger] = None,
) -> ConfigReport:
    """
    Report which services the current environment configures. Never fails.
    """
    source = os.environ if env is None else env
    log = log or logger
    report = ConfigReport()
    log.info("Checking environment variables")

    for service in services:
        missing = service.missing_keys(source)
        if not missing:
            report.configured.append(service.name)
            if service.name in REMOTE_SYNC_SERVICES:
                report.remote_sync = True
            log.info("[%s] backup configured", service.name)
        elif len(missing) < len(service.required_config_keys):
            report.partial.append(service.name)
            log.warning("[%s] incomplete configuration, missing %s", service.name, ", ".join(missing))

    if not report.remote_sync:
        log.warning("No remote sync configured: backups will be stored locally only")
    if report.nothing_to_do:
        log.info("No backup services configured; nothing to do")

    log.info("Configuration check complete")
    log_divider(log)
    return report
