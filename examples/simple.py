import asyncio
import random

from hyper_backup.domain.service import ServiceDescriptor, ServiceResult
from hyper_backup.logging_config import configure_logging, get_logger
from hyper_backup.registry import ServiceRegistry, ServiceSpec
from hyper_backup.scheduler import BackupScheduler
from hyper_backup.schedules import build_schedule, resolve_timezone


class PrintExecutor:
    def execute(self) -> ServiceResult:
        print("Archiving /srv/data")
        return ServiceResult.success()


class FlakyExecutor:
    def execute(self) -> ServiceResult:
        if random.random() < 0.5:
            raise RuntimeError("remote closed the connection")
        return ServiceResult.success()


registry = ServiceRegistry()
registry.register(ServiceSpec(name="Files", executor_factory=PrintExecutor))
registry.register(ServiceSpec(name="Sync", executor_factory=FlakyExecutor))


def services():
    # registry output plus an ad-hoc service, rebuilt every cycle
    return registry.build() + [
        ServiceDescriptor(name="Heartbeat", execute=lambda: print("still alive")),
    ]


async def main():
    configure_logging(log_level="INFO")
    logger = get_logger("example")
    schedule = build_schedule("* * * * *", tz=resolve_timezone("UTC"), log=logger)
    scheduler = BackupScheduler(schedule, services, logger=logger)
    # Ctrl+C stops after the running cycle
    await scheduler.run(handle_signals=True)


if __name__ == "__main__":
    asyncio.run(main())
