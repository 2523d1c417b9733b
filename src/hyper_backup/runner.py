import logging
from datetime import datetime
from typing import Mapping, Optional, Sequence

from hyper_backup.domain.outcome import CycleOutcome, FailureKind, ServiceFailure
from hyper_backup.domain.service import ServiceDescriptor, ServiceResult

logger = logging.getLogger(__name__)


def isolate(service: ServiceDescriptor, log: Optional[logging.Logger] = None) -> Optional[ServiceFailure]:
    """
    Invoke a service's callable so that nothing it does can escape.

    Args:
        service (ServiceDescriptor): The service to execute.
        log (logging.Logger): Logger receiving the traceback of unexpected faults.

    Returns:
        Optional[ServiceFailure]: None on success, otherwise the failure naming the service.
    """
    log = log or logger
    try:
        result = service.execute()
    except (Exception, SystemExit) as e:
        # KeyboardInterrupt still propagates
        log.exception("[%s] Unexpected fault during backup", service.name)
        return ServiceFailure(
            service=service.name,
            kind=FailureKind.FAULTED,
            message=f"unexpected fault: {type(e).__name__}: {e}",
        )

    if result is None:
        return None
    if not isinstance(result, ServiceResult):
        return ServiceFailure(
            service=service.name,
            message=f"unexpected return value of type {type(result).__name__}",
        )
    if result.ok:
        return None
    return ServiceFailure(service=service.name, message=result.error or "unknown error")


class ServiceRunner:
    """
    Runs one cycle over an ordered list of services.

    Services run sequentially in list order, so later services (remote sync) can rely on
    earlier ones (archiving) having finished. A failing service never stops its siblings.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None, logger: Optional[logging.Logger] = None):
        self.env = env
        self.logger: logging.Logger = logger or logging.getLogger(__name__)

    def run(self, services: Sequence[ServiceDescriptor]) -> CycleOutcome:
        outcome = CycleOutcome(started_at=datetime.now().astimezone())

        for service in services:
            missing = service.missing_keys(self.env)
            if not missing:
                self.logger.info("[%s] Starting backup...", service.name)
                failure = isolate(service, self.logger)
                outcome.executed.append(service.name)
                if failure is None:
                    self.logger.info("[%s] Backup finished", service.name)
                else:
                    outcome.failures.append(failure)
                    self.logger.error("[%s] Backup failed: %s", service.name, failure.message)
            elif not service.optional:
                outcome.add_failure(
                    service.name,
                    f"required service not configured (missing: {', '.join(missing)})",
                    kind=FailureKind.NOT_CONFIGURED,
                )
                self.logger.warning("[%s] Required but not configured; skipping", service.name)
            else:
                outcome.skipped.append(service.name)
                self.logger.debug("[%s] Not configured; skipping", service.name)

        if not outcome.executed and outcome.ok:
            self.logger.info("No services matched conditions; nothing to do")

        outcome.finished_at = datetime.now().astimezone()
        if not outcome.ok:
            self.logger.error("Cycle finished with %d failure(s): %s", len(outcome.failures), outcome.summary())
        return outcome
