from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hyper_backup.domain.outcome import CycleOutcome


class HyperBackupError(Exception):
    """
    Base class for all errors raised by hyper_backup.
    """


class ScheduleConfigError(HyperBackupError, ValueError):
    """
    Raised when the configured schedule cannot be used.
    This is the only fatal error: nothing can be scheduled without it.
    """


class CycleFailedError(HyperBackupError):
    """
    Composite error for a cycle in which at least one service failed.
    """

    def __init__(self, outcome: "CycleOutcome"):
        self.outcome = outcome
        super().__init__(outcome.summary())
