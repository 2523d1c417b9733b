from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from hyper_backup.errors import CycleFailedError


class FailureKind(str, Enum):
    FAILED = "failed"
    FAULTED = "faulted"
    NOT_CONFIGURED = "not_configured"


class ServiceFailure(BaseModel):
    """
    A single entry of a cycle's aggregate.
    """
    service: str = Field(..., description="Name of the offending service")
    kind: FailureKind = FailureKind.FAILED
    message: str = Field(..., description="Cause of the failure")

    def __str__(self) -> str:
        return f"{self.service}: {self.message}"


class CycleOutcome(BaseModel):
    """
    Aggregate result of one pass of the service runner.
    An empty list of failures means the whole cycle succeeded.
    """
    failures: List[ServiceFailure] = Field(default_factory=list)
    executed: List[str] = Field(default_factory=list, description="Services whose callable was invoked")
    skipped: List[str] = Field(default_factory=list, description="Optional services skipped as not configured")
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def duration(self) -> Optional[timedelta]:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def add_failure(self, service: str, message: str, kind: FailureKind = FailureKind.FAILED) -> ServiceFailure:
        failure = ServiceFailure(service=service, kind=kind, message=message)
        self.failures.append(failure)
        return failure

    def summary(self) -> str:
        """
        Concatenate every failure in encounter order.
        """
        return "; ".join(str(failure) for failure in self.failures)

    def to_error(self) -> Optional[CycleFailedError]:
        if self.ok:
            return None
        return CycleFailedError(self)
