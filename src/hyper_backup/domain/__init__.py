from .service import ServiceDescriptor, ServiceResult
from .outcome import CycleOutcome, FailureKind, ServiceFailure

__all__ = ["ServiceDescriptor", "ServiceResult", "CycleOutcome", "FailureKind", "ServiceFailure"]
