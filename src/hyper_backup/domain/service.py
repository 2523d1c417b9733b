import os
from typing import Callable, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class ServiceResult(BaseModel):
    """
    Explicit outcome of a single service execution.
    """
    ok: bool = Field(..., description="Whether the backup task succeeded")
    error: Optional[str] = Field(None, description="Human readable cause of the failure")

    @classmethod
    def success(cls) -> "ServiceResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str) -> "ServiceResult":
        return cls(ok=False, error=message or "unknown error")


class ServiceDescriptor(BaseModel):
    """
    Describes one backup task the runner may invoke during a cycle.

    Descriptors are built fresh for every cycle and carry no state between cycles.
    """
    name: str = Field(..., description="Display name, expected to be unique within a cycle")
    required_config_keys: List[str] = Field(
        default_factory=list,
        description="Configuration keys that must all be present and non-empty for the service to run",
    )
    execute: Callable[[], Optional[ServiceResult]] = Field(
        ..., description="Zero-argument callable performing the backup task"
    )
    optional: bool = Field(
        default=False,
        description="Skip silently when not configured instead of failing the cycle",
    )

    @field_validator('name')
    def check_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Service name must not be empty")
        return v

    def missing_keys(self, env: Optional[Mapping[str, str]] = None) -> List[str]:
        source = os.environ if env is None else env
        return [key for key in self.required_config_keys if not source.get(key)]

    def is_configured(self, env: Optional[Mapping[str, str]] = None) -> bool:
        return not self.missing_keys(env)
