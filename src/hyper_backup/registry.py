from typing import Callable, Dict, List

from pydantic import BaseModel, Field

from hyper_backup.domain.service import ServiceDescriptor
from hyper_backup.executors.protocol import ServiceExecutor


class ServiceSpec(BaseModel):
    """
    Static registration data for a backup service.
    """
    name: str = Field(..., description="Display name of the service")
    required_config_keys: List[str] = Field(default_factory=list)
    optional: bool = False
    executor_factory: Callable[[], ServiceExecutor] = Field(
        ..., description="Builds a fresh executor for every cycle"
    )


class ServiceRegistry:
    """
    Ordered registry of backup services.

    Registration order is execution order. `build` creates brand new descriptors and
    executors, so nothing carries over from one cycle to the next.
    """
    def __init__(self):
        self._specs: Dict[str, ServiceSpec] = {}

    @property
    def names(self) -> List[str]:
        return list(self._specs)

    def register(self, spec: ServiceSpec) -> None:
        """
        Register a new service.

        Args:
            spec (ServiceSpec): The service to register.

        Raises:
            ValueError: If a service with the same name is already registered.
        """
        if spec.name in self._specs:
            raise ValueError(f"A service named '{spec.name}' is already registered")
        self._specs[spec.name] = spec

    def build(self) -> List[ServiceDescriptor]:
        """
        Build the descriptors for one cycle, in registration order.
        """
        descriptors: List[ServiceDescriptor] = []
        for spec in self._specs.values():
            executor = spec.executor_factory()
            descriptors.append(
                ServiceDescriptor(
                    name=spec.name,
                    required_config_keys=list(spec.required_config_keys),
                    execute=executor.execute,
                    optional=spec.optional,
                )
            )
        return descriptors

    def __call__(self) -> List[ServiceDescriptor]:
        return self.build()

    def __len__(self) -> int:
        return len(self._specs)
