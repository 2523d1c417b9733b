from typing import List, Optional

import pytest

from hyper_backup.domain.service import ServiceResult
from hyper_backup.executors.protocol import ServiceExecutor
from hyper_backup.registry import ServiceRegistry, ServiceSpec
from hyper_backup.services import DEFAULT_CATALOG, default_registry


class DummyExecutor(ServiceExecutor):
    instances: List["DummyExecutor"] = []

    def __init__(self):
        DummyExecutor.instances.append(self)

    def execute(self) -> Optional[ServiceResult]:
        return ServiceResult.success()


@pytest.fixture
def registry() -> ServiceRegistry:
    DummyExecutor.instances = []
    return ServiceRegistry()


def spec(name: str, keys: Optional[List[str]] = None, optional: bool = False) -> ServiceSpec:
    return ServiceSpec(name=name, required_config_keys=keys or [], optional=optional, executor_factory=DummyExecutor)


def test_register_service(registry: ServiceRegistry) -> None:
    registry.register(spec("MySQL", ["MYSQL_HOST"]))
    assert registry.names == ["MySQL"]
    assert len(registry) == 1


def test_register_duplicate(registry: ServiceRegistry) -> None:
    registry.register(spec("MySQL"))
    with pytest.raises(ValueError, match="A service named 'MySQL' is already registered"):
        registry.register(spec("MySQL"))


def test_build_keeps_registration_order(registry: ServiceRegistry) -> None:
    for name in ("Files", "Rclone", "Rsync"):
        registry.register(spec(name, optional=True))

    descriptors = registry.build()

    assert [d.name for d in descriptors] == ["Files", "Rclone", "Rsync"]
    assert all(d.optional for d in descriptors)


def test_build_creates_fresh_executors_per_cycle(registry: ServiceRegistry) -> None:
    registry.register(spec("MySQL", ["MYSQL_HOST"]))

    first = registry()
    second = registry()

    assert len(DummyExecutor.instances) == 2
    assert first[0] is not second[0]
    assert first[0].required_config_keys == ["MYSQL_HOST"]
    assert first[0].execute().ok


def test_default_registry_matches_catalog(tmp_path) -> None:
    registry = default_registry(str(tmp_path))

    assert registry.names == [entry.name for entry in DEFAULT_CATALOG]
    descriptors = registry.build()
    assert descriptors[-2].required_config_keys == ["RCLONE_REMOTE", "RCLONE_PATH"]
    assert descriptors[-1].name == "Rsync"


def test_default_registry_runs_hooks(tmp_path) -> None:
    registry = default_registry(str(tmp_path))
    mysql = registry.build()[0]

    result = mysql.execute()

    assert not result.ok
    assert "backup-mysql" in result.error
