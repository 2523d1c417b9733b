"""
Default backup service catalog.

Order matters: database dumps and log rotation come first, file archiving next, and remote
sync last so that it ships everything produced earlier in the same cycle.

Each service shells out to an external `backup-<slug>` executable; the catalog only decides
when a service is configured and in which order it runs.
"""

from typing import List, NamedTuple, Optional

from hyper_backup.executors.command import CommandExecutor, hook_command
from hyper_backup.registry import ServiceRegistry, ServiceSpec


class CatalogEntry(NamedTuple):
    name: str
    slug: str
    required_config_keys: List[str]
    optional: bool = True


DEFAULT_CATALOG: List[CatalogEntry] = [
    CatalogEntry("MySQL", "mysql", ["MYSQL_HOST"]),
    CatalogEntry("PostgreSQL", "postgres", ["POSTGRES_HOST"]),
    CatalogEntry("MongoDB", "mongo", ["MONGO_HOST"]),
    CatalogEntry("Traefik", "traefik", ["TRAEFIK_LOG_FILE"]),
    CatalogEntry("Files", "files", ["PACK_UP_HYPER_BACKUP_1"]),
    CatalogEntry("Rclone", "rclone", ["RCLONE_REMOTE", "RCLONE_PATH"]),
    CatalogEntry("Rsync", "rsync", ["RSYNC_SRC", "RSYNC_DEST"]),
]


def _command_factory(slug: str, hooks_dir: Optional[str]):
    def factory() -> CommandExecutor:
        return CommandExecutor([hook_command(slug, hooks_dir)])
    return factory


def default_registry(hooks_dir: Optional[str] = None, catalog: Optional[List[CatalogEntry]] = None) -> ServiceRegistry:
    registry = ServiceRegistry()
    for entry in catalog if catalog is not None else DEFAULT_CATALOG:
        registry.register(
            ServiceSpec(
                name=entry.name,
                required_config_keys=list(entry.required_config_keys),
                optional=entry.optional,
                executor_factory=_command_factory(entry.slug, hooks_dir),
            )
        )
    return registry
