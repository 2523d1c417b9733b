from .protocol import ServiceExecutor
from .command import CommandExecutor

__all__ = ["ServiceExecutor", "CommandExecutor"]
