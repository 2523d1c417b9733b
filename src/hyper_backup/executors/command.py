import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from hyper_backup.domain.service import ServiceResult
from hyper_backup.executors.protocol import ServiceExecutor

logger = logging.getLogger(__name__)

HOOK_PREFIX = "backup-"


def hook_command(slug: str, hooks_dir: Optional[str] = None) -> str:
    """
    Resolve the external executable that performs the backup for `slug`.

    Args:
        slug (str): Short service identifier, e.g. "mysql".
        hooks_dir (Optional[str]): Directory holding the executables; PATH is searched when unset.

    Returns:
        str: Path or bare name of the executable.
    """
    name = f"{HOOK_PREFIX}{slug}"
    if hooks_dir:
        return str(Path(hooks_dir) / name)
    return shutil.which(name) or name


class CommandExecutor(ServiceExecutor):
    """
    Executor that shells out to an external program.
    Exit code 0 is success; otherwise the last line of stderr becomes the failure message.
    """

    def __init__(
        self,
        command: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
        log: Optional[logging.Logger] = None,
    ):
        if not command:
            raise ValueError("Command must not be empty")
        self.command: List[str] = [str(part) for part in command]
        self.env: Optional[Dict[str, str]] = dict(env) if env is not None else None
        self.cwd = cwd
        self.logger: logging.Logger = log or logger

    def execute(self) -> ServiceResult:
        env = None
        if self.env is not None:
            env = {**os.environ, **self.env}

        try:
            completed = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                env=env,
                cwd=self.cwd,
                check=False,
            )
        except FileNotFoundError:
            return ServiceResult.failure(f"executable not found: {self.command[0]}")
        except OSError as e:
            return ServiceResult.failure(f"cannot run {self.command[0]}: {e}")

        for line in (completed.stdout or "").splitlines():
            self.logger.debug("%s: %s", self.command[0], line)

        if completed.returncode == 0:
            return ServiceResult.success()

        stderr_lines = [line for line in (completed.stderr or "").splitlines() if line.strip()]
        if stderr_lines:
            return ServiceResult.failure(stderr_lines[-1].strip())
        return ServiceResult.failure(f"{self.command[0]} exited with code {completed.returncode}")
