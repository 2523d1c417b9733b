from typing import Optional, Protocol

from hyper_backup.domain.service import ServiceResult


class ServiceExecutor(Protocol):
    """
    Protocol class for backup task executors.
    """

    def execute(self) -> Optional[ServiceResult]:
        """
        Perform the backup task once.

        Returns:
            Optional[ServiceResult]: The outcome; None counts as success.
        """
        ...
