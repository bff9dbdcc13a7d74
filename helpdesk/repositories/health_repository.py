import os
from pathlib import Path

from helpdesk.core.db import ping_database
from helpdesk.models.schemas.health import DatabaseHealth, StorageHealth


class HealthRepository:
    def check_connection(self, database_url: str) -> DatabaseHealth:
        connected, error_message = ping_database(database_url)
        return DatabaseHealth(
            connected=connected,
            message=None if connected else error_message,
        )

    def check_storage(self, path: Path) -> StorageHealth:
        writable = path.is_dir() and os.access(path, os.W_OK)
        return StorageHealth(path=str(path), writable=writable)
