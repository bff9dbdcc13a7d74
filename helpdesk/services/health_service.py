from helpdesk.core.config import Settings
from helpdesk.models.schemas.health import HealthResponse
from helpdesk.repositories.health_repository import HealthRepository


class HealthService:
    def __init__(self, repository: HealthRepository, settings: Settings) -> None:
        self.repository = repository
        self.settings = settings

    def get_health(self) -> HealthResponse:
        database = self.repository.check_connection(self.settings.database_url)
        attachments = self.repository.check_storage(self.settings.attachments_dir)
        healthy = database.connected and attachments.writable
        return HealthResponse(
            status="ok" if healthy else "degraded",
            environment=self.settings.app_env,
            database=database,
            attachments=attachments,
        )
