from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field


class DatabaseHealth(BaseModel):
    connected: bool
    message: str | None = None


class StorageHealth(BaseModel):
    path: str
    writable: bool


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    service: str = "helpdesk-api"
    environment: str
    database: DatabaseHealth
    attachments: StorageHealth
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
