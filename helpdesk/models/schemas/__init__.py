"""Pydantic schema definitions."""

from helpdesk.models.schemas.base import CamelCaseModel, SuccessResponse
from helpdesk.models.schemas.health import DatabaseHealth, HealthResponse, StorageHealth
from helpdesk.models.schemas.report import (
    MonthDataResponse,
    MonthSeries,
    TopGroupItem,
    TopGroupsResponse,
    YearCountsResponse,
)
from helpdesk.models.schemas.ticket import (
    AttachmentRead,
    CommentCreateRequest,
    CommentRead,
    GroupRef,
    HistoryRead,
    SubscribeRequest,
    TicketCreateRequest,
    TicketDataResponse,
    TicketListResponse,
    TicketRead,
    TicketTypeListResponse,
    TicketTypeRead,
    TicketUpdateRequest,
)
from helpdesk.models.schemas.user import (
    AccountDataResponse,
    AccountListResponse,
    AccountUpdateRequest,
    UserRef,
)

__all__ = [
    "AccountDataResponse",
    "AccountListResponse",
    "AccountUpdateRequest",
    "AttachmentRead",
    "CamelCaseModel",
    "CommentCreateRequest",
    "CommentRead",
    "DatabaseHealth",
    "GroupRef",
    "HealthResponse",
    "HistoryRead",
    "MonthDataResponse",
    "MonthSeries",
    "StorageHealth",
    "SubscribeRequest",
    "SuccessResponse",
    "TicketCreateRequest",
    "TicketDataResponse",
    "TicketListResponse",
    "TicketRead",
    "TicketTypeListResponse",
    "TicketTypeRead",
    "TicketUpdateRequest",
    "TopGroupItem",
    "TopGroupsResponse",
    "UserRef",
    "YearCountsResponse",
]
