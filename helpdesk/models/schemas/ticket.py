from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from helpdesk.models.entities import TicketPriority, TicketStatus
from helpdesk.models.schemas.base import CamelCaseModel, SuccessResponse
from helpdesk.models.schemas.user import UserRef


class GroupRef(CamelCaseModel):
    id: int
    name: str


class TicketTypeRead(CamelCaseModel):
    id: int
    name: str


class CommentRead(CamelCaseModel):
    owner: UserRef | None
    date: datetime
    comment: str


class HistoryRead(CamelCaseModel):
    action: str
    description: str
    owner: int
    date: datetime


class AttachmentRead(CamelCaseModel):
    id: str
    owner: int
    name: str
    path: str
    type: str | None = None
    date: datetime


class TicketRead(CamelCaseModel):
    id: UUID
    uid: int
    owner: UserRef | None
    assignee: UserRef | None = None
    group: GroupRef | None
    type: TicketTypeRead | None
    status: TicketStatus
    priority: int
    tags: list[str]
    subject: str
    issue: str
    date: datetime
    updated: datetime
    closed_date: datetime | None = None
    deleted: bool
    comments: list[CommentRead]
    history: list[HistoryRead]
    attachments: list[AttachmentRead]
    subscribers: list[int]
    version: int


class TicketCreateRequest(CamelCaseModel):
    model_config = ConfigDict(extra="ignore")

    subject: str
    issue: str | None = None
    group: int | None = None
    type: int | None = None
    priority: TicketPriority = TicketPriority.NORMAL
    tags: str | list[str] | None = None
    socket_id: str | None = None


class TicketUpdateRequest(CamelCaseModel):
    """Partial update; only fields present in the request body are applied."""

    status: TicketStatus | None = None
    group: int | None = None
    closed_date: datetime | None = None
    assignee: int | None = None
    version: int | None = Field(default=None, ge=1)


class CommentCreateRequest(CamelCaseModel):
    comment: str | None = None
    owner_id: int | None = None


class SubscribeRequest(CamelCaseModel):
    user: int | None = None
    subscribe: bool | None = None


class TicketDataResponse(SuccessResponse):
    ticket: TicketRead


class TicketListResponse(SuccessResponse):
    tickets: list[TicketRead]
    page: int
    limit: int
    total: int


class TicketTypeListResponse(SuccessResponse):
    types: list[TicketTypeRead]
