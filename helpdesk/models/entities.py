from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from uuid import UUID


class TicketStatus(IntEnum):
    NEW = 0
    OPEN = 1
    PENDING = 2
    CLOSED = 3


class TicketPriority(IntEnum):
    NORMAL = 1
    URGENT = 2
    CRITICAL = 3


@dataclass(slots=True)
class UserEntity:
    id: int
    username: str
    fullname: str
    email: str
    role: str
    title: str | None = None
    image: str | None = None


@dataclass(slots=True)
class GroupEntity:
    id: int
    name: str
    members: list[int] = field(default_factory=list)


@dataclass(slots=True)
class TicketTypeEntity:
    id: int
    name: str


@dataclass(slots=True)
class CommentEntity:
    owner: int
    date: datetime
    comment: str


@dataclass(slots=True)
class HistoryEntity:
    action: str
    description: str
    owner: int
    date: datetime


@dataclass(slots=True)
class AttachmentEntity:
    id: str
    owner: int
    name: str
    path: str
    type: str | None
    date: datetime


@dataclass(slots=True)
class TicketEntity:
    id: UUID
    uid: int
    owner_id: int
    assignee_id: int | None
    group_id: int
    type_id: int
    status: int
    priority: int
    tags: list[str]
    subject: str
    issue: str
    date: datetime
    updated: datetime
    closed_date: datetime | None
    deleted: bool
    comments: list[CommentEntity]
    history: list[HistoryEntity]
    attachments: list[AttachmentEntity]
    subscribers: list[int]
    version: int
