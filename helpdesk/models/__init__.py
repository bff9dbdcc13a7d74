"""Domain models and API schemas."""

from helpdesk.models.entities import (
    AttachmentEntity,
    CommentEntity,
    GroupEntity,
    HistoryEntity,
    TicketEntity,
    TicketPriority,
    TicketStatus,
    TicketTypeEntity,
    UserEntity,
)

__all__ = [
    "AttachmentEntity",
    "CommentEntity",
    "GroupEntity",
    "HistoryEntity",
    "TicketEntity",
    "TicketPriority",
    "TicketStatus",
    "TicketTypeEntity",
    "UserEntity",
]
