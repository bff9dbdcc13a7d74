import logging
import re
from datetime import UTC, datetime
from typing import BinaryIO
from uuid import UUID, uuid4

from fastapi import status
from psycopg import Connection
from psycopg import Error as PsycopgError
from psycopg.errors import IntegrityError

from helpdesk.core import events
from helpdesk.core.config import Settings, get_settings
from helpdesk.core.database import get_connection
from helpdesk.core.errors import AppError
from helpdesk.core.markup import render_text
from helpdesk.core.permissions import can_this
from helpdesk.models.entities import (
    AttachmentEntity,
    CommentEntity,
    HistoryEntity,
    TicketEntity,
    TicketStatus,
    UserEntity,
)
from helpdesk.models.schemas.ticket import (
    AttachmentRead,
    CommentCreateRequest,
    CommentRead,
    GroupRef,
    HistoryRead,
    SubscribeRequest,
    TicketCreateRequest,
    TicketListResponse,
    TicketRead,
    TicketTypeRead,
    TicketUpdateRequest,
)
from helpdesk.models.schemas.user import UserRef
from helpdesk.repositories.group_repository import GroupRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.ticket_type_repository import TicketTypeRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.services.attachment_storage import AttachmentStorage

logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s+")
# ASCII digits only, short enough for a bigint column.
UID_PATTERN = re.compile(r"[0-9]{1,18}")


def normalize_tags(raw: str | list[str] | None) -> list[str]:
    """Turn ``"a, b,,c"`` (or a list of strings) into ``["a", "b", "c"]``."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = WHITESPACE_PATTERN.sub(" ", raw).strip().split(",")
    tags = (tag.strip() for tag in raw)
    return list(dict.fromkeys(tag for tag in tags if tag))


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TicketService:
    def __init__(
        self,
        ticket_repository: TicketRepository,
        user_repository: UserRepository,
        group_repository: GroupRepository,
        ticket_type_repository: TicketTypeRepository,
        attachment_storage: AttachmentStorage,
        settings: Settings | None = None,
        database_url: str | None = None,
    ) -> None:
        self.ticket_repository = ticket_repository
        self.user_repository = user_repository
        self.group_repository = group_repository
        self.ticket_type_repository = ticket_type_repository
        self.attachment_storage = attachment_storage
        self.settings = settings or get_settings()
        self.database_url = database_url

    def list_tickets(
        self,
        user: UserEntity,
        *,
        limit: int,
        page: int,
        assigned_self: bool,
        statuses: list[int] | None,
    ) -> TicketListResponse:
        known = {item.value for item in TicketStatus}
        if statuses and not known.issuperset(statuses):
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_REQUEST",
                message="Invalid Request",
                details={"status": statuses},
            )

        try:
            with get_connection(self.database_url) as connection:
                groups = self.group_repository.list_groups_of_user(user.id, connection=connection)
                tickets, total = self.ticket_repository.list_for_groups(
                    group_ids=[group.id for group in groups],
                    statuses=statuses or None,
                    assignee_id=user.id if assigned_self else None,
                    limit=limit,
                    offset=page * limit,
                    connection=connection,
                )
                items = self._build_ticket_reads(tickets, connection=connection)
        except PsycopgError as exc:
            logger.exception("Listing tickets failed for user %s", user.id)
            raise AppError(
                status_code=status.HTTP_200_OK,
                code="TICKET_LIST_FAILED",
                message="Unable to load tickets.",
            ) from exc

        return TicketListResponse(tickets=items, page=page, limit=limit, total=total)

    def create_ticket(self, payload: TicketCreateRequest, requester: UserEntity) -> TicketRead:
        subject = self._validate_subject(payload.subject)
        now = _utcnow()

        try:
            with get_connection(self.database_url) as connection:
                group_id = payload.group or self._default_group_id(requester, connection)
                type_id = payload.type or self._default_type_id(connection)
                ticket = self.ticket_repository.create(
                    owner_id=requester.id,
                    group_id=group_id,
                    type_id=type_id,
                    subject=subject,
                    issue=render_text(payload.issue),
                    priority=int(payload.priority),
                    tags=normalize_tags(payload.tags),
                    history=[
                        HistoryEntity(
                            action="ticket:created",
                            description="Ticket was created.",
                            owner=requester.id,
                            date=now,
                        )
                    ],
                    subscribers=[requester.id],
                    connection=connection,
                )
                created = self._build_ticket_read(ticket, connection=connection)
        except IntegrityError as exc:
            logger.warning("Ticket create rejected for user %s: %s", requester.id, exc)
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="TICKET_CREATE_FAILED",
                message="Ticket could not be saved.",
                details={"group": payload.group, "type": payload.type},
            ) from exc

        logger.info("Ticket %s created by user %s", created.uid, requester.id)
        events.emit(events.TICKET_CREATED, self, socket_id=payload.socket_id or "", ticket=created)
        return created

    def get_ticket_by_uid(self, uid: str | None) -> TicketRead:
        if uid is None or UID_PATTERN.fullmatch(uid.strip()) is None:
            self._raise_invalid_ticket()

        with get_connection(self.database_url) as connection:
            ticket = self.ticket_repository.get_by_uid(int(uid), connection=connection)
            if ticket is None:
                self._raise_invalid_ticket()
            return self._build_ticket_read(ticket, connection=connection)

    def update_ticket(
        self,
        ticket_id: UUID,
        payload: TicketUpdateRequest,
        requester: UserEntity,
    ) -> TicketRead:
        fields = payload.model_fields_set

        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            self._check_update_permission(ticket, requester)
            if payload.version is not None and payload.version != ticket.version:
                self._raise_version_conflict(ticket)

            now = _utcnow()
            changes: list[tuple[str, str]] = []

            if "status" in fields and payload.status is not None:
                if payload.status != ticket.status:
                    ticket.status = payload.status
                    changes.append(
                        (
                            "ticket:set:status",
                            f"Ticket status set to: {payload.status.name.title()}",
                        )
                    )

            if "group" in fields and payload.group is not None:
                if payload.group != ticket.group_id:
                    groups = self.group_repository.list_by_ids(
                        [payload.group], connection=connection
                    )
                    if not groups:
                        raise AppError(
                            status_code=status.HTTP_400_BAD_REQUEST,
                            code="INVALID_TICKET_GROUP",
                            message="Invalid Group",
                            details={"group": payload.group},
                        )
                    ticket.group_id = payload.group
                    changes.append(("ticket:set:group", f"Ticket group set to: {groups[0].name}"))

            if "closed_date" in fields and payload.closed_date != ticket.closed_date:
                ticket.closed_date = payload.closed_date
                description = (
                    f"Ticket closed date set to: {payload.closed_date.isoformat()}"
                    if payload.closed_date is not None
                    else "Ticket closed date cleared."
                )
                changes.append(("ticket:set:closeddate", description))

            if "assignee" in fields and payload.assignee != ticket.assignee_id:
                if payload.assignee is None:
                    changes.append(("ticket:set:assignee", "Ticket assignee cleared."))
                else:
                    assignee = self.user_repository.get_by_id(
                        payload.assignee, connection=connection
                    )
                    if assignee is None:
                        raise AppError(
                            status_code=status.HTTP_400_BAD_REQUEST,
                            code="INVALID_ASSIGNEE",
                            message="Invalid Assignee",
                            details={"assignee": payload.assignee},
                        )
                    changes.append(
                        ("ticket:set:assignee", f"Ticket was assigned to: {assignee.username}")
                    )
                ticket.assignee_id = payload.assignee

            if not changes:
                return self._build_ticket_read(ticket, connection=connection)

            for action, description in changes:
                self._append_history(ticket, action, description, requester, now)
            ticket.updated = max(now, ticket.updated)
            saved = self._save(ticket, connection)
            updated = self._build_ticket_read(saved, connection=connection)

        events.emit(events.TICKET_UPDATED, self, ticket=updated)
        return updated

    def delete_ticket(self, ticket_id: UUID, requester: UserEntity) -> None:
        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            if ticket.deleted:
                return
            now = _utcnow()
            ticket.deleted = True
            ticket.updated = max(now, ticket.updated)
            self._append_history(ticket, "ticket:delete", "Ticket was deleted.", requester, now)
            self._save(ticket, connection)

        logger.info("Ticket %s soft-deleted by user %s", ticket.uid, requester.id)
        events.emit(events.TICKET_DELETED, self, ticket_id=str(ticket_id))

    def restore_ticket(self, ticket_id: UUID, requester: UserEntity) -> TicketRead:
        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            if not ticket.deleted:
                return self._build_ticket_read(ticket, connection=connection)
            now = _utcnow()
            ticket.deleted = False
            ticket.updated = max(now, ticket.updated)
            self._append_history(ticket, "ticket:restore", "Ticket was restored.", requester, now)
            saved = self._save(ticket, connection)
            restored = self._build_ticket_read(saved, connection=connection)

        events.emit(events.TICKET_UPDATED, self, ticket=restored)
        return restored

    def post_comment(
        self,
        ticket_id: UUID,
        payload: CommentCreateRequest,
        requester: UserEntity,
    ) -> TicketRead:
        if payload.comment is None or not payload.comment.strip():
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_COMMENT",
                message="Invalid Comment",
            )

        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            now = _utcnow()
            comment = CommentEntity(
                owner=payload.owner_id or requester.id,
                date=now,
                comment=render_text(payload.comment),
            )
            ticket.comments.append(comment)
            ticket.updated = max(now, ticket.updated)
            self._append_history(
                ticket, "ticket:comment:added", "Comment was added", requester, now
            )
            saved = self._save(ticket, connection)
            commented = self._build_ticket_read(saved, connection=connection)

        events.emit(
            events.TICKET_COMMENT_ADDED,
            self,
            ticket=commented,
            comment=commented.comments[-1],
        )
        return commented

    def add_attachment(
        self,
        ticket_id: UUID,
        *,
        filename: str,
        content_type: str | None,
        stream: BinaryIO,
        requester: UserEntity,
    ) -> TicketRead:
        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            attachment_id = uuid4().hex
            name, path = self.attachment_storage.save(
                ticket_uid=ticket.uid,
                attachment_id=attachment_id,
                filename=filename,
                stream=stream,
            )
            now = _utcnow()
            ticket.attachments.append(
                AttachmentEntity(
                    id=attachment_id,
                    owner=requester.id,
                    name=name,
                    path=path,
                    type=content_type,
                    date=now,
                )
            )
            ticket.updated = max(now, ticket.updated)
            self._append_history(
                ticket, "ticket:added:attachment", f"Attachment was added: {name}", requester, now
            )
            try:
                saved = self._save(ticket, connection)
            except AppError:
                self.attachment_storage.remove(path)
                raise
            updated = self._build_ticket_read(saved, connection=connection)

        events.emit(events.TICKET_UPDATED, self, ticket=updated)
        return updated

    def remove_attachment(
        self,
        ticket_id: UUID,
        attachment_id: str,
        requester: UserEntity,
    ) -> TicketRead:
        if not can_this(requester.role, "tickets:removeAttachment"):
            self._raise_invalid_permissions()

        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            attachment = next(
                (item for item in ticket.attachments if item.id == attachment_id),
                None,
            )
            if attachment is None:
                raise AppError(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    code="INVALID_ATTACHMENT",
                    message="Invalid Request.",
                    details={"attachment_id": attachment_id},
                )

            now = _utcnow()
            ticket.attachments.remove(attachment)
            ticket.updated = max(now, ticket.updated)
            self._append_history(
                ticket,
                "ticket:delete:attachment",
                f"Attachment was removed: {attachment.name}",
                requester,
                now,
            )
            saved = self._save(ticket, connection)
            self.attachment_storage.remove(attachment.path)
            updated = self._build_ticket_read(saved, connection=connection)

        events.emit(events.TICKET_UPDATED, self, ticket=updated)
        return updated

    def subscribe(self, ticket_id: UUID, payload: SubscribeRequest, requester: UserEntity) -> None:
        if payload.user is None or payload.subscribe is None:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_PAYLOAD",
                message="Invalid Payload.",
            )

        with get_connection(self.database_url) as connection:
            ticket = self._load_ticket(ticket_id, connection)
            now = _utcnow()
            if payload.subscribe:
                if payload.user not in ticket.subscribers:
                    ticket.subscribers.append(payload.user)
                description = f"Subscriber added: {payload.user}"
            else:
                ticket.subscribers = [item for item in ticket.subscribers if item != payload.user]
                description = f"Subscriber removed: {payload.user}"
            self._append_history(
                ticket, "ticket:subscriber:update", description, requester, now
            )
            saved = self._save(ticket, connection)
            updated = self._build_ticket_read(saved, connection=connection)

        events.emit(events.TICKET_SUBSCRIBERS_UPDATE, self, ticket=updated)

    def get_types(self) -> list[TicketTypeRead]:
        types = self.ticket_type_repository.list_all()
        return [TicketTypeRead(id=item.id, name=item.name) for item in types]

    def _load_ticket(self, ticket_id: UUID, connection: Connection) -> TicketEntity:
        ticket = self.ticket_repository.get_by_id(ticket_id, connection=connection)
        if ticket is None:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_TICKET_ID",
                message="Invalid Ticket Id",
                details={"ticket_id": str(ticket_id)},
            )
        return ticket

    def _save(self, ticket: TicketEntity, connection: Connection) -> TicketEntity:
        try:
            saved = self.ticket_repository.save(ticket, connection=connection)
        except PsycopgError as exc:
            logger.exception("Saving ticket %s failed", ticket.uid)
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="TICKET_SAVE_FAILED",
                message="Ticket could not be saved.",
                details={"ticket_id": str(ticket.id)},
            ) from exc
        if saved is None:
            self._raise_version_conflict(ticket)
        return saved

    def _append_history(
        self,
        ticket: TicketEntity,
        action: str,
        description: str,
        requester: UserEntity,
        when: datetime,
    ) -> None:
        ticket.history.append(
            HistoryEntity(action=action, description=description, owner=requester.id, date=when)
        )

    def _check_update_permission(self, ticket: TicketEntity, requester: UserEntity) -> None:
        if not self.settings.enforce_update_permission:
            return
        if requester.id == ticket.owner_id or can_this(requester.role, "tickets:update"):
            return
        self._raise_invalid_permissions()

    def _default_group_id(self, requester: UserEntity, connection: Connection) -> int:
        groups = self.group_repository.list_groups_of_user(requester.id, connection=connection)
        if not groups:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_TICKET_GROUP",
                message="Invalid Group",
            )
        return groups[0].id

    def _default_type_id(self, connection: Connection) -> int:
        ticket_type = self.ticket_type_repository.get_default(connection=connection)
        if ticket_type is None:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_TICKET_TYPE",
                message="Invalid Ticket Type",
            )
        return ticket_type.id

    def _build_ticket_read(
        self,
        ticket: TicketEntity,
        connection: Connection | None = None,
    ) -> TicketRead:
        return self._build_ticket_reads([ticket], connection=connection)[0]

    def _build_ticket_reads(
        self,
        tickets: list[TicketEntity],
        connection: Connection | None = None,
    ) -> list[TicketRead]:
        if not tickets:
            return []

        user_ids: set[int] = set()
        for ticket in tickets:
            user_ids.add(ticket.owner_id)
            if ticket.assignee_id is not None:
                user_ids.add(ticket.assignee_id)
            user_ids.update(comment.owner for comment in ticket.comments)

        users = {
            user.id: UserRef.model_validate(user)
            for user in self.user_repository.list_by_ids(sorted(user_ids), connection=connection)
        }
        groups = {
            group.id: GroupRef(id=group.id, name=group.name)
            for group in self.group_repository.list_by_ids(
                sorted({ticket.group_id for ticket in tickets}),
                connection=connection,
            )
        }
        types = {
            item.id: TicketTypeRead(id=item.id, name=item.name)
            for item in self.ticket_type_repository.list_by_ids(
                sorted({ticket.type_id for ticket in tickets}),
                connection=connection,
            )
        }

        return [
            TicketRead(
                id=ticket.id,
                uid=ticket.uid,
                owner=users.get(ticket.owner_id),
                assignee=users.get(ticket.assignee_id) if ticket.assignee_id is not None else None,
                group=groups.get(ticket.group_id),
                type=types.get(ticket.type_id),
                status=ticket.status,
                priority=ticket.priority,
                tags=list(ticket.tags),
                subject=ticket.subject,
                issue=ticket.issue,
                date=ticket.date,
                updated=ticket.updated,
                closed_date=ticket.closed_date,
                deleted=ticket.deleted,
                comments=[
                    CommentRead(
                        owner=users.get(comment.owner),
                        date=comment.date,
                        comment=comment.comment,
                    )
                    for comment in ticket.comments
                ],
                history=[HistoryRead.model_validate(item) for item in ticket.history],
                attachments=[AttachmentRead.model_validate(item) for item in ticket.attachments],
                subscribers=list(ticket.subscribers),
                version=ticket.version,
            )
            for ticket in tickets
        ]

    def _validate_subject(self, subject: str) -> str:
        normalized = subject.strip()
        if not 1 <= len(normalized) <= 200:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_TICKET_SUBJECT",
                message="Ticket subject length must be between 1 and 200 characters.",
            )
        return normalized

    def _raise_invalid_ticket(self) -> None:
        raise AppError(
            status_code=status.HTTP_200_OK,
            code="INVALID_TICKET",
            message="Invalid Ticket",
        )

    def _raise_invalid_permissions(self) -> None:
        raise AppError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="INVALID_PERMISSIONS",
            message="Invalid Permissions",
        )

    def _raise_version_conflict(self, ticket: TicketEntity) -> None:
        raise AppError(
            status_code=status.HTTP_409_CONFLICT,
            code="TICKET_VERSION_CONFLICT",
            message="Ticket was modified by another request.",
            details={"ticket_id": str(ticket.id)},
        )
