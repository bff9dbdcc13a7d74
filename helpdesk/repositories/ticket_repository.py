from datetime import datetime
from typing import Any
from uuid import UUID

from psycopg import Connection
from psycopg.types.json import Jsonb

from helpdesk.core.database import ConnectionScope
from helpdesk.models.entities import (
    AttachmentEntity,
    CommentEntity,
    HistoryEntity,
    TicketEntity,
    TicketStatus,
)

TICKET_COLUMNS = """
    id, uid, owner_id, assignee_id, group_id, type_id, status, priority, tags,
    subject, issue, created_at, updated_at, closed_date, deleted,
    comments, history, attachments, subscribers, version
"""


def _parse_date(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _to_ticket_entity(row: dict[str, Any]) -> TicketEntity:
    return TicketEntity(
        id=row["id"],
        uid=row["uid"],
        owner_id=row["owner_id"],
        assignee_id=row["assignee_id"],
        group_id=row["group_id"],
        type_id=row["type_id"],
        status=row["status"],
        priority=row["priority"],
        tags=list(row["tags"]),
        subject=row["subject"],
        issue=row["issue"],
        date=row["created_at"],
        updated=row["updated_at"],
        closed_date=row["closed_date"],
        deleted=row["deleted"],
        comments=[
            CommentEntity(
                owner=item["owner"],
                date=_parse_date(item["date"]),
                comment=item["comment"],
            )
            for item in row["comments"]
        ],
        history=[
            HistoryEntity(
                action=item["action"],
                description=item["description"],
                owner=item["owner"],
                date=_parse_date(item["date"]),
            )
            for item in row["history"]
        ],
        attachments=[
            AttachmentEntity(
                id=item["id"],
                owner=item["owner"],
                name=item["name"],
                path=item["path"],
                type=item.get("type"),
                date=_parse_date(item["date"]),
            )
            for item in row["attachments"]
        ],
        subscribers=list(row["subscribers"]),
        version=row["version"],
    )


def _dump_comments(comments: list[CommentEntity]) -> Jsonb:
    return Jsonb(
        [
            {"owner": item.owner, "date": item.date.isoformat(), "comment": item.comment}
            for item in comments
        ]
    )


def _dump_history(history: list[HistoryEntity]) -> Jsonb:
    return Jsonb(
        [
            {
                "action": item.action,
                "description": item.description,
                "owner": item.owner,
                "date": item.date.isoformat(),
            }
            for item in history
        ]
    )


def _dump_attachments(attachments: list[AttachmentEntity]) -> Jsonb:
    return Jsonb(
        [
            {
                "id": item.id,
                "owner": item.owner,
                "name": item.name,
                "path": item.path,
                "type": item.type,
                "date": item.date.isoformat(),
            }
            for item in attachments
        ]
    )


class TicketRepository(ConnectionScope):
    """Ticket documents: scalar fields in columns, embedded logs in JSONB."""

    def create(
        self,
        *,
        owner_id: int,
        group_id: int,
        type_id: int,
        subject: str,
        issue: str,
        priority: int,
        tags: list[str],
        history: list[HistoryEntity],
        subscribers: list[int],
        status: int = TicketStatus.NEW,
        assignee_id: int | None = None,
        connection: Connection | None = None,
    ) -> TicketEntity:
        query = f"""
            INSERT INTO tickets (
                owner_id, assignee_id, group_id, type_id, status, priority,
                tags, subject, issue, history, subscribers
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s::text[], %s, %s, %s, %s::bigint[])
            RETURNING {TICKET_COLUMNS}
        """
        params = (
            owner_id,
            assignee_id,
            group_id,
            type_id,
            int(status),
            priority,
            tags,
            subject,
            issue,
            _dump_history(history),
            subscribers,
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                created = cursor.fetchone()
        if created is None:
            raise RuntimeError("Failed to create ticket.")
        return _to_ticket_entity(created)

    def get_by_id(
        self,
        ticket_id: UUID,
        connection: Connection | None = None,
    ) -> TicketEntity | None:
        query = f"SELECT {TICKET_COLUMNS} FROM tickets WHERE id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id,))
                row = cursor.fetchone()
        return _to_ticket_entity(row) if row is not None else None

    def get_by_uid(self, uid: int, connection: Connection | None = None) -> TicketEntity | None:
        query = f"SELECT {TICKET_COLUMNS} FROM tickets WHERE uid = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (uid,))
                row = cursor.fetchone()
        return _to_ticket_entity(row) if row is not None else None

    def save(
        self,
        ticket: TicketEntity,
        connection: Connection | None = None,
    ) -> TicketEntity | None:
        """Write back a mutated ticket if nobody saved it since it was read.

        Returns ``None`` when the stored version no longer matches
        ``ticket.version``.
        """
        query = f"""
            UPDATE tickets
            SET assignee_id = %s,
                group_id = %s,
                status = %s,
                priority = %s,
                tags = %s::text[],
                updated_at = %s,
                closed_date = %s,
                deleted = %s,
                comments = %s,
                history = %s,
                attachments = %s,
                subscribers = %s::bigint[],
                version = version + 1
            WHERE id = %s AND version = %s
            RETURNING {TICKET_COLUMNS}
        """
        params = (
            ticket.assignee_id,
            ticket.group_id,
            int(ticket.status),
            ticket.priority,
            ticket.tags,
            ticket.updated,
            ticket.closed_date,
            ticket.deleted,
            _dump_comments(ticket.comments),
            _dump_history(ticket.history),
            _dump_attachments(ticket.attachments),
            ticket.subscribers,
            ticket.id,
            ticket.version,
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        return _to_ticket_entity(row) if row is not None else None

    def list_for_groups(
        self,
        *,
        group_ids: list[int],
        statuses: list[int] | None,
        assignee_id: int | None,
        limit: int,
        offset: int,
        connection: Connection | None = None,
    ) -> tuple[list[TicketEntity], int]:
        where_clauses = ["t.deleted = FALSE", "t.group_id = ANY(%s::bigint[])"]
        params: list[Any] = [group_ids]

        if statuses:
            where_clauses.append("t.status = ANY(%s::smallint[])")
            params.append(statuses)

        if assignee_id is not None:
            where_clauses.append("t.assignee_id = %s")
            params.append(assignee_id)

        where_sql = "WHERE " + " AND ".join(where_clauses)
        list_query = f"""
            SELECT {TICKET_COLUMNS}
            FROM tickets t
            {where_sql}
            ORDER BY t.uid DESC
            LIMIT %s OFFSET %s
        """
        count_query = f"""
            SELECT COUNT(1) AS total
            FROM tickets t
            {where_sql}
        """

        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(count_query, params)
                count_row = cursor.fetchone()
                total = int(count_row["total"]) if count_row is not None else 0

                cursor.execute(list_query, [*params, limit, offset])
                rows = cursor.fetchall()

        return ([_to_ticket_entity(row) for row in rows], total)

    def month_counts(
        self,
        *,
        year: int,
        status: int | None = None,
        connection: Connection | None = None,
    ) -> dict[int, int]:
        """Count non-deleted tickets created in each month (1-12) of ``year``."""
        where_clauses = [
            "deleted = FALSE",
            "created_at >= make_timestamptz(%s, 1, 1, 0, 0, 0, 'UTC')",
            "created_at < make_timestamptz(%s, 1, 1, 0, 0, 0, 'UTC')",
        ]
        params: list[Any] = [year, year + 1]
        if status is not None:
            where_clauses.append("status = %s")
            params.append(int(status))

        query = f"""
            SELECT
                EXTRACT(MONTH FROM created_at AT TIME ZONE 'UTC')::int AS month,
                COUNT(1) AS total
            FROM tickets
            WHERE {" AND ".join(where_clauses)}
            GROUP BY 1
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall()
        return {int(row["month"]): int(row["total"]) for row in rows}

    def year_count(
        self,
        *,
        year: int,
        status: int | None = None,
        connection: Connection | None = None,
    ) -> int:
        return sum(self.month_counts(year=year, status=status, connection=connection).values())

    def top_groups(
        self,
        *,
        top: int,
        connection: Connection | None = None,
    ) -> list[tuple[str, int]]:
        query = """
            SELECT g.name, COUNT(t.id) AS total
            FROM tickets t
            JOIN groups g ON g.id = t.group_id
            WHERE t.deleted = FALSE
            GROUP BY g.id, g.name
            ORDER BY total DESC, g.name
            LIMIT %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (top,))
                rows = cursor.fetchall()
        return [(row["name"], int(row["total"])) for row in rows]
