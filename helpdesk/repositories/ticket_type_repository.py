from psycopg import Connection

from helpdesk.core.database import ConnectionScope
from helpdesk.models.entities import TicketTypeEntity


class TicketTypeRepository(ConnectionScope):
    def list_all(self, connection: Connection | None = None) -> list[TicketTypeEntity]:
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute("SELECT id, name FROM ticket_types ORDER BY id")
                rows = cursor.fetchall()
        return [TicketTypeEntity(id=row["id"], name=row["name"]) for row in rows]

    def list_by_ids(
        self,
        type_ids: list[int],
        connection: Connection | None = None,
    ) -> list[TicketTypeEntity]:
        if not type_ids:
            return []

        query = "SELECT id, name FROM ticket_types WHERE id = ANY(%s::bigint[]) ORDER BY id"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (type_ids,))
                rows = cursor.fetchall()
        return [TicketTypeEntity(id=row["id"], name=row["name"]) for row in rows]

    def get_default(self, connection: Connection | None = None) -> TicketTypeEntity | None:
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute("SELECT id, name FROM ticket_types ORDER BY id LIMIT 1")
                row = cursor.fetchone()
        return TicketTypeEntity(id=row["id"], name=row["name"]) if row is not None else None

    def create(self, *, name: str, connection: Connection | None = None) -> TicketTypeEntity:
        query = "INSERT INTO ticket_types (name) VALUES (%s) RETURNING id, name"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (name,))
                created = cursor.fetchone()
        if created is None:
            raise RuntimeError("Failed to create ticket type.")
        return TicketTypeEntity(id=created["id"], name=created["name"])
