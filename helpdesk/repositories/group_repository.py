from typing import Any

from psycopg import Connection

from helpdesk.core.database import ConnectionScope
from helpdesk.models.entities import GroupEntity

GROUP_QUERY = """
    SELECT
        g.id,
        g.name,
        COALESCE(
            ARRAY_AGG(gm.user_id ORDER BY gm.user_id) FILTER (WHERE gm.user_id IS NOT NULL),
            '{}'
        ) AS members
    FROM groups g
    LEFT JOIN group_members gm ON gm.group_id = g.id
"""


def _to_group_entity(row: dict[str, Any]) -> GroupEntity:
    return GroupEntity(id=row["id"], name=row["name"], members=list(row["members"]))


class GroupRepository(ConnectionScope):
    def list_groups_of_user(
        self,
        user_id: int,
        connection: Connection | None = None,
    ) -> list[GroupEntity]:
        query = f"""
            {GROUP_QUERY}
            WHERE g.id IN (SELECT group_id FROM group_members WHERE user_id = %s)
            GROUP BY g.id, g.name
            ORDER BY g.id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id,))
                rows = cursor.fetchall()
        return [_to_group_entity(row) for row in rows]

    def list_by_ids(
        self,
        group_ids: list[int],
        connection: Connection | None = None,
    ) -> list[GroupEntity]:
        if not group_ids:
            return []

        query = f"""
            {GROUP_QUERY}
            WHERE g.id = ANY(%s::bigint[])
            GROUP BY g.id, g.name
            ORDER BY g.id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (group_ids,))
                rows = cursor.fetchall()
        return [_to_group_entity(row) for row in rows]

    def create(
        self,
        *,
        name: str,
        members: list[int],
        connection: Connection | None = None,
    ) -> GroupEntity:
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute("INSERT INTO groups (name) VALUES (%s) RETURNING id, name", (name,))
                created = cursor.fetchone()
                if created is None:
                    raise RuntimeError("Failed to create group.")
                if members:
                    cursor.executemany(
                        "INSERT INTO group_members (group_id, user_id) VALUES (%s, %s)",
                        [(created["id"], user_id) for user_id in dict.fromkeys(members)],
                    )
        return GroupEntity(
            id=created["id"],
            name=created["name"],
            members=list(dict.fromkeys(members)),
        )
