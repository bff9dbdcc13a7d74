from typing import Any

from psycopg import Connection

from helpdesk.core.database import ConnectionScope
from helpdesk.models.entities import UserEntity

USER_COLUMNS = "id, username, fullname, email, role, title, image"


def _to_user_entity(row: dict[str, Any]) -> UserEntity:
    return UserEntity(
        id=row["id"],
        username=row["username"],
        fullname=row["fullname"],
        email=row["email"],
        role=row["role"],
        title=row["title"],
        image=row["image"],
    )


class UserRepository(ConnectionScope):
    def get_by_access_token(
        self,
        access_token: str,
        connection: Connection | None = None,
    ) -> UserEntity | None:
        query = f"SELECT {USER_COLUMNS} FROM users WHERE access_token = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (access_token,))
                row = cursor.fetchone()
        return _to_user_entity(row) if row is not None else None

    def get_by_id(self, user_id: int, connection: Connection | None = None) -> UserEntity | None:
        query = f"SELECT {USER_COLUMNS} FROM users WHERE id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id,))
                row = cursor.fetchone()
        return _to_user_entity(row) if row is not None else None

    def get_by_username(
        self,
        username: str,
        connection: Connection | None = None,
    ) -> UserEntity | None:
        query = f"SELECT {USER_COLUMNS} FROM users WHERE LOWER(username) = LOWER(%s)"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (username,))
                row = cursor.fetchone()
        return _to_user_entity(row) if row is not None else None

    def list_by_ids(
        self,
        user_ids: list[int],
        connection: Connection | None = None,
    ) -> list[UserEntity]:
        if not user_ids:
            return []

        query = f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY(%s::bigint[]) ORDER BY id"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_ids,))
                rows = cursor.fetchall()
        return [_to_user_entity(row) for row in rows]

    def list(
        self,
        *,
        limit: int = 100,
        offset: int = 0,
        connection: Connection | None = None,
    ) -> list[UserEntity]:
        query = f"""
            SELECT {USER_COLUMNS}
            FROM users
            ORDER BY LOWER(username)
            LIMIT %s OFFSET %s
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (limit, offset))
                rows = cursor.fetchall()
        return [_to_user_entity(row) for row in rows]

    def create(
        self,
        *,
        username: str,
        fullname: str,
        email: str,
        role: str = "user",
        title: str | None = None,
        access_token: str | None = None,
        connection: Connection | None = None,
    ) -> UserEntity:
        query = f"""
            INSERT INTO users (username, fullname, email, role, title, access_token)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {USER_COLUMNS}
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (username, fullname, email, role, title, access_token))
                created = cursor.fetchone()
        if created is None:
            raise RuntimeError("Failed to create user.")
        return _to_user_entity(created)

    def update(
        self,
        *,
        user_id: int,
        fullname: str,
        email: str,
        title: str | None,
        role: str,
        connection: Connection | None = None,
    ) -> UserEntity | None:
        query = f"""
            UPDATE users
            SET fullname = %s,
                email = %s,
                title = %s,
                role = %s
            WHERE id = %s
            RETURNING {USER_COLUMNS}
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (fullname, email, title, role, user_id))
                row = cursor.fetchone()
        return _to_user_entity(row) if row is not None else None
