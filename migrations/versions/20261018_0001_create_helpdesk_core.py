"""create helpdesk core tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("NOW()"),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("fullname", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("title", sa.String(length=120), nullable=True),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("access_token", sa.String(length=128), nullable=True),
        _timestamp("created_at"),
    )
    op.execute("CREATE UNIQUE INDEX uk_users_username_ci ON users (LOWER(username))")
    op.create_index("uk_users_access_token", "users", ["access_token"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
    )

    op.create_table(
        "group_members",
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("group_id", "user_id", name="pk_group_members"),
    )
    op.create_index("idx_group_members_user_id", "group_members", ["user_id"])

    op.create_table(
        "ticket_types",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=50), nullable=False, unique=True),
    )

    op.execute("CREATE SEQUENCE ticket_uid_seq START WITH 1000")

    op.create_table(
        "tickets",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "uid",
            sa.BigInteger(),
            nullable=False,
            unique=True,
            server_default=sa.text("nextval('ticket_uid_seq')"),
        ),
        sa.Column("owner_id", sa.BigInteger(), nullable=False),
        sa.Column("assignee_id", sa.BigInteger(), nullable=True),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("type_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("priority", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("issue", sa.Text(), nullable=False, server_default=""),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("closed_date", nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "comments",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "history",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "attachments",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "subscribers",
            postgresql.ARRAY(sa.BigInteger()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["assignee_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"]),
        sa.ForeignKeyConstraint(["type_id"], ["ticket_types.id"]),
        sa.CheckConstraint("status BETWEEN 0 AND 3", name="ck_tickets_status_valid"),
        sa.CheckConstraint("priority BETWEEN 1 AND 3", name="ck_tickets_priority_valid"),
    )
    op.execute("ALTER SEQUENCE ticket_uid_seq OWNED BY tickets.uid")

    op.create_index("idx_tickets_group_deleted", "tickets", ["group_id", "deleted"])
    op.create_index("idx_tickets_status", "tickets", ["status"])
    op.create_index("idx_tickets_assignee_id", "tickets", ["assignee_id"])
    op.create_index("idx_tickets_created_at", "tickets", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_tickets_created_at", table_name="tickets")
    op.drop_index("idx_tickets_assignee_id", table_name="tickets")
    op.drop_index("idx_tickets_status", table_name="tickets")
    op.drop_index("idx_tickets_group_deleted", table_name="tickets")
    op.drop_table("tickets")
    op.execute("DROP SEQUENCE IF EXISTS ticket_uid_seq")

    op.drop_table("ticket_types")
    op.drop_index("idx_group_members_user_id", table_name="group_members")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_index("uk_users_access_token", table_name="users")
    op.execute("DROP INDEX IF EXISTS uk_users_username_ci")
    op.drop_table("users")
