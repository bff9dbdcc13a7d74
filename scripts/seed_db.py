"""Seed a fresh database with an admin account, a group and ticket types.

Usage: python scripts/seed_db.py [--token TOKEN]
"""

from __future__ import annotations

import argparse
import secrets

from helpdesk.core.database import get_connection
from helpdesk.core.logging_config import setup_logging
from helpdesk.repositories.group_repository import GroupRepository
from helpdesk.repositories.ticket_type_repository import TicketTypeRepository
from helpdesk.repositories.user_repository import UserRepository

DEFAULT_TYPES = ("Issue", "Task")


def seed(access_token: str) -> None:
    logger = setup_logging()
    users = UserRepository()
    groups = GroupRepository()
    ticket_types = TicketTypeRepository()

    with get_connection() as connection:
        admin = users.get_by_username("admin", connection=connection)
        if admin is not None:
            logger.info("Database already seeded; nothing to do.")
            return

        admin = users.create(
            username="admin",
            fullname="Administrator",
            email="admin@localhost",
            role="admin",
            access_token=access_token,
            connection=connection,
        )
        groups.create(name="Support", members=[admin.id], connection=connection)
        for name in DEFAULT_TYPES:
            ticket_types.create(name=name, connection=connection)

    logger.info("Seeded admin user (id=%s) with access token %s", admin.id, access_token)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--token", default=secrets.token_hex(24))
    args = parser.parse_args()
    seed(args.token)


if __name__ == "__main__":
    main()
