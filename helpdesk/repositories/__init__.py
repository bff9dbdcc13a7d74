"""Database repositories."""

from helpdesk.repositories.group_repository import GroupRepository
from helpdesk.repositories.health_repository import HealthRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.ticket_type_repository import TicketTypeRepository
from helpdesk.repositories.user_repository import UserRepository

__all__ = [
    "GroupRepository",
    "HealthRepository",
    "TicketRepository",
    "TicketTypeRepository",
    "UserRepository",
]
