"""Business services."""

from helpdesk.services.account_service import AccountService
from helpdesk.services.attachment_storage import AttachmentStorage
from helpdesk.services.health_service import HealthService
from helpdesk.services.report_service import ReportService
from helpdesk.services.ticket_service import TicketService

__all__ = [
    "AccountService",
    "AttachmentStorage",
    "HealthService",
    "ReportService",
    "TicketService",
]
