from datetime import UTC, datetime

from fastapi import status

from helpdesk.core.database import get_connection
from helpdesk.core.errors import AppError
from helpdesk.models.entities import TicketStatus
from helpdesk.models.schemas.report import (
    MonthDataResponse,
    MonthSeries,
    TopGroupItem,
    TopGroupsResponse,
    YearCountsResponse,
)
from helpdesk.repositories.ticket_repository import TicketRepository

MAX_TOP_GROUPS = 1000


def _month_start_ms(year: int, month: int) -> int:
    return int(datetime(year, month, 1, tzinfo=UTC).timestamp() * 1000)


class ReportService:
    """Dashboard counts over non-deleted tickets."""

    def __init__(
        self,
        ticket_repository: TicketRepository,
        database_url: str | None = None,
    ) -> None:
        self.ticket_repository = ticket_repository
        self.database_url = database_url

    def get_month_data(self, now: datetime | None = None) -> MonthDataResponse:
        year = (now or datetime.now(UTC)).year

        with get_connection(self.database_url) as connection:
            created = self.ticket_repository.month_counts(year=year, connection=connection)
            closed = self.ticket_repository.month_counts(
                year=year,
                status=TicketStatus.CLOSED,
                connection=connection,
            )

        def points(counts: dict[int, int]) -> list[tuple[int, int]]:
            return [(_month_start_ms(year, month), counts.get(month, 0)) for month in range(1, 13)]

        return MonthDataResponse(
            series=[
                MonthSeries(label="New", data=points(created)),
                MonthSeries(label="Closed", data=points(closed)),
            ]
        )

    def get_year_data(self, year: int) -> YearCountsResponse:
        if not 1 <= year <= 9998:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_REQUEST",
                message="Invalid Request",
                details={"year": year},
            )

        with get_connection(self.database_url) as connection:
            total = self.ticket_repository.year_count(year=year, connection=connection)
            closed = self.ticket_repository.year_count(
                year=year,
                status=TicketStatus.CLOSED,
                connection=connection,
            )
        return YearCountsResponse(total_count=total, closed_count=closed)

    def get_top_groups(self, top: int) -> TopGroupsResponse:
        if not 1 <= top <= MAX_TOP_GROUPS:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_REQUEST",
                message="Invalid Request",
                details={"top": top},
            )

        items = self.ticket_repository.top_groups(top=top)
        return TopGroupsResponse(
            items=[TopGroupItem(name=name, count=count) for name, count in items],
        )
