from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, UploadFile, status

from helpdesk.api.deps import CurrentUser
from helpdesk.core.config import Settings, get_settings
from helpdesk.models.schemas.base import SuccessResponse
from helpdesk.models.schemas.report import MonthDataResponse, TopGroupsResponse, YearCountsResponse
from helpdesk.models.schemas.ticket import (
    CommentCreateRequest,
    SubscribeRequest,
    TicketCreateRequest,
    TicketDataResponse,
    TicketListResponse,
    TicketTypeListResponse,
    TicketUpdateRequest,
)
from helpdesk.repositories.group_repository import GroupRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.ticket_type_repository import TicketTypeRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.services.attachment_storage import AttachmentStorage
from helpdesk.services.report_service import MAX_TOP_GROUPS, ReportService
from helpdesk.services.ticket_service import TicketService

router = APIRouter(prefix="/tickets")


def get_ticket_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TicketService:
    return TicketService(
        ticket_repository=TicketRepository(),
        user_repository=UserRepository(),
        group_repository=GroupRepository(),
        ticket_type_repository=TicketTypeRepository(),
        attachment_storage=AttachmentStorage(settings.attachments_dir),
        settings=settings,
    )


def get_report_service() -> ReportService:
    return ReportService(ticket_repository=TicketRepository())


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]


@router.get("", response_model=TicketListResponse)
def list_tickets(
    user: CurrentUser,
    ticket_service: TicketServiceDep,
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    page: Annotated[int, Query(ge=0)] = 0,
    assigned_self: Annotated[bool, Query(alias="assignedself")] = False,
    status_filter: Annotated[list[int] | None, Query(alias="status")] = None,
) -> TicketListResponse:
    return ticket_service.list_tickets(
        user,
        limit=limit or settings.tickets_page_size,
        page=page,
        assigned_self=assigned_self,
        statuses=status_filter,
    )


@router.post("/create", response_model=TicketDataResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(
    payload: TicketCreateRequest,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> TicketDataResponse:
    ticket = ticket_service.create_ticket(payload, user)
    return TicketDataResponse(ticket=ticket)


@router.get("/types", response_model=TicketTypeListResponse)
def get_types(_: CurrentUser, ticket_service: TicketServiceDep) -> TicketTypeListResponse:
    return TicketTypeListResponse(types=ticket_service.get_types())


@router.get("/stats/month", response_model=MonthDataResponse)
def get_month_data(_: CurrentUser, report_service: ReportServiceDep) -> MonthDataResponse:
    return report_service.get_month_data()


@router.get("/stats/year/{year}", response_model=YearCountsResponse)
def get_year_data(
    year: int,
    _: CurrentUser,
    report_service: ReportServiceDep,
) -> YearCountsResponse:
    return report_service.get_year_data(year)


@router.get("/count/topgroups/{top}", response_model=TopGroupsResponse)
def get_top_ticket_groups(
    top: Annotated[int, Path(ge=1, le=MAX_TOP_GROUPS)],
    _: CurrentUser,
    report_service: ReportServiceDep,
) -> TopGroupsResponse:
    return report_service.get_top_groups(top)


@router.get("/{uid}", response_model=TicketDataResponse)
def get_ticket(uid: str, _: CurrentUser, ticket_service: TicketServiceDep) -> TicketDataResponse:
    return TicketDataResponse(ticket=ticket_service.get_ticket_by_uid(uid))


@router.put("/{ticket_id}", response_model=TicketDataResponse)
def update_ticket(
    ticket_id: UUID,
    payload: TicketUpdateRequest,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> TicketDataResponse:
    ticket = ticket_service.update_ticket(ticket_id, payload, user)
    return TicketDataResponse(ticket=ticket)


@router.delete("/{ticket_id}", response_model=SuccessResponse)
def delete_ticket(
    ticket_id: UUID,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> SuccessResponse:
    ticket_service.delete_ticket(ticket_id, user)
    return SuccessResponse()


@router.post("/{ticket_id}/restore", response_model=TicketDataResponse)
def restore_ticket(
    ticket_id: UUID,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> TicketDataResponse:
    return TicketDataResponse(ticket=ticket_service.restore_ticket(ticket_id, user))


@router.post("/{ticket_id}/comment", response_model=TicketDataResponse)
def post_comment(
    ticket_id: UUID,
    payload: CommentCreateRequest,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> TicketDataResponse:
    ticket = ticket_service.post_comment(ticket_id, payload, user)
    return TicketDataResponse(ticket=ticket)


@router.post("/{ticket_id}/attachments", response_model=TicketDataResponse)
def add_attachment(
    ticket_id: UUID,
    file: UploadFile,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> TicketDataResponse:
    ticket = ticket_service.add_attachment(
        ticket_id,
        filename=file.filename or "attachment",
        content_type=file.content_type,
        stream=file.file,
        requester=user,
    )
    return TicketDataResponse(ticket=ticket)


@router.delete("/{ticket_id}/attachments/{attachment_id}", response_model=TicketDataResponse)
def remove_attachment(
    ticket_id: UUID,
    attachment_id: str,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> TicketDataResponse:
    ticket = ticket_service.remove_attachment(ticket_id, attachment_id, user)
    return TicketDataResponse(ticket=ticket)


@router.post("/{ticket_id}/subscribe", response_model=SuccessResponse)
def subscribe(
    ticket_id: UUID,
    payload: SubscribeRequest,
    user: CurrentUser,
    ticket_service: TicketServiceDep,
) -> SuccessResponse:
    ticket_service.subscribe(ticket_id, payload, user)
    return SuccessResponse()
