from typing import Annotated

from fastapi import APIRouter, Depends, Query

from helpdesk.api.deps import CurrentUser, get_user_repository
from helpdesk.models.schemas.user import (
    AccountDataResponse,
    AccountListResponse,
    AccountUpdateRequest,
)
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.services.account_service import AccountService

router = APIRouter(prefix="/accounts")


def get_account_service(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
) -> AccountService:
    return AccountService(user_repository=user_repository)


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


@router.get("", response_model=AccountListResponse)
def list_accounts(
    _: CurrentUser,
    account_service: AccountServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    page: Annotated[int, Query(ge=0)] = 0,
) -> AccountListResponse:
    return account_service.list_accounts(limit=limit, page=page)


@router.put("/{username}", response_model=AccountDataResponse)
def save_edit_account(
    username: str,
    payload: AccountUpdateRequest,
    user: CurrentUser,
    account_service: AccountServiceDep,
) -> AccountDataResponse:
    account = account_service.save_edit_account(username, payload, user)
    return AccountDataResponse(account=account)
