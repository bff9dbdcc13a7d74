import logging

from fastapi import status

from helpdesk.core.errors import AppError
from helpdesk.core.permissions import ROLE_GRANTS, can_this
from helpdesk.models.entities import UserEntity
from helpdesk.models.schemas.user import AccountListResponse, AccountUpdateRequest, UserRef
from helpdesk.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, user_repository: UserRepository) -> None:
        self.user_repository = user_repository

    def list_accounts(self, *, limit: int, page: int) -> AccountListResponse:
        users = self.user_repository.list(limit=limit, offset=page * limit)
        return AccountListResponse(
            accounts=[UserRef.model_validate(user) for user in users],
            page=page,
            limit=limit,
        )

    def save_edit_account(
        self,
        username: str,
        payload: AccountUpdateRequest,
        requester: UserEntity,
    ) -> UserRef:
        account = self.user_repository.get_by_username(username)
        if account is None:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_ACCOUNT",
                message="Invalid Account",
                details={"username": username},
            )

        is_admin = can_this(requester.role, "accounts:update")
        editing_self = requester.id == account.id
        changing_role = payload.role is not None and payload.role != account.role
        if not (is_admin or editing_self) or (changing_role and not is_admin):
            raise AppError(
                status_code=status.HTTP_401_UNAUTHORIZED,
                code="INVALID_PERMISSIONS",
                message="Invalid Permissions",
            )
        if payload.role is not None and payload.role not in ROLE_GRANTS:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_ROLE",
                message="Invalid Role",
                details={"role": payload.role},
            )

        updated = self.user_repository.update(
            user_id=account.id,
            fullname=payload.fullname or account.fullname,
            email=payload.email or account.email,
            title=payload.title if "title" in payload.model_fields_set else account.title,
            role=payload.role or account.role,
        )
        if updated is None:
            raise AppError(
                status_code=status.HTTP_400_BAD_REQUEST,
                code="INVALID_ACCOUNT",
                message="Invalid Account",
                details={"username": username},
            )

        logger.info("Account %s updated by user %s", updated.username, requester.id)
        return UserRef.model_validate(updated)
