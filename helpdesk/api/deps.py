"""Dependencies shared by API routes."""

from typing import Annotated

from fastapi import Depends, Header, status

from helpdesk.core.errors import AppError
from helpdesk.models.entities import UserEntity
from helpdesk.repositories.user_repository import UserRepository


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_current_user(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    accesstoken: Annotated[str | None, Header()] = None,
) -> UserEntity:
    """
    Resolve the ``accesstoken`` header to the requesting user.
    """
    if not accesstoken:
        raise AppError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="INVALID_ACCESS_TOKEN",
            message="Invalid Access Token",
        )

    user = user_repository.get_by_access_token(accesstoken)
    if user is None:
        raise AppError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="INVALID_ACCESS_TOKEN",
            message="Unknown User",
        )
    return user


CurrentUser = Annotated[UserEntity, Depends(get_current_user)]
