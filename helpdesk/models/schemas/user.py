from pydantic import Field

from helpdesk.models.schemas.base import CamelCaseModel, SuccessResponse


class UserRef(CamelCaseModel):
    id: int
    username: str
    fullname: str
    email: str
    role: str
    title: str | None = None
    image: str | None = None


class AccountUpdateRequest(CamelCaseModel):
    fullname: str | None = Field(default=None, min_length=1, max_length=120)
    email: str | None = Field(default=None, min_length=3, max_length=254)
    title: str | None = Field(default=None, max_length=120)
    role: str | None = None


class AccountDataResponse(SuccessResponse):
    account: UserRef


class AccountListResponse(SuccessResponse):
    accounts: list[UserRef]
    page: int
    limit: int
