from typing import Literal

from helpdesk.models.schemas.base import CamelCaseModel, SuccessResponse


class MonthSeries(CamelCaseModel):
    label: Literal["New", "Closed"]
    data: list[tuple[int, int]]


class YearCountsResponse(SuccessResponse):
    total_count: int
    closed_count: int


class TopGroupItem(CamelCaseModel):
    name: str
    count: int


class TopGroupsResponse(SuccessResponse):
    items: list[TopGroupItem]


class MonthDataResponse(SuccessResponse):
    series: list[MonthSeries]
