import math
from datetime import datetime
from enum import Enum
from typing import Annotated, Generic, List, TypeVar

from pydantic import AfterValidator, BaseModel, Field

from app.core.datetime_utils import to_utc_naive


T = TypeVar("T")


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class PageOptions(BaseModel):
    order: SortOrder = SortOrder.DESC
    page: int = Field(1, ge=1)
    take: int = Field(10, ge=1, le=100)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.take


class PageMeta(BaseModel):
    page: int
    take: int
    item_count: int
    page_count: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def build(cls, options: PageOptions, item_count: int) -> "PageMeta":
        page_count = math.ceil(item_count / options.take) if item_count else 0
        return cls(
            page=options.page,
            take=options.take,
            item_count=item_count,
            page_count=page_count,
            has_previous_page=options.page > 1,
            has_next_page=options.page < page_count,
        )


class Page(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta


UTCDateTime = Annotated[datetime, AfterValidator(to_utc_naive)]
