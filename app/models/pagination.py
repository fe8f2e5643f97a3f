# app/models/pagination.py

import math
from typing import Generic, List, Tuple, TypeVar

from pydantic import BaseModel, computed_field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp_paging(page: int, page_size: int) -> Tuple[int, int]:
    """Page is 1-based; page_size is kept within [1, MAX_PAGE_SIZE]."""
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    return page, page_size


class PagedResult(BaseModel, Generic[T]):
    items: List[T]
    total_count: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
