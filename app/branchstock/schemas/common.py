from pydantic import BaseModel


class OffsetPagination(BaseModel):
    page: int
    limit: int
    total: int
    has_next: bool
    has_prev: bool


class PagePagination(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
