from __future__ import annotations

from dataclasses import dataclass, replace

from ..config import settings
from ..schemas import ALL_PLATFORMS, ListJobsRequest, Pagination


class ValidationRejected(Exception):
    """A client-side guard refused an action before any request was made."""


@dataclass(frozen=True)
class QueryState:
    page: int = 1
    page_size: int = settings.PAGE_SIZE
    platform: str = ""
    search_term: str = ""

    def set_filter(self, platform: str | None, search_term: str | None) -> QueryState:
        platform = (platform or "").strip()
        if platform == ALL_PLATFORMS:
            platform = ""
        return replace(self, platform=platform, search_term=search_term or "", page=1)

    def set_page(self, n: int, total_pages: int) -> QueryState:
        if not 1 <= n <= total_pages:
            raise ValidationRejected(f"page {n} is outside 1..{total_pages}")
        return replace(self, page=n)

    def at_page(self, n: int) -> QueryState:
        return replace(self, page=n)

    def build_request(self) -> ListJobsRequest:
        return ListJobsRequest(
            page=self.page,
            page_size=self.page_size,
            platform=self.platform or None,
            search_term=self.search_term or None,
        )


def page_window(pagination: Pagination, width: int = 5) -> list[int]:
    """Page numbers to offer as buttons, keeping the current page near the middle."""
    total, page = pagination.total_pages, pagination.page
    if total <= width:
        return list(range(1, total + 1))
    half = width // 2
    if page <= half + 1:
        start = 1
    elif page >= total - half:
        start = total - width + 1
    else:
        start = page - half
    return list(range(start, start + width))


def showing_range(pagination: Pagination) -> tuple[int, int]:
    if pagination.total <= 0:
        return 0, 0
    start = (pagination.page - 1) * pagination.page_size + 1
    end = min(pagination.page * pagination.page_size, pagination.total)
    return start, end
