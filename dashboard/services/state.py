from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Union

from .query import QueryState, ValidationRejected
from ..config import settings
from ..schemas import JobRecord, ListJobsResponse, Pagination, TriggerRequest


def coerce_limit(raw) -> int:
    """Limit typed into the form: non-numeric or < 1 means the default, capped at 100."""
    try:
        n = int(str(raw).strip())
    except (TypeError, ValueError):
        return settings.DEFAULT_FETCH_LIMIT
    if n < 1:
        return settings.DEFAULT_FETCH_LIMIT
    return min(n, 100)


@dataclass(frozen=True)
class ManualFetchForm:
    location: str = settings.DEFAULT_FETCH_LOCATION
    limit: int = settings.DEFAULT_FETCH_LIMIT
    platforms: tuple[str, ...] = tuple(settings.DEFAULT_PLATFORMS)

    def edit(self, *, location=None, limit=None, platforms=None) -> ManualFetchForm:
        form = self
        if location is not None:
            form = replace(form, location=location)
        if limit is not None:
            form = replace(form, limit=coerce_limit(limit))
        if platforms is not None:
            for p in platforms:
                _check_platform(p)
            form = replace(form, platforms=tuple(dict.fromkeys(platforms)))
        return form

    def toggle(self, platform: str) -> ManualFetchForm:
        _check_platform(platform)
        if platform in self.platforms:
            return replace(self, platforms=tuple(p for p in self.platforms if p != platform))
        return replace(self, platforms=self.platforms + (platform,))

    def to_trigger(self, search_term: str) -> TriggerRequest:
        return TriggerRequest(
            platforms=list(self.platforms) or list(settings.DEFAULT_PLATFORMS),
            search_term=search_term.strip() or settings.DEFAULT_SEARCH_TERM,
            location=self.location.strip() or settings.DEFAULT_FETCH_LOCATION,
            limit=coerce_limit(self.limit),
        )


def _check_platform(platform: str) -> None:
    if platform not in settings.DEFAULT_PLATFORMS:
        raise ValidationRejected(f"unknown platform: {platform}")


@dataclass(frozen=True)
class DashboardState:
    query: QueryState = field(default_factory=QueryState)
    jobs: tuple[JobRecord, ...] = ()
    pagination: Pagination = field(default_factory=lambda: Pagination(page_size=settings.PAGE_SIZE))
    loading: bool = False
    fetching: bool = False
    error: Optional[str] = None
    last_update_time: Optional[datetime] = None
    request_token: int = 0
    fetch_form: ManualFetchForm = field(default_factory=ManualFetchForm)


# events

@dataclass(frozen=True)
class ListRequested:
    query: QueryState


@dataclass(frozen=True)
class ListLoaded:
    token: int
    response: ListJobsResponse
    received_at: datetime


@dataclass(frozen=True)
class ListFailed:
    token: int
    message: str


@dataclass(frozen=True)
class FetchStarted:
    pass


@dataclass(frozen=True)
class FetchFinished:
    error: Optional[str] = None


@dataclass(frozen=True)
class FetchFormEdited:
    form: ManualFetchForm


Event = Union[ListRequested, ListLoaded, ListFailed, FetchStarted, FetchFinished, FetchFormEdited]


# results for a list request other than the latest one (request_token) are dropped
def reduce(state: DashboardState, event: Event) -> DashboardState:
    if isinstance(event, ListRequested):
        return replace(
            state,
            query=event.query,
            loading=True,
            error=None,
            request_token=state.request_token + 1,
        )

    if isinstance(event, ListLoaded):
        if event.token != state.request_token:
            return state
        resp = event.response
        if resp.status != "success":
            return replace(state, loading=False)
        pagination = resp.pagination or state.pagination
        return replace(
            state,
            jobs=tuple(resp.data),
            pagination=pagination,
            query=state.query.at_page(pagination.page) if resp.pagination else state.query,
            last_update_time=event.received_at,
            loading=False,
        )

    if isinstance(event, ListFailed):
        if event.token != state.request_token:
            return state
        return replace(state, error=event.message, loading=False)

    if isinstance(event, FetchStarted):
        return replace(state, fetching=True, error=None)

    if isinstance(event, FetchFinished):
        if event.error:
            return replace(state, fetching=False, error=event.error)
        return replace(state, fetching=False)

    if isinstance(event, FetchFormEdited):
        return replace(state, fetch_form=event.form)

    raise TypeError(f"unhandled event: {event!r}")
