from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

from .csv_export import build_export
from .query import QueryState, ValidationRejected
from .state import (
    DashboardState,
    FetchFinished,
    FetchFormEdited,
    FetchStarted,
    ListFailed,
    ListLoaded,
    ListRequested,
    reduce,
)
from ..gateway.base import GatewayError, JobGateway

log = logging.getLogger(__name__)

LIST_FAILED = "Failed to fetch jobs. Please try again."
TRIGGER_FAILED = "Failed to trigger manual fetch. Please check your backend connection."
TRIGGER_OK = "Manual fetch triggered successfully!"
TRIGGER_UNEXPECTED = "Manual fetch triggered, but response was unexpected."


@dataclass(frozen=True)
class Ok:
    message: Optional[str] = None
    value: Any = None


@dataclass(frozen=True)
class Error:
    message: str


Outcome = Union[Ok, Error]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DashboardController:
    """Owns the dashboard state and runs every user action against the gateway.

    All methods run on one event loop. List fetches may overlap each other and
    a manual fetch; only the newest list request is allowed to update the view.
    """

    def __init__(self, gateway: JobGateway, state: DashboardState | None = None):
        self.gateway = gateway
        self.state = state or DashboardState()

    def _dispatch(self, event) -> DashboardState:
        self.state = reduce(self.state, event)
        return self.state

    async def _load(self, query: QueryState) -> Outcome:
        token = self._dispatch(ListRequested(query)).request_token
        request = query.build_request()
        try:
            resp = await self.gateway.list_jobs(request)
        except GatewayError as e:
            message = e.user_message(LIST_FAILED)
            log.warning("[jobs] list request %d failed: %s", token, e)
            self._dispatch(ListFailed(token, message))
            return Error(message)

        if token != self.state.request_token:
            log.debug("[jobs] dropping stale response for request %d", token)
        elif resp.status != "success":
            log.warning("[jobs] gateway answered status=%r, keeping current list", resp.status)
        else:
            log.info("[jobs] page %d: %d jobs", request.page, len(resp.data))
        self._dispatch(ListLoaded(token, resp, _now()))
        return Ok()

    async def mount(self) -> Outcome:
        return await self._load(self.state.query)

    def _visible_query(self) -> QueryState:
        # the page on screen, not a requested page that never loaded
        return self.state.query.at_page(self.state.pagination.page)

    async def refresh(self) -> Outcome:
        return await self._load(self._visible_query())

    async def apply_filter(self, platform: str | None, search_term: str | None) -> Outcome:
        return await self._load(self.state.query.set_filter(platform, search_term))

    async def change_page(self, page: int) -> Outcome:
        try:
            query = self.state.query.set_page(page, self.state.pagination.total_pages)
        except ValidationRejected as e:
            log.debug("[jobs] page change rejected: %s", e)
            return Error(str(e))
        return await self._load(query)

    def update_fetch_form(self, *, location=None, limit=None, platforms=None) -> Outcome:
        try:
            form = self.state.fetch_form.edit(location=location, limit=limit, platforms=platforms)
        except ValidationRejected as e:
            return Error(str(e))
        self._dispatch(FetchFormEdited(form))
        return Ok()

    def toggle_platform(self, platform: str) -> Outcome:
        try:
            form = self.state.fetch_form.toggle(platform)
        except ValidationRejected as e:
            return Error(str(e))
        self._dispatch(FetchFormEdited(form))
        return Ok()

    async def manual_fetch(self) -> Outcome:
        """Ask the gateway for a collection run, then reload the current page.

        The reload happens whether or not the trigger worked; ``fetching``
        stays on until both are done.
        """
        self._dispatch(FetchStarted())
        config = self.state.fetch_form.to_trigger(self.state.query.search_term)
        log.info("[fetch] triggering %s for %r in %r (limit %d)",
                 ",".join(config.platforms), config.search_term, config.location, config.limit)

        failure: Optional[str] = None
        outcome: Outcome
        try:
            resp = await self.gateway.trigger_fetch(config)
        except GatewayError as e:
            failure = e.user_message(TRIGGER_FAILED)
            log.error("[fetch] trigger failed: %s", e)
            outcome = Error(failure)
        else:
            if resp.status == "success":
                outcome = Ok(TRIGGER_OK)
            else:
                outcome = Ok(resp.message or TRIGGER_UNEXPECTED)

        try:
            await self._load(self._visible_query())
        finally:
            self._dispatch(FetchFinished(error=failure))
        return outcome

    def export_csv(self, today: date | None = None) -> Outcome:
        try:
            export = build_export(list(self.state.jobs), today or date.today())
        except ValidationRejected as e:
            log.info("[export] %s", e)
            return Error(str(e))
        log.info("[export] %d jobs -> %s", len(self.state.jobs), export.filename)
        return Ok(value=export)
