# dashboard/main.py
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from .config import settings
from .gateway.http import HttpJobGateway
from .schemas import FetchFormIn, FilterIn, JobRecord, Pagination, PLATFORM_LABELS, Platform
from .services.controller import DashboardController, Error, Ok, Outcome
from .services.query import page_window, showing_range
from .services.state import DashboardState


BASE_DIR = Path(__file__).resolve().parent        # dashboard/
STATIC_DIR = BASE_DIR / "static"                  # dashboard/static
TEMPLATES_DIR = BASE_DIR / "templates"            # dashboard/templates

log = logging.getLogger(__name__)

PLACEHOLDER = "N/A"
PLATFORM_BADGES = {
    Platform.LINKEDIN: "badge-blue",
    Platform.INDEED: "badge-purple",
    Platform.GLASSDOOR: "badge-green",
    Platform.ZIP_RECRUITER: "badge-orange",
    Platform.MONSTER: "badge-red",
}


def display(value) -> str:
    return PLACEHOLDER if value in (None, "") else str(value)


def display_date(value: Optional[datetime]) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:%b} {value.day}, {value:%Y, %I:%M %p}"


def badge_class(platform: Optional[Platform]) -> str:
    return PLATFORM_BADGES.get(platform, "badge-gray")


app = FastAPI(title="Job Fetcher Dashboard")
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
tpl = Jinja2Templates(directory=str(TEMPLATES_DIR))
tpl.env.filters["display"] = display
tpl.env.filters["display_date"] = display_date
tpl.env.filters["badge"] = badge_class


def get_controller() -> DashboardController:
    ctl = getattr(app.state, "controller", None)
    if ctl is None:
        ctl = app.state.controller = DashboardController(HttpJobGateway())
    return ctl


@app.on_event("startup")
async def on_start():
    logging.basicConfig(level=settings.LOG_LEVEL)
    log.info("[dashboard] gateway at %s, page size %d", settings.GATEWAY_BASE_URL, settings.PAGE_SIZE)
    # first load; a failure only sets the error banner
    await get_controller().mount()


class StateOut(BaseModel):
    jobs: list[JobRecord]
    pagination: Pagination
    page: int
    platform: str
    search_term: str
    loading: bool
    fetching: bool
    error: Optional[str]
    last_update_time: Optional[datetime]
    fetch_location: str
    fetch_limit: int
    fetch_platforms: list[str]

    @classmethod
    def from_state(cls, s: DashboardState) -> StateOut:
        return cls(
            jobs=list(s.jobs),
            pagination=s.pagination,
            page=s.query.page,
            platform=s.query.platform,
            search_term=s.query.search_term,
            loading=s.loading,
            fetching=s.fetching,
            error=s.error,
            last_update_time=s.last_update_time,
            fetch_location=s.fetch_form.location,
            fetch_limit=s.fetch_form.limit,
            fetch_platforms=list(s.fetch_form.platforms),
        )


class FetchOut(BaseModel):
    ok: bool
    message: Optional[str] = None
    alert: bool = False
    state: StateOut


@app.get("/", response_class=HTMLResponse)
async def index(req: Request, ctl: DashboardController = Depends(get_controller)):
    s = ctl.state
    start, end = showing_range(s.pagination)
    return tpl.TemplateResponse(req, "index.html", {
        "state": s,
        "platform_labels": PLATFORM_LABELS,
        "fetch_platforms": settings.DEFAULT_PLATFORMS,
        "pages": page_window(s.pagination),
        "showing": (start, end),
    })


@app.get("/api/state", response_model=StateOut)
def api_state(ctl: DashboardController = Depends(get_controller)):
    return StateOut.from_state(ctl.state)


@app.post("/api/filter", response_model=StateOut)
async def api_filter(payload: FilterIn, ctl: DashboardController = Depends(get_controller)):
    q = ctl.state.query
    platform = q.platform if payload.platform is None else payload.platform
    term = q.search_term if payload.search_term is None else payload.search_term
    await ctl.apply_filter(platform, term)
    return StateOut.from_state(ctl.state)


@app.post("/api/refresh", response_model=StateOut)
async def api_refresh(ctl: DashboardController = Depends(get_controller)):
    await ctl.refresh()
    return StateOut.from_state(ctl.state)


@app.post("/api/page/{page}", response_model=StateOut)
async def api_page(page: int, ctl: DashboardController = Depends(get_controller)):
    before = ctl.state.request_token
    out = await ctl.change_page(page)
    if isinstance(out, Error) and ctl.state.request_token == before:
        raise HTTPException(409, out.message)
    return StateOut.from_state(ctl.state)


@app.post("/api/fetch-form", response_model=StateOut)
def api_fetch_form(payload: FetchFormIn, ctl: DashboardController = Depends(get_controller)):
    out = ctl.update_fetch_form(location=payload.location, limit=payload.limit, platforms=payload.platforms)
    if isinstance(out, Error):
        raise HTTPException(404, out.message)
    return StateOut.from_state(ctl.state)


@app.post("/api/fetch-form/platforms/{platform}", response_model=StateOut)
def api_toggle_platform(platform: str, ctl: DashboardController = Depends(get_controller)):
    out = ctl.toggle_platform(platform)
    if isinstance(out, Error):
        raise HTTPException(404, out.message)
    return StateOut.from_state(ctl.state)


def _fetch_out(out: Outcome, ctl: DashboardController) -> FetchOut:
    if isinstance(out, Ok):
        return FetchOut(ok=True, message=out.message, state=StateOut.from_state(ctl.state))
    return FetchOut(ok=False, message=out.message, alert=True, state=StateOut.from_state(ctl.state))


@app.post("/api/fetch", response_model=FetchOut)
async def api_fetch(ctl: DashboardController = Depends(get_controller)):
    return _fetch_out(await ctl.manual_fetch(), ctl)


@app.get("/api/export")
def api_export(ctl: DashboardController = Depends(get_controller)):
    out = ctl.export_csv()
    if isinstance(out, Error):
        raise HTTPException(400, out.message)
    export = out.value
    return Response(
        content=export.content,
        media_type=f"{export.media_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
