import math
from datetime import datetime, timezone
from enum import Enum
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from typing import List, Optional


class Platform(str, Enum):
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    GLASSDOOR = "glassdoor"
    ZIP_RECRUITER = "zip_recruiter"
    MONSTER = "monster"
    UNKNOWN = "unknown"


PLATFORM_LABELS = {
    Platform.LINKEDIN: "LinkedIn",
    Platform.INDEED: "Indeed",
    Platform.GLASSDOOR: "Glassdoor",
    Platform.ZIP_RECRUITER: "ZipRecruiter",
    Platform.MONSTER: "Monster",
}

ALL_PLATFORMS = "all"


def parse_platform(val) -> Optional[Platform]:
    if val is None or val == "":
        return None
    if isinstance(val, Platform):
        return val
    try:
        return Platform(str(val).strip().lower())
    except ValueError:
        return Platform.UNKNOWN


def parse_timestamp(val) -> Optional[datetime]:
    # the gateway sends ISO strings; numbers are epoch milliseconds
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    if isinstance(val, (int, float)):
        try:
            return datetime.fromtimestamp(val / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(val, str):
        try:
            return datetime.fromisoformat(val.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class JobRecord(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    platform: Optional[Platform] = None
    posted_date: Optional[datetime] = None
    fetched_date: Optional[datetime] = None
    description: Optional[str] = None
    link: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("id", mode="before")
    @classmethod
    def _opaque_id(cls, v):
        return v if isinstance(v, str) else str(v)

    @field_validator("platform", mode="before")
    @classmethod
    def _platform(cls, v):
        return parse_platform(v)

    @field_validator("posted_date", "fetched_date", mode="before")
    @classmethod
    def _dates(cls, v):
        return parse_timestamp(v)


class Pagination(BaseModel):
    page: int = 1
    page_size: int = 20
    total: int = 0
    total_pages: int = 0

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _derive_total_pages(cls, data):
        if isinstance(data, dict) and data.get("total_pages") is None:
            size = data.get("page_size") or 0
            total = data.get("total") or 0
            data = {**data, "total_pages": math.ceil(total / size) if size > 0 else 0}
        return data


class ListJobsRequest(BaseModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1)
    platform: Optional[str] = None
    search_term: Optional[str] = None

    def to_params(self) -> dict:
        params = {"page": self.page, "page_size": self.page_size}
        if self.platform and self.platform != ALL_PLATFORMS:
            params["platform"] = self.platform
        if self.search_term:
            params["search_term"] = self.search_term
        return params


class ListJobsResponse(BaseModel):
    status: str
    data: List[JobRecord] = []
    pagination: Optional[Pagination] = None

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v):
        return v or []


class TriggerRequest(BaseModel):
    platforms: List[str]
    search_term: str
    location: str
    limit: int = Field(ge=1, le=100)


class TriggerResponse(BaseModel):
    status: str
    message: Optional[str] = None


# request bodies for the dashboard's own endpoints

class FilterIn(BaseModel):
    platform: Optional[str] = None
    search_term: Optional[str] = None


class FetchFormIn(BaseModel):
    location: Optional[str] = None
    limit: Optional[str | int] = None
    platforms: Optional[List[str]] = None
