from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from .query import ValidationRejected
from ..schemas import JobRecord

CSV_HEADERS = ["Title", "Company", "Location", "Platform", "Posted Date", "Fetched Date", "Description", "Link"]
CSV_MEDIA_TYPE = "text/csv"
CSV_DATE_FORMAT = "%m/%d/%Y, %H:%M:%S"


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    media_type: str = CSV_MEDIA_TYPE


def format_csv_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    # naive timestamps are taken as UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(CSV_DATE_FORMAT)


def _row(job: JobRecord) -> list[str]:
    return [
        job.title or "",
        job.company or "",
        job.location or "",
        job.platform.value if job.platform else "",
        format_csv_date(job.posted_date),
        format_csv_date(job.fetched_date),
        job.description or "",
        job.link or "",
    ]


def jobs_to_csv(jobs: Iterable[JobRecord]) -> str:
    """Header row plus one row per job, in the order given.

    Fields are quoted only when they hold a comma, a quote or a line break;
    quotes inside a quoted field are doubled.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for job in jobs:
        writer.writerow(_row(job))
    return buf.getvalue().removesuffix("\n")


def export_filename(today: date) -> str:
    return f"jobs_export_{today.isoformat()}.csv"


def build_export(jobs: list[JobRecord], today: date) -> CsvExport:
    if not jobs:
        raise ValidationRejected("No jobs to export. Please load jobs first.")
    return CsvExport(filename=export_filename(today), content=jobs_to_csv(jobs))
