import csv
import io
import unittest
from datetime import date, datetime, timedelta, timezone

from dashboard.schemas import JobRecord
from dashboard.services.csv_export import (
    CSV_HEADERS,
    build_export,
    format_csv_date,
    jobs_to_csv,
)
from dashboard.services.query import ValidationRejected


class CsvExportTests(unittest.TestCase):
    def test_header_only_for_no_rows(self):
        self.assertEqual(
            jobs_to_csv([]),
            "Title,Company,Location,Platform,Posted Date,Fetched Date,Description,Link",
        )

    def test_rows_keep_order_and_blank_missing_fields(self):
        jobs = [
            JobRecord(id="b", title="Second", platform="indeed"),
            JobRecord(id="a", title="First", company="Acme", link="https://x.test/1"),
        ]
        lines = jobs_to_csv(jobs).split("\n")
        self.assertEqual(len(lines), 3)
        self.assertEqual(lines[1], "Second,,,indeed,,,,")
        self.assertEqual(lines[2], "First,Acme,,,,,,https://x.test/1")

    def test_quoting_only_when_needed(self):
        job = JobRecord(id="1", title="Engineer, Backend", company='The "Best" Co', location="Austin")
        row = jobs_to_csv([job]).split("\n")[1]
        self.assertEqual(row, '"Engineer, Backend","The ""Best"" Co",Austin,,,,,')

    def test_description_round_trips_through_csv_reader(self):
        desc = 'Build APIs, ship fast.\nSay "hi" to the team'
        text = jobs_to_csv([JobRecord(id="1", title="Dev", description=desc)])
        rows = list(csv.reader(io.StringIO(text)))
        self.assertEqual(rows[0], CSV_HEADERS)
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[1][6], desc)

    def test_dates_use_fixed_pattern(self):
        job = JobRecord(
            id="1",
            posted_date="2025-01-05T15:04:05Z",
            fetched_date=datetime(2025, 1, 6, 9, 0, 0),
        )
        row = next(csv.reader(io.StringIO(jobs_to_csv([job]).split("\n", 1)[1])))
        self.assertEqual(row[4], "01/05/2025, 15:04:05")
        self.assertEqual(row[5], "01/06/2025, 09:00:00")

    def test_aware_dates_are_converted_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        self.assertEqual(format_csv_date(datetime(2025, 1, 5, 22, 30, tzinfo=eastern)), "01/06/2025, 03:30:00")
        self.assertEqual(format_csv_date(None), "")

    def test_export_filename_and_type(self):
        export = build_export([JobRecord(id="1", title="Dev")], date(2025, 3, 9))
        self.assertEqual(export.filename, "jobs_export_2025-03-09.csv")
        self.assertEqual(export.media_type, "text/csv")
        self.assertTrue(export.content.startswith("Title,Company"))

    def test_empty_export_rejected(self):
        with self.assertRaises(ValidationRejected):
            build_export([], date(2025, 3, 9))


if __name__ == "__main__":
    unittest.main()
