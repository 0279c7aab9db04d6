"""
Unit tests for column projection.

Rules:
- one output string per requested column, in request order
- unknown columns and missing values become ""
- repeat events use today's date with their repeat time of day
"""

import unittest
from datetime import date, datetime, timezone

from garoon_cli.columns import format_row, parse_columns, project
from garoon_cli.model import Follow, Member, ScheduleEvent

TODAY = date(2024, 3, 15)


def _local(*args: int) -> str:
    return datetime(*args).strftime("%Y-%m-%dT%H:%M:%S")


class TestScheduleEventColumns(unittest.TestCase):
    def setUp(self) -> None:
        start = datetime(2024, 3, 15, 9, 0).astimezone(timezone.utc)
        end = datetime(2024, 3, 15, 10, 30).astimezone(timezone.utc)
        self.event = ScheduleEvent(
            id=42,
            event_type="normal",
            detail="Weekly\nsync",
            description="line1\nline2\n",
            members=[Member(id="1", name="Alice"), Member(id="2", name="Bob")],
            start=start,
            end=end,
        )

    def test_basic_columns(self) -> None:
        row = project(self.event, ["id", "type", "members"], today=TODAY)
        self.assertEqual(row, ["42", "normal", "Alice:Bob"])

    def test_newlines_are_deleted(self) -> None:
        detail, desc = project(self.event, ["detail", "desc"], today=TODAY)
        self.assertEqual(detail, "Weeklysync")
        self.assertEqual(desc, "line1line2")
        self.assertNotIn("\n", detail + desc)

    def test_datetime_is_local(self) -> None:
        row = project(self.event, ["start", "end"], today=TODAY)
        self.assertEqual(row, [_local(2024, 3, 15, 9, 0), _local(2024, 3, 15, 10, 30)])

    def test_column_order_is_preserved(self) -> None:
        row = project(self.event, ["end", "id"], today=TODAY)
        self.assertEqual(row, [_local(2024, 3, 15, 10, 30), "42"])

    def test_unknown_column_is_empty(self) -> None:
        self.assertEqual(project(self.event, ["bogus_column"], today=TODAY), [""])
        self.assertEqual(project(self.event, ["id", "bogus", "type"], today=TODAY), ["42", "", "normal"])

    def test_date_only_event(self) -> None:
        ev = ScheduleEvent(id=1, event_type="normal", start_date=date(2024, 3, 20), end_date=date(2024, 3, 21))
        self.assertEqual(project(ev, ["start", "end"], today=TODAY), ["2024-03-20", "2024-03-21"])

    def test_event_without_when_is_empty(self) -> None:
        ev = ScheduleEvent(id=1, event_type="normal")
        self.assertEqual(project(ev, ["start", "end", "members"], today=TODAY), ["", "", ""])

    def test_repeat_event_uses_today(self) -> None:
        ev = ScheduleEvent(
            id=7,
            event_type="repeat",
            start_date=date(2023, 1, 1),
            repeat_start_time="09:30:00",
            repeat_end_time="10:00:00",
        )
        row = project(ev, ["id", "start", "end"], today=TODAY)
        self.assertEqual(row, ["7", "2024-03-15T09:30:00", "2024-03-15T10:00:00"])

    def test_repeat_event_defaults_to_current_date(self) -> None:
        ev = ScheduleEvent(id=7, event_type="repeat", repeat_start_time="09:30:00")
        self.assertEqual(project(ev, ["start"]), [f"{date.today():%Y-%m-%d}T09:30:00"])


class TestFollowColumns(unittest.TestCase):
    def setUp(self) -> None:
        self.follow = Follow(id=100, number=3, text="a\r\nb", creator_name="Carol")

    def test_columns(self) -> None:
        self.assertEqual(project(self.follow, ["id", "creator", "text"]), ["3", "Carol", "a b"])

    def test_only_crlf_is_replaced(self) -> None:
        f = Follow(id=1, number=1, text="x\r\ny\nz", creator_name="")
        self.assertEqual(project(f, ["text"]), ["x y\nz"])

    def test_unknown_and_event_only_columns_are_empty(self) -> None:
        self.assertEqual(project(self.follow, ["start", "bogus_column"]), ["", ""])


class TestHelpers(unittest.TestCase):
    def test_unknown_record_type(self) -> None:
        self.assertEqual(project(object(), ["id", "text"]), ["", ""])

    def test_parse_columns(self) -> None:
        self.assertEqual(parse_columns("detail,start,end"), ["detail", "start", "end"])
        self.assertEqual(parse_columns("id, creator"), ["id", "creator"])

    def test_format_row_uses_tabs(self) -> None:
        self.assertEqual(format_row(["a", "", "c"]), "a\t\tc")


if __name__ == "__main__":
    unittest.main()
