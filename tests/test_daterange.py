"""
Unit tests for date window resolution.

Contract:
- "today"/"yesterday" cover the whole local day
- explicit bounds are "YYYY-MM-DD HH:MM:SS" local time, each optional
- results are UTC, converted from local wall-clock time
"""

import unittest
from datetime import datetime, timedelta, timezone

from garoon_cli.daterange import END_OF_DAY_OFFSET, beginning_of_day, end_of_day, parse_local, resolve
from garoon_cli.errors import ParseError


def _utc(*args: int) -> datetime:
    # naive local -> UTC, same conversion the resolver uses
    return datetime(*args).astimezone(timezone.utc)


NOW = datetime(2024, 3, 15, 10, 0, 0)


class TestDayBoundaries(unittest.TestCase):
    def test_beginning_of_day(self) -> None:
        self.assertEqual(beginning_of_day(datetime(2024, 3, 15, 10, 11, 12, 345)), datetime(2024, 3, 15))

    def test_end_of_day_uses_offset(self) -> None:
        self.assertEqual(end_of_day(NOW), datetime(2024, 3, 15) + END_OF_DAY_OFFSET)
        self.assertEqual(end_of_day(NOW), datetime(2024, 3, 15, 23, 59, 59, 999999))


class TestResolve(unittest.TestCase):
    def test_today(self) -> None:
        w = resolve("today", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 15, 0, 0, 0))
        self.assertEqual(w.end, _utc(2024, 3, 15, 23, 59, 59, 999999))

    def test_yesterday(self) -> None:
        w = resolve("yesterday", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 14, 0, 0, 0))
        self.assertEqual(w.end, _utc(2024, 3, 14, 23, 59, 59, 999999))

    def test_yesterday_crosses_month(self) -> None:
        w = resolve("yesterday", now=datetime(2024, 3, 1, 0, 30))
        self.assertEqual(w.start, _utc(2024, 2, 29, 0, 0, 0))

    def test_keyword_ignores_explicit_bounds(self) -> None:
        w = resolve("today", start="2000-01-01 00:00:00", end="bogus", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 15, 0, 0, 0))

    def test_no_selection_defaults_to_today(self) -> None:
        self.assertEqual(resolve(None, now=NOW), resolve("today", now=NOW))

    def test_explicit_bounds(self) -> None:
        w = resolve(None, start="2024-03-01 09:00:00", end="2024-03-02 18:30:15", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 1, 9, 0, 0))
        self.assertEqual(w.end, _utc(2024, 3, 2, 18, 30, 15))

    def test_only_start_given(self) -> None:
        w = resolve(None, start="2024-03-15 08:00:00", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 15, 8, 0, 0))
        self.assertEqual(w.end, _utc(2024, 3, 15, 23, 59, 59, 999999))

    def test_only_end_given(self) -> None:
        w = resolve(None, end="2024-03-20 12:00:00", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 15, 0, 0, 0))
        self.assertEqual(w.end, _utc(2024, 3, 20, 12, 0, 0))

    def test_bounds_are_utc(self) -> None:
        w = resolve("today", now=NOW)
        self.assertEqual(w.start.utcoffset(), timedelta(0))
        self.assertEqual(w.end.utcoffset(), timedelta(0))
        self.assertLessEqual(w.start, w.end)

    def test_aware_now_is_converted_to_local(self) -> None:
        aware = NOW.astimezone(timezone.utc)
        self.assertEqual(resolve("today", now=aware), resolve("today", now=NOW))

    def test_malformed_start_raises(self) -> None:
        with self.assertRaises(ParseError):
            resolve(None, start="2024/03/15 10:00", now=NOW)

    def test_date_only_is_rejected(self) -> None:
        with self.assertRaises(ParseError):
            resolve(None, end="2024-03-15", now=NOW)

    def test_future_start_without_end_is_kept(self) -> None:
        # bounds are independent; the server decides what an inverted window means
        w = resolve(None, start="2024-03-20 00:00:00", now=NOW)
        self.assertEqual(w.start, _utc(2024, 3, 20, 0, 0, 0))
        self.assertEqual(w.end, _utc(2024, 3, 15, 23, 59, 59, 999999))

    def test_single_digit_fields_are_rejected(self) -> None:
        with self.assertRaises(ParseError):
            parse_local("2024-3-5 1:2:3")

    def test_surrounding_whitespace_is_rejected(self) -> None:
        for text in (" 2024-03-15 10:00:00", "2024-03-15 10:00:00 ", "  2024-3-5 1:2:3  "):
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    parse_local(text)

    def test_impossible_date_is_rejected(self) -> None:
        with self.assertRaises(ParseError):
            parse_local("2024-02-30 10:00:00")

    def test_parse_local(self) -> None:
        self.assertEqual(parse_local("2024-03-05 01:02:03"), datetime(2024, 3, 5, 1, 2, 3))

    def test_parse_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            parse_local("not a date")


if __name__ == "__main__":
    unittest.main()
