"""
Date window resolution for the `schedule` command.

Turns the --date / --start / --end flags into a TimeWindow:

- "today" and "yesterday" cover the whole local calendar day
- explicit bounds use the fixed format "YYYY-MM-DD HH:MM:SS" (local time)
- a missing explicit bound falls back to the start/end of the current day

Day boundaries are computed on local wall-clock time first and only then
converted to UTC, which is what the Garoon API expects.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from garoon_cli.errors import ParseError
from garoon_cli.model import TimeWindow

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")

# Offset from local midnight used as the (inclusive) end of a day.
END_OF_DAY_OFFSET = timedelta(hours=23, minutes=59, seconds=59, microseconds=999999)


def _local_wall_clock(t: datetime) -> datetime:
    """
    Return `t` as naive local wall-clock time.
    """
    if t.tzinfo is None:
        return t
    return t.astimezone().replace(tzinfo=None)


def _to_utc(t: datetime) -> datetime:
    # naive datetimes are interpreted as local time by astimezone()
    return t.astimezone(timezone.utc)


def beginning_of_day(t: datetime) -> datetime:
    return t.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(t: datetime) -> datetime:
    return beginning_of_day(t) + END_OF_DAY_OFFSET


def parse_local(text: str) -> datetime:
    """
    Parse "YYYY-MM-DD HH:MM:SS" as naive local time.

    Raises ParseError for anything else, including single digit fields
    and surrounding whitespace.
    """
    msg = f"invalid timestamp {text!r}, expected YYYY-MM-DD HH:MM:SS"
    if not _TIMESTAMP_RE.fullmatch(text):
        raise ParseError(msg)
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise ParseError(msg) from exc


def resolve(
    mode: Optional[str],
    start: Optional[str] = None,
    end: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TimeWindow:
    """
    Resolve a date selection into a UTC TimeWindow.

    mode "today"/"yesterday" ignores `start` and `end`. Any other mode
    (usually None) uses the explicit bounds, each one defaulting
    independently to the start/end of the current local day.
    """
    local_now = _local_wall_clock(now) if now is not None else datetime.now()

    if mode == "today":
        lo, hi = beginning_of_day(local_now), end_of_day(local_now)
    elif mode == "yesterday":
        day = local_now - timedelta(days=1)
        lo, hi = beginning_of_day(day), end_of_day(day)
    else:
        lo = parse_local(start) if start else beginning_of_day(local_now)
        hi = parse_local(end) if end else end_of_day(local_now)

    return TimeWindow(start=_to_utc(lo), end=_to_utc(hi))
