"""
Column projection: records -> printable rows.

The `-c/--columns` flag selects which fields to print and in which order.
Each record becomes one list of strings, one per requested column.

Rules:
- unknown column names print as an empty string (never an error)
- missing values print as an empty string
- repeat events print today's date with their repeat time of day,
  not the date of the actual occurrence
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from garoon_cli.model import Follow, ScheduleEvent

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def parse_columns(text: str) -> List[str]:
    """
    Split a comma separated column list ("detail,start,end").
    """
    return [c.strip() for c in (text or "").split(",")]


def format_row(values: Sequence[str]) -> str:
    return "\t".join(values)


# ---------------------------------------------------------------------------
# Schedule events
# ---------------------------------------------------------------------------


def _format_datetime(t: datetime) -> str:
    return t.astimezone().strftime(DATETIME_FORMAT)


def _when(
    event: ScheduleEvent,
    dt: Optional[datetime],
    d: Optional[date],
    repeat_time: Optional[str],
    today: date,
) -> str:
    if event.event_type == "repeat":
        return f"{today.strftime(DATE_FORMAT)}T{repeat_time or ''}"
    if dt is not None:
        return _format_datetime(dt)
    if d is not None:
        return d.strftime(DATE_FORMAT)
    return ""


def _event_start(event: ScheduleEvent, today: date) -> str:
    return _when(event, event.start, event.start_date, event.repeat_start_time, today)


def _event_end(event: ScheduleEvent, today: date) -> str:
    return _when(event, event.end, event.end_date, event.repeat_end_time, today)


def _members(event: ScheduleEvent) -> str:
    return ":".join(m.name for m in event.members)


_EVENT_COLUMNS: Dict[str, Callable[[ScheduleEvent, date], str]] = {
    "id": lambda e, today: str(e.id),
    "members": lambda e, today: _members(e),
    "type": lambda e, today: e.event_type,
    "detail": lambda e, today: (e.detail or "").replace("\n", ""),
    "desc": lambda e, today: (e.description or "").replace("\n", ""),
    "start": _event_start,
    "end": _event_end,
}


# ---------------------------------------------------------------------------
# Bulletin follows
# ---------------------------------------------------------------------------

_FOLLOW_COLUMNS: Dict[str, Callable[[Follow], str]] = {
    "id": lambda f: str(f.number),
    "creator": lambda f: f.creator_name or "",
    "text": lambda f: (f.text or "").replace("\r\n", " "),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def project(record: Any, columns: Sequence[str], today: Optional[date] = None) -> List[str]:
    """
    Project one record onto the requested columns.

    Returns exactly one string per column, in the order given.
    """
    if isinstance(record, ScheduleEvent):
        day = today or date.today()
        out: List[str] = []
        for col in columns:
            fn = _EVENT_COLUMNS.get(col)
            out.append(fn(record, day) if fn else "")
        return out

    if isinstance(record, Follow):
        return [_FOLLOW_COLUMNS[col](record) if col in _FOLLOW_COLUMNS else "" for col in columns]

    return ["" for _ in columns]
