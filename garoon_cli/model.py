"""
Central data model definitions used across the project.

This module defines the records returned by the Garoon API and the option
objects the CLI builds for each command, so that:
- the client, the column projection and the CLI share the same field names
- records are read-only once parsed from a response
- each command receives its own immutable options instead of a shared struct
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, List


@dataclass(frozen=True)
class TimeWindow:
    """
    Query window for schedule requests, both bounds in UTC.
    """

    start: datetime
    end: datetime


@dataclass(frozen=True)
class Member:
    """
    One attendee of a schedule event.
    """

    id: str
    name: str


@dataclass(frozen=True)
class ScheduleEvent:
    """
    Represents one <schedule_event> element of a ScheduleGetEvents response.

    Normal events carry either `start`/`end` (aware datetimes) or, for
    all-day entries, only `start_date`/`end_date`. Repeat events carry the
    time of day of their repeat condition in `repeat_start_time` and
    `repeat_end_time` ("HH:MM:SS").
    """

    id: int
    event_type: str
    detail: str = ""
    description: str = ""
    members: List[Member] = field(default_factory=list)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    repeat_start_time: Optional[str] = None
    repeat_end_time: Optional[str] = None


@dataclass(frozen=True)
class Follow:
    """
    Represents one reply (<follow>) in a bulletin topic.
    """

    id: int
    number: int
    text: str
    creator_name: str


@dataclass(frozen=True)
class Session:
    """
    Contents of the local session file written by `garoon login`.
    """

    session_id: str
    endpoint: str


@dataclass(frozen=True)
class Credentials:
    endpoint: str
    username: Optional[str] = None
    password: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class ScheduleOptions:
    credentials: Credentials
    user_login: Optional[str]
    date: Optional[str]
    start: Optional[str]
    end: Optional[str]
    event_type: str
    columns: List[str]


@dataclass(frozen=True)
class BulletinOptions:
    credentials: Credentials
    topic_id: int
    offset: int
    limit: int
    columns: List[str]
