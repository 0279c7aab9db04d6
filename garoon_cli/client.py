"""
Garoon SOAP API client.

Only the handful of calls the CLI needs are implemented:

    UtilLogin                  -> login()
    BaseGetUserByLoginName     -> get_user_id()
    ScheduleGetEvents          -> get_events()
    ScheduleGetEventsByTarget  -> get_events_by_target()
    BulletinGetFollows         -> get_follows()

Requests are plain SOAP 1.2 envelopes sent with requests, responses are
parsed with BeautifulSoup. A stored session id is sent as the session
cookie; without one, username/password go into the WS-Security header.
"""

from __future__ import annotations

import re
import warnings
from datetime import date, datetime, timezone
from typing import List, Optional
from xml.sax.saxutils import escape, quoteattr

import requests
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from bs4.element import Tag
from rich.console import Console

from garoon_cli.errors import AuthError, GaroonError, NotFoundError
from garoon_cli.model import Follow, Member, ScheduleEvent, TimeWindow


# ---------------------------------------------------------------------------
# Protocol constants
# ---------------------------------------------------------------------------

SOAP_NS = "http://www.w3.org/2003/05/soap-envelope"
DEFAULT_SESSION_KEY = "CBSESSID"

UTIL_PATH = "/cbpapi/util_api/util/api.csp"
BASE_PATH = "/cbpapi/base/api.csp"
SCHEDULE_PATH = "/cbpapi/schedule/api.csp"
BULLETIN_PATH = "/cbpapi/bulletin/api.csp"

# Garoon only checks that the request falls inside this range.
TIMESTAMP_CREATED = "2010-08-12T14:45:00Z"
TIMESTAMP_EXPIRES = "2037-08-12T14:45:00Z"

_ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="{ns}">
  <soap:Header>
    <Action>{action}</Action>
    {security}
    <Timestamp>
      <Created>{created}</Created>
      <Expires>{expires}</Expires>
    </Timestamp>
    <Locale>jp</Locale>
  </soap:Header>
  <soap:Body>
    <{action}>
      {parameters}
    </{action}>
  </soap:Body>
</soap:Envelope>"""

_SECURITY = (
    "<Security><UsernameToken>"
    "<Username>{username}</Username><Password>{password}</Password>"
    "</UsernameToken></Security>"
)

_FAULT_RE = re.compile(r"(^|:)fault$")
_REASON_RE = re.compile(r"(^|:)(text|faultstring)$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def format_xml_datetime(t: datetime) -> str:
    """
    Format an instant the way Garoon expects it: UTC, seconds precision.
    """
    return t.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_xml_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise GaroonError(f"malformed datetime in response: {value!r}") from exc


def _parse_xml_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise GaroonError(f"malformed date in response: {value!r}") from exc


def _parse_int(value: str, name: str) -> int:
    if not value:
        return 0
    try:
        return int(value)
    except ValueError as exc:
        raise GaroonError(f"malformed {name} in response: {value!r}") from exc


def _attr(tag: Optional[Tag], name: str, default: str = "") -> str:
    if tag is None:
        return default
    value = tag.get(name)
    return default if value is None else str(value)


def _parse_event(el: Tag) -> ScheduleEvent:
    """
    Convert one <schedule_event> element into a ScheduleEvent.
    """
    members: List[Member] = []
    members_el = el.find("members")
    if members_el is not None:
        # facility members have no <user>; they still take a (blank) slot
        for m in members_el.find_all("member"):
            user = m.find("user")
            members.append(Member(id=_attr(user, "id"), name=_attr(user, "name")))

    description = _attr(el, "description")
    if not description:
        desc_el = el.find("description")
        if desc_el is not None:
            description = desc_el.get_text()

    start = end = None
    start_date = end_date = None
    when = el.find("when")
    if when is not None:
        dt = when.find("datetime")
        if dt is not None:
            start = _parse_xml_datetime(_attr(dt, "start"))
            end = _parse_xml_datetime(_attr(dt, "end"))
        d = when.find("date")
        if d is not None:
            start_date = _parse_xml_date(_attr(d, "start"))
            end_date = _parse_xml_date(_attr(d, "end"))

    repeat_start = repeat_end = None
    repeat_info = el.find("repeat_info")
    if repeat_info is not None:
        cond = repeat_info.find("condition")
        if cond is not None:
            repeat_start = cond.get("start_time")
            repeat_end = cond.get("end_time")

    return ScheduleEvent(
        id=_parse_int(_attr(el, "id"), "id"),
        event_type=_attr(el, "event_type"),
        detail=_attr(el, "detail"),
        description=description,
        members=members,
        start=start,
        end=end,
        start_date=start_date,
        end_date=end_date,
        repeat_start_time=repeat_start,
        repeat_end_time=repeat_end,
    )


def _parse_follow(el: Tag) -> Follow:
    return Follow(
        id=_parse_int(_attr(el, "id"), "id"),
        number=_parse_int(_attr(el, "number"), "number"),
        text=_attr(el, "text"),
        creator_name=_attr(el.find("creator"), "name"),
    )


def _raise_for_fault(soup: BeautifulSoup, error_cls: type[GaroonError] = GaroonError) -> None:
    fault = soup.find(_FAULT_RE)
    if fault is None:
        return

    code_el = fault.find("code")
    # SOAP 1.2 nests a <soap:Code><soap:Value> element as well; the Garoon
    # error code lives in <detail><code>.
    detail = fault.find(re.compile(r"(^|:)detail$"))
    if detail is not None and detail.find("code") is not None:
        code_el = detail.find("code")
    code = code_el.get_text(strip=True) if code_el is not None else None

    message = ""
    if detail is not None and detail.find("diagnosis") is not None:
        message = detail.find("diagnosis").get_text(strip=True)
    if not message:
        reason = fault.find(_REASON_RE)
        message = reason.get_text(strip=True) if reason is not None else "SOAP fault"

    raise error_cls(message, code=code)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GaroonClient:
    """
    Minimal Garoon API client.

    `debug` is an optional rich Console; when given, every request and
    response body is echoed on it.
    """

    def __init__(
        self,
        endpoint: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session_id: Optional[str] = None,
        session_key: str = DEFAULT_SESSION_KEY,
        debug: Optional[Console] = None,
        timeout: float = 30,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self.username = username
        self.password = password
        self.session_id = session_id
        self.session_key = session_key
        self.debug = debug
        self.timeout = timeout
        self.http = http or requests.Session()

    # --- transport ---

    def _envelope(self, action: str, parameters: str, with_credentials: bool = True) -> str:
        security = ""
        if with_credentials and not self.session_id and self.username:
            security = _SECURITY.format(
                username=escape(self.username),
                password=escape(self.password or ""),
            )
        return _ENVELOPE.format(
            ns=SOAP_NS,
            action=action,
            security=security,
            created=TIMESTAMP_CREATED,
            expires=TIMESTAMP_EXPIRES,
            parameters=parameters,
        )

    def _post(self, path: str, body: str) -> requests.Response:
        url = f"{self.endpoint.rstrip('/')}{path}"
        cookies = {self.session_key: self.session_id} if self.session_id else None

        if self.debug is not None:
            self.debug.print(f"POST {url}", markup=False, highlight=False, emoji=False, soft_wrap=True)
            self.debug.print(body, markup=False, highlight=False, emoji=False, soft_wrap=True)

        resp = self.http.post(
            url,
            data=body.encode("utf-8"),
            headers={"Content-Type": "application/soap+xml; charset=UTF-8"},
            cookies=cookies,
            timeout=self.timeout,
        )

        if self.debug is not None:
            self.debug.print(f"HTTP {resp.status_code}", markup=False, highlight=False, emoji=False, soft_wrap=True)
            self.debug.print(resp.text, markup=False, highlight=False, emoji=False, soft_wrap=True)
        return resp

    def _call(
        self,
        path: str,
        action: str,
        parameters: str,
        error_cls: type[GaroonError] = GaroonError,
        with_credentials: bool = True,
    ) -> tuple[BeautifulSoup, requests.Response]:
        resp = self._post(path, self._envelope(action, parameters, with_credentials))
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
            soup = BeautifulSoup(resp.text, "html.parser")
        # Garoon reports faults with HTTP 500, so look at the body first
        _raise_for_fault(soup, error_cls)
        resp.raise_for_status()
        return soup, resp

    # --- endpoints ---

    def login(self, username: str, password: str) -> str:
        """
        Log in and return the session id.
        """
        params = (
            f"<parameters><login_name>{escape(username)}</login_name>"
            f"<password>{escape(password)}</password></parameters>"
        )
        soup, resp = self._call(UTIL_PATH, "UtilLogin", params, AuthError, with_credentials=False)

        session_id = None
        cookie_el = soup.find("cookie")
        if cookie_el is not None:
            m = re.search(re.escape(self.session_key) + r"=(.+?);", cookie_el.get_text())
            if m:
                session_id = m.group(1)
        if not session_id:
            session_id = resp.cookies.get(self.session_key)
        if not session_id:
            raise AuthError(f"login succeeded but no {self.session_key} cookie was returned")

        self.session_id = session_id
        return session_id

    def get_user_id(self, login_name: str) -> str:
        """
        Look up a user's id by login name. Raises NotFoundError if unknown.
        """
        params = f"<parameters><login_name>{escape(login_name)}</login_name></parameters>"
        soup, _ = self._call(BASE_PATH, "BaseGetUserByLoginName", params)

        user = soup.find("user")
        user_id = _attr(user, "key") or _attr(user, "id")
        if not user_id:
            raise NotFoundError(f"user not found: {login_name}")
        return user_id

    def get_events(self, window: TimeWindow) -> List[ScheduleEvent]:
        params = (
            f"<parameters start={quoteattr(format_xml_datetime(window.start))}"
            f" end={quoteattr(format_xml_datetime(window.end))}></parameters>"
        )
        soup, _ = self._call(SCHEDULE_PATH, "ScheduleGetEvents", params)
        return [_parse_event(el) for el in soup.find_all("schedule_event")]

    def get_events_by_target(self, window: TimeWindow, user_id: str) -> List[ScheduleEvent]:
        params = (
            f"<parameters start={quoteattr(format_xml_datetime(window.start))}"
            f" end={quoteattr(format_xml_datetime(window.end))}>"
            f"<user id={quoteattr(user_id)}></user></parameters>"
        )
        soup, _ = self._call(SCHEDULE_PATH, "ScheduleGetEventsByTarget", params)
        return [_parse_event(el) for el in soup.find_all("schedule_event")]

    def get_follows(self, topic_id: int, offset: int = 0, limit: int = 20) -> List[Follow]:
        params = (
            f'<parameters topic_id="{int(topic_id)}" offset="{int(offset)}"'
            f' limit="{int(limit)}"></parameters>'
        )
        soup, _ = self._call(BULLETIN_PATH, "BulletinGetFollows", params)
        return [_parse_follow(el) for el in soup.find_all("follow")]
