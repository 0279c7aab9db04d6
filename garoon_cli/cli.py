"""
CLI (Command Line Interface).

Commands:

    garoon login      -u USER -p PASS -e ENDPOINT
    garoon schedule   [--date today|yesterday] [--start ..] [--end ..] [-c cols]
    garoon bulletin   --topic_id N [-o OFFSET] [-l LIMIT] [-c cols]

Credentials and the endpoint default to the GAROON_USERNAME,
GAROON_PASSWORD and GAROON_ENDPOINT environment variables. After `login`
the session is stored locally and reused by the other commands.

Output is one tab separated line per record on stdout, so it can be piped
into cut/awk/sort. Errors go to stderr and the exit code is non-zero.
"""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

import requests
from rich.console import Console

from garoon_cli import __version__
from garoon_cli.client import GaroonClient
from garoon_cli.columns import format_row, parse_columns, project
from garoon_cli.daterange import resolve
from garoon_cli.errors import GaroonCliError
from garoon_cli.model import BulletinOptions, Credentials, ScheduleOptions, Session
from garoon_cli.storage import load_session, save_session

err_console = Console(stderr=True)

DEFAULT_SCHEDULE_COLUMNS = "detail,start,end"
DEFAULT_BULLETIN_COLUMNS = "creator,text"


def _credentials(args: argparse.Namespace) -> Credentials:
    return Credentials(
        endpoint=(args.endpoint or "").strip(),
        username=args.username,
        password=args.password,
        debug=bool(args.debug),
    )


def _new_client(creds: Credentials) -> GaroonClient:
    """
    Build a client from the stored session if there is one,
    otherwise from the credential flags.
    """
    debug = Console() if creds.debug else None

    session = load_session()
    if session is not None:
        return GaroonClient(session.endpoint, session_id=session.session_id, debug=debug)
    return GaroonClient(creds.endpoint, username=creds.username, password=creds.password, debug=debug)


def _cmd_login(args: argparse.Namespace) -> int:
    """
    Log in with username/password and store the session id.
    """
    creds = _credentials(args)
    if not creds.endpoint:
        err_console.print("Please provide an endpoint (-e or GAROON_ENDPOINT).", soft_wrap=True)
        return 1

    client = GaroonClient(creds.endpoint, debug=Console() if creds.debug else None)
    session_id = client.login(creds.username or "", creds.password or "")
    save_session(Session(session_id=session_id, endpoint=creds.endpoint))
    return 0


def _cmd_schedule(opts: ScheduleOptions) -> int:
    """
    Print schedule events of the resolved window.
    """
    window = resolve(opts.date, opts.start, opts.end)
    client = _new_client(opts.credentials)

    if opts.user_login:
        user_id = client.get_user_id(opts.user_login)
        events = client.get_events_by_target(window, user_id)
    else:
        events = client.get_events(window)

    for event in events:
        if opts.event_type != "all" and event.event_type != opts.event_type:
            continue
        print(format_row(project(event, opts.columns)))
    return 0


def _cmd_bulletin(opts: BulletinOptions) -> int:
    """
    Print the follows of one bulletin topic.
    """
    client = _new_client(opts.credentials)
    follows = client.get_follows(opts.topic_id, offset=opts.offset, limit=opts.limit)
    for follow in follows:
        print(format_row(project(follow, opts.columns)))
    return 0


def _add_credential_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-u", "--username", default=os.environ.get("GAROON_USERNAME"), help="Login name")
    p.add_argument("-p", "--password", default=os.environ.get("GAROON_PASSWORD"), help="Password")
    p.add_argument("-e", "--endpoint", default=os.environ.get("GAROON_ENDPOINT"), help="Garoon base URL")
    p.add_argument("-D", "--debug", action="store_true", help="Dump SOAP requests and responses")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="garoon", description="Garoon utility")
    parser.add_argument("--version", action="version", version=f"version={__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_login = sub.add_parser("login", aliases=["l"], help="Login to Garoon")
    _add_credential_args(p_login)

    p_schedule = sub.add_parser("schedule", aliases=["s"], help="Get your schedule")
    _add_credential_args(p_schedule)
    p_schedule.add_argument("-i", "--userid", type=str, help="Login name of the user whose schedule to show")
    p_schedule.add_argument("--start", type=str, help='Window start, "YYYY-MM-DD HH:MM:SS"')
    p_schedule.add_argument("--end", type=str, help='Window end, "YYYY-MM-DD HH:MM:SS"')
    p_schedule.add_argument("-d", "--date", choices=["today", "yesterday"], help="Whole-day window")
    p_schedule.add_argument("-t", "--type", default="all", help="Only print events of this type (normal, repeat, ...)")
    p_schedule.add_argument("-c", "--columns", default=DEFAULT_SCHEDULE_COLUMNS, help="Comma separated columns")

    p_bulletin = sub.add_parser("bulletin", aliases=["b"], help="Get bulletin follows")
    _add_credential_args(p_bulletin)
    p_bulletin.add_argument("--topic_id", "--topic-id", dest="topic_id", type=int, default=0, help="Topic id")
    p_bulletin.add_argument("-o", "--offset", type=int, default=0)
    p_bulletin.add_argument("-l", "--limit", type=int, default=20)
    p_bulletin.add_argument("-c", "--columns", default=DEFAULT_BULLETIN_COLUMNS, help="Comma separated columns")

    return parser


def _dispatch(args: argparse.Namespace) -> int:
    if args.command in ("login", "l"):
        return _cmd_login(args)

    if args.command in ("schedule", "s"):
        opts = ScheduleOptions(
            credentials=_credentials(args),
            user_login=args.userid,
            date=args.date,
            start=args.start,
            end=args.end,
            event_type=args.type,
            columns=parse_columns(args.columns),
        )
        return _cmd_schedule(opts)

    if args.command in ("bulletin", "b"):
        opts_b = BulletinOptions(
            credentials=_credentials(args),
            topic_id=args.topic_id,
            offset=args.offset,
            limit=args.limit,
            columns=parse_columns(args.columns),
        )
        return _cmd_bulletin(opts_b)

    return 2


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        code = _dispatch(args)
    except (GaroonCliError, requests.RequestException) as exc:
        err_console.print(f"Error: {exc}", markup=False, highlight=False, emoji=False, soft_wrap=True)
        code = 1

    raise SystemExit(code)
