"""
Persistent storage for the Garoon session.

This module manages the file:

    ~/.garoon_session.json

written by `garoon login` and read by every other command. It stores only
the session id and the endpoint it belongs to; credentials are never
written to disk.

The location can be overridden with the GAROON_SESSION_FILE environment
variable.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from garoon_cli.model import Session

SESSION_FILE_ENV = "GAROON_SESSION_FILE"


def _default_session_path() -> Path:
    """
    Return the default path of the session file.

    Using a function instead of a constant makes testing easier,
    because tests can override the environment variable.
    """
    override = os.environ.get(SESSION_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".garoon_session.json"


def load_session(path: str | Path | None = None) -> Optional[Session]:
    """
    Load the stored session.

    Returns None if the file does not exist or is invalid, in which case
    callers fall back to username/password authentication.
    """
    session_path = Path(path) if path is not None else _default_session_path()

    # Never logged in
    if not session_path.exists():
        return None

    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
        session_id = data.get("session_id")
        endpoint = data.get("endpoint")
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return None

    if not isinstance(session_id, str) or not isinstance(endpoint, str):
        return None
    if not session_id or not endpoint:
        return None
    return Session(session_id=session_id, endpoint=endpoint)


def save_session(session: Session, path: str | Path | None = None) -> Path:
    """
    Save the session to disk and return the path written.

    Creates parent directories if needed.
    """
    session_path = Path(path) if path is not None else _default_session_path()
    session_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"session_id": session.session_id, "endpoint": session.endpoint}
    session_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return session_path
