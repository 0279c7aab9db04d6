"""
Exception types raised by garoon_cli.

Everything the CLI knows how to report derives from GaroonCliError.
Transport failures from requests are not wrapped and propagate as-is.
"""

from __future__ import annotations

from typing import Optional


class GaroonCliError(Exception):
    """Base class for all errors raised by this package."""


class ParseError(GaroonCliError, ValueError):
    """Raised when a user supplied timestamp cannot be parsed."""


class GaroonError(GaroonCliError):
    """
    A SOAP fault returned by the Garoon server.

    `code` holds the server error code (e.g. GRN_CMMN_00105) when the
    fault carries one.
    """

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        msg = super().__str__()
        if self.code:
            return f"{self.code}: {msg}"
        return msg


class AuthError(GaroonError):
    """Login was rejected or did not yield a session."""


class NotFoundError(GaroonError):
    """A looked up object (e.g. a user by login name) does not exist."""
