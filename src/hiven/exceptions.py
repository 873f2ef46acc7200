"""
exceptions.py — Hiven Client Error Hierarchy

All errors raised by the client are typed subclasses of HivenError —
never bare Exception.

Import from here, not from individual modules:
    from hiven.exceptions import SocketCloseError, HTTPRequestError

Hierarchy:
    HivenError
    ├── GatewayError
    │   ├── GatewayConnectError
    │   ├── ExpectationFailedError
    │   ├── SocketCloseError
    │   └── InternalChannelError
    └── HTTPError
        ├── HTTPConnectionError
        └── HTTPRequestError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


# ─────────────────────────────────────────────────────────────────────────────
# Root
# ─────────────────────────────────────────────────────────────────────────────

class HivenError(Exception):
    """Base class for all Hiven client exceptions."""


# ─────────────────────────────────────────────────────────────────────────────
# Gateway layer
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CloseReason:
    """Close code and text sent by the server when it closes the socket."""
    code: int
    reason: str = ""

    def __str__(self) -> str:
        return f"{self.code} {self.reason}".strip()


class GatewayError(HivenError):
    """Base for gateway session errors."""


class GatewayConnectError(GatewayError):
    """The gateway socket could not be opened."""


class ExpectationFailedError(GatewayError):
    """The server sent something the session was not prepared to accept."""

    def __init__(self, expected: str, observed: Any) -> None:
        self.expected = expected
        self.observed = observed if isinstance(observed, str) else repr(observed)
        super().__init__(f"Expected {expected}, got {self.observed}")


class SocketCloseError(GatewayError):
    """The server closed the gateway socket."""

    def __init__(self, close_reason: Optional[CloseReason] = None) -> None:
        self.close_reason = close_reason
        if close_reason is None:
            super().__init__("Gateway socket closed without a close reason")
        else:
            super().__init__(f"Gateway socket closed: {close_reason}")

    @property
    def code(self) -> Optional[int]:
        return self.close_reason.code if self.close_reason else None


class InternalChannelError(GatewayError):
    """
    An in-process pipe send failed because its consumer went away.

    Almost always a consequence of an earlier error in the partner task.
    """

    def __init__(self, context: str, message: str = "") -> None:
        self.context = context
        super().__init__(message or f"Internal {context} pipe is closed")


# ─────────────────────────────────────────────────────────────────────────────
# REST layer
# ─────────────────────────────────────────────────────────────────────────────

class HTTPError(HivenError):
    """Base for REST API errors."""


class HTTPConnectionError(HTTPError):
    """Network failure while talking to the REST API."""


class HTTPRequestError(HTTPError):
    """The REST API answered with a non-success status."""

    def __init__(self, status_code: int, message: str = "", body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"REST request failed with HTTP {status_code}")


# ─────────────────────────────────────────────────────────────────────────────
# Convenience: all public names
# ─────────────────────────────────────────────────────────────────────────────

__all__ = [
    "HivenError",
    "CloseReason",
    # Gateway
    "GatewayError",
    "GatewayConnectError",
    "ExpectationFailedError",
    "SocketCloseError",
    "InternalChannelError",
    # REST
    "HTTPError",
    "HTTPConnectionError",
    "HTTPRequestError",
]
