"""
Error taxonomy for the GuruTvapay client.

Every failure surfaces as a :class:`GurutvapayError` tagged with an
:class:`ErrorKind`. The subclasses are a closed, single-level set pinned to one
kind each, so callers can either ``except AuthError`` or switch on ``exc.kind``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .outcome import Failure, OutcomeKind

__all__ = [
    "AuthError",
    "ConfigError",
    "ErrorKind",
    "GatewayError",
    "GurutvapayError",
    "NotFoundError",
    "RateLimitError",
    "TransportError",
    "ValidationError",
    "error_from_failure",
]

MAX_BODY_CHARS = 1000


class ErrorKind(str, Enum):
    AUTH = "auth"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    TRANSPORT = "transport"
    GATEWAY = "gateway"


class GurutvapayError(Exception):
    """
    Base error raised by the client.

    ``status`` is 0 when no HTTP response was received. ``body`` holds the
    (truncated) raw response body for diagnostics; it is never part of
    ``str(exc)``.
    """

    kind: ErrorKind = ErrorKind.GATEWAY

    def __init__(self, message: str, *, status: int = 0, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = (body or "")[:MAX_BODY_CHARS]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status}, message={str(self)!r})"


class AuthError(GurutvapayError):
    kind = ErrorKind.AUTH


class NotFoundError(GurutvapayError):
    kind = ErrorKind.NOT_FOUND


class RateLimitError(GurutvapayError):
    kind = ErrorKind.RATE_LIMIT


class ValidationError(GurutvapayError):
    kind = ErrorKind.VALIDATION


class ConfigError(ValidationError):
    """Raised when the supplied configuration is invalid."""


class TransportError(GurutvapayError):
    kind = ErrorKind.TRANSPORT


class GatewayError(GurutvapayError):
    kind = ErrorKind.GATEWAY


def error_from_failure(failure: Failure, url: str = "") -> GurutvapayError:
    """
    Convert a terminal :class:`Failure` outcome into the matching exception.
    """
    status, body = failure.status, failure.body
    target = f" for {url}" if url else ""

    if failure.kind is OutcomeKind.AUTH:
        return AuthError(f"Authentication failed (HTTP {status}){target}", status=status, body=body)
    if failure.kind is OutcomeKind.NOT_FOUND:
        return NotFoundError(f"Not found{target}", status=status, body=body)
    if failure.kind is OutcomeKind.TRANSIENT:
        if status == 429:
            return RateLimitError(f"Rate limited{target}", status=status, body=body)
        if status == 0:
            return TransportError(f"HTTP request failed{target}", status=status, body=body)
        return TransportError(f"Gateway unavailable (HTTP {status}){target}", status=status, body=body)
    if status == 0:
        return TransportError(f"HTTP request could not be sent{target}", status=status, body=body)
    if 200 <= status < 300:
        return TransportError(
            f"Gateway returned a non-JSON body (HTTP {status}){target}", status=status, body=body
        )
    return GatewayError(f"HTTP {status}{target}", status=status, body=body)
