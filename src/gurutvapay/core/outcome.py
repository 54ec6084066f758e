"""
Result types produced by a single gateway round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

__all__ = [
    "Failure",
    "OutcomeKind",
    "RequestOutcome",
    "Success",
    "classify_status",
]


class OutcomeKind(str, Enum):
    TRANSIENT = "transient"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class Success:
    status: int
    body: Any


@dataclass(frozen=True)
class Failure:
    kind: OutcomeKind
    status: int
    body: str

    @property
    def retryable(self) -> bool:
        return self.kind is OutcomeKind.TRANSIENT


RequestOutcome = Union[Success, Failure]


def classify_status(status: int) -> OutcomeKind:
    """Map a non-2xx HTTP status to its outcome kind."""
    if status in (401, 403):
        return OutcomeKind.AUTH
    if status == 404:
        return OutcomeKind.NOT_FOUND
    if status == 429 or status >= 500:
        return OutcomeKind.TRANSIENT
    return OutcomeKind.PERMANENT
