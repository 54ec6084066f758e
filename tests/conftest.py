"""Shared fakes for the GuruTvapay client tests."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from gurutvapay import ClientConfig, GurutvapayClient, InMemoryTokenCache


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    """Records calls and replays queued responses or exceptions in order."""

    def __init__(self, *replies: Any) -> None:
        self.replies: List[Any] = list(replies)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "data": data,
                "headers": dict(headers or {}),
                "timeout": timeout,
            }
        )
        if not self.replies:
            raise AssertionError(f"Unexpected request: {method} {url}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def make_client(clock, sleeps):
    def _make(*replies: Any, cache=None, **config_values: Any):
        session = FakeSession(*replies)
        config_values.setdefault("max_retries", 3)
        config = ClientConfig(**config_values)
        client = GurutvapayClient(
            config,
            session=session,
            token_cache=cache if cache is not None else InMemoryTokenCache(),
            sleep=sleeps.append,
            clock=clock,
        )
        return client, session

    return _make


def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("boom")
