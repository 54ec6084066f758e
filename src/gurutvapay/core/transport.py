"""
Single-attempt HTTP transport for the GuruTvapay gateway.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, MutableMapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .errors import ValidationError
from .outcome import Failure, OutcomeKind, RequestOutcome, Success, classify_status

__all__ = ["send"]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


def _encode_body(
    headers: MutableMapping[str, str],
    form: Optional[Mapping[str, Any]],
    json_body: Optional[Any],
) -> Optional[Any]:
    if form is not None and json_body is not None:
        raise ValidationError("Provide either a form body or a JSON body, not both.")

    if json_body is not None:
        try:
            encoded = json.dumps(json_body)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Request body is not JSON serializable: {exc}") from exc
        headers["Content-Type"] = JSON_CONTENT_TYPE
        return encoded.encode("utf-8")

    if form is not None:
        headers["Content-Type"] = FORM_CONTENT_TYPE
        return dict(form)

    return None


def _decode(response: requests.Response) -> RequestOutcome:
    status = response.status_code
    text = response.text or ""

    if not 200 <= status < 300:
        return Failure(classify_status(status), status, text)

    if not text.strip():
        return Success(status, {})
    try:
        return Success(status, response.json())
    except ValueError:
        return Failure(OutcomeKind.PERMANENT, status, text)


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    query: Optional[Mapping[str, Any]] = None,
    form: Optional[Mapping[str, Any]] = None,
    json_body: Optional[Any] = None,
    timeout: float = 30,
) -> RequestOutcome:
    """
    Perform exactly one HTTP request and classify the result.

    Network-level problems never raise: timeouts and connection errors become
    transient failures with status 0, anything else ``requests`` rejects becomes
    a permanent failure. Only caller mistakes (both bodies set, unserializable
    JSON) raise :class:`ValidationError`.
    """
    final_headers: CaseInsensitiveDict = CaseInsensitiveDict(headers or {})
    data = _encode_body(final_headers, form, json_body)
    method = method.upper()

    logging.debug("Sending %s %s", method, url)
    try:
        response = session.request(
            method,
            url,
            params=dict(query) if query else None,
            data=data,
            headers=final_headers,
            timeout=timeout,
        )
    except (requests.Timeout, requests.ConnectionError) as exc:
        logging.debug("%s %s failed: %s", method, url, type(exc).__name__)
        return Failure(OutcomeKind.TRANSIENT, 0, "")
    except requests.RequestException as exc:
        logging.debug("%s %s could not be sent: %s", method, url, type(exc).__name__)
        return Failure(OutcomeKind.PERMANENT, 0, "")

    outcome = _decode(response)
    logging.debug("%s %s -> HTTP %s", method, url, response.status_code)
    return outcome
