"""
Webhook signature verification.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Mapping, Optional, Union

__all__ = [
    "SIGNATURE_HEADERS",
    "compute_signature",
    "signature_from_headers",
    "verify_webhook",
]

SIGNATURE_HEADERS = ("X-Signature", "X-Gurutvapay-Signature")
_PREFIX = "sha256="


def _as_bytes(value: Union[str, bytes]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(payload: Union[str, bytes], secret: Union[str, bytes]) -> str:
    """Hex HMAC-SHA256 of ``payload`` keyed with ``secret``."""
    return hmac.new(_as_bytes(secret), _as_bytes(payload), hashlib.sha256).hexdigest()


def signature_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    lowered = {key.lower(): value for key, value in headers.items()}
    for name in SIGNATURE_HEADERS:
        value = lowered.get(name.lower())
        if value:
            return value
    return None


def verify_webhook(
    payload: Union[str, bytes],
    signature_header: Optional[str],
    secret: Union[str, bytes],
) -> bool:
    """
    Check that ``signature_header`` is the HMAC-SHA256 of the raw request body.

    ``payload`` must be the exact bytes received, before any JSON parsing.
    The header may carry a ``sha256=`` prefix. Comparison is constant time.
    """
    if not signature_header:
        return False
    signature = signature_header.strip()
    if signature.startswith(_PREFIX):
        signature = signature[len(_PREFIX):]
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
