"""Unit tests for webhook signature verification."""

from __future__ import annotations

import hashlib
import hmac

from gurutvapay import compute_signature, signature_from_headers, verify_webhook

PAYLOAD = b'{"a":1}'
SECRET = "s"
DIGEST = hmac.new(b"s", PAYLOAD, hashlib.sha256).hexdigest()


def _flip_one_bit(hex_digest: str) -> str:
    raw = bytearray(bytes.fromhex(hex_digest))
    raw[0] ^= 0x01
    return raw.hex()


class TestVerifyWebhook:
    def test_compute_signature_matches_hmac(self):
        assert compute_signature(PAYLOAD, SECRET) == DIGEST

    def test_accepts_bare_digest(self):
        assert verify_webhook(PAYLOAD, DIGEST, SECRET) is True

    def test_accepts_prefixed_digest(self):
        assert verify_webhook(PAYLOAD, f"sha256={DIGEST}", SECRET) is True

    def test_accepts_bytes_secret(self):
        assert verify_webhook(PAYLOAD, DIGEST, b"s") is True

    def test_rejects_bit_flipped_digest(self):
        assert verify_webhook(PAYLOAD, _flip_one_bit(DIGEST), SECRET) is False
        assert verify_webhook(PAYLOAD, "sha256=" + _flip_one_bit(DIGEST), SECRET) is False

    def test_rejects_wrong_secret(self):
        assert verify_webhook(PAYLOAD, DIGEST, "not-the-secret") is False

    def test_rejects_modified_payload(self):
        assert verify_webhook(b'{"a":2}', DIGEST, SECRET) is False

    def test_rejects_missing_or_garbage_header(self):
        assert verify_webhook(PAYLOAD, "", SECRET) is False
        assert verify_webhook(PAYLOAD, None, SECRET) is False
        assert verify_webhook(PAYLOAD, "sha256=ünïcode", SECRET) is False


class TestSignatureFromHeaders:
    def test_reads_either_header_case_insensitively(self):
        assert signature_from_headers({"x-signature": "abc"}) == "abc"
        assert signature_from_headers({"X-GURUTVAPAY-SIGNATURE": "def"}) == "def"

    def test_prefers_x_signature(self):
        headers = {"X-Gurutvapay-Signature": "second", "X-Signature": "first"}
        assert signature_from_headers(headers) == "first"

    def test_missing_header(self):
        assert signature_from_headers({"Content-Type": "application/json"}) is None
