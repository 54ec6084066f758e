"""Tests for the gateway client facade against a stubbed requests session."""

from __future__ import annotations

import json

import pytest

from conftest import FakeResponse, connection_error
from gurutvapay import (
    AuthError,
    ConfigError,
    Customer,
    FileTokenCache,
    GatewayError,
    InMemoryTokenCache,
    NotFoundError,
    PaymentOrder,
    RateLimitError,
    TransportError,
    ValidationError,
)

ROOT = "https://api.gurutvapay.com"
ORDER = PaymentOrder(
    amount=100,
    merchant_order_id="ORD1",
    channel="web",
    purpose="test",
    customer=Customer(buyer_name="John", email="john@example.com", phone="9876543210"),
)


class TestCreatePayment:
    def test_end_to_end_returns_gateway_fields_and_raw_body(self, make_client):
        body = {
            "status": "pending",
            "token": "pay_x",
            "payment_url": "https://pay.example.test/pay_x",
            "expires_in": 900,
            "extra": {"kept": True},
        }
        client, session = make_client(FakeResponse(200, body), api_key="sk_test_1")

        initiation = client.create_payment(ORDER)

        assert initiation.status == "pending"
        assert initiation.token == "pay_x"
        assert initiation.payment_url == "https://pay.example.test/pay_x"
        assert initiation.expires_in == 900
        assert initiation.raw == body

        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == f"{ROOT}/uat_mode/initiate-payment"
        assert call["headers"]["Authorization"] == "Bearer sk_test_1"
        assert json.loads(call["data"]) == {
            "amount": 100,
            "merchantOrderId": "ORD1",
            "channel": "web",
            "purpose": "test",
            "customer": {"buyer_name": "John", "email": "john@example.com", "phone": "9876543210"},
        }

    def test_optional_fields_are_sent_when_present(self, make_client):
        client, session = make_client(FakeResponse(200, {"status": "pending"}), api_key="k")
        order = PaymentOrder(
            amount=50,
            merchant_order_id="ORD2",
            channel="app",
            purpose="p",
            customer={"buyer_name": "A", "email": "a@x.test", "phone": "1"},
            expires_in=600,
            metadata={"cart": "42"},
        )
        client.create_payment(order)
        payload = json.loads(session.calls[0]["data"])
        assert payload["expires_in"] == 600
        assert payload["metadata"] == {"cart": "42"}

    def test_live_environment_uses_live_prefix(self, make_client):
        client, session = make_client(FakeResponse(200, {}), api_key="k", environment="live")
        client.create_payment(ORDER)
        assert session.calls[0]["url"] == f"{ROOT}/live/initiate-payment"

    def test_non_object_response_is_rejected(self, make_client):
        client, _ = make_client(FakeResponse(200, ["not", "an", "object"]), api_key="k")
        with pytest.raises(TransportError):
            client.create_payment(ORDER)


class TestEndpoints:
    def test_transaction_status_posts_form(self, make_client):
        client, session = make_client(FakeResponse(200, {"status": "success"}), api_key="k")
        assert client.transaction_status("ORD1") == {"status": "success"}
        call = session.calls[0]
        assert call["url"] == f"{ROOT}/uat_mode/transaction-status"
        assert call["data"] == {"merchantOrderId": "ORD1"}
        assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"

    def test_transaction_list_sends_query(self, make_client):
        client, session = make_client(FakeResponse(200, {"items": []}), api_key="k")
        assert client.transaction_list(limit=10, page=3) == {"items": []}
        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == f"{ROOT}/uat_mode/transaction-list"
        assert call["params"] == {"limit": 10, "page": 3}

    def test_timeout_is_forwarded(self, make_client):
        client, session = make_client(FakeResponse(200, {}), api_key="k", timeout=7)
        client.transaction_list()
        assert session.calls[0]["timeout"] == 7

    def test_base_url_override(self, make_client):
        client, session = make_client(FakeResponse(200, {}), api_key="k", base_url="https://sandbox.test/")
        client.transaction_status("X")
        assert session.calls[0]["url"] == "https://sandbox.test/uat_mode/transaction-status"


class TestGenericRequest:
    def test_relative_path_joins_root_and_keeps_extra_headers(self, make_client):
        client, session = make_client(FakeResponse(200, {"ok": True}), api_key="k")
        result = client.request(
            "post",
            "v1/refunds",
            headers={"Idempotency-Key": "idem-1", "authorization": "Bearer spoofed"},
            json_body={"amount": 5},
        )
        assert result == {"ok": True}
        call = session.calls[0]
        assert call["url"] == f"{ROOT}/v1/refunds"
        assert call["headers"]["Idempotency-Key"] == "idem-1"
        auth_values = [v for k, v in call["headers"].items() if k.lower() == "authorization"]
        assert auth_values == ["Bearer k"]

    def test_absolute_url_is_used_verbatim(self, make_client):
        client, session = make_client(FakeResponse(200, {}), api_key="k")
        client.request("GET", "https://other.test/path", query={"q": "1"})
        assert session.calls[0]["url"] == "https://other.test/path"
        assert session.calls[0]["params"] == {"q": "1"}


class TestErrors:
    def test_missing_credentials_never_send_a_request(self, make_client):
        client, session = make_client()
        with pytest.raises(ValidationError):
            client.transaction_status("ORD1")
        assert session.calls == []

    def test_missing_credentials_do_not_borrow_a_cached_token(self, make_client, clock):
        cache = InMemoryTokenCache()
        cache.put_atomic("uat", {"access_token": "someone-elses", "expires_at": int(clock.now) + 3600})
        client, session = make_client(cache=cache)
        with pytest.raises(ValidationError):
            client.transaction_status("ORD1")
        assert session.calls == []

    @pytest.mark.parametrize(
        "status, error_type",
        [(401, AuthError), (403, AuthError), (404, NotFoundError), (400, GatewayError)],
    )
    def test_status_mapping_without_retry(self, make_client, sleeps, status, error_type):
        client, session = make_client(FakeResponse(status, text="diagnostic body"), api_key="k")
        with pytest.raises(error_type) as excinfo:
            client.transaction_status("ORD1")
        assert excinfo.value.status == status
        assert excinfo.value.body == "diagnostic body"
        assert len(session.calls) == 1
        assert sleeps == []

    def test_rate_limit_after_retries_exhausted(self, make_client, sleeps):
        replies = [FakeResponse(429, text="slow down") for _ in range(4)]
        client, session = make_client(*replies, api_key="k", max_retries=3, backoff_factor=0.5)
        with pytest.raises(RateLimitError) as excinfo:
            client.transaction_list()
        assert excinfo.value.body == "slow down"
        assert len(session.calls) == 4
        assert sleeps == [0.5, 1.0, 2.0]

    def test_server_error_after_retries_exhausted(self, make_client):
        replies = [FakeResponse(500, text="boom") for _ in range(3)]
        client, session = make_client(*replies, api_key="k", max_retries=2)
        with pytest.raises(TransportError) as excinfo:
            client.transaction_list()
        assert excinfo.value.status == 500
        assert excinfo.value.body == "boom"

    def test_recovers_from_transient_failures(self, make_client):
        client, session = make_client(
            connection_error(),
            FakeResponse(502, text="bad gateway"),
            FakeResponse(200, {"ok": True}),
            api_key="k",
            max_retries=3,
        )
        assert client.transaction_list() == {"ok": True}
        assert len(session.calls) == 3

    def test_non_json_success_body_raises(self, make_client):
        client, _ = make_client(FakeResponse(200, text="<html>"), api_key="k")
        with pytest.raises(TransportError) as excinfo:
            client.transaction_list()
        assert excinfo.value.body == "<html>"

    def test_invalid_environment_rejected_at_construction(self, make_client):
        with pytest.raises(ConfigError):
            make_client(environment="staging")


class TestOAuthFlow:
    def test_login_then_authenticated_call(self, make_client, clock):
        cache = InMemoryTokenCache()
        client, session = make_client(
            FakeResponse(200, {"access_token": "tok", "expires_in": 3600}),
            FakeResponse(200, {"status": "success"}),
            cache=cache,
            client_id="CLIENT_123",
            client_secret="SECRET_456",
        )

        token = client.login("john@example.com", "password")
        assert token.value == "tok"
        assert client.access_token == token

        client.transaction_status("ORD1")
        login_call, status_call = session.calls
        assert login_call["url"] == f"{ROOT}/uat_mode/login"
        assert "Authorization" not in login_call["headers"]
        assert login_call["data"]["grant_type"] == "password"
        assert status_call["headers"]["Authorization"] == "Bearer tok"

    def test_failed_login_status_is_auth_error(self, make_client):
        client, _ = make_client(
            FakeResponse(401, text="invalid credentials"),
            client_id="c",
            client_secret="s",
        )
        with pytest.raises(AuthError) as excinfo:
            client.login("u", "wrong")
        assert excinfo.value.status == 401

    def test_stale_token_is_refreshed_with_stored_credentials(self, make_client, clock):
        cache = InMemoryTokenCache()
        cache.put_atomic("uat", {"access_token": "old", "expires_at": int(clock.now) + 299})
        client, session = make_client(
            FakeResponse(200, {"access_token": "fresh", "expires_in": 3600}),
            FakeResponse(200, {"items": []}),
            cache=cache,
            client_id="c",
            client_secret="s",
            username="u",
            password="p",
        )
        client.transaction_list()
        assert session.calls[0]["url"].endswith("/login")
        assert session.calls[1]["headers"]["Authorization"] == "Bearer fresh"

    def test_valid_cached_token_is_reused_across_clients(self, make_client, clock):
        cache = InMemoryTokenCache()
        cache.put_atomic("uat", {"access_token": "shared", "expires_at": int(clock.now) + 301})
        client, session = make_client(
            FakeResponse(200, {}),
            cache=cache,
            client_id="c",
            client_secret="s",
            username="u",
            password="p",
        )
        client.transaction_status("ORD1")
        assert len(session.calls) == 1
        assert session.calls[0]["headers"]["Authorization"] == "Bearer shared"

    def test_environments_sharing_a_cache_file_keep_their_own_tokens(self, make_client, tmp_path):
        cache = FileTokenCache(tmp_path / "token.json")
        uat, _ = make_client(cache=cache, client_id="c", client_secret="s")
        uat.set_token("uat-token", 4_000_000_000)

        live, session = make_client(
            FakeResponse(200, {"access_token": "live-token", "expires_in": 3600}),
            FakeResponse(200, {"status": "success"}),
            cache=cache,
            environment="live",
            client_id="c",
            client_secret="s",
            username="u",
            password="p",
        )
        live.transaction_status("ORD1")

        login_call, status_call = session.calls
        assert login_call["url"] == f"{ROOT}/live/login"
        assert status_call["headers"]["Authorization"] == "Bearer live-token"

    def test_other_environment_token_in_shared_file_is_not_used(self, make_client, tmp_path):
        cache = FileTokenCache(tmp_path / "token.json")
        cache.put_atomic("uat", {"access_token": "uat-token", "expires_at": 4_000_000_000})
        live, session = make_client(cache=cache, environment="live", client_id="c", client_secret="s")
        with pytest.raises(AuthError):
            live.transaction_status("ORD1")
        assert session.calls == []


class TestLifecycle:
    def test_context_manager_leaves_injected_session_open(self, make_client):
        client, session = make_client(api_key="k")
        with client:
            pass
        assert session.closed is False
