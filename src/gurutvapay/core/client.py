"""
HTTP client for the GuruTvapay payment gateway.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .auth import AccessToken, TokenManager
from .config import ClientConfig
from .errors import TransportError
from .payloads import PaymentInitiation, PaymentOrder, build_payment_payload
from .retry import RetryPolicy, raise_for_outcome
from .token_cache import FileTokenCache, TokenCache
from .transport import send

__all__ = ["GurutvapayClient"]


class GurutvapayClient:
    """
    Authenticated client for the gateway endpoints.

    Every call resolves its bearer credential through :class:`TokenManager`,
    then runs one or more transport attempts under :class:`RetryPolicy`.
    Successful calls return the decoded JSON body untouched; failures raise a
    :class:`~gurutvapay.core.errors.GurutvapayError` subclass.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        token_cache: Optional[TokenCache] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.config = config
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.retry_policy = RetryPolicy(
            max_retries=config.max_retries,
            backoff_factor=config.backoff_factor,
            sleep=sleep or time.sleep,
        )
        cache = token_cache if token_cache is not None else FileTokenCache(config.token_cache_path)
        self.tokens = TokenManager(
            config,
            cache,
            self._authenticate,
            clock=clock or time.time,
        )

    def __enter__(self) -> "GurutvapayClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def _url(self, path: str) -> str:
        return f"{self.config.api_root}/{path.lstrip('/')}"

    def _resolve(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self.config.base_url}/{path_or_url.lstrip('/')}"

    def _call(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json_body: Optional[Any] = None,
        authenticated: bool = True,
    ) -> Any:
        final_headers: CaseInsensitiveDict = CaseInsensitiveDict(headers or {})
        final_headers.setdefault("Accept", "application/json")
        if authenticated:
            # Caller headers may add to but never replace the derived credential.
            final_headers.update(self.tokens.auth_header())

        outcome = self.retry_policy.execute(
            lambda: send(
                self.session,
                method,
                url,
                headers=final_headers,
                query=query,
                form=form,
                json_body=json_body,
                timeout=self.config.timeout,
            )
        )
        return raise_for_outcome(outcome, url)

    def _authenticate(self, form: Dict[str, str]) -> Mapping[str, Any]:
        return self._call("POST", self._url("login"), form=form, authenticated=False)

    @property
    def access_token(self) -> Optional[AccessToken]:
        return self.tokens.token

    def set_token(self, value: str, expires_at: int) -> AccessToken:
        return self.tokens.set_token(value, expires_at)

    def login(self, username: str, password: str, grant_type: str = "password") -> AccessToken:
        """
        Exchange user credentials for an access token (OAuth password grant).

        The token is cached and reused by subsequent calls until it enters
        the configured stale buffer.
        """
        logging.info("Logging in to %s gateway", self.config.environment.value)
        return self.tokens.login(username, password, grant_type=grant_type)

    def create_payment(self, order: PaymentOrder) -> PaymentInitiation:
        url = self._url("initiate-payment")
        logging.info("Initiating payment for order %s", order.merchant_order_id)
        body = self._call("POST", url, json_body=build_payment_payload(order))
        if not isinstance(body, dict):
            raise TransportError(f"Unexpected payment initiation response from {url}")
        return PaymentInitiation.from_response(body)

    def transaction_status(self, merchant_order_id: str) -> Any:
        return self._call(
            "POST",
            self._url("transaction-status"),
            form={"merchantOrderId": merchant_order_id},
        )

    def transaction_list(self, limit: int = 50, page: int = 0) -> Any:
        return self._call(
            "GET",
            self._url("transaction-list"),
            query={"limit": limit, "page": page},
        )

    def request(
        self,
        method: str,
        path_or_url: str,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """
        Authenticated request to an arbitrary endpoint.

        Relative paths are joined to the configured gateway root. Extra headers
        such as ``Idempotency-Key`` are sent along with the bearer credential.
        """
        return self._call(
            method,
            self._resolve(path_or_url),
            headers=headers,
            query=query,
            form=form,
            json_body=json_body,
        )
