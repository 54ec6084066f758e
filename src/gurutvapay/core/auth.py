"""
Access token acquisition, caching and renewal.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from .config import ClientConfig
from .errors import AuthError, GurutvapayError, ValidationError
from .token_cache import TokenCache

__all__ = [
    "AccessToken",
    "FALLBACK_TOKEN_LIFETIME",
    "TokenManager",
    "compute_expiry",
]

# Lifetime assumed when the login response carries no expiry at all.
FALLBACK_TOKEN_LIFETIME = 300


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: int

    def is_stale(self, now: float, buffer: int) -> bool:
        return now >= self.expires_at - buffer

    def to_dict(self) -> Dict[str, Any]:
        return {"access_token": self.value, "expires_at": self.expires_at}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["AccessToken"]:
        value = payload.get("access_token")
        expires_at = payload.get("expires_at")
        if not isinstance(value, str) or not value:
            return None
        try:
            return cls(value=value, expires_at=int(expires_at))
        except (TypeError, ValueError):
            return None


def _parse_iso(value: str) -> int:
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def compute_expiry(response: Mapping[str, Any], now: float) -> int:
    """
    Derive an absolute expiry from a login response.

    Precedence: ``expires_at`` (epoch) > ``expires_at_iso`` > ``expires_in``
    relative to ``now`` > ``now + FALLBACK_TOKEN_LIFETIME``. Unparseable
    values fall through to the next source.
    """
    expires_at = response.get("expires_at")
    if expires_at is not None:
        try:
            return int(float(expires_at))
        except (TypeError, ValueError):
            pass

    expires_at_iso = response.get("expires_at_iso")
    if isinstance(expires_at_iso, str) and expires_at_iso.strip():
        try:
            return _parse_iso(expires_at_iso)
        except ValueError:
            pass

    expires_in = response.get("expires_in")
    if expires_in is not None:
        try:
            return int(now + float(expires_in))
        except (TypeError, ValueError):
            pass

    return int(now + FALLBACK_TOKEN_LIFETIME)


class TokenManager:
    """
    Resolve the ``Authorization`` header for gateway calls.

    With an API key configured the key is used as-is. Otherwise the manager
    keeps an in-memory copy of the access token backed by ``cache`` (keyed by
    environment), and logs in again with the configured user credentials once
    the token enters the stale buffer. ``authenticate`` performs the login
    round trip and returns the decoded response body.
    """

    def __init__(
        self,
        config: ClientConfig,
        cache: TokenCache,
        authenticate: Callable[[Dict[str, str]], Mapping[str, Any]],
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.cache = cache
        self._authenticate = authenticate
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._lock = threading.RLock()

    @property
    def cache_key(self) -> str:
        return self.config.environment.value

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    def _fresh(self, token: Optional[AccessToken]) -> bool:
        return token is not None and not token.is_stale(self._clock(), self.config.expiry_buffer)

    def _load_cached(self) -> Optional[AccessToken]:
        entry = self.cache.get(self.cache_key)
        if entry is None:
            return None
        return AccessToken.from_dict(entry)

    def _store(self, token: AccessToken) -> AccessToken:
        self.cache.put_atomic(self.cache_key, token.to_dict())
        self._token = token
        return token

    def set_token(self, value: str, expires_at: int) -> AccessToken:
        """Install an externally obtained token and persist it."""
        if not value:
            raise ValidationError("access token must not be empty")
        with self._lock:
            return self._store(AccessToken(value=value, expires_at=int(expires_at)))

    def clear(self) -> None:
        with self._lock:
            self._token = None

    def login(self, username: str, password: str, grant_type: str = "password") -> AccessToken:
        if not self.config.has_oauth_credentials:
            raise ValidationError("client_id and client_secret are required for OAuth login")
        if not username or not password:
            raise ValidationError("username and password are required for OAuth login")

        form = {
            "grant_type": grant_type,
            "username": username,
            "password": password,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        with self._lock:
            try:
                response = self._authenticate(form)
            except (AuthError, ValidationError):
                raise
            except GurutvapayError as exc:
                raise AuthError(
                    f"Login failed: {exc}", status=exc.status, body=exc.body
                ) from exc

            if not isinstance(response, Mapping):
                raise AuthError("Login failed: unexpected response shape")
            value = response.get("access_token")
            if not isinstance(value, str) or not value:
                raise AuthError("Login failed or missing access_token")

            token = AccessToken(value=value, expires_at=compute_expiry(response, self._clock()))
            logging.info(
                "Obtained %s access token valid for %ds",
                self.cache_key,
                max(0, token.expires_at - int(self._clock())),
            )
            return self._store(token)

    def current_token(self) -> AccessToken:
        """
        Return a usable access token, refreshing it if needed.
        """
        if self._fresh(self._token):
            return self._token  # type: ignore[return-value]

        with self._lock:
            if self._fresh(self._token):
                return self._token  # type: ignore[return-value]

            # The shared cache only backs tokens this config could have obtained itself.
            if not self.config.has_oauth_credentials:
                if self._token is not None:
                    raise AuthError("Access token expired and no OAuth credentials are configured")
                raise ValidationError(
                    "No credentials configured: provide api_key or client_id and client_secret"
                )

            cached = self._load_cached()
            if self._fresh(cached):
                self._token = cached
                return cached  # type: ignore[return-value]

            if not self.config.has_user_credentials:
                raise AuthError("No valid access token; call login() first")

            logging.info("Refreshing %s access token", self.cache_key)
            return self.login(self.config.username, self.config.password)  # type: ignore[arg-type]

    def auth_header(self) -> Dict[str, str]:
        if self.config.api_key:
            return {"Authorization": f"Bearer {self.config.api_key}"}
        return {"Authorization": f"Bearer {self.current_token().value}"}
