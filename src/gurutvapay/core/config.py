"""
Configuration objects and helpers for the GuruTvapay client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigError

__all__ = [
    "ClientConfig",
    "ClientParameters",
    "ConfigError",
    "DEFAULT_ROOT",
    "Environment",
    "load_client_config",
]

DEFAULT_ROOT = "https://api.gurutvapay.com"

_PARAMETER_TO_ENV_KEY = {
    "environment": "GURUTVAPAY_ENV",
    "api_key": "GURUTVAPAY_API_KEY",
    "client_id": "GURUTVAPAY_CLIENT_ID",
    "client_secret": "GURUTVAPAY_CLIENT_SECRET",
    "username": "GURUTVAPAY_USERNAME",
    "password": "GURUTVAPAY_PASSWORD",
    "timeout": "GURUTVAPAY_TIMEOUT",
    "max_retries": "GURUTVAPAY_MAX_RETRIES",
    "backoff_factor": "GURUTVAPAY_BACKOFF_FACTOR",
    "base_url": "GURUTVAPAY_BASE_URL",
    "expiry_buffer": "GURUTVAPAY_EXPIRY_BUFFER",
    "token_cache_path": "GURUTVAPAY_TOKEN_CACHE",
    "webhook_secret": "GURUTVAPAY_WEBHOOK_SECRET",
}


class Environment(str, Enum):
    UAT = "uat"
    LIVE = "live"

    @property
    def path_prefix(self) -> str:
        return "/uat_mode" if self is Environment.UAT else "/live"

    @classmethod
    def parse(cls, value: "Environment | str") -> "Environment":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ConfigError(f"environment must be 'uat' or 'live', got '{value}'") from exc


def _stringify(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle layered on top of environment data by
    :func:`load_client_config`.
    """

    environment: Optional[str] = None
    api_key: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float | str] = None
    max_retries: Optional[int | str] = None
    backoff_factor: Optional[float | str] = None
    base_url: Optional[str] = None
    expiry_buffer: Optional[int | str] = None
    token_cache_path: Optional[str] = None
    webhook_secret: Optional[str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable client configuration.

    Credentials are optional here; a client without an API key or OAuth client
    credentials can be built but fails on its first authenticated call.
    """

    environment: Environment = Environment.UAT
    api_key: Optional[str] = field(default=None, repr=False)
    client_id: Optional[str] = None
    client_secret: Optional[str] = field(default=None, repr=False)
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    timeout: float = 30
    max_retries: int = 3
    backoff_factor: float = 0.5
    base_url: str = DEFAULT_ROOT
    expiry_buffer: int = 300
    token_cache_path: Optional[str] = None
    webhook_secret: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "environment", Environment.parse(self.environment))
        object.__setattr__(self, "base_url", (self.base_url or DEFAULT_ROOT).rstrip("/"))
        if self.timeout <= 0:
            raise ConfigError("timeout must be greater than zero")
        if self.max_retries < 0:
            raise ConfigError("max_retries must not be negative")
        if self.backoff_factor < 0:
            raise ConfigError("backoff_factor must not be negative")
        if self.expiry_buffer < 0:
            raise ConfigError("expiry_buffer must not be negative")

    @property
    def api_root(self) -> str:
        return self.base_url + self.environment.path_prefix

    @property
    def has_oauth_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def has_user_credentials(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        def _optional(key: str) -> Optional[str]:
            value = values.get(key)
            if value is None:
                return None
            value = value.strip()
            return value or None

        def _number(key: str, default: str, kind: type) -> Any:
            raw = values.get(key) or default
            try:
                return kind(raw)
            except ValueError as exc:
                raise ConfigError(f"{key} must be a valid {kind.__name__}, got '{raw}'") from exc

        return cls(
            environment=Environment.parse(values.get("GURUTVAPAY_ENV") or "uat"),
            api_key=_optional("GURUTVAPAY_API_KEY"),
            client_id=_optional("GURUTVAPAY_CLIENT_ID"),
            client_secret=_optional("GURUTVAPAY_CLIENT_SECRET"),
            username=_optional("GURUTVAPAY_USERNAME"),
            password=_optional("GURUTVAPAY_PASSWORD"),
            timeout=_number("GURUTVAPAY_TIMEOUT", "30", float),
            max_retries=_number("GURUTVAPAY_MAX_RETRIES", "3", int),
            backoff_factor=_number("GURUTVAPAY_BACKOFF_FACTOR", "0.5", float),
            base_url=_optional("GURUTVAPAY_BASE_URL") or DEFAULT_ROOT,
            expiry_buffer=_number("GURUTVAPAY_EXPIRY_BUFFER", "300", int),
            token_cache_path=_optional("GURUTVAPAY_TOKEN_CACHE"),
            webhook_secret=_optional("GURUTVAPAY_WEBHOOK_SECRET"),
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[ClientParameters] = None,
    ) -> "ClientConfig":
        merged_overrides = dict(overrides or {})
        if parameters is not None:
            merged_overrides.update(parameters.as_overrides())

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_client_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided through environment variables, a
    ``.env`` file, explicit overrides, a :class:`ClientParameters` bundle, or
    any combination. Later sources win.
    """
    return ClientConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
    )
