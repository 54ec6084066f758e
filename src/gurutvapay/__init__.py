"""
Python client for the GuruTvapay payment gateway.

The most useful pieces are re-exported here so integrators can
``from gurutvapay import ...`` without navigating the package.
"""

from .api import create_client
from .core import (
    AccessToken,
    AuthError,
    ClientConfig,
    ClientParameters,
    ConfigError,
    Customer,
    Environment,
    ErrorKind,
    FileTokenCache,
    GatewayError,
    GurutvapayClient,
    GurutvapayError,
    InMemoryTokenCache,
    NotFoundError,
    PaymentInitiation,
    PaymentOrder,
    RateLimitError,
    TokenCache,
    TransportError,
    ValidationError,
    compute_signature,
    load_client_config,
    signature_from_headers,
    verify_webhook,
)

__all__ = (
    "AccessToken",
    "AuthError",
    "ClientConfig",
    "ClientParameters",
    "ConfigError",
    "Customer",
    "Environment",
    "ErrorKind",
    "FileTokenCache",
    "GatewayError",
    "GurutvapayClient",
    "GurutvapayError",
    "InMemoryTokenCache",
    "NotFoundError",
    "PaymentInitiation",
    "PaymentOrder",
    "RateLimitError",
    "TokenCache",
    "TransportError",
    "ValidationError",
    "compute_signature",
    "create_client",
    "load_client_config",
    "signature_from_headers",
    "verify_webhook",
)
