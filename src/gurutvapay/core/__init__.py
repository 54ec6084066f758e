"""
Core primitives of the GuruTvapay client: transport, retry, tokens, webhooks.
"""

from .auth import AccessToken, TokenManager, compute_expiry
from .client import GurutvapayClient
from .config import (
    ClientConfig,
    ClientParameters,
    Environment,
    load_client_config,
)
from .environment import ClientEnvironment, build_environment, read_env_file
from .errors import (
    AuthError,
    ConfigError,
    ErrorKind,
    GatewayError,
    GurutvapayError,
    NotFoundError,
    RateLimitError,
    TransportError,
    ValidationError,
)
from .outcome import Failure, OutcomeKind, RequestOutcome, Success
from .payloads import Customer, PaymentInitiation, PaymentOrder, build_payment_payload
from .retry import RetryPolicy, raise_for_outcome
from .token_cache import FileTokenCache, InMemoryTokenCache, TokenCache
from .transport import send
from .webhook import compute_signature, signature_from_headers, verify_webhook

__all__ = [
    "AccessToken",
    "AuthError",
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "Customer",
    "Environment",
    "ErrorKind",
    "Failure",
    "FileTokenCache",
    "GatewayError",
    "GurutvapayClient",
    "GurutvapayError",
    "InMemoryTokenCache",
    "NotFoundError",
    "OutcomeKind",
    "PaymentInitiation",
    "PaymentOrder",
    "RateLimitError",
    "RequestOutcome",
    "RetryPolicy",
    "Success",
    "TokenCache",
    "TokenManager",
    "TransportError",
    "ValidationError",
    "build_environment",
    "build_payment_payload",
    "compute_expiry",
    "compute_signature",
    "load_client_config",
    "raise_for_outcome",
    "read_env_file",
    "send",
    "signature_from_headers",
    "verify_webhook",
]
