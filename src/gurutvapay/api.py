"""
Public, high-level helpers for interacting with the GuruTvapay gateway.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .core.client import GurutvapayClient
from .core.config import ClientConfig, ClientParameters, load_client_config
from .core.token_cache import TokenCache

__all__ = ["create_client"]


def create_client(
    *,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    token_cache: Optional[TokenCache] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
) -> GurutvapayClient:
    """
    Construct a :class:`GurutvapayClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from ``GURUTVAPAY_*`` environment data.
    """
    if config is not None:
        extras = (overrides, base, parameters)
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or environment parameters, not both."
            )
        cfg = config
    else:
        cfg = load_client_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            parameters=parameters,
        )
    return GurutvapayClient(cfg, session=session, token_cache=token_cache)
