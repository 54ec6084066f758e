"""
Collect ``GURUTVAPAY_*`` settings for
:meth:`gurutvapay.core.config.ClientConfig.from_mapping`.

Only the configuration loader at the edge of the package reads the process
environment; the client itself always receives an explicit config object.
Keys without the ``GURUTVAPAY_`` prefix are dropped from every source, so a
shared ``.env`` or process environment never leaks unrelated values into the
resolved mapping.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple

ENV_PREFIX = "GURUTVAPAY_"


def _iter_dotenv(text: str) -> Iterator[Tuple[str, str]]:
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        yield key, value


def _client_keys(values: Mapping[str, str]) -> Dict[str, str]:
    return {key: value for key, value in values.items() if key.startswith(ENV_PREFIX)}


def read_env_file(path: Optional[str]) -> Dict[str, str]:
    """
    ``GURUTVAPAY_*`` assignments from a dotenv file; a missing file reads as
    empty.
    """
    if path is None:
        return {}
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    return _client_keys(dict(_iter_dotenv(text)))


@dataclass(frozen=True)
class ClientEnvironment:
    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> ClientEnvironment:
    """
    Layer the client settings: ``base`` (default :data:`os.environ`), then
    keys from ``env_file`` that ``base`` does not set, then ``overrides``.
    """
    merged = _client_keys(os.environ if base is None else base)
    for key, value in read_env_file(env_file).items():
        merged.setdefault(key, value)
    merged.update(_client_keys(overrides or {}))
    return ClientEnvironment(variables=merged)
