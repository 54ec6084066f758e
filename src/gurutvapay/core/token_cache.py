"""
Token cache backends.

The file backend is safe across processes: writers hold an exclusive
advisory lock on a temporary file in the target directory and atomically
rename it over the cache file; readers hold a shared lock while reading.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

__all__ = [
    "FileTokenCache",
    "InMemoryTokenCache",
    "TokenCache",
    "default_cache_path",
]


class TokenCache(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def put_atomic(self, key: str, value: Dict[str, Any]) -> None:
        ...


def default_cache_path(key: str) -> Path:
    return Path(tempfile.gettempdir()) / f"gurutvapay_token_{key}.json"


class InMemoryTokenCache:
    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(key)
            return dict(entry) if entry is not None else None

    def put_atomic(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._entries[key] = dict(value)


class FileTokenCache:
    """
    JSON file per cache key.

    ``path`` pins every key to a single file; otherwise each key gets its own
    file under ``directory`` (the system temp dir by default). Entries record
    the key they were written for and are only returned for that key.
    """

    def __init__(
        self,
        path: Optional[str | os.PathLike] = None,
        *,
        directory: Optional[str | os.PathLike] = None,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._directory = Path(directory) if directory is not None else None

    def path_for(self, key: str) -> Path:
        if self._path is not None:
            return self._path
        if self._directory is not None:
            return self._directory / f"gurutvapay_token_{key}.json"
        return default_cache_path(key)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as handle:
                fcntl.flock(handle, fcntl.LOCK_SH)
                try:
                    raw = handle.read()
                finally:
                    fcntl.flock(handle, fcntl.LOCK_UN)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logging.warning("Token cache %s is unreadable: %s", path, exc)
            return None

        try:
            value = json.loads(raw)
        except ValueError:
            logging.warning("Token cache %s is corrupt; ignoring it", path)
            return None
        if not isinstance(value, dict):
            logging.warning("Token cache %s does not hold an object; ignoring it", path)
            return None

        stored_for = value.pop("environment", None)
        if stored_for != key:
            logging.debug("Token cache %s holds a %s token, not %s; ignoring it", path, stored_for, key)
            return None
        return value

    def put_atomic(self, key: str, value: Dict[str, Any]) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                fcntl.flock(handle, fcntl.LOCK_EX)
                try:
                    json.dump(dict(value, environment=key), handle)
                    handle.flush()
                    os.fsync(handle.fileno())
                finally:
                    fcntl.flock(handle, fcntl.LOCK_UN)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
