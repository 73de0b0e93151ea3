# infra/storage.py
"""
Preference persistence with two-tier fallback.

Tiers:
- FileStorage: the durable primary tier. One JSON text file per key inside a
  directory, with a per-value byte quota (the localStorage analogue).
- SessionStorage: the secondary tier. Lives as long as the process (the
  sessionStorage analogue).

PreferenceStore ties them together:
- save(key, record): serialize -> primary; on QuotaExceededError retry once
  against secondary; any other failure is logged and swallowed.
- load(key): primary, then secondary if primary has nothing usable. A value
  that fails to parse, or parses to something other than a JSON object, is
  treated as absent.

Losing a preference is never fatal to the host page, so no public method of
PreferenceStore raises.
"""

from __future__ import annotations

import errno
import json
import logging
import re
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.errors import (
    QuotaExceededError,
    SerializationError,
    StorageError,
    StorageUnavailableError,
)
from core.interfaces import StorageBackend

log = logging.getLogger(__name__)

_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}
_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorage(StorageBackend):
    """
    Directory-backed key/value storage.

    The directory is created lazily on the first write so that a read-only
    environment can still load (and simply find nothing).
    """

    def __init__(self, directory: Union[str, Path], quota_bytes: Optional[int] = None) -> None:
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path_for(self, key: str) -> Path:
        safe = _SAFE_KEY.sub("_", key) or "_"
        return self.directory / f"{safe}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if self.quota_bytes is not None and size > self.quota_bytes:
            raise QuotaExceededError(
                f"Value for {key!r} is {size} bytes; quota is {self.quota_bytes}"
            )
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as exc:
            if exc.errno in _QUOTA_ERRNOS:
                raise QuotaExceededError(f"No space left writing {path}") from exc
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageUnavailableError(str(exc)) from exc


class SessionStorage(StorageBackend):
    """In-memory key/value storage scoped to this process."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None and len(value.encode("utf-8")) > self.quota_bytes:
            raise QuotaExceededError(f"Session quota exceeded for {key!r}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class PreferenceStore:
    def __init__(self, primary: StorageBackend, secondary: Optional[StorageBackend] = None) -> None:
        self.primary = primary
        self.secondary = secondary if secondary is not None else SessionStorage()

    def save(self, key: str, record: Any) -> bool:
        """
        Persist `record` under `key`. Returns True if some tier accepted it.
        """
        try:
            payload = _serialize(record)
        except SerializationError as exc:
            log.warning("Could not serialize preferences for %s: %s", key, exc)
            return False

        try:
            self.primary.set_item(key, payload)
            return True
        except QuotaExceededError as exc:
            log.warning("Primary storage full (%s); falling back to session storage", exc)
        except StorageError as exc:
            log.warning("Could not save preferences: %s", exc)
            return False
        except Exception as exc:
            log.warning("Could not save preferences: %s", exc or exc.__class__.__name__)
            return False

        try:
            self.secondary.set_item(key, payload)
            return True
        except Exception as exc:
            log.warning("Session storage rejected preferences: %s", exc)
            return False

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Return the stored object for `key`, or None if neither tier holds a
        structurally valid one.
        """
        for tier_name, tier in (("primary", self.primary), ("secondary", self.secondary)):
            try:
                raw = tier.get_item(key)
            except Exception as exc:
                log.warning("Could not read %s storage: %s", tier_name, exc)
                continue
            record = _parse(raw)
            if record is not None:
                return record
            if raw:
                log.warning("Ignoring malformed %s value stored under %s", tier_name, key)
        return None

    def remove(self, key: str) -> None:
        for tier in (self.primary, self.secondary):
            try:
                tier.remove_item(key)
            except Exception as exc:
                log.warning("Could not remove %s: %s", key, exc)


# ---------- helpers (module-internal) ----------

def _serialize(record: Any) -> str:
    if is_dataclass(record) and not isinstance(record, type):
        record = asdict(record)
    try:
        return json.dumps(record, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


def _parse(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None
