# core/interfaces.py
"""
Stable abstractions the rest of the core depends on.
The style registry, the preference store and the scanner import only these
contracts, never a concrete document, storage medium or audit engine.

Design notes:
- StyleSink and StorageBackend are ABCs: the core ships concrete versions of
  both and subclasses are expected to share behaviour through them.
- AuditEngine and ReportWriter are Protocols: the external engine is a black
  box handed in by the caller, so structural typing is all we ask of it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Protocol

from core.models import ScanReport

__all__ = ["StyleSink", "StorageBackend", "AuditEngine", "ReportWriter"]


class StyleSink(ABC):
    """
    The single place the composed stylesheet is published to.

    Implementations own exactly one resource, create it once, and replace its
    content in place on every publish (never append a second one).
    """

    @abstractmethod
    def publish(self, css: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def current(self) -> str:
        """Return the text last published ("" if nothing yet)."""
        raise NotImplementedError


class StorageBackend(ABC):
    """
    A string key/value medium (think localStorage / sessionStorage).

    set_item raises QuotaExceededError when the medium is full and
    StorageUnavailableError when it cannot be used at all; get_item returns
    None for a missing key.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class AuditEngine(Protocol):
    """
    External audit engine handle (axe-core or compatible).

    run() returns a mapping (or an object with attributes) carrying
    `violations` and `incomplete` lists in the engine's own result shape.
    """

    def is_ready(self) -> bool: ...

    async def run(self, root: Any, options: Mapping[str, Any]) -> Any: ...


class ReportWriter(Protocol):
    def write(self, report: ScanReport) -> None: ...
