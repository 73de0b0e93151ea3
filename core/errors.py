# core/errors.py
"""
Error taxonomy of the overlay core.

Every error here is recovered inside the core: the operation that detects it
logs a warning and degrades (clamps a value, falls back to another storage
tier, drops to a local-only scan, skips a highlight). None of them is allowed
to escape a public operation and abort the host page.
"""

from __future__ import annotations


class A11yError(Exception):
    """Base class for all overlay-core errors."""


class ValidationError(A11yError):
    """An aspect value (or aspect name) was invalid; recovered by clamping."""


class StorageError(A11yError):
    """Base for preference persistence failures."""


class QuotaExceededError(StorageError):
    """The storage tier is full; the store retries once against the next tier."""


class SerializationError(StorageError):
    """The record could not be turned into JSON; the save is skipped."""


class StorageUnavailableError(StorageError):
    """The storage medium cannot be used at all; the operation is a no-op."""


class ExternalEngineError(A11yError):
    """The external audit engine failed to load, run, or answer in shape."""


class SelectorResolutionError(A11yError):
    """A violation's selector no longer resolves to exactly one live element."""
