# services/style_registry.py
"""
StyleRuleRegistry: the only writer of the SettingsRecord and its fragments.

Flow of every mutation:
    validate/clamp -> store value -> recompute that aspect's fragment
    -> compose all fragments in fixed aspect order -> publish -> persist

Invariants:
- At most one fragment per aspect; an aspect at its neutral value has no
  entry at all (the map stays sparse).
- compose() is a pure function of the settings: same settings, same bytes.
- Invalid input never raises. It is clamped or replaced by the aspect's
  default and a warning is logged.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from core.errors import ValidationError
from core.interfaces import StyleSink
from core.models import SettingsRecord
from infra.storage import PreferenceStore

from services.style_fragments import ASPECT_ORDER, ASPECTS, CONTRAST_CYCLE, AspectSpec, coerce

log = logging.getLogger(__name__)

FRAGMENT_SEPARATOR = "\n\n"


class StyleRuleRegistry:
    def __init__(
        self,
        sink: StyleSink,
        store: Optional[PreferenceStore] = None,
        preferences_key: str = "a11y_prefs",
        font_size_step: Optional[float] = None,
    ) -> None:
        self._sink = sink
        self._store = store
        self._key = preferences_key
        self._font_step = font_size_step
        self._settings = SettingsRecord()
        self._fragments: Dict[str, str] = {}
        self._stylesheet = ""

    # ------------- queries -------------

    def get_settings(self) -> SettingsRecord:
        return replace(self._settings)

    def get(self, name: str) -> Any:
        return getattr(self._settings, name)

    def fragments(self) -> Dict[str, str]:
        return dict(self._fragments)

    @property
    def stylesheet(self) -> str:
        return self._stylesheet

    # ------------- mutation -------------

    def set_aspect(self, name: str, value: Any) -> Any:
        """
        Set one aspect and leave the registry fully composed and persisted.
        Returns the value actually stored (after clamping).
        """
        try:
            spec = _lookup(name)
        except ValidationError as exc:
            log.warning("%s", exc)
            return None

        clamped, corrected = coerce(spec, value)
        if corrected:
            log.warning("Invalid value %r for %s; using %r", value, name, clamped)

        setattr(self._settings, name, clamped)
        if clamped == spec.default:
            self._fragments.pop(name, None)
        else:
            css = spec.render(clamped)
            if css:
                self._fragments[name] = css
            else:
                self._fragments.pop(name, None)

        self.compose()
        self._persist()
        return clamped

    def compose(self) -> str:
        """Concatenate present fragments in fixed aspect order and publish."""
        parts = [self._fragments[name] for name in ASPECT_ORDER if self._fragments.get(name)]
        css = FRAGMENT_SEPARATOR.join(parts)
        self._stylesheet = css
        self._sink.publish(css)
        return css

    def reset(self) -> None:
        self._settings = SettingsRecord()
        self._fragments = {}
        self.compose()
        self._persist()

    def restore(self, record: Union[SettingsRecord, Mapping[str, Any], None]) -> None:
        """
        Re-apply a previously loaded record through set_aspect, so stored
        values take the same validation path as live edits. Unknown keys are
        ignored; missing keys, and values equal to the current ones, are left
        untouched.
        """
        if record is None:
            return
        data = record.to_dict() if isinstance(record, SettingsRecord) else record
        if not isinstance(data, Mapping):
            log.warning("Ignoring stored preferences of type %s", type(data).__name__)
            return
        for name in ASPECT_ORDER:
            if name not in data:
                continue
            value = data[name]
            if value == getattr(self._settings, name):
                continue
            self.set_aspect(name, value)

    def saved_record(self) -> Optional[Dict[str, Any]]:
        """The persisted preference blob, unapplied (None if nothing usable)."""
        if self._store is None:
            return None
        return self._store.load(self._key)

    def load_saved(self) -> bool:
        """Restore the persisted record, if any. Returns True when one was found."""
        record = self.saved_record()
        if record is None:
            return False
        self.restore(record)
        return True

    # ------------- convenience -------------

    def increase(self, name: str, step: Optional[float] = None) -> Any:
        return self._step(name, step, +1)

    def decrease(self, name: str, step: Optional[float] = None) -> Any:
        return self._step(name, step, -1)

    def increase_font_size(self, step: Optional[float] = None) -> Any:
        return self.increase("font_scale", step)

    def decrease_font_size(self, step: Optional[float] = None) -> Any:
        return self.decrease("font_scale", step)

    def reset_font_size(self) -> Any:
        return self.set_aspect("font_scale", ASPECTS["font_scale"].default)

    def toggle(self, name: str) -> Any:
        spec = ASPECTS.get(name)
        if spec is None or spec.kind != "flag":
            log.warning("Aspect %r cannot be toggled", name)
            return None
        return self.set_aspect(name, not getattr(self._settings, name))

    def toggle_contrast(self) -> str:
        current = self._settings.contrast_mode
        index = CONTRAST_CYCLE.index(current) if current in CONTRAST_CYCLE else -1
        return self.set_aspect("contrast_mode", CONTRAST_CYCLE[(index + 1) % len(CONTRAST_CYCLE)])

    # ------------- internals -------------

    def _step(self, name: str, step: Optional[float], direction: int) -> Any:
        spec = ASPECTS.get(name)
        if spec is None or spec.kind != "number":
            log.warning("Aspect %r is not numeric", name)
            return None
        if step is None:
            step = self._font_step if name == "font_scale" and self._font_step else spec.step
        low, high = spec.bounds
        # Stepping past a bound clamps silently.
        value = max(low, min(high, round(getattr(self._settings, name) + direction * step, 4)))
        return self.set_aspect(name, value)

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self._key, self._settings)


def _lookup(name: str) -> AspectSpec:
    spec = ASPECTS.get(name)
    if spec is None:
        raise ValidationError(f"Unknown aspect {name!r}")
    return spec
