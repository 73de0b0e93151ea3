# services/profiles.py
"""
Disability profile presets.

A profile is a named bundle of aspect values. Applying one resets the style
registry and replays the bundle through set_aspect, so presets get no
privileged path around validation.

Two registration paths are kept apart:
- built-in presets, fixed at construction;
- custom profiles added through register_custom(), which may not shadow a
  built-in id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from infra.storage import PreferenceStore

from services.page_enhancements import screen_reader_enhancements
from services.style_fragments import ASPECT_ORDER
from services.style_registry import StyleRuleRegistry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    description: str
    settings: Dict[str, Any] = field(default_factory=dict)
    # Runs against the page document after the settings are applied.
    on_activate: Optional[Callable[[Any], None]] = None
    builtin: bool = False


BUILTIN_PROFILES: List[Profile] = [
    Profile(
        "low-vision", "Low Vision",
        "Larger text, enhanced contrast, and improved focus visibility",
        {"font_scale": 1.5, "contrast_mode": "none", "focus_highlight": True, "line_height": 1.3,
         "letter_spacing": 1, "cursor_size": "large", "link_highlight": True},
        builtin=True,
    ),
    Profile(
        "color-blind", "Color Blind Friendly",
        "Enhanced contrast without relying on color alone",
        {"font_scale": 1.1, "contrast_mode": "light", "focus_highlight": True, "link_highlight": True},
        builtin=True,
    ),
    Profile(
        "light-sensitive", "Light Sensitive", "Dark mode with reduced brightness",
        {"contrast_mode": "dark", "stop_animations": True},
        builtin=True,
    ),
    Profile(
        "motor-impaired", "Motor Accessibility",
        "Larger click targets and enhanced focus indicators",
        {"font_scale": 1.2, "focus_highlight": True, "cursor_size": "xlarge", "line_height": 1.2},
        builtin=True,
    ),
    Profile(
        "dyslexia", "Dyslexia Friendly",
        "Improved readability with optimized spacing and reading guide",
        {"font_scale": 1.2, "line_height": 1.5, "letter_spacing": 2, "word_spacing": 4,
         "reading_guide": True, "contrast_mode": "none"},
        builtin=True,
    ),
    Profile(
        "adhd-friendly", "ADHD Friendly", "Reduced distractions and animations",
        {"stop_animations": True, "focus_highlight": True, "reading_guide": True},
        builtin=True,
    ),
    Profile(
        "seizure-safe", "Seizure Safe", "Stops all animations and flashing content",
        {"stop_animations": True, "contrast_mode": "none"},
        builtin=True,
    ),
    Profile(
        "screen-reader", "Screen Reader Optimized",
        "Enhanced structure and navigation for screen readers",
        {"stop_animations": True, "focus_highlight": True},
        on_activate=screen_reader_enhancements,
        builtin=True,
    ),
    Profile(
        "high-contrast-dark", "High Contrast (Dark)", "White text on black background",
        {"contrast_mode": "dark", "font_scale": 1.1, "focus_highlight": True},
        builtin=True,
    ),
    Profile(
        "high-contrast-light", "High Contrast (Light)", "Black text on white background",
        {"contrast_mode": "light", "font_scale": 1.1, "focus_highlight": True},
        builtin=True,
    ),
    Profile(
        "senior-friendly", "Senior Friendly",
        "Larger text, simplified navigation, enhanced visibility",
        {"font_scale": 1.4, "line_height": 1.4, "contrast_mode": "light", "focus_highlight": True,
         "cursor_size": "large", "link_highlight": True, "stop_animations": True},
        builtin=True,
    ),
]


class ProfileManager:
    def __init__(
        self,
        registry: StyleRuleRegistry,
        store: Optional[PreferenceStore] = None,
        profile_key: str = "a11y_profile",
        document: Any = None,
    ) -> None:
        self._document = document
        self._registry = registry
        self._store = store
        self._key = profile_key
        self._builtin: Dict[str, Profile] = {p.id: p for p in BUILTIN_PROFILES}
        self._custom: Dict[str, Profile] = {}
        self._active: Optional[Profile] = None

    # ------------- catalog -------------

    def register_custom(self, profile: Profile) -> bool:
        """Add (or replace) a custom profile. Built-in ids are reserved."""
        if profile.id in self._builtin:
            log.warning("Profile id %r is reserved by a built-in preset", profile.id)
            return False
        unknown = [k for k in profile.settings if k not in ASPECT_ORDER]
        if unknown:
            log.warning("Profile %r names unknown aspects %s; they will be ignored", profile.id, unknown)
        self._custom[profile.id] = profile
        return True

    def unregister_custom(self, profile_id: str) -> bool:
        """Remove a custom profile, deactivating it first if it is the active one."""
        if self._custom.pop(profile_id, None) is None:
            if profile_id in self._builtin:
                log.warning("Cannot remove built-in profile %s", profile_id)
            return False
        if self._active is not None and self._active.id == profile_id:
            self.deactivate_profile()
        return True

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self._builtin.get(profile_id) or self._custom.get(profile_id)

    def get_profiles(self) -> List[Profile]:
        return list(self._builtin.values()) + list(self._custom.values())

    @property
    def active_profile(self) -> Optional[Profile]:
        return self._active

    # ------------- activation -------------

    def apply_profile(self, profile_id: str) -> bool:
        profile = self.get_profile(profile_id)
        if profile is None:
            log.warning("Profile not found: %s", profile_id)
            return False

        self._registry.reset()
        for name in ASPECT_ORDER:
            if name in profile.settings:
                self._registry.set_aspect(name, profile.settings[name])

        if profile.on_activate is not None and self._document is None:
            log.debug("No document bound; skipping activation hook of %s", profile.id)
        elif profile.on_activate is not None:
            try:
                profile.on_activate(self._document)
            except Exception as exc:
                log.warning("Activation hook of profile %s failed: %s", profile.id, exc)

        self._active = profile
        if self._store is not None:
            self._store.save(self._key, {"id": profile.id})
        log.info("Profile applied: %s", profile.name)
        return True

    def deactivate_profile(self) -> None:
        self._registry.reset()
        previous = self._active
        self._active = None
        if self._store is not None:
            self._store.remove(self._key)
        if previous is not None:
            log.info("Profile deactivated: %s", previous.name)

    def load_saved_profile(self) -> bool:
        if self._store is None:
            return False
        saved = self._store.load(self._key)
        profile_id = saved.get("id") if saved else None
        if isinstance(profile_id, str) and self.get_profile(profile_id) is not None:
            return self.apply_profile(profile_id)
        return False
