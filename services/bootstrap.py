# services/bootstrap.py
"""
Entry point: builds every overlay component exactly once for one document
and wires them together by reference.

Flow:
1) Load config (+ env overrides) and configure logging if asked to.
2) Build storage tiers and the PreferenceStore.
3) Build the style registry on a document sink, re-activate the saved
   profile, then restore saved preferences over it.
4) Build the rule registry, rule set, highlight overlay and scanner.

Nothing here is a module-level singleton: two calls give two independent
overlays.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from checks.aria_rules import register_builtin_rules
from checks.ruleset import AccessibilityRuleSet
from core.interfaces import StorageBackend
from core.registry import RuleRegistry
from infra.config_loader import load_config
from infra.logging_config import configure_from_config
from infra.storage import FileStorage, PreferenceStore, SessionStorage

from services.highlight import HighlightOverlay
from services.profiles import ProfileManager
from services.scanner import ViolationScanner
from services.style_registry import StyleRuleRegistry
from services.style_sinks import DocumentStyleSink

log = logging.getLogger(__name__)


@dataclass
class OverlayContext:
    document: BeautifulSoup
    config: Dict[str, Any]
    store: PreferenceStore
    styles: StyleRuleRegistry
    profiles: ProfileManager
    rules: RuleRegistry
    scanner: ViolationScanner
    highlights: HighlightOverlay


def build_overlay(
    document: BeautifulSoup,
    config: Optional[Dict[str, Any]] = None,
    primary: Optional[StorageBackend] = None,
    secondary: Optional[StorageBackend] = None,
    setup_logging: bool = False,
) -> OverlayContext:
    cfg = config if config is not None else load_config()
    if setup_logging:
        configure_from_config(cfg)

    store = PreferenceStore(
        primary if primary is not None else FileStorage(cfg["storage_dir"], cfg.get("storage_quota_bytes")),
        secondary if secondary is not None else SessionStorage(),
    )

    styles = StyleRuleRegistry(
        DocumentStyleSink(document),
        store=store,
        preferences_key=cfg.get("preferences_key", "a11y_prefs"),
        font_size_step=cfg.get("font_size_step"),
    )
    profiles = ProfileManager(
        styles,
        store=store,
        profile_key=cfg.get("profile_key", "a11y_profile"),
        document=document,
    )

    # The saved profile is re-activated first (hooks included); saved
    # preferences then override it, since they hold any later edits.
    saved = styles.saved_record()
    profiles.load_saved_profile()
    if saved is not None:
        styles.restore(saved)

    rules = register_builtin_rules(RuleRegistry())
    ruleset = AccessibilityRuleSet(
        rules,
        snippet_max_chars=cfg.get("snippet_max_chars", 200),
        selector_max_depth=cfg.get("selector_max_depth", 5),
    )
    highlights = HighlightOverlay(document)
    scanner = ViolationScanner(
        ruleset,
        overlay=highlights,
        developer_mode=cfg.get("developer_mode", False),
        run_only_tags=cfg.get("axe_run_only_tags"),
        result_types=cfg.get("axe_result_types"),
        snippet_max_chars=cfg.get("snippet_max_chars", 200),
        external_engine_enabled=cfg.get("external_engine_enabled", True),
    )

    log.info("Accessibility overlay initialized (%d local rules)", len(rules))
    return OverlayContext(
        document=document,
        config=cfg,
        store=store,
        styles=styles,
        profiles=profiles,
        rules=rules,
        scanner=scanner,
        highlights=highlights,
    )
