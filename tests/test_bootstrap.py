"""
Tests for overlay wiring, configuration and logging setup.
"""

import asyncio
import logging

from infra.config_loader import load_config
from infra.logging_config import (
    CONSOLE_HANDLER_NAME,
    FILE_HANDLER_NAME,
    configure_from_config,
    configure_logging,
    remove_overlay_handlers,
)
from infra.storage import SessionStorage
from services.bootstrap import build_overlay
from services.style_sinks import STYLE_ELEMENT_ID
from utils.dom_utils import parse_document

PAGE_HTML = """
<html><body>
  <a id="DERIVED_HR$prompt" href="#"></a>
  <a id="JOB$delete$0" href="#"></a>
  <table class="PSLEVEL1GRID"><tr><th>Dept</th></tr></table>
</body></html>
"""


def make_document():
    return parse_document(PAGE_HTML)


def make_config(tmp_path, **overrides):
    cfg = load_config()
    cfg["storage_dir"] = str(tmp_path / "storage")
    cfg.update(overrides)
    return cfg


class TestBuildOverlay:
    def test_components_are_wired(self, tmp_path):
        doc = make_document()
        ctx = build_overlay(doc, config=make_config(tmp_path))

        assert len(ctx.rules) == 9
        ctx.styles.set_aspect("font_scale", 1.5)
        assert doc.find("style", id=STYLE_ELEMENT_ID).string == ctx.styles.stylesheet

        report = asyncio.run(ctx.scanner.scan(doc))
        assert report.is_local_only
        assert len(report.violations) == 3

    def test_preferences_survive_rebuild(self, tmp_path):
        cfg = make_config(tmp_path)
        first = build_overlay(make_document(), config=cfg)
        first.styles.set_aspect("contrast_mode", "dark")
        first.styles.set_aspect("letter_spacing", 1.5)

        doc = make_document()
        second = build_overlay(doc, config=cfg)
        assert second.styles.get_settings() == first.styles.get_settings()
        assert doc.find("style", id=STYLE_ELEMENT_ID).string == first.styles.stylesheet

    def test_saved_profile_replayed_without_preferences(self, tmp_path):
        primary = SessionStorage()
        cfg = make_config(tmp_path)
        first = build_overlay(make_document(), config=cfg, primary=primary)
        first.profiles.apply_profile("dyslexia")
        primary.remove_item(cfg["preferences_key"])

        second = build_overlay(make_document(), config=cfg, primary=primary)
        assert second.profiles.active_profile.id == "dyslexia"
        assert second.styles.get("reading_guide") is True

    def test_saved_profile_survives_rebuild_with_preferences(self, tmp_path):
        primary = SessionStorage()
        cfg = make_config(tmp_path)
        first = build_overlay(make_document(), config=cfg, primary=primary)
        first.profiles.apply_profile("low-vision")

        second = build_overlay(make_document(), config=cfg, primary=primary)
        assert second.profiles.active_profile is not None
        assert second.profiles.active_profile.id == "low-vision"
        assert second.styles.get_settings() == first.styles.get_settings()

    def test_edits_after_profile_survive_rebuild(self, tmp_path):
        primary = SessionStorage()
        cfg = make_config(tmp_path)
        first = build_overlay(make_document(), config=cfg, primary=primary)
        first.profiles.apply_profile("low-vision")
        first.styles.set_aspect("font_scale", 2.0)

        second = build_overlay(make_document(), config=cfg, primary=primary)
        assert second.profiles.active_profile.id == "low-vision"
        assert second.styles.get("font_scale") == 2.0
        assert second.styles.get("cursor_size") == "large"

    def test_profile_enhancements_rerun_on_new_document(self, tmp_path):
        primary = SessionStorage()
        cfg = make_config(tmp_path)
        build_overlay(make_document(), config=cfg, primary=primary).profiles.apply_profile("screen-reader")

        doc = make_document()
        build_overlay(doc, config=cfg, primary=primary)
        assert doc.find(id="a11y-skip-links") is not None

    def test_oversized_saved_number_does_not_break_startup(self, tmp_path):
        primary = SessionStorage()
        cfg = make_config(tmp_path)
        primary.set_item(cfg["preferences_key"], '{"font_scale": 1' + "0" * 400 + "}")

        ctx = build_overlay(make_document(), config=cfg, primary=primary)
        assert ctx.styles.get("font_scale") == 3.0

    def test_two_overlays_are_independent(self, tmp_path):
        a = build_overlay(make_document(), config=make_config(tmp_path), primary=SessionStorage())
        b = build_overlay(make_document(), config=make_config(tmp_path), primary=SessionStorage())
        a.styles.set_aspect("font_scale", 2)
        assert b.styles.get("font_scale") == 1.0
        assert a.rules is not b.rules

    def test_developer_mode_from_config(self, tmp_path):
        doc = make_document()
        ctx = build_overlay(doc, config=make_config(tmp_path, developer_mode=True))
        asyncio.run(ctx.scanner.scan(doc))
        assert len(ctx.highlights.handles) == 3


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in ("A11Y_FONT_SIZE_STEP", "A11Y_DEVELOPER_MODE", "A11Y_AXE_TAGS"):
            monkeypatch.delenv(name, raising=False)
        cfg = load_config()
        assert cfg["font_size_step"] == 0.1
        assert cfg["developer_mode"] is False
        assert cfg["axe_run_only_tags"] == ["wcag2a", "wcag2aa", "wcag21aa", "best-practice"]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("A11Y_FONT_SIZE_STEP", "0.25")
        monkeypatch.setenv("A11Y_DEVELOPER_MODE", "yes")
        monkeypatch.setenv("A11Y_AXE_TAGS", "WCAG2A, wcag2aa,")
        monkeypatch.setenv("A11Y_LOG_LEVEL", "debug")
        monkeypatch.setenv("A11Y_SNIPPET_MAX_CHARS", "120")
        cfg = load_config()
        assert cfg["font_size_step"] == 0.25
        assert cfg["developer_mode"] is True
        assert cfg["axe_run_only_tags"] == ["wcag2a", "wcag2aa"]
        assert cfg["log_level"] == "DEBUG"
        assert cfg["snippet_max_chars"] == 120

    def test_bad_env_values_ignored(self, monkeypatch):
        monkeypatch.setenv("A11Y_FONT_SIZE_STEP", "-1")
        monkeypatch.setenv("A11Y_SELECTOR_MAX_DEPTH", "deep")
        cfg = load_config()
        assert cfg["font_size_step"] == 0.1
        assert cfg["selector_max_depth"] == 5

    def test_lists_not_shared(self):
        load_config()["axe_run_only_tags"].append("experimental")
        assert "experimental" not in load_config()["axe_run_only_tags"]


class TestLogging:
    """The overlay's handlers are installed once and never disturb the host's."""

    def _overlay_handlers(self):
        return [
            h for h in logging.getLogger().handlers
            if h.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME)
        ]

    def test_rotating_file_created(self, tmp_path):
        root = logging.getLogger()
        level = root.level
        try:
            configure_logging("WARNING", tmp_path)
            assert (tmp_path / "a11y.log").exists()
            assert root.level == logging.WARNING
        finally:
            remove_overlay_handlers()
            root.setLevel(level)

    def test_reconfigure_does_not_duplicate(self, tmp_path):
        root = logging.getLogger()
        level = root.level
        host = logging.NullHandler()
        root.addHandler(host)
        try:
            configure_logging("INFO", tmp_path / "first")
            configure_from_config({"log_level": "DEBUG", "log_dir": str(tmp_path / "second")})
            handlers = self._overlay_handlers()
            assert len(handlers) == 2
            assert {h.level for h in handlers} == {logging.DEBUG}
            assert host in root.handlers
            assert (tmp_path / "second" / "a11y.log").exists()
        finally:
            remove_overlay_handlers()
            root.removeHandler(host)
            root.setLevel(level)

    def test_rotation_settings_from_config(self, tmp_path):
        root = logging.getLogger()
        level = root.level
        try:
            configure_from_config({"log_dir": str(tmp_path), "log_max_bytes": 1024, "log_backup_count": 1})
            file_handler = next(h for h in self._overlay_handlers() if h.get_name() == FILE_HANDLER_NAME)
            assert file_handler.maxBytes == 1024
            assert file_handler.backupCount == 1
        finally:
            remove_overlay_handlers()
            root.setLevel(level)
