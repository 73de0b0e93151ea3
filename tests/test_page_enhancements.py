"""
Tests for the structural page enhancements used by the screen-reader profile.

These tests verify:
1. Skip links are inserted once, first in <body>, with their stylesheet
2. PeopleSoft content and nav areas gain landmark roles and fallback ids
3. Existing roles and ids are never overwritten
"""

from services.page_enhancements import (
    MAIN_CONTENT_ID,
    NAVIGATION_ID,
    SKIP_LINK_STYLES_ID,
    SKIP_LINKS_ID,
    enhance_landmarks,
    ensure_skip_links,
    screen_reader_enhancements,
)
from services.style_sinks import STYLE_ELEMENT_ID
from utils.dom_utils import parse_document


FLUID_PAGE = """
<html><head><title>Fluid</title></head>
<body>
  <div class="PTNUI_NAVBAR">nav one</div>
  <nav>nav two</nav>
  <div class="ps_apps-fluid"><p>content</p></div>
</body></html>
"""


# =============================================================================
# SKIP LINKS
# =============================================================================

class TestSkipLinks:
    def test_inserted_first_in_body(self):
        doc = parse_document(FLUID_PAGE)
        assert ensure_skip_links(doc) is True

        container = doc.body.find(True)
        assert container["id"] == SKIP_LINKS_ID
        links = container.find_all("a")
        assert [a["href"] for a in links] == ["#main-content", "#navigation"]
        assert [a.get_text() for a in links] == ["Skip to main content", "Skip to navigation"]
        assert doc.head.find("style", id=SKIP_LINK_STYLES_ID) is not None

    def test_runs_once(self):
        doc = parse_document(FLUID_PAGE)
        ensure_skip_links(doc)
        assert ensure_skip_links(doc) is False
        assert len(doc.find_all(id=SKIP_LINKS_ID)) == 1
        assert len(doc.find_all("style", id=SKIP_LINK_STYLES_ID)) == 1

    def test_does_not_touch_overlay_stylesheet(self):
        doc = parse_document(FLUID_PAGE)
        ensure_skip_links(doc)
        assert doc.find("style", id=STYLE_ELEMENT_ID) is None

    def test_no_body(self):
        doc = parse_document("<html><head></head></html>")
        if doc.body is not None:
            doc.body.decompose()
        assert ensure_skip_links(doc) is False


# =============================================================================
# LANDMARKS
# =============================================================================

class TestLandmarks:
    def test_roles_and_fallback_ids(self):
        doc = parse_document(FLUID_PAGE)
        assert enhance_landmarks(doc) == 3

        main = doc.select_one(".ps_apps-fluid")
        assert main["role"] == "main"
        assert main["id"] == MAIN_CONTENT_ID

        navs = doc.select(".PTNUI_NAVBAR, nav")
        assert [n["role"] for n in navs] == ["navigation", "navigation"]
        assert len(doc.find_all(id=NAVIGATION_ID)) == 1

    def test_classic_page_body(self):
        doc = parse_document('<div id="ptpgltbody"><p>x</p></div>')
        enhance_landmarks(doc)
        main = doc.find(id="ptpgltbody")
        assert main["role"] == "main"
        assert main["id"] == "ptpgltbody"

    def test_existing_roles_kept(self):
        doc = parse_document('<main role="presentation"></main><nav role="menubar"></nav>')
        assert enhance_landmarks(doc) == 0
        assert doc.find("main")["role"] == "presentation"
        assert doc.find("nav")["role"] == "menubar"

    def test_nothing_to_enhance(self):
        assert enhance_landmarks(parse_document("<p>plain</p>")) == 0


class TestScreenReaderEnhancements:
    def test_skip_links_point_at_landmarks(self):
        doc = parse_document(FLUID_PAGE)
        screen_reader_enhancements(doc)
        for link in doc.find(id=SKIP_LINKS_ID).find_all("a"):
            assert doc.select_one(link["href"]) is not None
