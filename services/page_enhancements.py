# services/page_enhancements.py
"""
Structural page enhancements run by profile activation hooks.

- ensure_skip_links(document): prepends a "skip to" link block to <body>
  together with its own small stylesheet. Present once; re-running is a no-op.
- enhance_landmarks(document): gives the PeopleSoft content area role="main"
  and the nav bars role="navigation", plus fallback ids the skip links
  point at. Elements that already declare a role are left alone.

Both are additive: they never remove or rewrite existing attributes.
"""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

log = logging.getLogger(__name__)

SKIP_LINKS_ID = "a11y-skip-links"
SKIP_LINK_STYLES_ID = "a11y-skip-link-styles"
MAIN_CONTENT_ID = "main-content"
NAVIGATION_ID = "navigation"

SKIP_LINKS: List[Tuple[str, str]] = [
    (f"#{MAIN_CONTENT_ID}", "Skip to main content"),
    (f"#{NAVIGATION_ID}", "Skip to navigation"),
]

# Fluid content area, Classic page body, then plain HTML5
MAIN_CANDIDATES = (".ps_apps-fluid", "#ptpgltbody", "main")
NAV_SELECTOR = ".PTNUI_NAVBAR, .ps_apps-navbar, nav"

SKIP_LINK_CSS = "\n".join([
    ".a11y-skip-link {",
    "  position: fixed;",
    "  top: -100px;",
    "  left: 10px;",
    "  background: #000;",
    "  color: #fff;",
    "  padding: 10px 20px;",
    "  z-index: 999999;",
    "  text-decoration: none;",
    "  font-weight: bold;",
    "}",
    ".a11y-skip-link:focus {",
    "  top: 10px;",
    "}",
])


def ensure_skip_links(document: Any) -> bool:
    """Insert the skip-link block. Returns True if it was added by this call."""
    if document.find(id=SKIP_LINKS_ID) is not None:
        return False
    body = document.body
    if body is None:
        log.debug("No <body>; skip links not added")
        return False

    container = document.new_tag("div", attrs={"id": SKIP_LINKS_ID})
    for href, text in SKIP_LINKS:
        link = document.new_tag("a", attrs={"href": href, "class": "a11y-skip-link"})
        link.string = text
        container.append(link)
    body.insert(0, container)

    if document.find("style", id=SKIP_LINK_STYLES_ID) is None:
        style = document.new_tag("style", attrs={"id": SKIP_LINK_STYLES_ID})
        style.string = SKIP_LINK_CSS
        head = document.head
        (head if head is not None else body).append(style)
    return True


def enhance_landmarks(document: Any) -> int:
    """Add missing landmark roles. Returns how many elements were changed."""
    changed = 0

    main = None
    for selector in MAIN_CANDIDATES:
        main = document.select_one(selector)
        if main is not None:
            break
    if main is not None and not main.has_attr("role"):
        main["role"] = "main"
        if not main.get("id"):
            main["id"] = MAIN_CONTENT_ID
        changed += 1

    for nav in document.select(NAV_SELECTOR):
        if nav.has_attr("role"):
            continue
        nav["role"] = "navigation"
        # Only one element may carry the fallback id.
        if not nav.get("id") and document.find(id=NAVIGATION_ID) is None:
            nav["id"] = NAVIGATION_ID
        changed += 1

    if changed:
        log.info("Added %d landmark role(s)", changed)
    return changed


def screen_reader_enhancements(document: Any) -> None:
    ensure_skip_links(document)
    enhance_landmarks(document)
