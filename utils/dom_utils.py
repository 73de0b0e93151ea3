# utils/dom_utils.py
"""
DOM utilities over BeautifulSoup documents.

Goals:
- Single responsibility: parsing, selector generation and element lookup only
  (no rule policy, no styling, no reporting).
- Generated selectors are valid CSS even for host ids such as
  "DERIVED_HR$prompt" (identifiers are escaped through soupsieve).
- Lookups never raise bare library errors: an unusable selector surfaces as
  SelectorResolutionError so callers can skip that one target.
"""

from __future__ import annotations

from typing import Any, List, Optional

import soupsieve
from bs4 import BeautifulSoup, Tag

from core.errors import SelectorResolutionError

_DEFAULT_MAX_DEPTH = 5
_DEFAULT_SNIPPET = 200


def parse_document(html: str) -> BeautifulSoup:
    """Parse page markup into the document tree the overlay works on."""
    return BeautifulSoup(html, "lxml")


def document_of(element: Any) -> Any:
    """Walk up to the top of the tree (the BeautifulSoup object when attached)."""
    node = element
    while getattr(node, "parent", None) is not None:
        node = node.parent
    return node


def css_path(element: Tag, max_depth: int = _DEFAULT_MAX_DEPTH) -> str:
    """
    Build a selector path for `element`.

    - An element with an id is addressed by that id alone.
    - Otherwise walk up: tag name, up to two classes, :nth-of-type(n) when the
      element is not the first of its tag among its siblings. Stop at the first
      ancestor with an id (included as the anchor) or after max_depth steps.
    """
    element_id = element.get("id")
    if element_id:
        return "#" + soupsieve.escape(element_id)

    path: List[str] = []
    node: Optional[Tag] = element
    while isinstance(node, Tag) and not isinstance(node, BeautifulSoup):
        node_id = node.get("id")
        if node_id:
            path.insert(0, "#" + soupsieve.escape(node_id))
            break

        selector = node.name.lower()
        classes = [c for c in (node.get("class") or []) if c][:2]
        if classes:
            selector += "." + ".".join(soupsieve.escape(c) for c in classes)

        nth = 1 + sum(1 for _ in node.find_previous_siblings(node.name))
        if nth > 1:
            selector += f":nth-of-type({nth})"

        path.insert(0, selector)
        node = node.parent
        if len(path) >= max_depth:
            break

    return " > ".join(path)


def outer_html(element: Tag, limit: int = _DEFAULT_SNIPPET) -> str:
    """Truncated markup snippet of the element (for reports)."""
    return str(element)[:limit]


def text_content(element: Tag) -> str:
    return element.get_text(strip=True)


def select_all(root: Any, selector: str) -> List[Tag]:
    """
    Elements under `root` matching `selector`, in document order.
    Raises SelectorResolutionError for a selector the engine cannot parse.
    """
    try:
        return list(root.select(selector))
    except Exception as exc:
        raise SelectorResolutionError(f"Invalid selector {selector!r}: {exc}") from exc


def resolve_unique(root: Any, selector: str) -> Tag:
    """Return the one live element `selector` addresses, or raise SelectorResolutionError."""
    matches = select_all(root, selector)
    if len(matches) != 1:
        raise SelectorResolutionError(f"Selector {selector!r} matched {len(matches)} elements")
    return matches[0]
