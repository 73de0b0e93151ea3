# services/style_sinks.py
"""
Style-publishing sinks.

DocumentStyleSink owns one <style> element inside a BeautifulSoup document.
It is created on first publish (or adopted if the document already carries
one with our id), then only its text is replaced. MemoryStyleSink is the
document-less variant used when the overlay runs without a page.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from bs4 import BeautifulSoup, Tag

from core.interfaces import StyleSink

log = logging.getLogger(__name__)

STYLE_ELEMENT_ID = "a11y-dynamic-styles"


class DocumentStyleSink(StyleSink):
    def __init__(self, document: BeautifulSoup, element_id: str = STYLE_ELEMENT_ID) -> None:
        self.document = document
        self.element_id = element_id
        self._element: Optional[Tag] = None
        self._css = ""

    def publish(self, css: str) -> None:
        element = self._ensure_element()
        element.string = css
        self._css = css

    def current(self) -> str:
        return self._css

    @property
    def element(self) -> Optional[Tag]:
        return self._element

    def destroy(self) -> None:
        """Remove the owned element from the document."""
        if self._element is not None:
            self._element.decompose()
        self._element = None
        self._css = ""

    def _ensure_element(self) -> Tag:
        # Still attached: replace in place
        if self._element is not None and self._element.parent is not None:
            return self._element

        existing = self.document.find("style", id=self.element_id)
        if existing is not None:
            self._element = existing
            return existing

        head = self._head()
        element = self.document.new_tag("style", attrs={"id": self.element_id, "data-a11y": "true"})
        head.append(element)
        self._element = element
        log.debug("Created style element #%s", self.element_id)
        return element

    def _head(self) -> Any:
        head = self.document.head
        if head is not None:
            return head
        head = self.document.new_tag("head")
        html = self.document.html
        if html is not None:
            html.insert(0, head)
        else:
            self.document.insert(0, head)
        return head


class MemoryStyleSink(StyleSink):
    def __init__(self) -> None:
        self.css = ""
        self.publish_count = 0

    def publish(self, css: str) -> None:
        self.css = css
        self.publish_count += 1

    def current(self) -> str:
        return self.css
