# services/highlight.py
"""
HighlightOverlay: reversible visual markers for the violations of a report.

apply(report):
- implicitly clears whatever a previous apply() left behind;
- for each violation whose selector resolves to exactly one live element,
  appends an outline to the element's inline style (colour by impact), sets
  the data-a11y-issue marker and a title tooltip, and records a handle.

clear():
- restores each marked element's original style/title and removes the marker,
  newest first so stacked markers on one element unwind correctly.
- idempotent and safe before any apply().
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from core.errors import SelectorResolutionError
from core.models import HighlightHandle, Impact, ScanReport, Violation
from utils.dom_utils import resolve_unique

log = logging.getLogger(__name__)

MARKER_ATTR = "data-a11y-issue"

IMPACT_COLORS: Dict[Impact, str] = {
    Impact.CRITICAL: "#ff0000",
    Impact.SERIOUS: "#ff6600",
    Impact.MODERATE: "#ffcc00",
    Impact.MINOR: "#0066ff",
}


class HighlightOverlay:
    def __init__(self, document: Any) -> None:
        self._document = document
        self._handles: List[HighlightHandle] = []

    @property
    def handles(self) -> List[HighlightHandle]:
        return list(self._handles)

    def apply(self, report: Optional[ScanReport]) -> int:
        """Mark the report's violations. Returns the number of elements marked."""
        self.clear()
        if report is None:
            return 0
        for violation in report.violations:
            try:
                element = resolve_unique(self._document, violation.selector)
            except SelectorResolutionError as exc:
                log.debug("Not highlighting %s: %s", violation.rule_id, exc)
                continue
            self._handles.append(self._mark(element, violation))
        return len(self._handles)

    def clear(self) -> None:
        handles, self._handles = self._handles, []
        for handle in reversed(handles):
            try:
                _restore(handle)
            except Exception as exc:
                log.warning("Could not clear highlight for %s: %s", handle.violation.rule_id, exc)

    # ---------- helpers ----------

    def _mark(self, element: Any, violation: Violation) -> HighlightHandle:
        color = IMPACT_COLORS.get(violation.impact, IMPACT_COLORS[Impact.MODERATE])
        outline = f"outline: 3px solid {color}; outline-offset: 2px;"
        handle = HighlightHandle(
            element=element,
            violation=violation,
            outline_style=outline,
            previous_style=element.get("style"),
            previous_title=element.get("title"),
        )
        element["style"] = _append_style(handle.previous_style, outline)
        element[MARKER_ATTR] = violation.rule_id
        element["title"] = f"{violation.description}\n\nFix: {violation.fix}"
        return handle


def _append_style(existing: Optional[str], declarations: str) -> str:
    current = (existing or "").strip()
    if not current:
        return declarations
    if not current.endswith(";"):
        current += ";"
    return f"{current} {declarations}"


def _restore(handle: HighlightHandle) -> None:
    element = handle.element
    for attr, previous in (("style", handle.previous_style), ("title", handle.previous_title)):
        if previous is None:
            if element.has_attr(attr):
                del element[attr]
        else:
            element[attr] = previous
    if element.has_attr(MARKER_ATTR):
        del element[MARKER_ATTR]
