# checks/aria_rules.py
"""
Local ARIA checks for PeopleSoft pages (Classic and Fluid markup).

Includes:
- psft-prompt-icon:      prompt/lookup icons need an accessible name
- psft-calendar-icon:    calendar pickers need an accessible name
- psft-grid-actions:     grid Add/Delete buttons need an accessible name
- psft-related-actions:  Related Actions must not misuse role="menu"
- psft-tabs-panel:       tab panels must be labelled
- psft-modal-focus:      modals must declare aria-modal or an autofocus target
- psft-error-message:    validation errors must be referenced by a field
- psft-grid-headers:     grid header cells need a scope
- psft-required-field:   required-field labels must point at an aria-required input

Behavior:
- Each predicate is pure: it only reads the element (and, where the rule is
  about cross references, the element's document).
- True means the element passes.
- Catalog order is the order below; register_builtin_rules() keeps it.
"""

from __future__ import annotations

from bs4 import Tag

from core.models import RuleDefinition
from core.registry import RuleRegistry
from utils.dom_utils import document_of, text_content


def _has_accessible_name(el: Tag) -> bool:
    """aria-label, title, or (for images) a non-empty alt."""
    if el.has_attr("aria-label") or el.has_attr("title"):
        return True
    return el.name == "img" and bool(el.get("alt"))


def _prompt_icon(el: Tag) -> bool:
    return _has_accessible_name(el)


def _calendar_icon(el: Tag) -> bool:
    return _has_accessible_name(el)


def _grid_action(el: Tag) -> bool:
    return el.has_attr("aria-label") or el.has_attr("title") or text_content(el) != ""


def _related_actions(el: Tag) -> bool:
    # Should not use menu role (misuse)
    return el.get("role") != "menu"


def _tabs_panel(el: Tag) -> bool:
    return el.has_attr("aria-labelledby") or el.has_attr("aria-label")


def _modal_focus(el: Tag) -> bool:
    return el.has_attr("aria-modal") or el.select_one("[autofocus]") is not None


def _error_message(el: Tag) -> bool:
    error_id = el.get("id")
    if not error_id:
        return False
    for field in document_of(el).select("[aria-describedby]"):
        if error_id in field.get("aria-describedby", ""):
            return True
    return False


def _grid_headers(el: Tag) -> bool:
    headers = el.find_all("th")
    if not headers:
        return False
    return all(th.has_attr("scope") for th in headers)


def _required_field(el: Tag) -> bool:
    label_for = el.get("for")
    if not label_for:
        return True  # no association to follow
    target = document_of(el).find(id=label_for)
    if target is None:
        return False
    return target.has_attr("aria-required") or target.has_attr("required")


BUILTIN_RULES = (
    RuleDefinition(
        id="psft-prompt-icon",
        description="PeopleSoft prompt/lookup icons must have accessible names",
        selector='a[id*="ICSearch"], a[id*="ICList"], a[id*="ICDetail"], img.PTPROMPT',
        predicate=_prompt_icon,
        fix='Add aria-label="Search" or aria-label="Lookup" to prompt icons',
    ),
    RuleDefinition(
        id="psft-calendar-icon",
        description="Calendar picker icons must have accessible names",
        selector='a[id*="$prompt"], img[id*="CALENDAR"], a[id*="CALENDAR"]',
        predicate=_calendar_icon,
        fix='Add aria-label="Select Date" to calendar icons',
    ),
    RuleDefinition(
        id="psft-grid-actions",
        description="Grid Add/Delete buttons must have accessible names",
        selector='a[id*="$add$"], a[id*="$delete$"], a[id*="$new$"]',
        predicate=_grid_action,
        fix='Add aria-label="Add Row" or aria-label="Delete Row" to grid action buttons',
    ),
    RuleDefinition(
        id="psft-related-actions",
        description="Related Actions menus should use correct ARIA patterns",
        selector='[id*="RELATED_ACTIONS"], .ps-related-actions',
        predicate=_related_actions,
        fix="Use disclosure pattern (aria-expanded) instead of menu role for Related Actions",
    ),
    RuleDefinition(
        id="psft-tabs-panel",
        description="Tab panels must be properly associated with their tabs",
        selector=".PSTAB, .ps-tab-panel",
        predicate=_tabs_panel,
        fix="Add aria-labelledby referencing the associated tab ID",
    ),
    RuleDefinition(
        id="psft-modal-focus",
        description="Modal dialogs should trap focus",
        selector='#ptMod_1, .ps-modal, [role="dialog"]',
        predicate=_modal_focus,
        fix='Add aria-modal="true" and implement focus trap for modal dialogs',
    ),
    RuleDefinition(
        id="psft-error-message",
        description="Validation errors must be linked to their fields",
        selector=".PSERRORMESSAGE, .ps-error-message",
        predicate=_error_message,
        fix="Add aria-describedby to input fields, referencing the error message ID",
    ),
    RuleDefinition(
        id="psft-grid-headers",
        description="Grid tables should have proper header associations",
        selector="table.PSLEVEL1GRID, table.PSLEVEL2GRID, table.ps-grid",
        predicate=_grid_headers,
        fix='Add scope="col" or scope="row" to table header cells',
    ),
    RuleDefinition(
        id="psft-required-field",
        description="Required fields must be marked with aria-required",
        selector='.PSREQUIREDFLDLBL, [id*="req$"]',
        predicate=_required_field,
        fix='Add aria-required="true" to required form fields',
    ),
)


def register_builtin_rules(registry: RuleRegistry) -> RuleRegistry:
    for rule in BUILTIN_RULES:
        registry.register(rule)
    return registry
