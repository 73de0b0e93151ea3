# core/models.py
"""
Plain data shapes for the overlay core (no DOM access, no storage, no I/O).
These are the "contracts" that the style registry, the rule set, the scanner
and the highlight overlay speak.

Design goals:
- Closed vocabularies (contrast modes, cursor sizes, impact levels) are Enums
  with an explicit default, never free-form strings.
- Immutable where it matters: rule definitions and violations are historical
  truth once produced.
- The scan report owns its severity summary and recomputes it; nothing else
  writes to it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class Impact(Enum):
    """
    How serious a violation is. Values match the external audit engine's
    vocabulary so its classification can be taken over verbatim.
    """
    CRITICAL = "critical"
    SERIOUS = "serious"
    MODERATE = "moderate"
    MINOR = "minor"


class ContrastMode(Enum):
    """Declaration order is the cycle order used by toggle_contrast()."""
    NONE = "none"
    DARK = "dark"
    LIGHT = "light"
    INVERT = "invert"
    YELLOW_BLACK = "yellow-black"
    BLACK_YELLOW = "black-yellow"


class CursorSize(Enum):
    DEFAULT = "default"
    LARGE = "large"
    XLARGE = "xlarge"


class ViolationSource(Enum):
    LOCAL = "local"
    EXTERNAL = "external"


class ScanMode(Enum):
    FULL = "full"
    LOCAL_ONLY = "local-only"


class ScanState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    LOCAL_ONLY = "local-only"
    MERGING = "merging"
    DONE = "done"


@dataclass
class SettingsRecord:
    """
    The complete user preference state. Field names are also the keys of the
    persisted JSON blob and the aspect names understood by the style registry.

    Only the style registry mutates an instance, and only with values that
    already went through validation/clamping.
    """
    font_scale: float = 1.0
    contrast_mode: str = ContrastMode.NONE.value
    stop_animations: bool = False
    reading_guide: bool = False
    focus_highlight: bool = False
    line_height: float = 1.0
    letter_spacing: float = 0.0
    word_spacing: float = 0.0
    cursor_size: str = CursorSize.DEFAULT.value
    link_highlight: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Predicate contract: (element) -> True when the element passes the rule.
Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class RuleDefinition:
    """
    One entry of the local rule catalog.

    Fields:
    - id: stable rule id (used for dedup, exports and the highlight marker).
    - description: human-readable statement of what is required.
    - selector: CSS selector picking the elements the rule applies to.
    - predicate: pure check, True = pass.
    - fix: remediation hint shown in reports and tooltips.
    """
    id: str
    description: str
    selector: str
    predicate: Predicate
    fix: str


@dataclass(frozen=True)
class Violation:
    """
    A single failing (rule, element) pair, from either source.

    `selector` is the generated selector path of the target element and is,
    together with `rule_id`, the identity used for deduplication.
    """
    rule_id: str
    impact: Impact
    description: str
    selector: str
    html: str
    fix: str
    source: ViolationSource
    help: str = ""
    help_url: str = ""
    wcag_criteria: List[str] = field(default_factory=list)
    failure_summary: str = ""

    @property
    def key(self) -> tuple:
        return (self.rule_id, self.selector)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "impact": self.impact.value,
            "description": self.description,
            "help": self.help,
            "helpUrl": self.help_url,
            "wcagCriteria": list(self.wcag_criteria),
            "element": {
                "selector": self.selector,
                "html": self.html,
                "failureSummary": self.failure_summary,
            },
            "suggestedFix": self.fix,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class PassEntry:
    rule_id: str
    selector: str

    def to_dict(self) -> Dict[str, Any]:
        return {"ruleId": self.rule_id, "element": self.selector}


@dataclass(frozen=True)
class IncompleteEntry:
    """Ambiguous finding that needs manual review; never counted as a violation."""
    rule_id: str
    description: str
    selector: str
    html: str
    source: ViolationSource = ViolationSource.EXTERNAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "description": self.description,
            "element": {"selector": self.selector, "html": self.html},
            "source": self.source.value,
        }


def empty_summary() -> Dict[str, int]:
    return {level.value: 0 for level in Impact}


@dataclass
class ScanReport:
    """
    Result of one scan invocation. Superseded, never merged, by the next scan.

    The summary is derived data: call recompute_summary() after changing the
    violations list. Nothing increments the counters directly.
    """
    timestamp: str
    page_info: Dict[str, Any] = field(default_factory=dict)
    mode: ScanMode = ScanMode.LOCAL_ONLY
    violations: List[Violation] = field(default_factory=list)
    passes: List[PassEntry] = field(default_factory=list)
    incomplete: List[IncompleteEntry] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=empty_summary)
    warnings: List[str] = field(default_factory=list)

    def recompute_summary(self) -> Dict[str, int]:
        counts = empty_summary()
        for v in self.violations:
            counts[v.impact.value] += 1
        self.summary = counts
        return counts

    @property
    def is_local_only(self) -> bool:
        return self.mode is ScanMode.LOCAL_ONLY


@dataclass
class HighlightHandle:
    """
    One visual marker applied by the highlight overlay.

    previous_style / previous_title hold the element's attribute values from
    before the marker was applied (None = attribute was absent).
    """
    element: Any
    violation: Violation
    outline_style: str
    previous_style: Optional[str] = None
    previous_title: Optional[str] = None
