# checks/ruleset.py
"""
AccessibilityRuleSet: runs the local rule catalog against a document subtree.

Behavior:
- Rules run in catalog order; within a rule, elements in document order.
- A failing element yields one Violation, impact fixed at SERIOUS, source LOCAL.
- A passing element yields one PassEntry keyed by rule id + selector.
- A predicate that raises counts as a failure for that element; the
  exception is logged and the scan carries on.
- A rule whose selector cannot be parsed is logged and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List

from core.errors import SelectorResolutionError
from core.models import Impact, PassEntry, RuleDefinition, Violation, ViolationSource
from core.registry import RuleRegistry
from utils.dom_utils import css_path, outer_html, select_all

log = logging.getLogger(__name__)


@dataclass
class RuleSetOutcome:
    violations: List[Violation] = field(default_factory=list)
    passes: List[PassEntry] = field(default_factory=list)
    evaluated: int = 0


class AccessibilityRuleSet:
    def __init__(
        self,
        registry: RuleRegistry,
        snippet_max_chars: int = 200,
        selector_max_depth: int = 5,
    ) -> None:
        self._registry = registry
        self._snippet = snippet_max_chars
        self._depth = selector_max_depth

    def rules(self) -> List[RuleDefinition]:
        return self._registry.rules()

    def run(self, root: Any) -> RuleSetOutcome:
        outcome = RuleSetOutcome()
        for rule in self._registry.rules():
            try:
                elements = select_all(root, rule.selector)
            except SelectorResolutionError as exc:
                log.warning("Skipping rule %s: %s", rule.id, exc)
                continue

            for el in elements:
                outcome.evaluated += 1
                selector = css_path(el, self._depth)
                if self._safe_check(rule, el, selector):
                    outcome.passes.append(PassEntry(rule_id=rule.id, selector=selector))
                else:
                    outcome.violations.append(self._violation(rule, el, selector))
        return outcome

    # ---------- helpers ----------

    def _safe_check(self, rule: RuleDefinition, el: Any, selector: str) -> bool:
        try:
            return bool(rule.predicate(el))
        except Exception as exc:
            log.warning("Rule %s raised on %s: %s", rule.id, selector, exc or exc.__class__.__name__)
            return False

    def _violation(self, rule: RuleDefinition, el: Any, selector: str) -> Violation:
        return Violation(
            rule_id=rule.id,
            impact=Impact.SERIOUS,
            description=rule.description,
            selector=selector,
            html=outer_html(el, self._snippet),
            fix=rule.fix,
            source=ViolationSource.LOCAL,
            help=rule.fix,
            wcag_criteria=["wcag2aa"],
            failure_summary=rule.description,
        )
