# core/registry.py
"""
Ordered registry of local rule definitions.

Usage pattern:
- Build one RuleRegistry at the entry point (services.bootstrap).
- Rule modules expose a register_*(registry) function that adds their
  RuleDefinitions in catalog order.
- AccessibilityRuleSet asks the registry for the rules and runs them.

The registry is an explicit instance passed by reference, not a module-level
store, so two documents in the same process never share rule state.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from core.models import RuleDefinition

log = logging.getLogger(__name__)


class RuleRegistry:
    def __init__(self, rules: Optional[Iterable[RuleDefinition]] = None) -> None:
        self._rules: List[RuleDefinition] = []
        for rule in rules or ():
            self.register(rule)

    def register(self, rule: RuleDefinition) -> bool:
        """
        Register a rule if its id is not already present.
        Returns False (and keeps the first definition) on a duplicate id.
        """
        if any(existing.id == rule.id for existing in self._rules):
            log.warning("Rule %s already registered; keeping the first definition", rule.id)
            return False
        self._rules.append(rule)
        return True

    def rules(self) -> List[RuleDefinition]:
        """
        Return a shallow copy in registration order to prevent accidental
        mutation of the internal list by callers.
        """
        return list(self._rules)

    def get(self, rule_id: str) -> Optional[RuleDefinition]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def clear(self) -> None:
        """Testing helper: wipe current registrations."""
        self._rules.clear()

    def __len__(self) -> int:
        return len(self._rules)
