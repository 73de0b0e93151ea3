# services/scanner.py
"""
High-level coordinator for accessibility scans: runs the local rule set,
optionally awaits the external audit engine, merges both into one report and
drives the highlight overlay in developer mode.

State per scan:
    IDLE -> RUNNING -> (LOCAL_ONLY | MERGING) -> DONE

This module depends only on:
- checks.ruleset (local rules) and the AuditEngine protocol (external engine)
- core.models (report shapes)
- infra.exporters (CSV/JSON projections)

Failure policy: an engine that is missing, not ready, or raising degrades the
scan to local-only mode with a warning in the report. A scan always returns a
report. asyncio.CancelledError is left to propagate (that is the caller's
timeout, not an engine failure).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from checks.ruleset import AccessibilityRuleSet
from core.errors import ExternalEngineError
from core.interfaces import AuditEngine
from core.models import (
    Impact,
    IncompleteEntry,
    ScanMode,
    ScanReport,
    ScanState,
    Violation,
    ViolationSource,
)
from infra.exporters import report_to_csv, report_to_json

from services.highlight import HighlightOverlay

log = logging.getLogger(__name__)

DEFAULT_RUN_ONLY_TAGS = ["wcag2a", "wcag2aa", "wcag21aa", "best-practice"]
DEFAULT_RESULT_TYPES = ["violations", "incomplete", "passes"]

# Host-specific remediation for well-known external rule ids.
SUGGESTED_FIXES: Dict[str, str] = {
    "button-name": "Add aria-label via Page Field Properties or use AddJavaScript to inject aria-label",
    "image-alt": "Set Alt Text in Image Properties dialog in App Designer",
    "label": "Associate label using PeopleTools label property or add aria-labelledby via JavaScript injection",
    "aria-required-attr": "Add required ARIA attributes via Event Mapping or global JavaScript injection",
    "link-name": "Add descriptive text to links or use aria-label",
    "color-contrast": "Update stylesheet colors or use high contrast mode",
    "heading-order": "Ensure heading levels increase sequentially (H1, H2, H3...)",
    "landmark-one-main": 'Add role="main" to the main content container',
    "page-has-heading-one": "Add an H1 heading to the page",
    "region": "Add landmark roles to major page sections",
}
RULE_DOCS_URL = "https://dequeuniversity.com/rules/axe/"


class ViolationScanner:
    """
    Usage:
        scanner = ViolationScanner(ruleset, overlay=HighlightOverlay(doc))
        report = await scanner.scan(doc, engine=axe_handle, page_info={...})
    """

    def __init__(
        self,
        ruleset: AccessibilityRuleSet,
        overlay: Optional[HighlightOverlay] = None,
        developer_mode: bool = False,
        run_only_tags: Optional[Iterable[str]] = None,
        result_types: Optional[Iterable[str]] = None,
        snippet_max_chars: int = 200,
        external_engine_enabled: bool = True,
    ) -> None:
        self._ruleset = ruleset
        self._external_enabled = external_engine_enabled
        self._overlay = overlay
        self._developer_mode = developer_mode
        self._run_only_tags = list(run_only_tags or DEFAULT_RUN_ONLY_TAGS)
        self._result_types = list(result_types or DEFAULT_RESULT_TYPES)
        self._snippet = snippet_max_chars
        self._report: Optional[ScanReport] = None
        self._state = ScanState.IDLE
        self._issued = 0
        self._stored = 0

    # ------------- properties -------------

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def report(self) -> Optional[ScanReport]:
        return self._report

    @property
    def developer_mode(self) -> bool:
        return self._developer_mode

    # ------------- scanning -------------

    async def scan(
        self,
        root: Any,
        engine: Optional[AuditEngine] = None,
        page_info: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ScanReport:
        """
        Run local rules, then (if an engine is handed in and ready) merge the
        engine's findings. The newest call's report becomes the current one.
        """
        self._issued += 1
        token = self._issued
        self._state = ScanState.RUNNING
        if self._overlay is not None:
            self._overlay.clear()

        local = self._ruleset.run(root)
        report = ScanReport(
            timestamp=datetime.now(timezone.utc).isoformat(),
            page_info=dict(page_info or {}),
            mode=ScanMode.LOCAL_ONLY,
            violations=list(local.violations),
            passes=list(local.passes),
        )

        external = None
        if not self._external_enabled:
            report.warnings.append("External audit engine disabled; local rules only")
        elif engine is None:
            report.warnings.append("External audit engine not available; local rules only")
        elif not _engine_ready(engine):
            report.warnings.append("External audit engine not ready; local rules only")
        else:
            try:
                external = await engine.run(root, self._run_options(options))
                if external is None:
                    raise ExternalEngineError("engine returned no result")
            except Exception as exc:
                external = None
                report.warnings.append(
                    f"External audit engine failed: {exc or exc.__class__.__name__}"
                )

        if external is None:
            self._state = ScanState.LOCAL_ONLY
            for message in report.warnings:
                log.warning("%s", message)
        else:
            self._state = ScanState.MERGING
            try:
                self._merge(report, external)
                report.mode = ScanMode.FULL
            except Exception as exc:
                # Malformed engine output: keep the local findings untouched.
                self._state = ScanState.LOCAL_ONLY
                report.violations = list(local.violations)
                report.incomplete = []
                report.warnings.append(f"External audit result unusable: {exc}")
                log.warning("External audit result unusable: %s", exc)

        report.recompute_summary()

        if token > self._stored:
            self._stored = token
            self._report = report
            if self._developer_mode and self._overlay is not None:
                self._overlay.apply(report)
        self._state = ScanState.DONE
        return report

    def _run_options(self, options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        run_options: Dict[str, Any] = {
            "runOnly": {"type": "tag", "values": list(self._run_only_tags)},
            "resultTypes": list(self._result_types),
        }
        if options:
            run_options.update(options)
        return run_options

    def _merge(self, report: ScanReport, external: Any) -> None:
        violations = self._external_violations(_field(external, "violations"))
        incomplete = self._external_incomplete(_field(external, "incomplete"))

        external_keys = {v.key for v in violations}
        kept_local = [v for v in report.violations if v.key not in external_keys]
        dropped = len(report.violations) - len(kept_local)
        if dropped:
            log.debug("Dropped %d local finding(s) also reported by the external engine", dropped)

        report.violations = kept_local + violations
        report.incomplete = incomplete

    def _external_violations(self, raw: Iterable[Any]) -> List[Violation]:
        out: List[Violation] = []
        seen = set()
        for item in raw:
            rule_id = str(_field(item, "id", ""))
            impact = _impact(_field(item, "impact", None))
            tags = [t for t in _field(item, "tags", []) or [] if str(t).startswith("wcag")]
            for node in _field(item, "nodes", []) or []:
                violation = Violation(
                    rule_id=rule_id,
                    impact=impact,
                    description=str(_field(item, "description", "") or ""),
                    selector=_target_selector(_field(node, "target", [])),
                    html=str(_field(node, "html", "") or "")[: self._snippet],
                    fix=suggested_fix(rule_id),
                    source=ViolationSource.EXTERNAL,
                    help=str(_field(item, "help", "") or ""),
                    help_url=str(_field(item, "helpUrl", "") or ""),
                    wcag_criteria=tags,
                    failure_summary=str(_field(node, "failureSummary", "") or ""),
                )
                if violation.key in seen:
                    continue
                seen.add(violation.key)
                out.append(violation)
        return out

    def _external_incomplete(self, raw: Iterable[Any]) -> List[IncompleteEntry]:
        out: List[IncompleteEntry] = []
        for item in raw:
            for node in _field(item, "nodes", []) or []:
                out.append(
                    IncompleteEntry(
                        rule_id=str(_field(item, "id", "")),
                        description=str(_field(item, "description", "") or ""),
                        selector=_target_selector(_field(node, "target", [])),
                        html=str(_field(node, "html", "") or "")[: self._snippet],
                    )
                )
        return out

    # ------------- developer mode -------------

    def set_developer_mode(self, enabled: bool) -> None:
        self._developer_mode = bool(enabled)
        if self._overlay is not None:
            if not self._developer_mode:
                self._overlay.clear()
            elif self._report is not None:
                self._overlay.apply(self._report)
        log.info("Developer mode: %s", "enabled" if self._developer_mode else "disabled")

    def clear_highlights(self) -> None:
        if self._overlay is not None:
            self._overlay.clear()

    # ------------- projections -------------

    def export_csv(self) -> str:
        if self._report is None:
            log.warning("No scan results to export")
            return ""
        return report_to_csv(self._report)

    def export_json(self) -> str:
        if self._report is None:
            log.warning("No scan results to export")
            return "{}"
        return report_to_json(self._report)

    def get_summary(self) -> Dict[str, int]:
        if self._report is None:
            return {"total": 0, "critical": 0, "serious": 0, "moderate": 0, "minor": 0}
        summary = {"total": len(self._report.violations)}
        summary.update(self._report.summary)
        summary["incomplete"] = len(self._report.incomplete)
        summary["passes"] = len(self._report.passes)
        return summary

    def log_results(self) -> None:
        if self._report is None:
            log.info("No scan results available. Run scan() first.")
            return
        report = self._report
        summary = self.get_summary()
        log.info(
            "Scan of %s / %s (%s): %d issue(s) - critical %d, serious %d, moderate %d, minor %d; %d need review",
            report.page_info.get("component", "unknown"),
            report.page_info.get("page", "unknown"),
            report.mode.value,
            summary["total"],
            summary["critical"],
            summary["serious"],
            summary["moderate"],
            summary["minor"],
            summary["incomplete"],
        )
        for i, v in enumerate(report.violations, start=1):
            log.info("%d. [%s] %s at %s - fix: %s", i, v.impact.value.upper(), v.rule_id, v.selector, v.fix)


# ---------- helpers (module-internal) ----------

def suggested_fix(rule_id: str) -> str:
    return SUGGESTED_FIXES.get(rule_id) or f"See axe-core documentation: {RULE_DOCS_URL}{rule_id}"


def _engine_ready(engine: Any) -> bool:
    try:
        ready = engine.is_ready()
    except Exception as exc:
        log.warning("External audit engine readiness check failed: %s", exc)
        return False
    return bool(ready)


def _field(obj: Any, name: str, default: Any = ()) -> Any:
    """Read `name` from a mapping or an attribute-style result object."""
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _impact(value: Any) -> Impact:
    try:
        return Impact(str(value).lower())
    except ValueError:
        return Impact.MODERATE


def _target_selector(target: Any) -> str:
    if isinstance(target, str):
        return target
    parts = []
    for part in target or []:
        if isinstance(part, (list, tuple)):
            parts.append(" > ".join(str(p) for p in part))
        else:
            parts.append(str(part))
    return " > ".join(parts)
