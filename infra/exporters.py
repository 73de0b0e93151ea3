# infra/exporters.py
"""
Projections and writers for the ScanReport.

Exports:
- JSON (schema_version "1.0"): the full report with a fixed key order
- CSV: one row per violation
  Component,Page,Rule,Impact,Element,Description,Fix,Source

Usage:
    from infra.exporters import JsonReportWriter, CsvReportWriter
    JsonReportWriter("scan.json").write(report)
    CsvReportWriter("scan.csv").write(report)

report_to_json / report_to_csv are the pure string forms the scanner's
export methods return.
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict, Union

from core.interfaces import ReportWriter
from core.models import ScanReport

SCHEMA_VERSION = "1.0"
CSV_HEADER = ["Component", "Page", "Rule", "Impact", "Element", "Description", "Fix", "Source"]


def report_to_dict(report: ScanReport) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "timestamp": report.timestamp,
        "mode": report.mode.value,
        # page_info is caller-supplied; keys may be of mixed types.
        "page": {str(k): report.page_info[k] for k in sorted(report.page_info, key=str)},
        "summary": {level: report.summary.get(level, 0) for level in ("critical", "serious", "moderate", "minor")},
        "violations": [v.to_dict() for v in report.violations],
        "passes": [p.to_dict() for p in report.passes],
        "incomplete": [i.to_dict() for i in report.incomplete],
        "warnings": list(report.warnings),
    }


def report_to_json(report: ScanReport) -> str:
    return json.dumps(report_to_dict(report), ensure_ascii=False, indent=2, default=str)


def report_to_csv(report: ScanReport) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(CSV_HEADER)
    component = str(report.page_info.get("component", "unknown"))
    page = str(report.page_info.get("page", "unknown"))
    for v in report.violations:
        w.writerow([
            component,
            page,
            v.rule_id,
            v.impact.value,
            v.selector,
            v.description,
            v.fix,
            v.source.value,
        ])
    return buf.getvalue()


class JsonReportWriter(ReportWriter):
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def write(self, report: ScanReport) -> None:
        self.path.write_text(report_to_json(report), encoding="utf-8")


class CsvReportWriter(ReportWriter):
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def write(self, report: ScanReport) -> None:
        with self.path.open("w", newline="", encoding="utf-8") as fp:
            fp.write(report_to_csv(report))
