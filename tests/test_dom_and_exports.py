"""
Tests for DOM helpers and report exporters.
"""

import csv
import json

import pytest

from core.errors import SelectorResolutionError
from core.models import Impact, PassEntry, ScanMode, ScanReport, Violation, ViolationSource
from infra.exporters import (
    CSV_HEADER,
    CsvReportWriter,
    JsonReportWriter,
    report_to_csv,
    report_to_dict,
    report_to_json,
)
from utils.dom_utils import css_path, outer_html, parse_document, resolve_unique, select_all


# =============================================================================
# SELECTOR GENERATION
# =============================================================================

class TestCssPath:
    def test_id_short_circuits(self):
        doc = parse_document('<div><a id="plain">x</a></div>')
        assert css_path(doc.find("a")) == "#plain"

    def test_special_characters_escaped(self):
        doc = parse_document('<a id="PSPUSHBUTTON$0:1">x</a>')
        selector = css_path(doc.find("a"))
        assert selector == "#PSPUSHBUTTON\\$0\\:1"
        assert resolve_unique(doc, selector) is doc.find("a")

    def test_nth_of_type_and_classes(self):
        doc = parse_document(
            '<div id="grid"><span class="a b c">1</span><span class="a b c">2</span></div>'
        )
        second = doc.find_all("span")[1]
        assert css_path(second) == "#grid > span.a.b:nth-of-type(2)"

    def test_first_of_type_has_no_index(self):
        doc = parse_document('<div id="grid"><p>1</p><span>2</span></div>')
        assert css_path(doc.find("span")) == "#grid > span"

    def test_max_depth(self):
        doc = parse_document("<div><div><div><div><p>deep</p></div></div></div></div>")
        path = css_path(doc.find("p"), max_depth=2)
        assert path == "div > p"

    def test_generated_paths_resolve(self, document):
        for element in document.find_all(["a", "table"]):
            assert resolve_unique(document, css_path(element)) is element


class TestLookup:
    def test_select_all_document_order(self):
        doc = parse_document("<p>1</p><div><p>2</p></div><p>3</p>")
        assert [p.get_text() for p in select_all(doc, "p")] == ["1", "2", "3"]

    def test_invalid_selector(self):
        with pytest.raises(SelectorResolutionError):
            select_all(parse_document("<p></p>"), "p[")

    def test_resolve_unique_requires_one(self):
        doc = parse_document("<p>1</p><p>2</p>")
        with pytest.raises(SelectorResolutionError):
            resolve_unique(doc, "p")
        with pytest.raises(SelectorResolutionError):
            resolve_unique(doc, "#missing")

    def test_outer_html_truncated(self):
        doc = parse_document("<p>" + "y" * 50 + "</p>")
        assert outer_html(doc.find("p"), 8) == "<p>yyyyy"


# =============================================================================
# EXPORTERS
# =============================================================================

def sample_report():
    report = ScanReport(
        timestamp="2024-05-01T10:00:00+00:00",
        page_info={"page": "JOB_DATA1", "component": "JOB_DATA"},
        mode=ScanMode.FULL,
        violations=[
            Violation(
                rule_id="psft-grid-actions",
                impact=Impact.SERIOUS,
                description="Grid Add/Delete buttons must have accessible names",
                selector="#JOB\\$delete\\$0",
                html='<a id="JOB$delete$0"></a>',
                fix='Add aria-label="Delete Row"',
                source=ViolationSource.LOCAL,
            ),
        ],
        passes=[PassEntry("psft-prompt-icon", "#EMPLID\\$ICSearch")],
    )
    report.recompute_summary()
    return report


class TestExporters:
    def test_dict_key_order(self):
        data = report_to_dict(sample_report())
        assert list(data) == [
            "schema_version", "timestamp", "mode", "page", "summary",
            "violations", "passes", "incomplete", "warnings",
        ]
        assert list(data["page"]) == ["component", "page"]
        assert data["summary"] == {"critical": 0, "serious": 1, "moderate": 0, "minor": 0}

    def test_mixed_page_info_keys(self):
        report = sample_report()
        report.page_info = {1: "x", "page": "y"}
        assert report_to_dict(report)["page"] == {"1": "x", "page": "y"}
        assert json.loads(report_to_json(report))["page"] == {"1": "x", "page": "y"}
        assert report_to_csv(report).splitlines()[1].startswith("unknown,y,")

    def test_csv_quotes_embedded_quotes(self):
        text = report_to_csv(sample_report())
        lines = text.splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        assert '"Add aria-label=""Delete Row"""' in lines[1]

    def test_csv_empty_report_is_header_only(self):
        report = ScanReport(timestamp="t")
        assert report_to_csv(report) == ",".join(CSV_HEADER) + "\n"

    def test_writers(self, tmp_path):
        report = sample_report()
        JsonReportWriter(tmp_path / "scan.json").write(report)
        CsvReportWriter(tmp_path / "scan.csv").write(report)

        data = json.loads((tmp_path / "scan.json").read_text(encoding="utf-8"))
        assert data["violations"][0]["suggestedFix"] == 'Add aria-label="Delete Row"'

        with (tmp_path / "scan.csv").open(newline="", encoding="utf-8") as fp:
            rows = list(csv.reader(fp))
        assert rows[1][:3] == ["JOB_DATA", "JOB_DATA1", "psft-grid-actions"]
