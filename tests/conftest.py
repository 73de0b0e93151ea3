"""
Shared fixtures: a small PeopleSoft-like page and storage-backed registries.
"""

import pytest

from core.registry import RuleRegistry
from checks.aria_rules import register_builtin_rules
from checks.ruleset import AccessibilityRuleSet
from infra.storage import PreferenceStore, SessionStorage
from services.highlight import HighlightOverlay
from services.scanner import ViolationScanner
from services.style_registry import StyleRuleRegistry
from services.style_sinks import DocumentStyleSink, MemoryStyleSink
from utils.dom_utils import parse_document


PAGE_HTML = """
<html>
<head><title>Job Data</title></head>
<body>
  <div id="win0divPAGECONTAINER">
    <a id="DERIVED_HR$prompt" href="#"></a>
    <a id="EMPLID$ICSearch" href="#" aria-label="Search"></a>
    <a id="JOB$add$0" href="#">Add</a>
    <a id="JOB$delete$0" href="#"></a>
    <table class="PSLEVEL1GRID">
      <tr><th scope="col">Name</th><th>Dept</th></tr>
    </table>
  </div>
</body>
</html>
"""


@pytest.fixture
def document():
    return parse_document(PAGE_HTML)


@pytest.fixture
def store():
    return PreferenceStore(SessionStorage(), SessionStorage())


@pytest.fixture
def memory_sink():
    return MemoryStyleSink()


@pytest.fixture
def styles(memory_sink, store):
    return StyleRuleRegistry(memory_sink, store=store)


@pytest.fixture
def document_styles(document, store):
    return StyleRuleRegistry(DocumentStyleSink(document), store=store)


@pytest.fixture
def ruleset():
    return AccessibilityRuleSet(register_builtin_rules(RuleRegistry()))


@pytest.fixture
def overlay(document):
    return HighlightOverlay(document)


@pytest.fixture
def scanner(ruleset, overlay):
    return ViolationScanner(ruleset, overlay=overlay)
