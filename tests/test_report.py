"""Tests for findings and the validation report."""
import json

from haguard.models.corpus import Location
from haguard.models.report import CheckName, Finding, FindingKind, Severity, ValidationReport


def make_error(script_id="old", line=4):
    return Finding(
        severity=Severity.ERROR,
        check=CheckName.SCRIPT_REFERENCES,
        kind=FindingKind.DANGLING_SCRIPT_REFERENCE,
        message=f"Script 'script.{script_id}' called from automation 'a' is not defined",
        location=Location("automations.yaml", line),
    )


def make_warning(helper_id="volume"):
    return Finding(
        severity=Severity.WARNING,
        check=CheckName.UNGROUPED_HELPERS,
        kind=FindingKind.UNGROUPED_HELPER,
        message=f"Helper input_number '{helper_id}' has no category",
    )


class TestValidationReport:
    """Report accessors and verdict."""

    def test_empty_report_is_clean_and_safe(self):
        report = ValidationReport()

        assert report.is_clean()
        assert report.is_safe
        assert report.errors == []
        assert report.warnings == []

    def test_warnings_never_block(self):
        report = ValidationReport()
        report.add(make_warning("a"))
        report.add(make_warning("b"))

        assert report.is_safe
        assert not report.is_clean()
        assert len(report.warnings) == 2

    def test_one_error_blocks(self):
        report = ValidationReport()
        report.extend([make_warning(), make_error()])

        assert not report.is_safe
        assert report.errors == [make_error()]

    def test_summary_lists_every_check_in_order(self):
        report = ValidationReport([make_error("a"), make_error("b"), make_warning()])

        summary = report.summary()

        assert list(summary) == list(CheckName.ORDER)
        assert summary[CheckName.SCRIPT_REFERENCES] == {Severity.ERROR: 2, Severity.WARNING: 0}
        assert summary[CheckName.HELPER_REFERENCES] == {Severity.ERROR: 0, Severity.WARNING: 0}
        assert summary[CheckName.UNGROUPED_HELPERS] == {Severity.ERROR: 0, Severity.WARNING: 1}


class TestReportJson:
    """JSON rendering handed to CI."""

    def test_json_structure(self):
        report = ValidationReport([make_error(), make_warning()])

        data = json.loads(report.to_json())

        assert data["safe"] is False
        assert data["errors"] == 1
        assert data["warnings"] == 1
        assert data["findings"][0] == {
            "severity": "ERROR",
            "check": "script_references",
            "kind": "DanglingScriptReference",
            "message": "Script 'script.old' called from automation 'a' is not defined",
            "location": {"file": "automations.yaml", "line": 4},
        }
        assert data["findings"][1]["location"] is None

    def test_json_keeps_non_ascii(self):
        report = ValidationReport([make_warning("wekker_één")])

        assert "wekker_één" in report.to_json()


def test_location_string():
    assert str(Location("automations.yaml", 12)) == "automations.yaml:12"
    assert str(Location(".storage/lovelace")) == ".storage/lovelace"
