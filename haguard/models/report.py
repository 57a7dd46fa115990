"""Validation findings and the report handed to the deployment step."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from haguard.models.corpus import Location


class Severity:
    """Finding severities."""

    ERROR = "ERROR"      # Blocks deployment
    WARNING = "WARNING"  # Informational only


class FindingKind:
    """Kinds of findings, one per check."""

    DANGLING_SCRIPT_REFERENCE = "DanglingScriptReference"
    DANGLING_HELPER_REFERENCE = "DanglingHelperReference"
    UNKNOWN_DASHBOARD_ENTITY = "UnknownDashboardEntity"
    UNGROUPED_HELPER = "UngroupedHelper"


class CheckName:
    """Check identifiers, in the order the validator runs them."""

    SCRIPT_REFERENCES = "script_references"
    HELPER_REFERENCES = "helper_references"
    DASHBOARD_ENTITIES = "dashboard_entities"
    UNGROUPED_HELPERS = "ungrouped_helpers"

    ORDER = (
        SCRIPT_REFERENCES,
        HELPER_REFERENCES,
        DASHBOARD_ENTITIES,
        UNGROUPED_HELPERS,
    )


@dataclass(frozen=True)
class Finding:
    """A single validation finding."""

    severity: str
    check: str
    kind: str
    message: str
    location: Optional[Location] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "check": self.check,
            "kind": self.kind,
            "message": self.message,
            "location": self.location.to_dict() if self.location else None,
        }


@dataclass
class ValidationReport:
    """Ordered findings of one validation run."""

    findings: List[Finding] = field(default_factory=list)

    def add(self, finding: Finding) -> None:
        self.findings.append(finding)

    def extend(self, findings: List[Finding]) -> None:
        self.findings.extend(findings)

    @property
    def errors(self) -> List[Finding]:
        return [finding for finding in self.findings if finding.is_error]

    @property
    def warnings(self) -> List[Finding]:
        return [finding for finding in self.findings if not finding.is_error]

    @property
    def is_safe(self) -> bool:
        """True when nothing blocks deployment. Warnings never count."""
        return not self.errors

    def is_clean(self) -> bool:
        return not self.findings

    def by_check(self, check: str) -> List[Finding]:
        return [finding for finding in self.findings if finding.check == check]

    def summary(self) -> Dict[str, Dict[str, int]]:
        """Count findings per check and severity, in check order."""
        counts: Dict[str, Dict[str, int]] = {
            check: {Severity.ERROR: 0, Severity.WARNING: 0} for check in CheckName.ORDER
        }
        for finding in self.findings:
            per_check = counts.setdefault(
                finding.check, {Severity.ERROR: 0, Severity.WARNING: 0}
            )
            per_check[finding.severity] = per_check.get(finding.severity, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "safe": self.is_safe,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "findings": [finding.to_dict() for finding in self.findings],
        }

    def to_json(self) -> str:
        """Render the report as stable JSON (same report, same bytes)."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)
