"""Reference validation over a loaded corpus snapshot."""
from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional

from haguard.config.loader import load_corpus
from haguard.config.settings import CorpusSettings
from haguard.core.logger import get_logger
from haguard.models.corpus import (
    BUILTIN_ENTITIES,
    HELPER_CATEGORY_SCOPE,
    Corpus,
    EntityReference,
    EntityRegistryEntry,
    HelperDefinition,
    Location,
)
from haguard.models.report import CheckName, Finding, FindingKind, Severity, ValidationReport

logger = get_logger(__name__)


def _sort_key(location: Optional[Location], identifier: str):
    if location is None:
        return ("", -1, identifier)
    return (location.file, location.line if location.line is not None else -1, identifier)


class ReferenceValidator:
    """Runs the reference checks, in fixed order, against one corpus.

    The corpus is never modified. Sets computed by an earlier check are
    frozen and may be reused by later ones.
    """

    def __init__(self, corpus: Corpus):
        self.corpus = corpus
        self.report = ValidationReport()

    def run(self) -> ValidationReport:
        self.report = ValidationReport()
        live_ids = self.corpus.live_entity_ids

        self.report.extend(self.check_script_references())
        self.report.extend(self.check_helper_references(live_ids))
        self.report.extend(self.check_dashboard_entities(live_ids))
        self.report.extend(self.check_ungrouped_helpers())

        logger.debug(
            f"Validated {self.corpus.root}: {len(self.report.errors)} error(s), "
            f"{len(self.report.warnings)} warning(s)"
        )
        return self.report

    # ----------------------------
    # Check 1: scripts
    # ----------------------------

    def check_script_references(self) -> List[Finding]:
        """One ERROR per call site of a script that is not defined."""
        defined = self.corpus.defined_script_ids
        dangling = [
            invocation for invocation in self.corpus.script_invocations
            if invocation.script_id not in defined
        ]
        dangling.sort(key=lambda inv: _sort_key(inv.location, inv.script_id))

        return [
            Finding(
                severity=Severity.ERROR,
                check=CheckName.SCRIPT_REFERENCES,
                kind=FindingKind.DANGLING_SCRIPT_REFERENCE,
                message=(
                    f"Script 'script.{invocation.script_id}' called from "
                    f"{invocation.source} is not defined"
                ),
                location=invocation.location,
            )
            for invocation in dangling
        ]

    # ----------------------------
    # Check 2: helpers
    # ----------------------------

    def check_helper_references(self, live_ids: FrozenSet[str]) -> List[Finding]:
        """One ERROR per helper reference that is not a live registry id.

        Only the registry is authoritative: a renamed helper must be
        referenced by its new entity id. Helpers without a registry entry
        are not reported here.
        """
        dangling = [ref for ref in self.corpus.helper_references if ref.entity_id not in live_ids]
        dangling.sort(key=lambda ref: _sort_key(ref.location, ref.entity_id))

        renamed = self._renamed_helpers()
        findings = []
        for ref in dangling:
            message = f"Helper '{ref.entity_id}' referenced from {ref.source} is not in the entity registry"
            hint = self._helper_hint(ref, renamed, live_ids)
            if hint:
                message = f"{message} ({hint})"
            findings.append(
                Finding(
                    severity=Severity.ERROR,
                    check=CheckName.HELPER_REFERENCES,
                    kind=FindingKind.DANGLING_HELPER_REFERENCE,
                    message=message,
                    location=ref.location,
                )
            )
        return findings

    def _renamed_helpers(self) -> Dict[str, str]:
        """Map original helper entity ids to live ids that differ from them."""
        by_unique_id = self.corpus.registry_by_unique_id()
        renamed = {}
        for helper in self.corpus.helpers:
            entry = by_unique_id.get((helper.domain, helper.helper_id))
            if entry is not None and entry.entity_id != helper.entity_id:
                renamed[helper.entity_id] = entry.entity_id
        return renamed

    def _helper_hint(self, ref: EntityReference, renamed: Dict[str, str],
                     live_ids: FrozenSet[str]) -> Optional[str]:
        if ref.entity_id in renamed:
            return f"renamed to '{renamed[ref.entity_id]}'"

        # A live helper with the same object id under another domain
        for domain in self.corpus.helper_domains:
            candidate = f"{domain}.{ref.object_id}"
            if domain != ref.domain and candidate in live_ids:
                return f"registered as '{candidate}'"
        return None

    # ----------------------------
    # Check 3: dashboards
    # ----------------------------

    def check_dashboard_entities(self, live_ids: FrozenSet[str]) -> List[Finding]:
        """One WARNING per dashboard reference to an unknown entity."""
        known = live_ids | BUILTIN_ENTITIES
        unknown = [ref for ref in self.corpus.dashboard_references if ref.entity_id not in known]
        unknown.sort(key=lambda ref: _sort_key(ref.location, ref.entity_id))

        return [
            Finding(
                severity=Severity.WARNING,
                check=CheckName.DASHBOARD_ENTITIES,
                kind=FindingKind.UNKNOWN_DASHBOARD_ENTITY,
                message=f"Dashboard entity '{ref.entity_id}' in {ref.source} is not in the entity registry",
                location=ref.location,
            )
            for ref in unknown
        ]

    # ----------------------------
    # Check 4: categories
    # ----------------------------

    def check_ungrouped_helpers(self) -> List[Finding]:
        """One WARNING per helper without a category."""
        by_unique_id = self.corpus.registry_by_unique_id()
        ungrouped = [
            helper for helper in self.corpus.helpers
            if not self._has_category(helper, by_unique_id.get((helper.domain, helper.helper_id)))
        ]
        domain_order = {domain: index for index, domain in enumerate(self.corpus.helper_domains)}
        ungrouped.sort(key=lambda helper: (domain_order.get(helper.domain, len(domain_order)),
                                           helper.domain, helper.helper_id))

        return [
            Finding(
                severity=Severity.WARNING,
                check=CheckName.UNGROUPED_HELPERS,
                kind=FindingKind.UNGROUPED_HELPER,
                message=f"Helper {helper.domain} '{helper.helper_id}' has no category",
            )
            for helper in ungrouped
        ]

    @staticmethod
    def _has_category(helper: HelperDefinition, entry: Optional[EntityRegistryEntry]) -> bool:
        if helper.category:
            return True
        return entry is not None and bool(entry.categories.get(HELPER_CATEGORY_SCOPE))


def validate_corpus(corpus: Corpus) -> ValidationReport:
    """Validate an already loaded corpus snapshot."""
    return ReferenceValidator(corpus).run()


def validate(settings: CorpusSettings) -> ValidationReport:
    """Load the corpus described by ``settings`` and validate it.

    Raises:
        CorpusUnreadable: If any corpus document cannot be parsed
    """
    return validate_corpus(load_corpus(settings))
