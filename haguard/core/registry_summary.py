"""Per-domain overview of the entity registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from haguard.models.corpus import EntityRegistryEntry


@dataclass
class DomainSummary:
    """Entity counts for one domain."""

    domain: str
    enabled: int = 0
    disabled: int = 0
    examples: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return self.enabled + self.disabled


def summarize_registry(
    entries: Iterable[EntityRegistryEntry],
    domain: Optional[str] = None,
    limit: int = 3,
) -> List[DomainSummary]:
    """Return domain summaries sorted by domain, with up to ``limit`` examples each."""
    summaries: Dict[str, DomainSummary] = {}
    for entry in sorted(entries, key=lambda item: item.entity_id):
        if domain and entry.domain != domain:
            continue
        summary = summaries.setdefault(entry.domain, DomainSummary(entry.domain))
        if entry.is_disabled:
            summary.disabled += 1
        else:
            summary.enabled += 1
        if len(summary.examples) < limit:
            summary.examples.append(entry.entity_id)

    return [summaries[name] for name in sorted(summaries)]
