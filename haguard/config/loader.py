"""Corpus loader: reads every document once into an immutable snapshot."""
import json
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from haguard.config.settings import CorpusSettings
from haguard.config.yaml_loader import line_of, load_yaml
from haguard.core.extractor import ReferenceExtractor
from haguard.core.logger import get_logger
from haguard.models.corpus import (
    HELPER_DOMAINS,
    Corpus,
    EntityReference,
    EntityRegistryEntry,
    HelperDefinition,
    Location,
    ScriptDefinition,
    ScriptInvocation,
)
from haguard.models.errors import CorpusUnreadable

logger = get_logger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class CorpusLoader:
    """Loads the documents named by :class:`CorpusSettings` into a :class:`Corpus`.

    Any document that cannot be parsed into its expected structure raises
    :class:`CorpusUnreadable`; nothing is validated on a partial corpus.
    """

    def __init__(self, settings: CorpusSettings):
        self.settings = settings

    def load(self) -> Corpus:
        if not self.settings.root.is_dir():
            raise CorpusUnreadable(self.settings.root, "corpus root is not a directory")

        invocations: List[ScriptInvocation] = []
        references: List[EntityReference] = []

        definitions = self._load_scripts(invocations, references)
        self._load_automations(invocations, references)
        helpers = self._load_helpers()
        registry = self._load_registry()
        dashboard_references = self._load_dashboards()

        # Every helper domain is checked, whether or not its document is configured
        helper_references = [ref for ref in references if ref.domain in HELPER_DOMAINS]

        logger.debug(
            f"Loaded corpus {self.settings.root}: {len(definitions)} scripts, "
            f"{len(invocations)} script calls, {len(helper_references)} helper references, "
            f"{len(helpers)} helpers, {len(registry)} registry entries, "
            f"{len(dashboard_references)} dashboard references"
        )

        return Corpus(
            root=str(self.settings.root),
            script_definitions=tuple(definitions),
            script_invocations=tuple(invocations),
            helper_references=tuple(helper_references),
            dashboard_references=tuple(dashboard_references),
            helpers=tuple(helpers),
            registry=tuple(registry),
            helper_domains=HELPER_DOMAINS,
        )

    # ----------------------------
    # Document readers
    # ----------------------------

    def _read(self, path: Path, located: bool = True) -> Any:
        """Parse one document.

        Documents whose findings need line numbers go through the YAML
        loader. Record stores (registry, helpers) only need their values,
        so JSON ones are read with :mod:`json`, which is much faster on a
        large entity registry.
        """
        rel = self.settings.relative(path)
        if not located and path.suffix not in YAML_SUFFIXES:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as exc:
                raise CorpusUnreadable(rel, f"cannot parse document: {exc}") from exc
            except (OSError, UnicodeDecodeError) as exc:
                raise CorpusUnreadable(rel, f"cannot read document: {exc}") from exc
        try:
            return load_yaml(path)
        except yaml.YAMLError as exc:
            raise CorpusUnreadable(rel, f"cannot parse document: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise CorpusUnreadable(rel, f"cannot read document: {exc}") from exc

    def _load_scripts(
        self,
        invocations: List[ScriptInvocation],
        references: List[EntityReference],
    ) -> List[ScriptDefinition]:
        definitions: Dict[str, ScriptDefinition] = {}

        for path in self.settings.resolve_all(self.settings.scripts):
            rel = self.settings.relative(path)
            data = self._read(path)
            if data is None:
                continue
            if not isinstance(data, dict):
                raise CorpusUnreadable(rel, "scripts document must be a mapping of script ids")

            extractor = ReferenceExtractor(rel)
            for script_id, body in data.items():
                if not isinstance(script_id, str) or not script_id:
                    raise CorpusUnreadable(rel, f"invalid script id {script_id!r}")
                if body is not None and not isinstance(body, dict):
                    raise CorpusUnreadable(
                        rel, f"script '{script_id}' must be a mapping (line {line_of(script_id)})"
                    )
                if script_id in definitions:
                    raise CorpusUnreadable(
                        rel,
                        f"script '{script_id}' is already defined at {definitions[script_id].location}",
                    )
                definitions[script_id] = ScriptDefinition(
                    str(script_id), Location(rel, line_of(script_id))
                )

                found = extractor.extract(body or {}, f"script '{script_id}'")
                invocations.extend(found.invocations)
                references.extend(found.references)

        return list(definitions.values())

    def _load_automations(
        self,
        invocations: List[ScriptInvocation],
        references: List[EntityReference],
    ) -> None:
        for path in self.settings.resolve_all(self.settings.automations):
            rel = self.settings.relative(path)
            data = self._read(path)
            if data is None:
                continue
            if not isinstance(data, list):
                raise CorpusUnreadable(rel, "automations document must be a list of rules")

            extractor = ReferenceExtractor(rel)
            for index, rule in enumerate(data):
                if not isinstance(rule, dict):
                    raise CorpusUnreadable(rel, f"automation #{index} must be a mapping")
                name = rule.get("id") or rule.get("alias") or f"#{index}"
                found = extractor.extract(rule, f"automation '{name}'")
                invocations.extend(found.invocations)
                references.extend(found.references)

    def _load_helpers(self) -> List[HelperDefinition]:
        helpers: List[HelperDefinition] = []

        for domain in self.settings.helper_domains:
            path = self.settings.root / self.settings.helpers[domain]
            if not path.is_file():
                logger.debug(f"No {domain} helper registry at {path}")
                continue
            rel = self.settings.relative(path)
            for index, record in enumerate(self._helper_records(rel, self._read(path, located=False))):
                try:
                    helpers.append(HelperDefinition.model_validate({**record, "domain": domain}))
                except ValidationError as exc:
                    raise CorpusUnreadable(rel, f"invalid {domain} helper #{index}: {exc}") from exc

        return helpers

    @staticmethod
    def _helper_records(rel: str, data: Any) -> List[Dict[str, Any]]:
        """Normalize the accepted helper document shapes to a list of records."""
        if data is None:
            return []
        if isinstance(data, dict) and "data" in data:
            # Home Assistant storage collection: {"data": {"items": [...]}}
            items = (data.get("data") or {}).get("items")
            if not isinstance(items, list):
                raise CorpusUnreadable(rel, "storage document has no 'data.items' list")
            data = items
        elif isinstance(data, dict):
            # YAML style: {helper_id: {name: ..., category: ...}}
            records = []
            for helper_id, body in data.items():
                if body is not None and not isinstance(body, dict):
                    raise CorpusUnreadable(rel, f"helper '{helper_id}' must be a mapping")
                records.append({**(body or {}), "id": helper_id})
            return records

        if not isinstance(data, list):
            raise CorpusUnreadable(rel, "helper document must be a list of records")
        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise CorpusUnreadable(rel, f"helper record #{index} must be a mapping")
        return data

    def _load_registry(self) -> List[EntityRegistryEntry]:
        path = self.settings.root / self.settings.entity_registry
        rel = self.settings.relative(path)
        if not path.is_file():
            raise CorpusUnreadable(rel, "entity registry not found")

        data = self._read(path, located=False)
        if isinstance(data, dict) and "data" in data:
            # Home Assistant storage: {"data": {"entities": [...], "deleted_entities": [...]}}
            data = (data.get("data") or {}).get("entities")
        if not isinstance(data, list):
            raise CorpusUnreadable(rel, "entity registry must be a list of entity records")

        entries: List[EntityRegistryEntry] = []
        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise CorpusUnreadable(rel, f"registry record #{index} must be a mapping")
            try:
                entries.append(EntityRegistryEntry.model_validate(record))
            except ValidationError as exc:
                raise CorpusUnreadable(rel, f"invalid registry record #{index}: {exc}") from exc
        return entries

    def _load_dashboards(self) -> List[EntityReference]:
        references: List[EntityReference] = []
        for path in self.settings.resolve_all(self.settings.dashboards):
            rel = self.settings.relative(path)
            data = self._read(path)
            if data is None:
                continue
            if not isinstance(data, (dict, list)):
                raise CorpusUnreadable(rel, "dashboard document must be a mapping or a list")
            found = ReferenceExtractor.for_dashboard(rel).extract(data, f"dashboard '{rel}'")
            references.extend(found.references)
        return references


def load_corpus(settings: CorpusSettings) -> Corpus:
    """Read the corpus described by ``settings``."""
    return CorpusLoader(settings).load()
