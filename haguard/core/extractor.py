"""Reference extraction from parsed Home Assistant documents."""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from haguard.config.yaml_loader import line_of
from haguard.models.corpus import EntityReference, Location, ScriptInvocation, split_entity_id

_OBJECT_ID_RE = re.compile(r"^[a-z0-9_]+$")
_UUID_RE = re.compile(r"^[a-f0-9]{32}$")
_TEMPLATE_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)

# Jinja helpers that take an entity id as their first argument
_TEMPLATE_PATTERNS = [
    re.compile(r"states\(\s*'([^']+)'"),
    re.compile(r'states\(\s*"([^"]+)"'),
    re.compile(r"states\.([a-z0-9_]+\.[a-z0-9_]+)"),
    re.compile(r"is_state\(\s*'([^']+)'"),
    re.compile(r'is_state\(\s*"([^"]+)"'),
    re.compile(r"state_attr\(\s*'([^']+)'"),
    re.compile(r'state_attr\(\s*"([^"]+)"'),
    re.compile(r"is_state_attr\(\s*'([^']+)'"),
    re.compile(r'is_state_attr\(\s*"([^"]+)"'),
]
_TEMPLATE_HINTS = ("states(", "states.", "is_state(", "state_attr(", "is_state_attr(")


def is_valid_entity_id(value: str) -> bool:
    """True for ``domain.object_id`` with lowercase slug parts."""
    domain, object_id = split_entity_id(value)
    return bool(_OBJECT_ID_RE.match(domain)) and bool(_OBJECT_ID_RE.match(object_id))


def is_template(value: str) -> bool:
    return bool(_TEMPLATE_RE.search(value))


def should_skip(value: str) -> bool:
    """Values in entity positions that are not entity ids."""
    return (
        value.startswith("!")             # !input, !secret, ...
        or bool(_UUID_RE.match(value))    # device automations use registry UUIDs
        or is_template(value)
        or value in ReferenceExtractor.SPECIAL_KEYWORDS
    )


def entities_from_template(template: str) -> List[str]:
    """Entity ids named inside a Jinja template, in order of appearance."""
    found = []
    for pattern in _TEMPLATE_PATTERNS:
        for match in pattern.finditer(template):
            found.append((match.start(), match.group(1)))
    found.sort()

    entities: List[str] = []
    for _, candidate in found:
        if is_valid_entity_id(candidate) and candidate not in entities:
            entities.append(candidate)
    return entities


@dataclass
class ExtractionResult:
    """References found in one document, in document order."""

    invocations: List[ScriptInvocation] = field(default_factory=list)
    references: List[EntityReference] = field(default_factory=list)


class ReferenceExtractor:
    """Walks nested documents and collects script calls and entity references.

    One extractor is bound to a single document file; every reference it
    returns carries that file plus the line of the scalar it came from.
    """

    ENTITY_KEYS = frozenset({"entity_id", "entity_ids", "entities"})
    DASHBOARD_ENTITY_KEYS = frozenset({"entity", "entity_id", "entity_ids", "entities"})
    SERVICE_KEYS = frozenset({"service", "action"})

    # script.<service> calls that target scripts instead of naming one
    SCRIPT_SERVICES = frozenset({"turn_on", "turn_off", "toggle", "reload"})

    SPECIAL_KEYWORDS = frozenset({"all", "none"})

    def __init__(self, file: str, entity_keys: Optional[Iterable[str]] = None,
                 scripts_as_invocations: bool = True):
        self.file = file
        self.entity_keys = frozenset(entity_keys) if entity_keys else self.ENTITY_KEYS
        self.scripts_as_invocations = scripts_as_invocations

    @classmethod
    def for_dashboard(cls, file: str) -> "ReferenceExtractor":
        """Extractor for dashboards, where script entities are plain entities."""
        return cls(file, entity_keys=cls.DASHBOARD_ENTITY_KEYS, scripts_as_invocations=False)

    def extract(self, data: Any, source: str) -> ExtractionResult:
        """Collect invocations and references from ``data``.

        Unless built with ``scripts_as_invocations=False``, entity references
        in the ``script`` domain are reported as script invocations.
        """
        result = ExtractionResult()
        self._walk(data, source, result, fallback_line=line_of(data))
        return result

    def _location(self, value: Any, fallback_line: Optional[int]) -> Location:
        line = line_of(value)
        return Location(self.file, line if line is not None else fallback_line)

    def _walk(self, data: Any, source: str, result: ExtractionResult,
              fallback_line: Optional[int]) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                key_line = line_of(key) or fallback_line
                if key in self.entity_keys:
                    self._collect_entity_values(value, source, result, key_line)
                elif key in self.SERVICE_KEYS and isinstance(value, str):
                    self._collect_service_call(value, source, result, key_line)
                elif isinstance(value, str):
                    self._collect_template(value, source, result, key_line)
                else:
                    self._walk(value, source, result, key_line)
        elif isinstance(data, list):
            for item in data:
                self._walk(item, source, result, line_of(item) or fallback_line)
        elif isinstance(data, str):
            self._collect_template(data, source, result, fallback_line)

    def _collect_entity_values(self, value: Any, source: str, result: ExtractionResult,
                               fallback_line: Optional[int]) -> None:
        if isinstance(value, str):
            if is_template(value):
                self._collect_template(value, source, result, fallback_line)
                return
            # Home Assistant accepts comma separated entity lists
            for part in value.split(","):
                self._add_entity(part.strip(), value, source, result, fallback_line)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, str):
                    self._collect_entity_values(item, source, result, fallback_line)
                else:
                    self._walk(item, source, result, fallback_line)
        elif isinstance(value, dict):
            # Scenes list their entities as mapping keys
            for key, nested in value.items():
                if isinstance(key, str) and is_valid_entity_id(key):
                    self._add_entity(key, key, source, result, fallback_line)
                    self._walk(nested, source, result, line_of(key) or fallback_line)
                else:
                    self._walk({key: nested}, source, result, fallback_line)

    def _collect_service_call(self, value: str, source: str, result: ExtractionResult,
                              fallback_line: Optional[int]) -> None:
        domain, service = split_entity_id(value.strip())
        if domain != "script" or not _OBJECT_ID_RE.match(service):
            return
        if service in self.SCRIPT_SERVICES:
            return
        result.invocations.append(
            ScriptInvocation(service, self._location(value, fallback_line), source)
        )

    def _collect_template(self, value: str, source: str, result: ExtractionResult,
                          fallback_line: Optional[int]) -> None:
        if not any(hint in value for hint in _TEMPLATE_HINTS):
            return
        for entity_id in entities_from_template(value):
            self._add_entity(entity_id, value, source, result, fallback_line)

    def _add_entity(self, entity_id: str, origin: Any, source: str, result: ExtractionResult,
                    fallback_line: Optional[int]) -> None:
        if not entity_id or should_skip(entity_id) or not is_valid_entity_id(entity_id):
            return
        location = self._location(origin, fallback_line)
        domain, object_id = split_entity_id(entity_id)
        if domain == "script" and self.scripts_as_invocations:
            result.invocations.append(ScriptInvocation(object_id, location, source))
        else:
            result.references.append(EntityReference(str(entity_id), location, source))
