"""Typed records parsed from a Home Assistant configuration corpus."""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

HELPER_DOMAINS = (
    "input_boolean",
    "input_button",
    "input_datetime",
    "input_number",
    "input_select",
    "input_text",
    "counter",
    "timer",
    "schedule",
)

# Always present, never listed in the entity registry
BUILTIN_ENTITIES = frozenset({"sun.sun", "zone.home"})

# Registry scope under which helper categories are stored
HELPER_CATEGORY_SCOPE = "helpers"


def split_entity_id(entity_id: str) -> Tuple[str, str]:
    """Split ``domain.object_id`` into its two parts."""
    domain, _, object_id = entity_id.partition(".")
    return domain, object_id


@dataclass(frozen=True)
class Location:
    """Position of a value inside a corpus document (1-based line)."""

    file: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"

    def to_dict(self) -> Dict[str, object]:
        return {"file": self.file, "line": self.line}


@dataclass(frozen=True)
class ScriptDefinition:
    """A script declared in a scripts document."""

    script_id: str
    location: Location


@dataclass(frozen=True)
class ScriptInvocation:
    """A call to ``script.<script_id>`` from an automation or script."""

    script_id: str
    location: Location
    source: str


@dataclass(frozen=True)
class EntityReference:
    """A ``domain.object_id`` reference found in a document."""

    entity_id: str
    location: Location
    source: str

    @property
    def domain(self) -> str:
        return split_entity_id(self.entity_id)[0]

    @property
    def object_id(self) -> str:
        return split_entity_id(self.entity_id)[1]


class HelperDefinition(BaseModel):
    """A helper record from a per-domain helper registry document."""

    model_config = ConfigDict(extra='ignore', frozen=True, populate_by_name=True)

    domain: str
    helper_id: str = Field(..., alias="id")
    name: Optional[str] = None
    category: Optional[str] = None

    @field_validator('helper_id')
    @classmethod
    def validate_helper_id(cls, v):
        if not v.strip():
            raise ValueError("Helper id cannot be empty")
        return v

    @field_validator('category')
    @classmethod
    def blank_category_is_none(cls, v):
        if v is not None and not str(v).strip():
            return None
        return v

    @property
    def entity_id(self) -> str:
        """Identifier the helper was created with, before any rename."""
        return f"{self.domain}.{self.helper_id}"


class EntityRegistryEntry(BaseModel):
    """Maps a stable ``unique_id`` to the live ``entity_id``."""

    model_config = ConfigDict(extra='ignore', frozen=True)

    entity_id: str
    unique_id: str
    original_name: Optional[str] = None
    name: Optional[str] = None
    platform: Optional[str] = None
    disabled_by: Optional[str] = None
    categories: Dict[str, str] = Field(default_factory=dict)

    @field_validator('entity_id')
    @classmethod
    def validate_entity_id(cls, v):
        domain, object_id = split_entity_id(v)
        if not domain or not object_id:
            raise ValueError(f"entity_id '{v}' must look like domain.object_id")
        return v

    @field_validator('unique_id', mode='before')
    @classmethod
    def coerce_unique_id(cls, v):
        # Some integrations register numeric unique ids
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('categories', mode='before')
    @classmethod
    def none_categories_is_empty(cls, v):
        return v or {}

    @property
    def domain(self) -> str:
        return split_entity_id(self.entity_id)[0]

    @property
    def is_disabled(self) -> bool:
        return self.disabled_by is not None


@dataclass(frozen=True)
class Corpus:
    """Immutable snapshot of everything one validation run looks at."""

    root: str
    script_definitions: Tuple[ScriptDefinition, ...] = ()
    script_invocations: Tuple[ScriptInvocation, ...] = ()
    helper_references: Tuple[EntityReference, ...] = ()
    dashboard_references: Tuple[EntityReference, ...] = ()
    helpers: Tuple[HelperDefinition, ...] = ()
    registry: Tuple[EntityRegistryEntry, ...] = ()
    helper_domains: Tuple[str, ...] = HELPER_DOMAINS
    _live_ids: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, '_live_ids', frozenset(entry.entity_id for entry in self.registry)
        )

    @property
    def defined_script_ids(self) -> FrozenSet[str]:
        return frozenset(definition.script_id for definition in self.script_definitions)

    @property
    def live_entity_ids(self) -> FrozenSet[str]:
        """Every live entity id in the registry, across all domains."""
        return self._live_ids

    def registry_by_unique_id(self) -> Dict[Tuple[str, str], EntityRegistryEntry]:
        """Index registry entries by ``(domain, unique_id)``."""
        return {(entry.domain, entry.unique_id): entry for entry in self.registry}
