"""Data models for haguard."""
from haguard.models.corpus import (
    BUILTIN_ENTITIES,
    HELPER_DOMAINS,
    Corpus,
    EntityReference,
    EntityRegistryEntry,
    HelperDefinition,
    Location,
    ScriptDefinition,
    ScriptInvocation,
)
from haguard.models.errors import ConfigValidationError, CorpusUnreadable
from haguard.models.report import CheckName, Finding, FindingKind, Severity, ValidationReport

__all__ = [
    'BUILTIN_ENTITIES',
    'HELPER_DOMAINS',
    'CheckName',
    'ConfigValidationError',
    'Corpus',
    'CorpusUnreadable',
    'EntityReference',
    'EntityRegistryEntry',
    'Finding',
    'FindingKind',
    'HelperDefinition',
    'Location',
    'ScriptDefinition',
    'ScriptInvocation',
    'Severity',
    'ValidationReport',
]
