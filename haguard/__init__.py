"""haguard - reference checks for Home Assistant configuration repositories."""
from haguard.config.loader import CorpusLoader, load_corpus
from haguard.config.settings import CorpusSettings, load_settings
from haguard.core.reference_validator import ReferenceValidator, validate, validate_corpus
from haguard.models.errors import ConfigValidationError, CorpusUnreadable
from haguard.models.report import Finding, Severity, ValidationReport

__version__ = "0.3.0"

__all__ = [
    'ConfigValidationError',
    'CorpusLoader',
    'CorpusSettings',
    'CorpusUnreadable',
    'Finding',
    'ReferenceValidator',
    'Severity',
    'ValidationReport',
    'load_corpus',
    'load_settings',
    'validate',
    'validate_corpus',
]
