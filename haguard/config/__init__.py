"""Corpus settings and document loading."""
from haguard.config.loader import CorpusLoader, load_corpus
from haguard.config.settings import CorpusSettings, load_settings
from haguard.models.errors import ConfigValidationError, CorpusUnreadable

__all__ = [
    'ConfigValidationError',
    'CorpusLoader',
    'CorpusSettings',
    'CorpusUnreadable',
    'load_corpus',
    'load_settings',
]
