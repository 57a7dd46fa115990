"""Exceptions raised while reading a corpus or its settings."""
from pathlib import Path
from typing import Optional, Union


class ConfigValidationError(Exception):
    """Raised when the haguard settings file is invalid."""


class CorpusUnreadable(Exception):
    """A corpus document could not be parsed into its expected structure.

    This is a hard stop: validation never runs on a partially read corpus,
    and the problem is not reported as a finding.
    """

    def __init__(self, path: Optional[Union[str, Path]], reason: str):
        self.path = str(path) if path is not None else None
        self.reason = reason
        if self.path:
            super().__init__(f"{self.path}: {reason}")
        else:
            super().__init__(reason)
