"""Corpus settings: where the documents of one corpus live."""
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from haguard.models.corpus import HELPER_DOMAINS
from haguard.models.errors import ConfigValidationError

SETTINGS_FILENAMES = ("haguard.yml", "haguard.yaml")


def _default_helpers() -> Dict[str, str]:
    return {domain: f".storage/{domain}" for domain in HELPER_DOMAINS}


class CorpusSettings(BaseModel):
    """Explicit locations of the corpus documents.

    Paths and glob patterns are relative to ``root``. Nothing here is read
    from the environment or the current working directory.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    root: Path
    automations: List[str] = Field(default_factory=lambda: ["automations.yaml"])
    scripts: List[str] = Field(default_factory=lambda: ["scripts.yaml"])
    entity_registry: str = ".storage/core.entity_registry"
    helpers: Dict[str, str] = Field(default_factory=_default_helpers)
    dashboards: List[str] = Field(
        default_factory=lambda: [".storage/lovelace", ".storage/lovelace.*", "dashboards/*.yaml"]
    )

    @field_validator('automations', 'scripts', 'dashboards', mode='before')
    @classmethod
    def single_pattern_to_list(cls, v):
        if isinstance(v, str):
            return [v]
        return v

    @field_validator('helpers')
    @classmethod
    def validate_helper_domains(cls, v):
        for domain in v:
            if domain not in HELPER_DOMAINS:
                raise ValueError(
                    f"Unknown helper domain '{domain}'. "
                    f"Valid domains: {', '.join(HELPER_DOMAINS)}"
                )
        return v

    @property
    def helper_domains(self) -> List[str]:
        """Configured helper domains, in canonical order."""
        return [domain for domain in HELPER_DOMAINS if domain in self.helpers]

    def resolve(self, pattern: str) -> List[Path]:
        """Existing files matching ``pattern`` under the root, sorted."""
        if any(char in pattern for char in "*?["):
            return sorted(path for path in self.root.glob(pattern) if path.is_file())
        path = self.root / pattern
        return [path] if path.is_file() else []

    def resolve_all(self, patterns: List[str]) -> List[Path]:
        seen = set()
        paths: List[Path] = []
        for pattern in patterns:
            for path in self.resolve(pattern):
                if path not in seen:
                    seen.add(path)
                    paths.append(path)
        return paths

    def relative(self, path: Path) -> str:
        """Path as shown in findings (relative to the root, POSIX separators)."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()


def find_settings_file(root: Path) -> Optional[Path]:
    for name in SETTINGS_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_settings(
    root: Union[str, Path],
    settings_file: Optional[Union[str, Path]] = None,
) -> CorpusSettings:
    """Build settings for the corpus at ``root``.

    Values from ``settings_file`` (or ``haguard.yml`` in the root, when
    present) override the defaults.

    Raises:
        ConfigValidationError: If the settings file is missing, unparsable or invalid
    """
    root_path = Path(root)
    if settings_file is not None:
        source = Path(settings_file)
        if not source.is_file():
            raise ConfigValidationError(f"Settings file not found: {source}")
    else:
        source = find_settings_file(root_path)

    overrides = {}
    if source is not None:
        try:
            with open(source, "r", encoding="utf-8") as f:
                overrides = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"Settings file {source} is not valid YAML: {exc}") from exc

        if not isinstance(overrides, dict):
            raise ConfigValidationError(f"Settings file {source} must contain a mapping")
        if 'root' in overrides:
            raise ConfigValidationError(
                f"Settings file {source} cannot set 'root'; pass the corpus root explicitly"
            )
        if isinstance(overrides.get('helpers'), dict):
            # Listed domains move; the others keep their default documents
            overrides['helpers'] = {**_default_helpers(), **overrides['helpers']}

    try:
        return CorpusSettings(root=root_path, **overrides)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid settings in {source}:\n{exc}") from exc
