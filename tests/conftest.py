"""Shared test fixtures for haguard tests."""
import json
import textwrap
from pathlib import Path

import pytest

from haguard.config.settings import load_settings

SCRIPTS = """
sonos_group_all:
  alias: Group all Sonos speakers
  sequence:
    - action: media_player.join
      target:
        entity_id: media_player.living_room
morning_routine:
  sequence:
    - action: script.sonos_group_all
    - condition: state
      entity_id: input_boolean.wekker_actief
      state: "on"
"""

AUTOMATIONS = """
- id: wake_up
  alias: Wake up
  triggers:
    - trigger: state
      entity_id: input_boolean.wekker_actief
  actions:
    - action: script.sonos_group_all
    - action: script.turn_on
      target:
        entity_id: script.morning_routine
"""

REGISTRY = [
    {
        "entity_id": "input_boolean.wekker_actief",
        "unique_id": "wekker_aan",
        "platform": "input_boolean",
        "original_name": "Wekker aan",
        "categories": {"helpers": "01HALARM"},
    },
    {
        "entity_id": "input_datetime.wekker_tijd",
        "unique_id": "wekker_tijd",
        "platform": "input_datetime",
    },
    {"entity_id": "light.kitchen", "unique_id": "hue-1", "platform": "hue"},
    {"entity_id": "media_player.living_room", "unique_id": "sonos-1", "platform": "sonos"},
    {"entity_id": "script.sonos_group_all", "unique_id": "sonos_group_all", "platform": "script"},
]

INPUT_BOOLEANS = [{"id": "wekker_aan", "name": "Wekker aan"}]
INPUT_DATETIMES = [{"id": "wekker_tijd", "name": "Wekker tijd", "category": "Alarm"}]

LOVELACE = {
    "version": 1,
    "data": {
        "config": {
            "views": [
                {
                    "title": "Home",
                    "cards": [
                        {
                            "type": "entities",
                            "entities": [
                                "light.kitchen",
                                {"entity": "input_boolean.wekker_actief"},
                            ],
                        }
                    ],
                }
            ]
        }
    },
}


def write_doc(root: Path, rel: str, content) -> Path:
    """Write a corpus document; dicts and lists are written as storage JSON."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        path.write_text(textwrap.dedent(content).lstrip("\n"))
    else:
        path.write_text(json.dumps(content, indent=4))
    return path


def storage(key: str, payload_key: str, items) -> dict:
    """Wrap records the way Home Assistant .storage files do."""
    return {"version": 1, "key": key, "data": {payload_key: items}}


@pytest.fixture
def corpus_dir(tmp_path):
    """A small, fully consistent Home Assistant configuration."""
    write_doc(tmp_path, "scripts.yaml", SCRIPTS)
    write_doc(tmp_path, "automations.yaml", AUTOMATIONS)
    write_doc(tmp_path, ".storage/core.entity_registry",
              storage("core.entity_registry", "entities", REGISTRY))
    write_doc(tmp_path, ".storage/input_boolean", storage("input_boolean", "items", INPUT_BOOLEANS))
    write_doc(tmp_path, ".storage/input_datetime",
              storage("input_datetime", "items", INPUT_DATETIMES))
    write_doc(tmp_path, ".storage/lovelace", LOVELACE)
    return tmp_path


@pytest.fixture
def settings(corpus_dir):
    return load_settings(corpus_dir)
