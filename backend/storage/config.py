"""Player preferences and scene selection (data/config.json)."""

import json
from pathlib import Path
from typing import Any, get_args

from aware.models import Language, PacingMode, Preferences

from .core import data_dir

LANGUAGES: tuple[str, ...] = get_args(Language)
PACING_MODES: tuple[str, ...] = get_args(PacingMode)

_CONFIG_DEFAULTS: dict[str, Any] = {
    "language": "en",
    "pacing": "medium",
    "text_scene": "text_scene_01",
    "encounter": "encounter_01",
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def _validate(fields: dict[str, Any]) -> None:
    if "language" in fields and fields["language"] not in LANGUAGES:
        raise ValueError(f"Unknown language {fields['language']!r} (expected one of {', '.join(LANGUAGES)})")
    if "pacing" in fields and fields["pacing"] not in PACING_MODES:
        raise ValueError(f"Unknown pacing {fields['pacing']!r} (expected one of {', '.join(PACING_MODES)})")
    for key in ("text_scene", "encounter"):
        if key in fields and not (isinstance(fields[key], str) and fields[key].strip()):
            raise ValueError(f"{key} must be a non-empty scene name")


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values.

    Stored values that are no longer valid (e.g. a removed language) fall
    back to the default instead of failing.
    """
    config = dict(_CONFIG_DEFAULTS)
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        for key in _CONFIG_DEFAULTS:
            if key not in stored:
                continue
            try:
                _validate({key: stored[key]})
            except ValueError:
                continue
            config[key] = stored[key]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge known fields into config and persist. Returns full config.

    Raises ValueError for an unknown language or pacing mode.
    """
    _validate(fields)
    config = get_config()
    for key in _CONFIG_DEFAULTS:
        if key in fields:
            config[key] = fields[key]
    _config_path().write_text(json.dumps(config, indent=2))
    return config


def get_preferences() -> Preferences:
    """Immutable snapshot of the current language and pacing."""
    config = get_config()
    return Preferences(language=config["language"], pacing=config["pacing"])
