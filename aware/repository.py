"""JSON scene repository.

Scenes are flat JSON files named after the scene. Two directories are searched,
user data first, then the built-in presets, so a user file overrides the preset
of the same name:

    {base}/
      {name}.json          ← user scenes
    {presets}/
      {name}.json          ← built-in, read-only

A scene that is missing, unreadable or does not validate is reported as None;
the session falls back to an empty scene in that case.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from aware.models import EncounterScene, TextScene

logger = logging.getLogger(__name__)

SceneT = TypeVar("SceneT", bound=BaseModel)


class SceneRepository:
    def __init__(self, base_path: Path, presets_path: Path | None = None) -> None:
        self._base = base_path
        self._presets = presets_path

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _dirs(self) -> list[Path]:
        dirs = [self._base]
        if self._presets is not None:
            dirs.append(self._presets)
        return dirs

    def _find(self, name: str) -> Path | None:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            return None
        for directory in self._dirs():
            path = directory / f"{name}.json"
            if path.is_file():
                return path
        return None

    def _load(self, model: type[SceneT], name: str) -> SceneT | None:
        path = self._find(name)
        if path is None:
            logger.warning("Scene %r not found", name)
            return None
        try:
            return model.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Scene %r could not be loaded from %s: %s", name, path, e)
            return None

    # ------------------------------------------------------------------
    # Scenes
    # ------------------------------------------------------------------

    def load_text_scene(self, name: str) -> TextScene | None:
        return self._load(TextScene, name)

    def load_encounter(self, name: str) -> EncounterScene | None:
        return self._load(EncounterScene, name)

    def get_raw(self, name: str) -> dict[str, Any] | None:
        """Return the stored document as-is, for clients that render it themselves."""
        path = self._find(name)
        if path is None:
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Scene %r is not valid JSON: %s", name, e)
            return None

    def list_scenes(self) -> list[str]:
        """Scene names across user data and presets, sorted, without duplicates."""
        names: set[str] = set()
        for directory in self._dirs():
            if directory.is_dir():
                names.update(p.stem for p in directory.glob("*.json"))
        return sorted(names)

