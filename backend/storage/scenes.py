"""Scene documents: user scenes under data/scenes/, presets under presets/scenes/."""

from typing import Any

from aware.models import EncounterScene, TextScene
from aware.repository import SceneRepository

from .core import preset_scenes_dir, scenes_dir


def get_repository() -> SceneRepository:
    return SceneRepository(scenes_dir(), preset_scenes_dir())


def list_scenes() -> list[str]:
    return get_repository().list_scenes()


def get_scene(name: str) -> dict[str, Any] | None:
    return get_repository().get_raw(name)


def load_text_scene(name: str) -> TextScene | None:
    return get_repository().load_text_scene(name)


def load_encounter(name: str) -> EncounterScene | None:
    return get_repository().load_encounter(name)
