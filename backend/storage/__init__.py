"""File-based JSON storage.

Data layout:
  data/
    config.json          Player preferences (language, pacing) + active scene names
    scenes/              User scene documents (override presets of the same name)
      <name>.json
  presets/
    scenes/              Built-in read-only scenes (merged at read time)

Preset merging: list_scenes() merges preset + user names; get_scene() and the
scene loaders read the user file first and fall back to the preset.

Config: get_config() returns defaults merged with stored values.
update_config() validates and applies partial updates.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    preset_scenes_dir,
    presets_dir,
    scenes_dir,
)

from .scenes import (  # noqa: F401
    get_repository,
    get_scene,
    list_scenes,
    load_encounter,
    load_text_scene,
)

from .config import (  # noqa: F401
    LANGUAGES,
    PACING_MODES,
    get_config,
    get_preferences,
    update_config,
)
