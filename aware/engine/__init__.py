"""Scene-driving engine.

Drivers (interpreters and the epilogue) are cooperative asyncio tasks that
emit SceneEvents into an append-only log and wait between emissions through
an injected sleeper. The GameSession owns one of each and moves the player
through the phases:

  1. Text scene — message thread with choices; ends ready to transition.
  2. Transition screen — skipped under fast pacing.
  3. Encounter — location header, dialogue with choices; ends the play-through.
  4. Epilogue — the ending tier earned by the total score.

Outside readers only ever see snapshots (InterpreterSnapshot, SessionSnapshot).
"""

from .driver import CancelToken, Driver, DriverCancelled, Sleeper  # noqa: F401
from .epilogue import EpiloguePlayer  # noqa: F401
from .interpreter import (  # noqa: F401
    EncounterInterpreter,
    SceneInterpreter,
    TextSceneInterpreter,
)
from .session import (  # noqa: F401
    GameSession,
    fallback_encounter,
    fallback_text_scene,
    resolve_ending,
)
