"""Session coordinator — phases, score and the ending for one play-through.

Phase flow:

    text_scene ──(transition trigger)──▶ transition_to_encounter
        │                                        │ (player confirms)
        └──────(fast pacing skips the screen)────┴──▶ encounter
                                                        │ (encounter ends)
                                                        ▼
    text_scene ◀────────────(restart, score → 0)──── epilogue

Every choice anywhere reports its points here; the sum is never clamped.
The ending is the first tier, checked good → neutral → bad, whose threshold
the final score reaches. Bad is the fallback.
"""

from __future__ import annotations

import asyncio
import logging

from aware.engine.driver import Sleeper
from aware.engine.epilogue import EpiloguePlayer
from aware.engine.interpreter import EncounterInterpreter, SceneInterpreter, TextSceneInterpreter
from aware.models import (
    EncounterEndings,
    EncounterScene,
    Ending,
    EndingTier,
    LText,
    Phase,
    Preferences,
    SessionSnapshot,
    TextScene,
)
from aware.pacing import delay_for_transition

logger = logging.getLogger(__name__)


def resolve_ending(score: int, endings: EncounterEndings) -> tuple[EndingTier, Ending]:
    if score >= endings.good.threshold:
        return "good", endings.good
    if score >= endings.neutral.threshold:
        return "neutral", endings.neutral
    return "bad", endings.bad


def fallback_text_scene() -> TextScene:
    return TextScene(chapter=1, scene_id="fallback", scene_type="text_message_thread", nodes=[])


def fallback_encounter() -> EncounterScene:
    def ending(threshold: int) -> Ending:
        return Ending(threshold=threshold, post_scene_label=LText.blank(), final_texts=[])

    return EncounterScene(
        chapter=1,
        scene_id="fallback",
        scene_type="in_person_interaction",
        location=LText.blank(),
        atmosphere=LText.blank(),
        nodes=[],
        endings=EncounterEndings(good=ending(14), neutral=ending(8), bad=ending(0)),
    )


class GameSession:
    """Owns the interpreters of one play-through and moves between them."""

    def __init__(
        self,
        text_scene: TextScene | None,
        encounter_scene: EncounterScene | None,
        preferences: Preferences | None = None,
        *,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if text_scene is None:
            logger.warning("Text scene missing — using an empty fallback")
            text_scene = fallback_text_scene()
        if encounter_scene is None:
            logger.warning("Encounter scene missing — using an empty fallback")
            encounter_scene = fallback_encounter()

        self.text_scene = text_scene
        self.encounter_scene = encounter_scene
        self.preferences = preferences or Preferences()
        self.phase: Phase = "text_scene"
        self.total_score = 0

        self.text = TextSceneInterpreter(text_scene, on_points=self.add_points, sleep=sleep)
        self.encounter = EncounterInterpreter(
            encounter_scene, on_points=self.add_points, on_finish=self.finish_encounter, sleep=sleep,
        )
        self.epilogue = EpiloguePlayer(sleep=sleep)

    # ------------------------------------------------------------------
    # Score and ending
    # ------------------------------------------------------------------

    def add_points(self, points: int) -> None:
        self.total_score += points

    @property
    def earned_ending(self) -> Ending:
        return resolve_ending(self.total_score, self.encounter_scene.endings)[1]

    @property
    def ending_tier(self) -> EndingTier:
        return resolve_ending(self.total_score, self.encounter_scene.endings)[0]

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    async def begin(self) -> None:
        """Play the text scene from the top."""
        self.phase = "text_scene"
        await self.text.start(self.preferences)

    async def trigger_transition(self) -> bool:
        """Leave the text scene once it is ready. Returns False when it is not."""
        if self.phase != "text_scene" or not self.text.transition_ready:
            logger.warning("Transition ignored: phase=%s ready=%s", self.phase, self.text.transition_ready)
            return False
        await self.text.cancel()
        if self.preferences.pacing == "fast":
            await self._enter_encounter()
        else:
            self.phase = "transition_to_encounter"
        return True

    async def begin_encounter(self) -> bool:
        """Player confirmed the transition screen."""
        if self.phase != "transition_to_encounter":
            logger.warning("Encounter start ignored in phase %s", self.phase)
            return False
        await self._enter_encounter()
        return True

    def finish_encounter(self) -> None:
        tier, ending = resolve_ending(self.total_score, self.encounter_scene.endings)
        logger.info("Encounter finished: score=%d tier=%s", self.total_score, tier)
        self.phase = "epilogue"
        self.epilogue.play(self.preferences, ending, tier)

    async def restart(self, preferences: Preferences | None = None) -> None:
        """Back to a clean text scene phase. Call begin() to play again."""
        await self.text.reset()
        await self.encounter.reset()
        await self.epilogue.reset()
        if preferences is not None:
            self.preferences = preferences
        self.total_score = 0
        self.phase = "text_scene"

    async def _enter_encounter(self) -> None:
        self.phase = "encounter"
        await self.encounter.start(self.preferences)

    # ------------------------------------------------------------------
    # Player input
    # ------------------------------------------------------------------

    def current_interpreter(self) -> SceneInterpreter | None:
        if self.phase == "text_scene":
            return self.text
        if self.phase == "encounter":
            return self.encounter
        return None

    async def select_choice(self, option_id: str) -> bool:
        """Select one of the currently offered options by its id."""
        interpreter = self.current_interpreter()
        if interpreter is None:
            return False
        for choice in interpreter.choices:
            if choice.tag == option_id:
                return await interpreter.select_choice(choice)
        logger.warning("Option %r is not on offer in phase %s", option_id, self.phase)
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def settle(self) -> None:
        """Wait until no driver of this session is running."""
        drivers = (self.text, self.encounter, self.epilogue)
        while any(d.active for d in drivers):
            for driver in drivers:
                await driver.wait()

    async def close(self) -> None:
        for driver in (self.text, self.encounter, self.epilogue):
            await driver.cancel()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            total_score=self.total_score,
            preferences=self.preferences,
            transition_delay=delay_for_transition(self.preferences.pacing),
            text_scene=self.text.snapshot(),
            encounter=self.encounter.snapshot(),
            epilogue=self.epilogue.snapshot(),
        )
