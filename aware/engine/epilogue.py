"""Epilogue playback — the earned ending, one final text at a time."""

from __future__ import annotations

import asyncio
import logging

from aware.engine.driver import CancelToken, Driver, Sleeper
from aware.models import Ending, EndingTier, EpilogueSnapshot, Preferences, SceneEvent
from aware.pacing import delay_for_epilogue, delay_for_text

logger = logging.getLogger(__name__)

CLOSING_BEAT = 0.6


class EpiloguePlayer(Driver):
    def __init__(self, *, sleep: Sleeper = asyncio.sleep) -> None:
        super().__init__(sleep=sleep)
        self.tier: EndingTier | None = None
        self.restart_ready = False

    def play(self, preferences: Preferences, ending: Ending, tier: EndingTier) -> None:
        """Start playing `ending`. Replaces any playback still in progress."""
        self.tier = tier
        self.restart_ready = False
        self.events = []
        self._record(SceneEvent(kind="system", text=ending.post_scene_label.resolve(preferences.language)))
        logger.debug("epilogue: tier=%s texts=%d", tier, len(ending.final_texts))

        async def run(token: CancelToken) -> None:
            await self._pause(token, delay_for_epilogue(preferences.pacing))
            for final_text in ending.final_texts:
                text = final_text.resolve(preferences.language)
                await self._pause(token, delay_for_text(preferences.pacing, len(text)))
                self._emit(token, "ending", text, tier=tier)
            await self._pause(token, CLOSING_BEAT)
            self.restart_ready = True

        self._spawn(run)

    async def reset(self) -> None:
        await self.cancel()
        self.tier = None
        self.restart_ready = False
        self.events = []

    def snapshot(self) -> EpilogueSnapshot:
        return EpilogueSnapshot(tier=self.tier, events=list(self.events), restart_ready=self.restart_ready)
