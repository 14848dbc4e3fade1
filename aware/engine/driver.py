"""Cooperative driver base shared by the scene interpreters and the epilogue.

A driver owns at most one asyncio task at a time. Every task gets a fresh
CancelToken; spawning a new task flips the previous token first, so a driver
that is still unwinding can never emit another event. All waits go through an
injected sleeper:

    async def __call__(self, seconds: float) -> None: ...

Production uses asyncio.sleep. Tests pass a recording clock instead.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from aware.models import EndingTier, EventKind, SceneEvent

logger = logging.getLogger(__name__)


class Sleeper(Protocol):
    async def __call__(self, seconds: float) -> None: ...


EventListener = Callable[[SceneEvent], None]


class DriverCancelled(Exception):
    """Raised inside a driver whose token was cancelled. A normal exit path."""


class CancelToken:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def check(self) -> None:
        if self.cancelled:
            raise DriverCancelled()


class Driver:
    """Event log + single-task ownership + token-checked waits."""

    def __init__(self, *, sleep: Sleeper = asyncio.sleep) -> None:
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._token = CancelToken()
        self._listeners: list[EventListener] = []
        self.events: list[SceneEvent] = []

    # ------------------------------------------------------------------
    # Task ownership
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def cancel(self) -> None:
        """Stop the current driver task and wait until it has unwound."""
        self._token.cancel()
        task, self._task = self._task, None
        if task is None or task is asyncio.current_task():
            return
        if not task.done():
            task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def wait(self) -> None:
        """Wait for the current driver task, including any task it hands over to."""
        while self._task is not None and not self._task.done():
            await asyncio.gather(self._task, return_exceptions=True)

    def _spawn(self, run: Callable[[CancelToken], Awaitable[None]]) -> None:
        self._token.cancel()
        if self._task is not None and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()
        token = self._token = CancelToken()
        self._task = asyncio.get_running_loop().create_task(self._guard(run, token))

    async def _guard(self, run: Callable[[CancelToken], Awaitable[None]], token: CancelToken) -> None:
        try:
            await run(token)
        except DriverCancelled:
            logger.debug("%s driver cancelled", type(self).__name__)

    # ------------------------------------------------------------------
    # Emission and waits
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def _record(self, event: SceneEvent) -> None:
        self.events.append(event)
        for listener in self._listeners:
            listener(event)

    def _emit(self, token: CancelToken, kind: EventKind, text: str, tier: EndingTier | None = None) -> None:
        token.check()
        self._record(SceneEvent(kind=kind, text=text, tier=tier))

    async def _pause(self, token: CancelToken, seconds: float) -> None:
        token.check()
        await self._sleep(max(seconds, 0.0))
        token.check()
