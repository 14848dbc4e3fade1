"""Scene interpreter — walks a scene's node list and emits timed events.

One interpreter per scene. The walk:

  1. start() clears the log, emits any header events, and spawns the driver.
  2. The driver inspects the node at the current index:
       narrative_block  → narrative event, wait, next node
       message_block    → (typing) text messages, then transition / choice / next
       dialogue_block   → action, (thinking) spoken lines, then choice / next
       player_choice    → expose the options and stop (awaiting_choice)
       system_event     → text scenes show a label and go on; otherwise the scene ends
       anything else    → skipped
  3. select_choice() records the player's line, reports the points, plays the
     option's branch content and resumes the walk after the choice node. A
     transition marker block right after the choice is not played; the text
     scene goes straight to transition_ready.
  4. Running off the end of the node list ends the scene.

A block followed directly by a player_choice hands over to the choice without
another pass through the loop, so the options show as soon as the block is done.

Text-message scenes additionally stop at the "transition_to_encounter" marker
and wait for an outside trigger instead of ending (transition_ready).
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Literal

from aware.engine.driver import CancelToken, Driver, Sleeper
from aware.models import (
    TRANSITION_MARKER,
    ActiveChoice,
    ChoiceOption,
    DialogueBlock,
    EncounterScene,
    EventKind,
    InterpreterSnapshot,
    InterpreterState,
    MessageBlock,
    NarrativeBlock,
    Node,
    PlayerChoice,
    Preferences,
    SceneEvent,
    SystemEvent,
    TextScene,
)
from aware.pacing import (
    delay_for_intro,
    delay_for_marker,
    delay_for_reaction,
    delay_for_scripted_response,
    delay_for_text,
    delays_for_label,
)

logger = logging.getLogger(__name__)

PointsCallback = Callable[[int], None]

# Fixed beats, in seconds
ACTION_BEAT = 0.4
NPC_LINE_BEAT = 0.4
PLAYER_LINE_BEAT = 0.15
MESSAGE_TRAILING_BEAT = 0.2
DIALOGUE_TRAILING_BEAT = 0.3
BRANCH_MESSAGE_BEAT = 0.25
BRANCH_NARRATIVE_BEAT = 0.5
BRANCH_LINE_BEAT = 0.5
AFTER_BRANCH_BEAT = 0.4

# Reaction waits above these show the thinking indicator; shorter ones pass silently.
DIALOGUE_THINKING_THRESHOLD = 0.5
BRANCH_THINKING_THRESHOLD = 0.4


class SceneInterpreter(Driver, ABC):
    """Shared node walk. Subclasses decide headers, branch playback and endings."""

    suspension: Literal["typing", "thinking"] = "typing"
    stops_at_transition = False
    labels_continue = False

    def __init__(
        self,
        nodes: list[Node],
        *,
        on_points: PointsCallback | None = None,
        on_finish: Callable[[], None] | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        super().__init__(sleep=sleep)
        self._nodes = list(nodes)
        self._on_points = on_points
        self._on_finish = on_finish
        self._prefs = Preferences()
        self._finished = False
        self.state: InterpreterState = "idle"
        self.node_index = 0
        self.choices: list[ActiveChoice] = []
        self.suspended = False
        self.transition_ready = False

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    async def start(self, preferences: Preferences) -> None:
        """(Re)start the scene from node 0 with a fixed preferences snapshot."""
        await self.reset()
        self._prefs = preferences
        self.state = "running"
        for kind, text in self._header():
            self._record_text(kind, text)
        self._spawn(self._open)

    async def reset(self) -> None:
        await self.cancel()
        self._finished = False
        self.state = "idle"
        self.node_index = 0
        self.events = []
        self.choices = []
        self.suspended = False
        self.transition_ready = False

    async def select_choice(self, choice: ActiveChoice) -> bool:
        """Apply the player's choice. Returns False if no choice is pending."""
        if self.state != "awaiting_choice":
            logger.warning(
                "%s: choice %r ignored in state %s", type(self).__name__, choice.tag, self.state,
            )
            return False

        # Claimed before the first await so a concurrent call sees no pending choice
        self.choices = []
        self.state = "running"
        node = self._nodes[self.node_index]
        option = node.find_option(choice.tag) if isinstance(node, PlayerChoice) else None

        await self.cancel()
        self._record_text("player", choice.text)
        if self._on_points is not None:
            self._on_points(choice.points)
        if option is None:
            logger.warning(
                "Choice %r matches no option on node %r — continuing without branch",
                choice.tag, node.id,
            )

        async def resume(token: CancelToken) -> None:
            if option is not None:
                await self._play_branch(token, option)
            self.node_index += 1
            following = self._nodes[self.node_index] if self.node_index < len(self._nodes) else None
            if (
                self.stops_at_transition
                and isinstance(following, MessageBlock)
                and following.system_event == TRANSITION_MARKER
            ):
                await self._ready_to_transition(token)
                return
            await self._drive(token)

        self._spawn(resume)
        return True

    def snapshot(self) -> InterpreterSnapshot:
        return InterpreterSnapshot(
            state=self.state,
            node_index=self.node_index,
            events=list(self.events),
            choices=list(self.choices),
            typing=self.suspended and self.suspension == "typing",
            thinking=self.suspended and self.suspension == "thinking",
            transition_ready=self.transition_ready,
        )

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _header(self) -> list[tuple[EventKind, str]]:
        return []

    def _intro_delay(self) -> float:
        return 0.0

    @abstractmethod
    async def _play_branch(self, token: CancelToken, option: ChoiceOption) -> None:
        """Play the content attached to the chosen option."""

    # ------------------------------------------------------------------
    # The walk
    # ------------------------------------------------------------------

    async def _open(self, token: CancelToken) -> None:
        delay = self._intro_delay()
        if delay > 0:
            await self._pause(token, delay)
        await self._drive(token)

    async def _drive(self, token: CancelToken) -> None:
        while self.node_index < len(self._nodes):
            token.check()
            node = self._nodes[self.node_index]
            logger.debug("node %d: %s %s", self.node_index, node.type, node.id)

            if isinstance(node, NarrativeBlock):
                await self._play_narrative(token, node)
                self.node_index += 1

            elif isinstance(node, (MessageBlock, DialogueBlock)):
                if isinstance(node, MessageBlock):
                    await self._play_message_block(token, node)
                    if self.stops_at_transition and node.system_event == TRANSITION_MARKER:
                        await self._ready_to_transition(token)
                        return
                    await self._pause(token, MESSAGE_TRAILING_BEAT)
                else:
                    await self._play_dialogue_block(token, node)
                    await self._pause(token, DIALOGUE_TRAILING_BEAT)

                following = self._peek()
                if isinstance(following, PlayerChoice) and following.options:
                    self.node_index += 1
                    self._await_choice(token, following)
                    return
                self.node_index += 1

            elif isinstance(node, PlayerChoice):
                if not node.options:
                    logger.warning("Choice node %r has no options — skipped", node.id)
                    self.node_index += 1
                    continue
                self._await_choice(token, node)
                return

            elif isinstance(node, SystemEvent):
                if self.stops_at_transition and node.event == TRANSITION_MARKER:
                    await self._ready_to_transition(token)
                    return
                if node.label is None or not self.labels_continue:
                    self._finish(token)
                    return
                await self._play_label(token, node)
                self.node_index += 1

            else:
                logger.warning("Unknown node type %r at index %d — skipped", node.type, self.node_index)
                self.node_index += 1

        self._finish(token)

    def _peek(self) -> Node | None:
        index = self.node_index + 1
        return self._nodes[index] if index < len(self._nodes) else None

    # ------------------------------------------------------------------
    # Node playback
    # ------------------------------------------------------------------

    async def _play_narrative(self, token: CancelToken, node: NarrativeBlock) -> None:
        if node.description is None:
            return
        text = node.description.resolve(self._prefs.language)
        self._emit(token, "narrative", text)
        await self._pause(token, delay_for_text(self._prefs.pacing, len(text)))

    async def _play_message_block(self, token: CancelToken, node: MessageBlock) -> None:
        texts = self._resolve_all(node.messages)
        if not texts:
            return
        pacing = self._prefs.pacing
        if node.is_player:
            await self._emit_lines(token, "player", texts, PLAYER_LINE_BEAT)
            scripted = delay_for_scripted_response(pacing, node.response_delay_ms)
            if scripted > 0:
                await self._wait_suspended(token, scripted)
        else:
            await self._wait_suspended(token, delay_for_text(pacing, sum(len(t) for t in texts)))
            await self._emit_lines(token, "npc", texts, NPC_LINE_BEAT)

    async def _play_dialogue_block(self, token: CancelToken, node: DialogueBlock) -> None:
        lang = self._prefs.language
        if node.narrative_action is not None:
            self._emit(token, "action", node.narrative_action.resolve(lang))
            await self._pause(token, ACTION_BEAT)

        if not node.is_player and node.reaction_delay_ms is not None:
            delay = delay_for_reaction(self._prefs.pacing, node.reaction_delay_ms)
            await self._wait_suspended(token, delay, threshold=DIALOGUE_THINKING_THRESHOLD)

        kind: EventKind = "player" if node.is_player else "npc"
        await self._emit_lines(token, kind, self._resolve_all(node.lines), NPC_LINE_BEAT)

    async def _play_label(self, token: CancelToken, node: SystemEvent) -> None:
        before, after = delays_for_label(self._prefs.pacing)
        await self._pause(token, before)
        self._emit(token, "system", node.label.resolve(self._prefs.language))
        await self._pause(token, after)

    # ------------------------------------------------------------------
    # Suspension points
    # ------------------------------------------------------------------

    def _await_choice(self, token: CancelToken, node: PlayerChoice) -> None:
        token.check()
        lang = self._prefs.language
        self.choices = [
            ActiveChoice(tag=o.option_id, text=o.text.resolve(lang), points=o.points)
            for o in node.options or []
        ]
        self.state = "awaiting_choice"

    async def _ready_to_transition(self, token: CancelToken) -> None:
        await self._pause(token, delay_for_marker(self._prefs.pacing))
        self.transition_ready = True
        self.state = "transition_ready"

    def _finish(self, token: CancelToken) -> None:
        token.check()
        self.state = "terminal"
        if self._finished:
            return
        self._finished = True
        if self.stops_at_transition:
            self.transition_ready = True
        logger.debug("%s finished at node %d", type(self).__name__, self.node_index)
        if self._on_finish is not None:
            self._on_finish()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record_text(self, kind: EventKind, text: str) -> None:
        self._record(SceneEvent(kind=kind, text=text))

    def _resolve_all(self, texts) -> list[str]:
        return [t.resolve(self._prefs.language) for t in texts or []]

    async def _emit_lines(self, token: CancelToken, kind: EventKind, texts: list[str], beat: float) -> None:
        for i, text in enumerate(texts):
            self._emit(token, kind, text)
            if i < len(texts) - 1:
                await self._pause(token, beat)

    async def _wait_suspended(self, token: CancelToken, seconds: float, threshold: float = 0.0) -> None:
        if seconds <= threshold:
            await self._pause(token, seconds)
            return
        self.suspended = True
        try:
            await self._pause(token, seconds)
        finally:
            self.suspended = False


class TextSceneInterpreter(SceneInterpreter):
    """Text-message thread. Ends by offering the move to the encounter."""

    suspension = "typing"
    stops_at_transition = True
    labels_continue = True

    def __init__(self, scene: TextScene, **kwargs) -> None:
        super().__init__(scene.nodes, **kwargs)
        self.scene = scene

    async def _play_branch(self, token: CancelToken, option: ChoiceOption) -> None:
        lang, pacing = self._prefs.language, self._prefs.pacing
        if option.branch_narrative is not None:
            self._emit(token, "action", option.branch_narrative.resolve(lang))
            await self._pause(token, BRANCH_NARRATIVE_BEAT)

        texts = self._resolve_all(option.branch_lines)
        if texts:
            if option.reaction_delay_ms:
                delay = delay_for_reaction(pacing, option.reaction_delay_ms)
            else:
                delay = delay_for_text(pacing, sum(len(t) for t in texts))
            await self._wait_suspended(token, delay)
            for text in texts:
                await self._pause(token, BRANCH_MESSAGE_BEAT)
                self._emit(token, "npc", text)

        await self._pause(token, AFTER_BRANCH_BEAT)


class EncounterInterpreter(SceneInterpreter):
    """In-person encounter. Opens with the location header; its end closes the play-through."""

    suspension = "thinking"

    def __init__(self, scene: EncounterScene, **kwargs) -> None:
        super().__init__(scene.nodes, **kwargs)
        self.scene = scene

    def _header(self) -> list[tuple[EventKind, str]]:
        lang = self._prefs.language
        return [
            ("system", self.scene.location.resolve(lang)),
            ("action", self.scene.atmosphere.resolve(lang)),
        ]

    def _intro_delay(self) -> float:
        return delay_for_intro(self._prefs.pacing)

    async def _play_branch(self, token: CancelToken, option: ChoiceOption) -> None:
        lang = self._prefs.language
        delay = delay_for_reaction(self._prefs.pacing, option.reaction_delay_ms)
        await self._wait_suspended(token, delay, threshold=BRANCH_THINKING_THRESHOLD)

        if option.branch_narrative is not None:
            self._emit(token, "action", option.branch_narrative.resolve(lang))
            await self._pause(token, BRANCH_NARRATIVE_BEAT)

        await self._emit_lines(token, "npc", self._resolve_all(option.branch_lines), BRANCH_LINE_BEAT)
        await self._pause(token, AFTER_BRANCH_BEAT)
