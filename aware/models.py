"""Core domain models.

Scene documents, player preferences, and everything the engine hands to the
outside world. Pydantic is used for validation and serialisation at every data
boundary; the field names are the snake_case keys of the scene JSON files.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Discriminator, Field, Tag

Language = Literal["en", "it", "ka", "fa"]
PacingMode = Literal["fast", "medium", "native"]

PLAYER = "Player"
TRANSITION_MARKER = "transition_to_encounter"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class LText(_Frozen):
    """One string per supported language."""

    en: str
    it: str
    ka: str
    fa: str

    def resolve(self, lang: Language) -> str:
        return getattr(self, lang)

    @classmethod
    def blank(cls) -> LText:
        return cls(en="", it="", ka="", fa="")


class Preferences(_Frozen):
    """Read-only snapshot of the player's settings for one run."""

    language: Language = "en"
    pacing: PacingMode = "medium"


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

class ChoiceOption(_Frozen):
    """A selectable branch of a player_choice node.

    Text scenes store the delay hint as ``response_delay_ms`` and follow-up
    lines as ``branch_messages``; encounters use ``reaction_delay_ms`` and
    ``branch_lines``. Both spellings load into the same fields.
    """

    option_id: str
    text: LText
    points: int
    reaction_delay_ms: int | None = Field(
        default=None,
        validation_alias=AliasChoices("reaction_delay_ms", "response_delay_ms"),
    )
    branch_narrative: LText | None = None
    branch_lines: list[LText] | None = Field(
        default=None,
        validation_alias=AliasChoices("branch_lines", "branch_messages"),
    )

    @property
    def has_branch(self) -> bool:
        return self.branch_narrative is not None or bool(self.branch_lines)


class NarrativeBlock(_Frozen):
    id: str
    type: Literal["narrative_block"] = "narrative_block"
    description: LText | None = None


class MessageBlock(_Frozen):
    """A run of text messages from one sender (text-message threads)."""

    id: str
    type: Literal["message_block"] = "message_block"
    sender: str | None = None
    messages: list[LText] | None = None
    response_delay_ms: int | None = None
    system_event: str | None = None

    @property
    def is_player(self) -> bool:
        return self.sender == PLAYER


class DialogueBlock(_Frozen):
    """Spoken lines from one speaker (in-person encounters)."""

    id: str
    type: Literal["dialogue_block"] = "dialogue_block"
    speaker: str | None = None
    lines: list[LText] | None = None
    narrative_action: LText | None = None
    reaction_delay_ms: int | None = None

    @property
    def is_player(self) -> bool:
        return self.speaker == PLAYER


class PlayerChoice(_Frozen):
    id: str
    type: Literal["player_choice"] = "player_choice"
    options: list[ChoiceOption] | None = None

    def find_option(self, option_id: str) -> ChoiceOption | None:
        for option in self.options or []:
            if option.option_id == option_id:
                return option
        return None


class SystemEvent(_Frozen):
    id: str
    type: Literal["system_event"] = "system_event"
    event: str | None = None
    label: LText | None = None


class UnknownNode(BaseModel):
    """Any node whose type the engine does not know. Skipped at run time."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = ""
    type: str = ""


_KNOWN_NODE_TYPES = {
    "narrative_block", "message_block", "dialogue_block",
    "player_choice", "system_event",
}


def _node_tag(value: Any) -> str:
    if isinstance(value, dict):
        node_type = value.get("type")
    else:
        node_type = getattr(value, "type", None)
    return node_type if node_type in _KNOWN_NODE_TYPES else "unknown"


Node = Annotated[
    Union[
        Annotated[NarrativeBlock, Tag("narrative_block")],
        Annotated[MessageBlock, Tag("message_block")],
        Annotated[DialogueBlock, Tag("dialogue_block")],
        Annotated[PlayerChoice, Tag("player_choice")],
        Annotated[SystemEvent, Tag("system_event")],
        Annotated[UnknownNode, Tag("unknown")],
    ],
    Discriminator(_node_tag),
]


# ---------------------------------------------------------------------------
# Scenes
# ---------------------------------------------------------------------------

class TextScene(_Frozen):
    """A text-message thread."""

    chapter: int
    scene_id: str
    scene_type: str
    characters: list[str] = Field(default_factory=list)
    nodes: list[Node] = Field(default_factory=list)


class Ending(_Frozen):
    threshold: int
    post_scene_label: LText
    final_texts: list[LText] = Field(default_factory=list)


class EncounterEndings(_Frozen):
    good: Ending
    neutral: Ending
    bad: Ending


class EncounterScene(_Frozen):
    """An in-person encounter, closed by an ending table."""

    chapter: int
    scene_id: str
    scene_type: str
    location: LText
    atmosphere: LText
    nodes: list[Node] = Field(default_factory=list)
    endings: EncounterEndings


# ---------------------------------------------------------------------------
# Engine output
# ---------------------------------------------------------------------------

EventKind = Literal["npc", "player", "narrative", "action", "system", "ending"]
EndingTier = Literal["good", "neutral", "bad"]
InterpreterState = Literal[
    "idle", "running", "awaiting_choice", "transition_ready", "terminal",
]
Phase = Literal["text_scene", "transition_to_encounter", "encounter", "epilogue"]


class SceneEvent(_Frozen):
    """One entry of an interpreter's append-only event log."""

    kind: EventKind
    text: str
    tier: EndingTier | None = None  # present on ending events only


class ActiveChoice(_Frozen):
    """An option as offered to the player, already localized."""

    tag: str
    text: str
    points: int


class InterpreterSnapshot(BaseModel):
    state: InterpreterState
    node_index: int
    events: list[SceneEvent]
    choices: list[ActiveChoice]
    typing: bool = False
    thinking: bool = False
    transition_ready: bool = False


class EpilogueSnapshot(BaseModel):
    tier: EndingTier | None
    events: list[SceneEvent]
    restart_ready: bool = False


class SessionSnapshot(BaseModel):
    phase: Phase
    total_score: int
    preferences: Preferences
    transition_delay: float  # how long to hold the transition screen
    text_scene: InterpreterSnapshot
    encounter: InterpreterSnapshot
    epilogue: EpilogueSnapshot
