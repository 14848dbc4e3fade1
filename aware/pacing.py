"""Pacing policy — how long the engine waits between emissions.

Pure functions of the pacing mode and a length or authored hint. All
durations are seconds, never negative, and identical for identical inputs.

    fast    near-instant, for replays
    medium  a fixed two-second beat per message
    native  scales with message length, like watching someone type
"""

from aware.models import PacingMode

NATIVE_SECONDS_PER_CHAR = 0.055
NATIVE_MIN = 0.8
NATIVE_MAX = 7.0

SCRIPTED_RESPONSE_CAP = 8.0


def delay_for_text(mode: PacingMode, char_count: int) -> float:
    """Wait before showing a message of `char_count` characters."""
    if mode == "fast":
        return 0.15
    if mode == "medium":
        return 2.0
    return min(max(char_count * NATIVE_SECONDS_PER_CHAR, NATIVE_MIN), NATIVE_MAX)


def delay_for_reaction(mode: PacingMode, hint_ms: int | None) -> float:
    """Wait before an NPC reacts. Falls back to a short-message wait without a hint."""
    if not hint_ms or hint_ms <= 0:
        return delay_for_text(mode, 20)
    if mode == "fast":
        return 0.2
    return hint_ms / 1000


def delay_for_transition(mode: PacingMode) -> float:
    if mode == "fast":
        return 0.0
    if mode == "medium":
        return 1.5
    return 2.5


def delay_for_intro(mode: PacingMode) -> float:
    """Pause after an encounter's location header, before the first node."""
    return 0.3 if mode == "fast" else 1.5


def delay_for_epilogue(mode: PacingMode) -> float:
    return 0.3 if mode == "fast" else 1.2


def delay_for_marker(mode: PacingMode) -> float:
    """Pause before a text scene reports it is ready to move on."""
    return 0.1 if mode == "fast" else 0.8


def delays_for_label(mode: PacingMode) -> tuple[float, float]:
    """(before, after) waits around a system label."""
    if mode == "fast":
        return 0.2, 0.3
    return 0.8, 1.2


def delay_for_scripted_response(mode: PacingMode, delay_ms: int | None) -> float:
    """Authored pause after the player's own messages. Native pacing only."""
    if mode != "native" or not delay_ms or delay_ms <= 0:
        return 0.0
    return min(delay_ms / 1000, SCRIPTED_RESPONSE_CAP)
