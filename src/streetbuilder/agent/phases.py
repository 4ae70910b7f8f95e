"""
Mission phases and their allowed transitions.

The mission is a finite state machine. This module holds the data half of
it: the Phase enum and the table of successors each phase may hand over to.
The behaviour half (one handler per phase) lives in mission.py, which checks
every transition a handler requests against PHASE_TRANSITIONS.

Phase Graph (staged variant; compact replaces LOCATE and GOTO with FIND):

    READY → DISCOVER → LOCATE → GOTO → COLLECT → BUILD → DANCE → TERMINATE

    Fallbacks: LOCATE → DISCOVER (no targets), GOTO → LOCATE (targets
    exhausted), COLLECT → DISCOVER (nothing left to collect), COLLECT → GOTO
    (goal not met yet), BUILD → DISCOVER (material shortage).

Dependencies:
    None (pure data module)
"""

from __future__ import annotations

from enum import Enum


class Phase(Enum):
    """The single authoritative state of the mission for a given tick."""

    READY = "ready"
    DISCOVER = "discover"
    LOCATE = "locate"
    FIND = "find"
    COLLECT = "collect"
    BUILD = "build"
    DANCE = "dance"
    GOTO = "goto"
    TERMINATE = "terminate"


# Successors each phase may advance to. Remaining in the same phase is
# always allowed and is not listed.
PHASE_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.READY: frozenset({Phase.DISCOVER}),
    Phase.DISCOVER: frozenset({Phase.LOCATE, Phase.FIND}),
    Phase.LOCATE: frozenset({Phase.DISCOVER, Phase.GOTO}),
    Phase.FIND: frozenset({Phase.DISCOVER, Phase.COLLECT}),
    Phase.GOTO: frozenset({Phase.LOCATE, Phase.COLLECT}),
    Phase.COLLECT: frozenset({Phase.BUILD, Phase.GOTO, Phase.FIND, Phase.DISCOVER}),
    Phase.BUILD: frozenset({Phase.DISCOVER, Phase.DANCE, Phase.TERMINATE}),
    Phase.DANCE: frozenset({Phase.TERMINATE}),
    Phase.TERMINATE: frozenset(),
}


def allowed_successors(phase: Phase) -> frozenset[Phase]:
    """All phases reachable from phase in one tick, including phase itself."""
    return PHASE_TRANSITIONS[phase] | {phase}


def is_valid_transition(current: Phase, successor: Phase) -> bool:
    return successor in allowed_successors(current)
