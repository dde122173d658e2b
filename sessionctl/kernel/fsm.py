"""sessionctl/kernel/fsm.py — Legal-transition table for the session lifecycle."""
from __future__ import annotations
from sessionctl.models.types import State, TransitionKind, TransitionSpec

TRANSITIONS: dict[TransitionKind, TransitionSpec] = {
    TransitionKind.ENTER: TransitionSpec(TransitionKind.ENTER, guard=State.NOT_IN_SESSION,
                                         in_progress=State.ENTERING, settled=State.IN_SESSION),
    TransitionKind.QUIT:  TransitionSpec(TransitionKind.QUIT, guard=State.IN_SESSION,
                                         in_progress=State.EXITING_SESSION,
                                         settled=State.NOT_IN_SESSION),
    TransitionKind.JOIN:  TransitionSpec(TransitionKind.JOIN, guard=State.IN_SESSION,
                                         in_progress=State.JOINING, settled=State.JOINED),
    TransitionKind.LEAVE: TransitionSpec(TransitionKind.LEAVE, guard=State.JOINED,
                                         in_progress=State.LEAVING, settled=State.IN_SESSION),
}


def guard_holds(kind: TransitionKind, state: State) -> bool:
    return TRANSITIONS[kind].guard == state


def allowed_from(state: State) -> list[TransitionKind]:
    return [k for k, spec in TRANSITIONS.items() if spec.guard == state]
