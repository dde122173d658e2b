"""sessionctl/presentation.py — Text rendering of controller state."""
from __future__ import annotations
from typing import Callable
from sessionctl.models.types import State

GUIDED_PREFIX = "[TUTORIAL] "


def render_state(state: State, first_run_complete: bool) -> str:
    if first_run_complete:
        return state.value
    return f"{GUIDED_PREFIX}{state.value}"


class StateView:
    """Controller listener that re-renders on every state change.

    ``guided`` is asked on each render, so the prefix follows the strategy the
    controller is running rather than the persisted flag.
    """

    def __init__(self, guided: Callable[[], bool],
                 echo: Callable[[str], None] | None = None) -> None:
        self._guided = guided
        self._echo = echo
        self.lines: list[str] = []

    def __call__(self, state: State) -> None:
        text = render_state(state, first_run_complete=not self._guided())
        self.lines.append(text)
        if self._echo is not None:
            self._echo(text)

    @property
    def text(self) -> str:
        return self.lines[-1] if self.lines else ""
