"""
sessionctl/kernel/strategy.py — Pluggable transition strategies.

A strategy owns, per transition kind, the guard and the scripted step sequence.
Scripts are data: each Step waits its delay on the event loop, then emits a trace.
The controller never inspects which strategy it holds; the only guided-specific
effect it observes is the ``on_finished`` signal fired from the guided Leave.
"""
from __future__ import annotations
import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable
from sessionctl.kernel import fsm
from sessionctl.logging_setup import get_logger
from sessionctl.models.types import State, Step, StrategyKind, TransitionKind

_log = get_logger("sessionctl.strategy")

Sleep = Callable[[float], Awaitable[None]]

SETTLE_UNITS = 2.0
GUIDE_UNITS = 0.5

_STANDARD_SCRIPTS: dict[TransitionKind, tuple[Step, ...]] = {
    TransitionKind.ENTER: (Step("Entering"), Step("Entered", SETTLE_UNITS)),
    TransitionKind.QUIT:  (Step("Quitting"), Step("Quitted", SETTLE_UNITS)),
    TransitionKind.JOIN:  (Step("Joining"), Step("Joined", SETTLE_UNITS)),
    TransitionKind.LEAVE: (Step("Leaving"), Step("Left", SETTLE_UNITS)),
}


def _guided(start: str, done: str) -> tuple[Step, ...]:
    return (
        Step(start),
        Step("This", SETTLE_UNITS),
        Step("is", GUIDE_UNITS),
        Step("Tutorial", GUIDE_UNITS),
        Step(done, GUIDE_UNITS),
    )


_GUIDED_SCRIPTS: dict[TransitionKind, tuple[Step, ...]] = {
    TransitionKind.JOIN:  _guided("Joining", "Joined"),
    TransitionKind.LEAVE: _guided("Leaving", "Left"),
}


class TransitionStrategy(ABC):
    kind: StrategyKind

    def __init__(self, time_unit: float = 1.0, sleep: Sleep | None = None) -> None:
        self._time_unit = time_unit
        self._sleep: Sleep = sleep or asyncio.sleep

    @property
    def name(self) -> str:
        return self.kind.value

    def can_perform(self, kind: TransitionKind, state: State) -> bool:
        return fsm.guard_holds(kind, state)

    @abstractmethod
    def script(self, kind: TransitionKind) -> tuple[Step, ...]: ...

    async def perform(self, kind: TransitionKind) -> None:
        for n, step in enumerate(self.script(kind)):
            delay = step.delay_units * self._time_unit
            if step.delay_units:
                await self._sleep(delay)
            _log.info("step", extra={"strategy": self.name, "kind": kind.value,
                                     "step": n, "trace": step.label, "delay_s": delay})


class StandardStrategy(TransitionStrategy):
    kind = StrategyKind.STANDARD

    def script(self, kind: TransitionKind) -> tuple[Step, ...]:
        return _STANDARD_SCRIPTS[kind]


class GuidedStrategy(StandardStrategy):
    """First-run variant. Extends Join and Leave; signals once Leave finishes."""

    kind = StrategyKind.GUIDED

    def __init__(self, on_finished: Callable[[], None] | None = None,
                 time_unit: float = 1.0, sleep: Sleep | None = None) -> None:
        super().__init__(time_unit=time_unit, sleep=sleep)
        self._on_finished = on_finished

    def script(self, kind: TransitionKind) -> tuple[Step, ...]:
        return _GUIDED_SCRIPTS.get(kind) or super().script(kind)

    async def perform(self, kind: TransitionKind) -> None:
        await super().perform(kind)
        if kind == TransitionKind.LEAVE and self._on_finished is not None:
            _log.info("guided_sequence_finished", extra={"strategy": self.name})
            self._on_finished()


def build_strategy(kind: StrategyKind, on_finished: Callable[[], None] | None = None,
                   time_unit: float = 1.0, sleep: Sleep | None = None) -> TransitionStrategy:
    if kind == StrategyKind.GUIDED:
        return GuidedStrategy(on_finished=on_finished, time_unit=time_unit, sleep=sleep)
    return StandardStrategy(time_unit=time_unit, sleep=sleep)
