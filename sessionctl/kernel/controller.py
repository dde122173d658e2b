"""
sessionctl/kernel/controller.py — The session lifecycle controller.

Owns the current State and the active strategy. Gates each request through the
strategy's guard, runs the strategy's step sequence as an asyncio task, then
applies the settled State and fires the caller's completion callback.

Invariants:
  - State is mutated here only: once on accept (in-progress), once on settle.
  - The settled-state write happens before on_settled is invoked.
  - Guard failure is a silent rejection: no state change, no callback, no raise.
  - Guided -> standard swap happens at most once per guided binding.
  - A failing listener is logged and skipped; it never strands a transition.

Precondition: at most one outstanding request. In-progress states satisfy no
guard, so a request issued mid-transition is rejected like any illegal one.
There is no cancellation; an accepted transition always runs to completion.
"""
from __future__ import annotations
import asyncio
from dataclasses import replace
from typing import Callable
from sessionctl.kernel.fsm import TRANSITIONS
from sessionctl.kernel.strategy import Sleep, TransitionStrategy, build_strategy
from sessionctl.logging_setup import get_logger
from sessionctl.memory.flags import FirstRunFlags
from sessionctl.models.errors import StorageError
from sessionctl.models.types import (
    ControllerConfig, State, StrategyKind, TransitionKind, TransitionRecord,
    TransitionSpec, utcnow,
)

_log = get_logger("sessionctl.controller")

Listener = Callable[[State], None]
OnSettled = Callable[[], None]


class SessionController:
    """Single event loop, one transition in flight. Not thread-safe."""

    def __init__(self, flags: FirstRunFlags, config: ControllerConfig | None = None,
                 sleep: Sleep | None = None) -> None:
        self._flags = flags
        self._config = config or ControllerConfig()
        self._sleep = sleep
        self._listeners: list[Listener] = []
        self._history: list[TransitionRecord] = []
        self._inflight: asyncio.Task[None] | None = None
        self._state = State.NOT_IN_SESSION
        self._strategy: TransitionStrategy
        self.reset_to_initial(first_run=not flags.has_completed_first_run())

    # ── Queries ───────────────────────────────────────────────────────────────

    @property
    def current_state(self) -> State:
        return self._state

    @property
    def strategy_name(self) -> str:
        return self._strategy.name

    @property
    def strategy_kind(self) -> StrategyKind:
        return self._strategy.kind

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    def transition_history(self) -> list[TransitionRecord]:
        return list(self._history)

    # ── Listeners ─────────────────────────────────────────────────────────────

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── Transitions ───────────────────────────────────────────────────────────

    def request_transition(self, kind: TransitionKind,
                           on_settled: OnSettled | None = None) -> bool:
        """Accept and schedule ``kind`` if its guard holds. Returns False on rejection.

        Must be called from a running event loop.
        """
        strategy = self._strategy
        if not strategy.can_perform(kind, self._state):
            _log.debug("transition_rejected", extra={
                "kind": kind.value, "state": self._state.value, "strategy": strategy.name})
            return False

        loop = asyncio.get_running_loop()
        spec = TRANSITIONS[kind]
        record = TransitionRecord(kind=kind, from_state=self._state,
                                  in_progress=spec.in_progress, settled=spec.settled,
                                  strategy=strategy.kind)
        _log.info("transition_accepted", extra={
            "kind": kind.value, "from_state": self._state.value, "strategy": strategy.name})
        self._inflight = loop.create_task(self._drive(strategy, spec, record, on_settled))
        self._set_state(spec.in_progress)
        return True

    async def run_transition(self, kind: TransitionKind,
                             on_settled: OnSettled | None = None) -> bool:
        if not self.request_transition(kind, on_settled):
            return False
        await self.wait_settled()
        return True

    async def wait_settled(self) -> None:
        if self._inflight is not None:
            await self._inflight

    async def _drive(self, strategy: TransitionStrategy, spec: TransitionSpec,
                     record: TransitionRecord, on_settled: OnSettled | None) -> None:
        await strategy.perform(spec.kind)
        self._set_state(spec.settled)
        self._history.append(replace(record, settled_at=utcnow()))
        # A reset mid-flight may have let a newer transition take the handle.
        if self._inflight is asyncio.current_task():
            self._inflight = None
        _log.info("transition_settled", extra={"kind": spec.kind.value,
                                               "state": spec.settled.value})
        if on_settled is not None:
            on_settled()

    # ── Strategy binding ──────────────────────────────────────────────────────

    def reset_to_initial(self, first_run: bool) -> None:
        if self._inflight is not None:
            _log.warning("reset_during_transition", extra={"state": self._state.value})
        kind = StrategyKind.GUIDED if first_run else StrategyKind.STANDARD
        self._strategy = self._build(kind)
        _log.info("controller_reset", extra={"strategy": kind.value})
        self._set_state(State.NOT_IN_SESSION)

    def reset_tutorial(self) -> None:
        self._flags.clear_first_run_flag()
        self.reset_to_initial(first_run=True)

    def _build(self, kind: StrategyKind) -> TransitionStrategy:
        def finished() -> None:
            self._on_guided_finished(strategy)

        strategy = build_strategy(kind, on_finished=finished,
                                  time_unit=self._config.time_unit, sleep=self._sleep)
        return strategy

    def _on_guided_finished(self, strategy: TransitionStrategy) -> None:
        if strategy is not self._strategy:
            _log.debug("stale_guided_signal", extra={"strategy": strategy.name})
            return
        self._strategy = self._build(StrategyKind.STANDARD)
        _log.info("strategy_swapped", extra={"strategy": self._strategy.name})
        try:
            self._flags.mark_first_run_complete()
        except StorageError as exc:
            _log.error("first_run_persist_failed", extra={
                "error": str(exc), "error_type": type(exc).__name__})

    def _set_state(self, state: State) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _log.exception("listener_failed", extra={"state": state.value})
