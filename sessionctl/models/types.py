"""
sessionctl/models/types.py  —  Shared data contracts.
Uses stdlib dataclasses + enums. No external deps.
Immutable records use frozen=True.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC
from enum import Enum

# ── Enumerations ──────────────────────────────────────────────────────────────


class State(str, Enum):
    NOT_IN_SESSION = "NotInSession"
    ENTERING = "Entering"
    IN_SESSION = "InSession"
    JOINING = "Joining"
    JOINED = "Joined"
    LEAVING = "Leaving"
    EXITING_SESSION = "ExitingSession"


class TransitionKind(str, Enum):
    ENTER = "enter"
    QUIT = "quit"
    JOIN = "join"
    LEAVE = "leave"


class StrategyKind(str, Enum):
    STANDARD = "standard"
    GUIDED = "guided"


# ── Helpers ───────────────────────────────────────────────────────────────────


def utcnow() -> str:
    from datetime import datetime

    return datetime.now(UTC).isoformat()


# ── Core data structures ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class TransitionSpec:
    kind: TransitionKind
    guard: State
    in_progress: State
    settled: State


@dataclass(frozen=True)
class Step:
    """One scripted step: wait ``delay_units``, then emit ``label``."""

    label: str
    delay_units: float = 0.0

    def __post_init__(self) -> None:
        if self.delay_units < 0:
            raise ValueError(f"delay_units must be >= 0, got {self.delay_units}")


@dataclass(frozen=True)
class TransitionRecord:
    kind: TransitionKind
    from_state: State
    in_progress: State
    settled: State
    strategy: StrategyKind
    started_at: str = field(default_factory=utcnow)
    settled_at: str | None = None


@dataclass(frozen=True)
class ControllerConfig:
    time_unit: float = 1.0
    db_path: str = "~/.sessionctl/sessionctl.db"
    log_path: str | None = None
    log_level: str = "INFO"
    namespace: str = "default"

    def __post_init__(self) -> None:
        if self.time_unit < 0:
            raise ValueError("time_unit must be >= 0")
        if not self.namespace:
            raise ValueError("namespace must not be empty")
