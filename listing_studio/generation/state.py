from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from listing_studio.errors import StateError

T = TypeVar("T")


class GenerationPhase(str, Enum):
    """Phases of one generation request."""
    IDLE = "idle"
    EXPORTING = "exporting"
    REMOVING_BACKGROUND = "removing_background"
    FETCHING_BACKGROUNDS = "fetching_backgrounds"
    BUILDING = "building"
    DONE = "done"
    FAILED = "failed"


class StepStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"  # best-effort step failed, fallback used
    FATAL = "fatal"


@dataclass
class StepOutcome(Generic[T]):
    """Result of one orchestrated step: Ok(value), Degraded(fallback) or Fatal(error)."""
    status: StepStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: T) -> "StepOutcome[T]":
        return cls(StepStatus.OK, value=value)

    @classmethod
    def degraded(cls, fallback: Optional[T], error: BaseException) -> "StepOutcome[T]":
        return cls(StepStatus.DEGRADED, value=fallback, error=error)

    @classmethod
    def fatal(cls, error: BaseException) -> "StepOutcome[T]":
        return cls(StepStatus.FATAL, error=error)

    def unwrap(self) -> Optional[T]:
        """Return the value (or fallback); re-raise the error of a fatal step."""
        if self.status == StepStatus.FATAL:
            raise self.error
        return self.value


@dataclass
class GenerationRun:
    """Record of one generateMain / generateSix request."""
    kind: str
    size_px: int
    phase: GenerationPhase = GenerationPhase.IDLE
    history: List[GenerationPhase] = field(default_factory=lambda: [GenerationPhase.IDLE])
    steps: Dict[str, StepStatus] = field(default_factory=dict)
    frame_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def advance(self, phase: GenerationPhase) -> None:
        self.phase = phase
        self.history.append(phase)

    def record(self, step: str, outcome: StepOutcome[Any]) -> StepOutcome[Any]:
        self.steps[step] = outcome.status
        return outcome


class GenerationState:
    """
    Frames of the most recent six-template generation.

    One instance per service process. Not persisted.
    """

    def __init__(self):
        self._last_generated_ids: List[str] = []

    @property
    def last_generated_ids(self) -> List[str]:
        return list(self._last_generated_ids)

    def replace(self, frame_ids: List[str]) -> None:
        self._last_generated_ids = list(frame_ids)

    def require_generated(self) -> List[str]:
        if not self._last_generated_ids:
            raise StateError("Nothing generated yet")
        return self.last_generated_ids
