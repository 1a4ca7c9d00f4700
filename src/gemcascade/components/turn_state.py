from dataclasses import dataclass
from enum import Enum, auto


class TurnPhase(Enum):
    IDLE = auto()
    SWAPPING = auto()
    RESOLVING = auto()
    TURN_REJECTED = auto()
    SESSION_OVER = auto()


@dataclass(slots=True)
class TurnState:
    """Tracks current turn-level state shared across systems."""

    phase: TurnPhase = TurnPhase.IDLE
    cascade_active: bool = False
    cascade_depth: int = 0
    turns_completed: int = 0
