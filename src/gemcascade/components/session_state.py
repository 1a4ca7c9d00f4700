"""Session-wide progress: score, move budget, objective counters."""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional

from gemcascade.components.level import ObjectiveType


class SessionResult(Enum):
    WON = auto()
    OUT_OF_MOVES = auto()


@dataclass(slots=True)
class SessionState:
    moves_left: int
    target_score: int
    score: int = 0
    moves_used: int = 0
    objective_counts: Dict[ObjectiveType, int] = field(
        default_factory=lambda: {objective: 0 for objective in ObjectiveType}
    )
    result: Optional[SessionResult] = None

    @property
    def is_over(self) -> bool:
        return self.result is not None
