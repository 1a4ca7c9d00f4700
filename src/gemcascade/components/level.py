"""Level parameters pulled from the level/objective collaborator."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from gemcascade.constants import DEFAULT_COLOR_COUNT, GRID_COLS, GRID_ROWS, OBJECTIVE_COLOR


class ObjectiveType(Enum):
    COLLECT_COLOR = "collect_color"              # objective-color tokens removed
    CLEAR_BLOCKING = "clear_blocking"            # blocking markers destroyed
    HARVEST_COLLECTIBLE = "harvest_collectible"  # collectibles harvested on the bottom row
    CLEAR_FROZEN = "clear_frozen"                # frozen tokens thawed


@dataclass(frozen=True, slots=True)
class ObjectiveRequirement:
    type: ObjectiveType
    count: int


@dataclass(slots=True)
class LevelConfig:
    """Read-only level description.

    Attributes:
        rows, cols: board dimensions
        target_score: score needed (together with all objectives) to win
        moves: move budget for the session
        frozen_count, blocking_count, collectible_count: obstacles seeded at init
        objectives: additional requirements gating the win
        color_count: how many palette colors spawn
        objective_color: color counted by COLLECT_COLOR
        seed: RNG seed used when no explicit rng is supplied
        rejected_swap_costs_move: charge a move for swaps that match nothing
    """
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    target_score: int = 1000
    moves: int = 20
    frozen_count: int = 0
    blocking_count: int = 0
    collectible_count: int = 0
    objectives: List[ObjectiveRequirement] = field(default_factory=list)
    color_count: int = DEFAULT_COLOR_COUNT
    objective_color: int = OBJECTIVE_COLOR
    seed: Optional[int] = None
    rejected_swap_costs_move: bool = False

    def __post_init__(self) -> None:
        if self.rows < 3 or self.cols < 3:
            raise ValueError(f"Board must be at least 3x3, got {self.rows}x{self.cols}")
        if self.color_count < 3:
            raise ValueError("At least three colors are required to avoid initial matches")
        if self.moves < 0:
            raise ValueError("Move budget cannot be negative")
        cells = self.rows * self.cols
        if self.blocking_count + self.collectible_count + self.frozen_count > cells // 2:
            raise ValueError("Too many obstacles for the board size")
