from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ObstacleKind(Enum):
    BLOCKING = "blocking"        # immovable barrier, destroyed by adjacent removals
    COLLECTIBLE = "collectible"  # falls with gravity, harvested on the bottom row


@dataclass(slots=True)
class CellObstacle:
    """Obstacle marker for a cell. When kind is set the cell holds no token."""
    kind: Optional[ObstacleKind] = None

    @property
    def blocking(self) -> bool:
        return self.kind is ObstacleKind.BLOCKING

    @property
    def collectible(self) -> bool:
        return self.kind is ObstacleKind.COLLECTIBLE
