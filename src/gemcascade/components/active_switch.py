from dataclasses import dataclass

@dataclass(slots=True)
class ActiveSwitch:
    """Per-cell occupancy flag.

    active: True if the cell currently holds a token or an obstacle; False if cleared/empty.
    Token data lives in the Token component, obstacle data in CellObstacle.
    """
    active: bool = True
