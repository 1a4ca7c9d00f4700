from dataclasses import dataclass, field
from typing import Dict, Iterable, List

@dataclass(slots=True)
class TokenPalette:
    """Canonical token colors stored on the board entity.

    ``colors`` maps color value to a display name. ``spawnable`` lists the colors
    refill and initialization may draw from, in a stable order.
    """
    colors: Dict[int, str]
    objective_color: int
    spawnable: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.spawnable:
            # Preserve order while filtering unknown colors.
            seen: set[int] = set()
            filtered: List[int] = []
            for color in self.spawnable:
                if color in self.colors and color not in seen:
                    filtered.append(color)
                    seen.add(color)
            self.spawnable = filtered or list(self.colors.keys())
        else:
            self.spawnable = list(self.colors.keys())

    def name_for(self, color: int) -> str:
        return self.colors.get(color, str(color))

    def spawnable_colors(self) -> List[int]:
        return list(self.spawnable)

    def set_spawnable(self, colors: Iterable[int], *, allow_empty: bool = False) -> None:
        seen: set[int] = set()
        filtered: List[int] = []
        for color in colors:
            if color in self.colors and color not in seen:
                filtered.append(color)
                seen.add(color)
        if not filtered and not allow_empty:
            filtered = list(self.colors.keys())
        self.spawnable = filtered
