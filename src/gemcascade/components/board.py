from dataclasses import dataclass, field
from typing import List

@dataclass(slots=True)
class Board:
    rows: int
    cols: int
    # Cell entity ids indexed [row][col]; fixed for the lifetime of the board.
    entities: List[List[int]] = field(default_factory=list)
    next_token_id: int = 1

    def allocate_token_id(self) -> int:
        token_id = self.next_token_id
        self.next_token_id += 1
        return token_id
