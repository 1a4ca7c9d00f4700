from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from esper import World

from gemcascade.components.obstacle import ObstacleKind
from gemcascade.components.token import Token, TokenKind
from gemcascade.systems.board_ops import Position, get_board, read_cell


@dataclass(frozen=True, slots=True)
class CellView:
    """Immutable copy of one cell's contents."""
    row: int
    col: int
    token_id: Optional[int] = None
    color: Optional[int] = None
    kind: Optional[TokenKind] = None
    frozen: bool = False
    obstacle: Optional[ObstacleKind] = None

    @property
    def position(self) -> Position:
        return self.row, self.col

    @property
    def empty(self) -> bool:
        return self.token_id is None and self.obstacle is None


@dataclass(frozen=True, slots=True)
class PhaseSnapshot:
    """Board state at one phase boundary of a turn (swap, explosion, refill, reshuffle)."""
    phase: str
    depth: int
    cells: Tuple[Tuple[CellView, ...], ...]

    def at(self, row: int, col: int) -> CellView:
        return self.cells[row][col]


def cell_view(world: World, pos: Position) -> CellView:
    row, col = pos
    contents = read_cell(world, pos)
    if isinstance(contents, Token):
        return CellView(row, col, contents.token_id, contents.color, contents.kind, contents.frozen)
    if isinstance(contents, ObstacleKind):
        return CellView(row, col, obstacle=contents)
    return CellView(row, col)


def take_snapshot(world: World, phase: str, depth: int = 0) -> PhaseSnapshot:
    board = get_board(world)
    cells = tuple(
        tuple(cell_view(world, (row, col)) for col in range(board.cols))
        for row in range(board.rows)
    )
    return PhaseSnapshot(phase=phase, depth=depth, cells=cells)


def render_text(snapshot: PhaseSnapshot) -> str:
    """Compact text grid for logs: color digits, specials as letters, obstacles as symbols."""
    marks = {
        TokenKind.LINE_ROW: "r",
        TokenKind.LINE_COL: "c",
        TokenKind.AREA: "a",
        TokenKind.WILDCARD: "*",
    }
    lines = []
    for row in snapshot.cells:
        chars = []
        for cell in row:
            if cell.obstacle is ObstacleKind.BLOCKING:
                chars.append("#")
            elif cell.obstacle is ObstacleKind.COLLECTIBLE:
                chars.append("$")
            elif cell.empty:
                chars.append(".")
            elif cell.kind is TokenKind.PLAIN:
                chars.append(str(cell.color))
            else:
                chars.append(marks[cell.kind])
        lines.append("".join(chars))
    return "\n".join(lines)
