from __future__ import annotations

from typing import Dict, List, Mapping, Tuple

from esper import World

from gemcascade.components.level import LevelConfig
from gemcascade.components.obstacle import ObstacleKind
from gemcascade.components.token import TokenKind
from gemcascade.events.bus import EventBus
from gemcascade.systems.board import BoardSystem
from gemcascade.systems.board_ops import clear_cell, get_board, place_obstacle, place_token
from gemcascade.systems.turn_system import TurnOrchestrator
from gemcascade.world import create_world

KIND_CODES = {
    'r': TokenKind.LINE_ROW,
    'c': TokenKind.LINE_COL,
    'a': TokenKind.AREA,
}


def base_color(row: int, col: int) -> int:
    """Background colors 3..6; no two neighbours share a color and no swap matches."""
    return 3 + (col + 2 * row) % 4


def make_session(rows: int = 8, cols: int = 8, *, seed: int = 7, **level_kwargs):
    """Build bus, world, board and orchestrator for one session."""
    bus = EventBus()
    level = LevelConfig(rows=rows, cols=cols, seed=seed, **level_kwargs)
    world = create_world(bus, level)
    board = BoardSystem(world, bus, level)
    turns = TurnOrchestrator(world, bus)
    return bus, world, board, turns


def paint(world: World, cells: Mapping[Tuple[int, int], str] | None = None) -> None:
    """Repaint the whole board with the background pattern, then apply overrides.

    Cell codes:
      '2'   plain token of color 2       '.'  background color
      '2r'  line blast clearing a row    '2c' line blast clearing a column
      '2a'  area blast                   '*'  wildcard
      '2f'  frozen token (suffix 'f' combines with any of the above)
      '#'   blocking marker              '$'  collectible
      '_'   empty cell
    """
    cells = cells or {}
    board = get_board(world)
    for row in range(board.rows):
        for col in range(board.cols):
            pos = (row, col)
            code = cells.get(pos, '.')
            if code == '#':
                place_obstacle(world, pos, ObstacleKind.BLOCKING)
            elif code == '$':
                place_obstacle(world, pos, ObstacleKind.COLLECTIBLE)
            elif code == '_':
                clear_cell(world, pos)
            elif code.startswith('*'):
                place_token(world, pos, base_color(row, col), TokenKind.WILDCARD, frozen='f' in code)
            else:
                color = base_color(row, col) if code[0] == '.' else int(code[0])
                suffix = code[1:]
                kind = KIND_CODES.get(suffix.replace('f', ''), TokenKind.PLAIN)
                place_token(world, pos, color, kind, frozen='f' in suffix)


def capture(bus: EventBus, name: str) -> List[Dict]:
    """Record every payload emitted for an event name."""
    received: List[Dict] = []
    bus.subscribe(name, lambda sender, **kwargs: received.append(kwargs))
    return received
