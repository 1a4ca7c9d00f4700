from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from esper import World

from gemcascade.components.obstacle import ObstacleKind
from gemcascade.systems.board_ops import (
    Position,
    board_dimensions,
    clear_cell,
    ensure_board_consistent,
    move_cell_contents,
    read_cell,
    spawn_token,
    token_at,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    token_id: Optional[int] = None
    obstacle: Optional[ObstacleKind] = None


@dataclass(slots=True)
class GravityReport:
    moves: List[GravityMove] = field(default_factory=list)
    harvested: List[Position] = field(default_factory=list)
    spawned: List[Position] = field(default_factory=list)
    cascades: int = 0


def _column_segments(world: World, col: int, rows: int) -> List[List[int]]:
    """Split a column into bottom-first row lists separated by blocking cells."""
    segments: List[List[int]] = []
    current: List[int] = []
    for row in range(rows - 1, -1, -1):
        if read_cell(world, (row, col)) is ObstacleKind.BLOCKING:
            if current:
                segments.append(current)
            current = []
            continue
        current.append(row)
    if current:
        segments.append(current)
    return segments


def compute_gravity_moves(world: World) -> Tuple[List[GravityMove], int]:
    """Plan downward compaction; returns the moves and how many columns move."""
    dims = board_dimensions(world)
    if dims is None:
        return [], 0
    rows, cols = dims
    moves: List[GravityMove] = []
    cascades = 0
    for col in range(cols):
        column_moved = False
        for segment in _column_segments(world, col, rows):
            filled_rows = [row for row in segment if read_cell(world, (row, col)) is not None]
            for target_row, original_row in zip(segment, filled_rows):
                if original_row == target_row:
                    continue
                contents = read_cell(world, (original_row, col))
                token = token_at(world, (original_row, col))
                moves.append(
                    GravityMove(
                        source=(original_row, col),
                        target=(target_row, col),
                        token_id=token.token_id if token is not None else None,
                        obstacle=contents if isinstance(contents, ObstacleKind) else None,
                    )
                )
                column_moved = True
        if column_moved:
            cascades += 1
    return moves, cascades


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    # Moves are planned bottom-first per segment, so every target is vacant when reached.
    for move in moves:
        move_cell_contents(world, move.source, move.target)


def harvest_collectibles(world: World) -> List[Position]:
    """Remove collectibles resting on the bottom row."""
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    harvested: List[Position] = []
    for col in range(cols):
        pos = (rows - 1, col)
        if read_cell(world, pos) is ObstacleKind.COLLECTIBLE:
            clear_cell(world, pos)
            harvested.append(pos)
    return harvested


def refill_empty_cells(world: World, rng: random.Random | None = None) -> List[Position]:
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    spawned: List[Position] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            if read_cell(world, pos) is None:
                spawn_token(world, pos, rng)
                spawned.append(pos)
    return spawned


def settle_board(world: World, rng: random.Random | None = None, *, refill: bool = True) -> GravityReport:
    """Compact columns, harvest collectibles until none rest on the bottom row, then refill."""
    report = GravityReport()
    moves, cascades = compute_gravity_moves(world)
    apply_gravity_moves(world, moves)
    report.moves.extend(moves)
    report.cascades = cascades
    while True:
        harvested = harvest_collectibles(world)
        if not harvested:
            break
        report.harvested.extend(harvested)
        moves, cascades = compute_gravity_moves(world)
        apply_gravity_moves(world, moves)
        report.moves.extend(moves)
        report.cascades = max(report.cascades, cascades)
    if refill:
        report.spawned = refill_empty_cells(world, rng)
        ensure_board_consistent(world)
    logger.debug(
        f"Gravity settled: {len(report.moves)} moves, {len(report.harvested)} harvested, "
        f"{len(report.spawned)} spawned"
    )
    return report
