"""Obstacle seeding for a fresh board.

Blocking markers and collectibles are never placed on the bottom row: a
blocker there would pin the column and a collectible would be harvested
before the first move.
"""
from __future__ import annotations

import random
from typing import List

from esper import World

from gemcascade.components.level import LevelConfig
from gemcascade.components.obstacle import ObstacleKind
from gemcascade.systems.board_ops import Position, board_dimensions, place_obstacle, read_cell, token_at


def _free_cells(world: World, rows: int, cols: int, *, skip_bottom: bool) -> List[Position]:
    last_row = rows - 1 if skip_bottom else rows
    return [
        (row, col)
        for row in range(last_row)
        for col in range(cols)
        if read_cell(world, (row, col)) is None
    ]


def seed_obstacles(world: World, level: LevelConfig, rng: random.Random) -> None:
    """Place blocking and collectible markers on an empty board."""
    dims = board_dimensions(world)
    if dims is None:
        return
    rows, cols = dims
    free = _free_cells(world, rows, cols, skip_bottom=True)
    needed = level.blocking_count + level.collectible_count
    if needed > len(free):
        raise ValueError(f"Cannot place {needed} obstacles on {len(free)} free cells")
    chosen = rng.sample(free, needed)
    for pos in chosen[: level.blocking_count]:
        place_obstacle(world, pos, ObstacleKind.BLOCKING)
    for pos in chosen[level.blocking_count:]:
        place_obstacle(world, pos, ObstacleKind.COLLECTIBLE)


def seed_frozen(world: World, count: int, rng: random.Random) -> List[Position]:
    """Freeze ``count`` random tokens."""
    if count <= 0:
        return []
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    candidates = [
        (row, col)
        for row in range(rows)
        for col in range(cols)
        if token_at(world, (row, col)) is not None
    ]
    chosen = sorted(rng.sample(candidates, min(count, len(candidates))))
    for pos in chosen:
        token_at(world, pos).frozen = True
    return chosen
