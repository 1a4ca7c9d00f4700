from __future__ import annotations

import logging
import random
from typing import Dict, List, Mapping, Tuple

from esper import World

from gemcascade.components.obstacle import ObstacleKind
from gemcascade.components.token import Token, TokenKind
from gemcascade.constants import MAX_LAYOUT_ATTEMPTS
from gemcascade.systems.board_ops import (
    CellContents,
    Position,
    board_dimensions,
    get_palette,
    iter_cells,
    place_token,
    read_cell,
    swappable,
)
from gemcascade.systems.interactions import interaction_kind_for
from gemcascade.systems.match import find_matches, has_line_match

logger = logging.getLogger(__name__)


def _contents_map(world: World) -> Dict[Position, CellContents]:
    return {pos: read_cell(world, pos) for pos, _ in iter_cells(world)}


def _colors_from_contents(contents: Mapping[Position, CellContents]) -> Dict[Position, int]:
    return {
        pos: value.color
        for pos, value in contents.items()
        if isinstance(value, Token) and not value.frozen and value.kind is not TokenKind.WILDCARD
    }


def predict_swap_effect(
    world: World,
    src: Position,
    dst: Position,
    *,
    contents: Mapping[Position, CellContents] | None = None,
    colors: Mapping[Position, int] | None = None,
) -> bool:
    """Return True if swapping src/dst would trigger an interaction or create a match."""
    cells = contents if contents is not None else _contents_map(world)
    if src not in cells or dst not in cells:
        return False
    a, b = cells[src], cells[dst]
    if not (swappable(a) and swappable(b)):
        return False
    if isinstance(a, Token) and isinstance(b, Token) and interaction_kind_for(a.kind, b.kind) is not None:
        return True
    color_map = dict(colors) if colors is not None else _colors_from_contents(cells)
    value_src = color_map.pop(src, None)
    value_dst = color_map.pop(dst, None)
    if value_dst is not None:
        color_map[src] = value_dst
    if value_src is not None:
        color_map[dst] = value_src
    return has_line_match(color_map, src) or has_line_match(color_map, dst)


def find_valid_swaps(world: World) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would produce a match or an interaction."""
    dims = board_dimensions(world)
    if not dims:
        return []
    rows, cols = dims
    cells = _contents_map(world)
    colors = _colors_from_contents(cells)
    swaps: List[Tuple[Position, Position]] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            right = (row, col + 1)
            if col + 1 < cols and predict_swap_effect(world, pos, right, contents=cells, colors=colors):
                swaps.append((pos, right))
            down = (row + 1, col)
            if row + 1 < rows and predict_swap_effect(world, pos, down, contents=cells, colors=colors):
                swaps.append((pos, down))
    return swaps


def respawn_full_board(
    world: World,
    *,
    rng: random.Random | None = None,
    max_attempts: int = MAX_LAYOUT_ATTEMPTS,
) -> List[Position]:
    """Recolor every token so the board has no matches and at least one valid move.

    Obstacles stay where they are; existing tokens keep their id, kind and
    frozen flag; empty non-obstacle cells receive new tokens first.
    """
    dims = board_dimensions(world)
    if not dims:
        return []
    rows, cols = dims
    palette = get_palette(world)
    choices = palette.spawnable_colors()
    if not choices:
        return []
    candidate_rng = rng or getattr(world, "random", None)
    if isinstance(candidate_rng, random.Random):
        rng = candidate_rng
    else:
        rng = random.Random()

    for pos, _ in iter_cells(world):
        if read_cell(world, pos) is None:
            place_token(world, pos, choices[0])
    cells = _contents_map(world)
    token_positions = sorted(pos for pos, value in cells.items() if isinstance(value, Token))

    for attempt in range(max_attempts):
        layout: Dict[Position, int] = {}
        valid_layout = True
        for row in range(rows):
            for col in range(cols):
                if not isinstance(cells[(row, col)], Token):
                    continue
                available = list(choices)
                left1, left2 = layout.get((row, col - 1)), layout.get((row, col - 2))
                if left1 is not None and left1 == left2:
                    available = [c for c in available if c != left1]
                up1, up2 = layout.get((row - 1, col)), layout.get((row - 2, col))
                if up1 is not None and up1 == up2:
                    available = [c for c in available if c != up1]
                if not available:
                    valid_layout = False
                    break
                layout[(row, col)] = rng.choice(available)
            if not valid_layout:
                break
        if not valid_layout:
            continue

        for pos in token_positions:
            cells[pos].color = layout[pos]

        if find_matches(world):
            continue
        if not find_valid_swaps(world):
            continue
        logger.debug(f"Board respawned after {attempt + 1} attempt(s)")
        return token_positions

    raise RuntimeError("Unable to respawn board without matches and valid swaps")


def count_obstacles(world: World, kind: ObstacleKind) -> int:
    return sum(1 for pos, _ in iter_cells(world) if read_cell(world, pos) is kind)
