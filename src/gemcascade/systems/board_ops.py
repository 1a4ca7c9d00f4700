from __future__ import annotations

import random
from typing import Dict, Iterator, List, Tuple, Union

from esper import World

from gemcascade.components.active_switch import ActiveSwitch
from gemcascade.components.board import Board
from gemcascade.components.board_position import BoardPosition
from gemcascade.components.obstacle import CellObstacle, ObstacleKind
from gemcascade.components.palette import TokenPalette
from gemcascade.components.token import Token, TokenKind
from gemcascade.errors import InconsistentBoard, InvalidSwap

Position = Tuple[int, int]
CellContents = Union[Token, ObstacleKind, None]


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board component not found")


def get_palette(world: World) -> TokenPalette:
    for _, palette in world.get_component(TokenPalette):
        return palette
    raise RuntimeError("TokenPalette definitions not found")


def board_dimensions(world: World) -> Tuple[int, int] | None:
    for _, board in world.get_component(Board):
        return board.rows, board.cols
    return None


def in_bounds(world: World, pos: Position) -> bool:
    dims = board_dimensions(world)
    if dims is None:
        return False
    rows, cols = dims
    row, col = pos
    return 0 <= row < rows and 0 <= col < cols


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def orthogonal_neighbors(world: World, pos: Position) -> List[Position]:
    row, col = pos
    candidates = [(row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)]
    return [p for p in candidates if in_bounds(world, p)]


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for _, board in world.get_component(Board):
        if 0 <= row < board.rows and 0 <= col < board.cols and board.entities:
            return board.entities[row][col]
        return None
    return None


def iter_cells(world: World) -> Iterator[Tuple[Position, int]]:
    """Yield (position, entity) pairs in row-major order."""
    board = get_board(world)
    for row in range(board.rows):
        for col in range(board.cols):
            yield (row, col), board.entities[row][col]


def _parts(world: World, entity: int) -> Tuple[ActiveSwitch, Token, CellObstacle]:
    return (
        world.component_for_entity(entity, ActiveSwitch),
        world.component_for_entity(entity, Token),
        world.component_for_entity(entity, CellObstacle),
    )


def read_cell(world: World, pos: Position) -> CellContents:
    """Return the token, the obstacle marker, or None for an empty cell."""
    entity = get_entity_at(world, *pos)
    if entity is None:
        return None
    switch, token, obstacle = _parts(world, entity)
    if not switch.active:
        return None
    if obstacle.kind is not None:
        return obstacle.kind
    return token


def token_at(world: World, pos: Position) -> Token | None:
    contents = read_cell(world, pos)
    return contents if isinstance(contents, Token) else None


def occupied_tokens(world: World) -> Dict[Position, Token]:
    """Return mapping of positions holding a live token (obstacles and empties excluded)."""
    mapping: Dict[Position, Token] = {}
    for pos, entity in iter_cells(world):
        switch, token, obstacle = _parts(world, entity)
        if switch.active and obstacle.kind is None:
            mapping[pos] = token
    return mapping


def place_token(
    world: World,
    pos: Position,
    color: int,
    kind: TokenKind = TokenKind.PLAIN,
    *,
    frozen: bool = False,
) -> Token:
    """Put a freshly identified token into the cell at pos."""
    board = get_board(world)
    entity = board.entities[pos[0]][pos[1]]
    switch, token, obstacle = _parts(world, entity)
    token.token_id = board.allocate_token_id()
    token.color = color
    token.kind = kind
    token.frozen = frozen
    obstacle.kind = None
    switch.active = True
    return token


def place_obstacle(world: World, pos: Position, kind: ObstacleKind) -> None:
    entity = get_entity_at(world, *pos)
    if entity is None:
        raise IndexError(f"Position {pos} is outside the board")
    switch, token, obstacle = _parts(world, entity)
    obstacle.kind = kind
    token.kind = TokenKind.PLAIN
    token.frozen = False
    switch.active = True


def clear_cell(world: World, pos: Position) -> None:
    entity = get_entity_at(world, *pos)
    if entity is None:
        return
    switch, _, obstacle = _parts(world, entity)
    obstacle.kind = None
    switch.active = False


def spawn_token(world: World, pos: Position, rng: random.Random | None = None) -> Token:
    palette = get_palette(world)
    chooser = rng or getattr(world, "random", None) or random
    return place_token(world, pos, chooser.choice(palette.spawnable_colors()))


def move_cell_contents(world: World, src: Position, dst: Position) -> None:
    """Move whatever occupies src into dst, leaving src empty."""
    src_entity = get_entity_at(world, *src)
    dst_entity = get_entity_at(world, *dst)
    if src_entity is None or dst_entity is None or src_entity == dst_entity:
        return
    src_switch, src_token, src_obstacle = _parts(world, src_entity)
    dst_switch, dst_token, dst_obstacle = _parts(world, dst_entity)
    dst_token.copy_from(src_token)
    dst_obstacle.kind = src_obstacle.kind
    dst_switch.active = src_switch.active
    src_obstacle.kind = None
    src_switch.active = False


def swap_cells(world: World, a: Position, b: Position) -> bool:
    """Exchange the contents of two cells in place.

    Only bounds are checked here; callers validate legality first.
    """
    if not (in_bounds(world, a) and in_bounds(world, b)):
        return False
    ent_a = get_entity_at(world, *a)
    ent_b = get_entity_at(world, *b)
    if ent_a is None or ent_b is None:
        return False
    if ent_a == ent_b:
        return True
    switch_a, token_a, obstacle_a = _parts(world, ent_a)
    switch_b, token_b, obstacle_b = _parts(world, ent_b)
    held = Token(token_a.token_id, token_a.color, token_a.kind, token_a.frozen)
    token_a.copy_from(token_b)
    token_b.copy_from(held)
    obstacle_a.kind, obstacle_b.kind = obstacle_b.kind, obstacle_a.kind
    switch_a.active, switch_b.active = switch_b.active, switch_a.active
    return True


def swappable(contents: CellContents) -> bool:
    if contents is None or contents is ObstacleKind.BLOCKING:
        return False
    if isinstance(contents, Token):
        return not contents.frozen
    return True


def validate_swap(world: World, src: Position, dst: Position) -> None:
    """Raise InvalidSwap when the player may not swap src and dst."""
    if src == dst:
        raise InvalidSwap("identical", src, dst)
    if not (in_bounds(world, src) and in_bounds(world, dst)):
        raise InvalidSwap("out_of_bounds", src, dst)
    if not is_adjacent(src, dst):
        raise InvalidSwap("not_adjacent", src, dst)
    for pos in (src, dst):
        contents = read_cell(world, pos)
        if contents is None:
            raise InvalidSwap("empty_cell", src, dst)
        if contents is ObstacleKind.BLOCKING:
            raise InvalidSwap("blocked", src, dst)
        if isinstance(contents, Token) and contents.frozen:
            raise InvalidSwap("frozen", src, dst)


def ensure_board_consistent(world: World) -> None:
    """Raise InconsistentBoard if any cell is empty or a token id repeats."""
    seen: Dict[int, Position] = {}
    for pos, entity in iter_cells(world):
        position = world.component_for_entity(entity, BoardPosition)
        if (position.row, position.col) != pos:
            raise InconsistentBoard(f"Cell entity {entity} indexed at {pos} but positioned at {(position.row, position.col)}")
        switch, token, obstacle = _parts(world, entity)
        if not switch.active:
            raise InconsistentBoard(f"Empty cell at {pos} after refill")
        if obstacle.kind is not None:
            continue
        if token.token_id in seen:
            raise InconsistentBoard(
                f"Token id {token.token_id} present at both {seen[token.token_id]} and {pos}"
            )
        seen[token.token_id] = pos
