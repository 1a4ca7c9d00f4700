"""Chain-reaction expansion of removals.

``propagate`` is read-only: it walks an explicit stack from the seed positions,
keyed by token id so overlapping blasts terminate, and returns what would be
removed. ``apply_explosion`` performs the removal together with the adjacency
side effects (blocking markers destroyed, frozen neighbours thawed).
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from esper import World

from gemcascade.components.obstacle import ObstacleKind
from gemcascade.components.token import Token, TokenKind
from gemcascade.systems.board_ops import (
    Position,
    board_dimensions,
    clear_cell,
    occupied_tokens,
    orthogonal_neighbors,
    read_cell,
    token_at,
)
from gemcascade.utils.snapshot import CellView, cell_view


@dataclass(slots=True)
class ExplosionPlan:
    removed: List[Position] = field(default_factory=list)
    thawed: List[Position] = field(default_factory=list)
    detonations: List[Tuple[Position, TokenKind]] = field(default_factory=list)
    wildcard_targets: Dict[Position, int] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.removed or self.thawed)


@dataclass(slots=True)
class ExplosionReport:
    removed: List[CellView] = field(default_factory=list)
    destroyed_blockers: List[Position] = field(default_factory=list)
    thawed: List[Position] = field(default_factory=list)
    detonations: int = 0

    @property
    def removed_positions(self) -> List[Position]:
        return [view.position for view in self.removed]


def blast_area(pos: Position, kind: TokenKind, rows: int, cols: int) -> List[Position]:
    """Cells swept by a line or area token detonating at pos (pos included)."""
    row, col = pos
    if kind is TokenKind.LINE_ROW:
        return [(row, c) for c in range(cols)]
    if kind is TokenKind.LINE_COL:
        return [(r, col) for r in range(rows)]
    if kind is TokenKind.AREA:
        return [
            (r, c)
            for r in range(row - 1, row + 2)
            for c in range(col - 1, col + 2)
            if 0 <= r < rows and 0 <= c < cols
        ]
    return [pos]


def wildcard_target_color(tokens: Mapping[Position, Token], visited: Set[int]) -> Optional[int]:
    """Most common color among tokens not yet swept; ties go to the lowest color value."""
    counts = Counter(
        token.color
        for token in tokens.values()
        if token.token_id not in visited and token.kind is not TokenKind.WILDCARD
    )
    if not counts:
        return None
    return min(counts, key=lambda color: (-counts[color], color))


def propagate(
    world: World,
    seeds: Iterable[Position],
    anchors: Iterable[Position] = (),
    spent: Iterable[Position] = (),
) -> ExplosionPlan:
    """Expand seed positions into the full set of removals, following chained detonations.

    anchors are reserved for transformation and never removed. spent tokens
    are removed without firing their own effect.
    """
    dims = board_dimensions(world)
    plan = ExplosionPlan()
    if not dims:
        return plan
    rows, cols = dims
    tokens = occupied_tokens(world)
    anchor_set = set(anchors)
    spent_set = set(spent)
    visited: Set[int] = set()
    stack: List[Position] = list(seeds)[::-1]
    while stack:
        pos = stack.pop()
        token = tokens.get(pos)
        if token is None or pos in anchor_set or token.token_id in visited:
            continue
        visited.add(token.token_id)
        if token.frozen:
            plan.thawed.append(pos)
            continue
        plan.removed.append(pos)
        if pos in spent_set or token.kind is TokenKind.PLAIN:
            continue
        if token.kind is TokenKind.WILDCARD:
            color = wildcard_target_color(tokens, visited)
            if color is None:
                continue
            plan.wildcard_targets[pos] = color
            targets = [
                p for p, t in sorted(tokens.items())
                if t.color == color and t.kind is not TokenKind.WILDCARD
            ]
        else:
            targets = blast_area(pos, token.kind, rows, cols)
        plan.detonations.append((pos, token.kind))
        for target in reversed(targets):
            candidate = tokens.get(target)
            if candidate is not None and candidate.token_id not in visited:
                stack.append(target)
    return plan


def apply_explosion(world: World, plan: ExplosionPlan) -> ExplosionReport:
    """Clear planned cells and resolve adjacency effects on obstacles."""
    report = ExplosionReport(detonations=len(plan.detonations))
    removed_set = set(plan.removed)
    for pos in plan.removed:
        report.removed.append(cell_view(world, pos))
        clear_cell(world, pos)
    thawed: Set[Position] = set()
    for pos in plan.thawed:
        token = token_at(world, pos)
        if token is not None and token.frozen:
            token.frozen = False
            thawed.add(pos)
    destroyed: Set[Position] = set()
    for pos in plan.removed:
        for neighbor in orthogonal_neighbors(world, pos):
            if neighbor in removed_set:
                continue
            contents = read_cell(world, neighbor)
            if contents is ObstacleKind.BLOCKING:
                clear_cell(world, neighbor)
                destroyed.add(neighbor)
            elif isinstance(contents, Token) and contents.frozen:
                contents.frozen = False
                thawed.add(neighbor)
    report.destroyed_blockers = sorted(destroyed)
    report.thawed = sorted(thawed)
    return report
