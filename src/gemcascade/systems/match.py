"""Match detection: runs of equal color and the specials they produce.

Runs are maximal horizontal or vertical lines of three or more equal-colored
participants. Frozen tokens, wildcards, obstacles and empty cells are not
participants and break runs.

Shapes are classified in a fixed priority order:

    intersection (L/T/plus)  -> AREA at the crossing token
    run of five or more      -> WILDCARD
    run of exactly four      -> LINE_COL for a horizontal run, LINE_ROW for a vertical one
    run of three             -> no special

Each run yields at most one special, and a token claimed as an anchor is
never claimed again nor included in the matched set.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from esper import World

from gemcascade.components.token import Token, TokenKind
from gemcascade.systems.board_ops import Position, board_dimensions, occupied_tokens

MIN_RUN = 3


@dataclass(frozen=True, slots=True)
class Run:
    positions: Tuple[Position, ...]
    horizontal: bool
    color: int

    def __len__(self) -> int:
        return len(self.positions)


@dataclass(frozen=True, slots=True)
class Transformation:
    position: Position
    token_id: int
    kind: TokenKind


@dataclass(slots=True)
class MatchResult:
    matched: List[Position] = field(default_factory=list)
    transformations: List[Transformation] = field(default_factory=list)
    runs: List[Run] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.matched or self.transformations)

    @property
    def anchors(self) -> Set[Position]:
        return {t.position for t in self.transformations}

    @property
    def positions(self) -> List[Position]:
        """Every position involved in the match, anchors included."""
        return sorted(set(self.matched) | self.anchors)


def participant_colors(tokens: Mapping[Position, Token]) -> Dict[Position, int]:
    return {
        pos: token.color
        for pos, token in tokens.items()
        if not token.frozen and token.kind is not TokenKind.WILDCARD
    }


def find_runs(colors: Mapping[Position, int], rows: int, cols: int) -> List[Run]:
    """Detect all maximal horizontal then vertical runs of length >= 3."""
    runs: List[Run] = []
    for r in range(rows):
        runs.extend(_scan_line([(r, c) for c in range(cols)], colors, horizontal=True))
    for c in range(cols):
        runs.extend(_scan_line([(r, c) for r in range(rows)], colors, horizontal=False))
    return runs


def _scan_line(line: List[Position], colors: Mapping[Position, int], *, horizontal: bool) -> List[Run]:
    found: List[Run] = []
    run: List[Position] = []
    last = None
    for pos in line:
        value = colors.get(pos)
        if value is not None and value == last:
            run.append(pos)
        else:
            if len(run) >= MIN_RUN:
                found.append(Run(tuple(run), horizontal, last))
            run = [pos] if value is not None else []
            last = value
    if len(run) >= MIN_RUN:
        found.append(Run(tuple(run), horizontal, last))
    return found


def has_line_match(colors: Mapping[Position, int], pos: Position) -> bool:
    """Return True if a horizontal or vertical run of three passes through pos."""
    row, col = pos
    value = colors.get(pos)
    if value is None:
        return False
    # Horizontal sweep
    h_run = 1
    c_left = col - 1
    while colors.get((row, c_left)) == value:
        h_run += 1
        c_left -= 1
    c_right = col + 1
    while colors.get((row, c_right)) == value:
        h_run += 1
        c_right += 1
    if h_run >= MIN_RUN:
        return True
    # Vertical sweep
    v_run = 1
    r_up = row - 1
    while colors.get((r_up, col)) == value:
        v_run += 1
        r_up -= 1
    r_down = row + 1
    while colors.get((r_down, col)) == value:
        v_run += 1
        r_down += 1
    return v_run >= MIN_RUN


def _pick_line_anchor(run: Run, claimed: Set[Position], tokens: Mapping[Position, Token]) -> Optional[Position]:
    # Geometric center first, then outward; only unclaimed plain tokens qualify.
    center = (len(run) - 1) // 2
    order = sorted(range(len(run)), key=lambda i: (abs(i - center), i))
    for index in order:
        pos = run.positions[index]
        if pos in claimed:
            continue
        if tokens[pos].kind.is_special:
            continue
        return pos
    return None


def classify_runs(runs: Iterable[Run], tokens: Mapping[Position, Token]) -> MatchResult:
    runs = list(runs)
    result = MatchResult(runs=runs)
    if not runs:
        return result
    claimed: Set[Position] = set()
    used: Set[int] = set()
    h_index: Dict[Position, int] = {}
    v_index: Dict[Position, int] = {}
    for idx, run in enumerate(runs):
        target = h_index if run.horizontal else v_index
        for pos in run.positions:
            target[pos] = idx

    def claim(pos: Position, kind: TokenKind, run_ids: Iterable[int]) -> None:
        claimed.add(pos)
        used.update(run_ids)
        result.transformations.append(Transformation(pos, tokens[pos].token_id, kind))

    # Intersections: L, T and plus shapes.
    for pos in sorted(set(h_index) & set(v_index)):
        h, v = h_index[pos], v_index[pos]
        if h in used or v in used or pos in claimed:
            continue
        if tokens[pos].kind.is_special:
            continue
        claim(pos, TokenKind.AREA, (h, v))

    ordered = sorted(range(len(runs)), key=lambda i: (-len(runs[i]), runs[i].positions[0], not runs[i].horizontal))
    # Five or longer.
    for idx in ordered:
        run = runs[idx]
        if idx in used or len(run) < 5:
            continue
        anchor = _pick_line_anchor(run, claimed, tokens)
        if anchor is not None:
            claim(anchor, TokenKind.WILDCARD, (idx,))
    # Exactly four; the blast direction is orthogonal to the run.
    for idx in ordered:
        run = runs[idx]
        if idx in used or len(run) != 4:
            continue
        anchor = _pick_line_anchor(run, claimed, tokens)
        if anchor is not None:
            kind = TokenKind.LINE_COL if run.horizontal else TokenKind.LINE_ROW
            claim(anchor, kind, (idx,))

    members = {pos for run in runs for pos in run.positions}
    result.matched = sorted(members - claimed)
    return result


def find_matches(world: World) -> MatchResult:
    """Scan the board and return matched positions plus transformation requests."""
    dims = board_dimensions(world)
    if not dims:
        return MatchResult()
    rows, cols = dims
    tokens = occupied_tokens(world)
    runs = find_runs(participant_colors(tokens), rows, cols)
    return classify_runs(runs, tokens)


def find_all_matches(world: World) -> List[List[Position]]:
    """Return matched groups (runs sharing a token are merged), each sorted."""
    result = find_matches(world)
    groups = [set(run.positions) for run in result.runs]
    merged: List[Set[Position]] = []
    while groups:
        first = groups.pop()
        changed = True
        while changed:
            changed = False
            for g in groups[:]:
                if first & g:
                    first |= g
                    groups.remove(g)
                    changed = True
        merged.append(first)
    return [sorted(group) for group in merged]
