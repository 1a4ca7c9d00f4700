from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from esper import World

from gemcascade.components.scoring_rules import ScoringRules
from gemcascade.components.token import Token, TokenKind
from gemcascade.systems.board_ops import Position, board_dimensions, occupied_tokens, token_at


class InteractionKind(Enum):
    BOARD_CLEAR = "board_clear"      # wildcard + wildcard; frozen tokens are thawed, not removed
    COLOR_CLEAR = "color_clear"      # wildcard + plain
    COLOR_PROMOTE = "color_promote"  # wildcard + line/area blast
    CROSS_BLAST = "cross_blast"      # line blast + area blast


@dataclass(slots=True)
class InteractionResult:
    """Effect of swapping two special tokens into each other.

    seeds: positions to hand to the explosion propagator
    spent: the two swapped tokens; removed without firing their own effect
    promoted: tokens retyped to ``promote_kind`` before detonation
    """
    kind: InteractionKind
    seeds: List[Position]
    spent: List[Position]
    bonus: int
    color: Optional[int] = None
    promoted: List[Position] = field(default_factory=list)
    promote_kind: Optional[TokenKind] = None


def interaction_kind_for(a: TokenKind, b: TokenKind) -> Optional[InteractionKind]:
    if a is TokenKind.WILDCARD and b is TokenKind.WILDCARD:
        return InteractionKind.BOARD_CLEAR
    if TokenKind.WILDCARD in (a, b):
        other = b if a is TokenKind.WILDCARD else a
        if other.is_blast:
            return InteractionKind.COLOR_PROMOTE
        return InteractionKind.COLOR_CLEAR
    if (a.is_line and b is TokenKind.AREA) or (b.is_line and a is TokenKind.AREA):
        return InteractionKind.CROSS_BLAST
    return None


def _bonus(kind: InteractionKind, rules: ScoringRules) -> int:
    return {
        InteractionKind.BOARD_CLEAR: rules.board_clear_bonus,
        InteractionKind.COLOR_CLEAR: rules.color_clear_bonus,
        InteractionKind.COLOR_PROMOTE: rules.color_promote_bonus,
        InteractionKind.CROSS_BLAST: rules.cross_blast_bonus,
    }[kind]


def resolve_interaction(
    world: World,
    src: Position,
    dst: Position,
    rules: ScoringRules | None = None,
) -> Optional[InteractionResult]:
    """Check the two just-swapped cells for a special-on-special combination.

    Returns None when the pairing has no bespoke effect and ordinary matching applies.
    """
    token_src = token_at(world, src)
    token_dst = token_at(world, dst)
    if token_src is None or token_dst is None:
        return None
    kind = interaction_kind_for(token_src.kind, token_dst.kind)
    if kind is None:
        return None
    rules = rules or ScoringRules()
    tokens = occupied_tokens(world)
    spent = [src, dst]
    result = InteractionResult(kind=kind, seeds=[], spent=spent, bonus=_bonus(kind, rules))

    if kind is InteractionKind.BOARD_CLEAR:
        result.seeds = sorted(tokens)
    elif kind is InteractionKind.COLOR_CLEAR:
        plain = token_dst if token_src.kind is TokenKind.WILDCARD else token_src
        result.color = plain.color
        result.seeds = sorted(set(_positions_of_color(tokens, plain.color)) | set(spent))
    elif kind is InteractionKind.COLOR_PROMOTE:
        blast = token_dst if token_src.kind is TokenKind.WILDCARD else token_src
        result.color = blast.color
        result.promote_kind = blast.kind
        same_color = _positions_of_color(tokens, blast.color)
        result.promoted = [
            pos for pos in same_color
            if pos not in spent and tokens[pos].kind is TokenKind.PLAIN and not tokens[pos].frozen
        ]
        result.seeds = sorted(set(same_color) | set(spent))
    else:
        center = src if token_src.kind is TokenKind.AREA else dst
        result.seeds = _cross_positions(world, center, tokens)
    return result


def apply_interaction(world: World, result: InteractionResult) -> None:
    """Retype promoted tokens ahead of detonation."""
    if result.promote_kind is None:
        return
    for pos in result.promoted:
        token = token_at(world, pos)
        if token is not None:
            token.kind = result.promote_kind


def _positions_of_color(tokens: dict[Position, Token], color: int) -> List[Position]:
    return [
        pos for pos, token in sorted(tokens.items())
        if token.color == color and token.kind is not TokenKind.WILDCARD
    ]


def _cross_positions(world: World, center: Position, tokens: dict[Position, Token]) -> List[Position]:
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    row, col = center
    band_rows = {r for r in range(row - 1, row + 2) if 0 <= r < rows}
    band_cols = {c for c in range(col - 1, col + 2) if 0 <= c < cols}
    return sorted(pos for pos in tokens if pos[0] in band_rows or pos[1] in band_cols)
