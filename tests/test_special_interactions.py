from gemcascade.components.scoring_rules import ScoringRules
from gemcascade.components.token import TokenKind
from gemcascade.systems.board_ops import token_at
from gemcascade.systems.explosion import propagate
from gemcascade.systems.interactions import (
    InteractionKind,
    apply_interaction,
    interaction_kind_for,
    resolve_interaction,
)
from tests.helpers import make_session, paint


def test_interaction_table():
    assert interaction_kind_for(TokenKind.WILDCARD, TokenKind.WILDCARD) is InteractionKind.BOARD_CLEAR
    assert interaction_kind_for(TokenKind.PLAIN, TokenKind.WILDCARD) is InteractionKind.COLOR_CLEAR
    assert interaction_kind_for(TokenKind.WILDCARD, TokenKind.AREA) is InteractionKind.COLOR_PROMOTE
    assert interaction_kind_for(TokenKind.LINE_COL, TokenKind.WILDCARD) is InteractionKind.COLOR_PROMOTE
    assert interaction_kind_for(TokenKind.LINE_ROW, TokenKind.AREA) is InteractionKind.CROSS_BLAST
    assert interaction_kind_for(TokenKind.AREA, TokenKind.LINE_COL) is InteractionKind.CROSS_BLAST
    assert interaction_kind_for(TokenKind.LINE_ROW, TokenKind.LINE_COL) is None
    assert interaction_kind_for(TokenKind.AREA, TokenKind.AREA) is None
    assert interaction_kind_for(TokenKind.PLAIN, TokenKind.LINE_ROW) is None


def test_plain_pair_has_no_interaction():
    _, world, _, _ = make_session()
    paint(world)
    assert resolve_interaction(world, (3, 3), (3, 4)) is None


def test_board_clear_seeds_every_token():
    _, world, _, _ = make_session()
    paint(world, {(3, 3): '*', (3, 4): '*', (0, 0): '#'})
    result = resolve_interaction(world, (3, 3), (3, 4))
    assert result.kind is InteractionKind.BOARD_CLEAR
    assert len(result.seeds) == 63
    assert result.bonus == ScoringRules().board_clear_bonus
    plan = propagate(world, result.seeds, spent=result.spent)
    assert len(plan.removed) == 63
    assert plan.detonations == []


def test_color_clear_removes_every_token_of_the_partner_color():
    _, world, _, _ = make_session()
    paint(world, {(3, 3): '*', (3, 4): '2', (0, 0): '2', (5, 5): '2', (7, 7): '2'})
    result = resolve_interaction(world, (3, 3), (3, 4))
    assert result.kind is InteractionKind.COLOR_CLEAR
    assert result.color == 2
    plan = propagate(world, result.seeds, spent=result.spent)
    assert set(plan.removed) == {(3, 3), (3, 4), (0, 0), (5, 5), (7, 7)}


def test_color_promote_turns_same_color_tokens_into_blasts():
    _, world, _, _ = make_session()
    paint(world, {(3, 3): '*', (3, 4): '2r', (6, 1): '2', (0, 5): '2', (1, 1): '2f'})
    result = resolve_interaction(world, (3, 3), (3, 4))
    assert result.kind is InteractionKind.COLOR_PROMOTE
    assert result.promote_kind is TokenKind.LINE_ROW
    assert result.promoted == [(0, 5), (6, 1)]

    apply_interaction(world, result)
    assert token_at(world, (6, 1)).kind is TokenKind.LINE_ROW
    assert token_at(world, (1, 1)).kind is TokenKind.PLAIN

    plan = propagate(world, result.seeds, spent=result.spent)
    removed = set(plan.removed)
    assert {(6, c) for c in range(8)} <= removed
    assert {(0, c) for c in range(8)} <= removed
    assert (3, 0) not in removed
    assert (1, 1) in plan.thawed


def test_cross_blast_covers_three_rows_and_three_columns():
    _, world, _, _ = make_session()
    paint(world, {(3, 3): '2c', (3, 4): '4a'})
    result = resolve_interaction(world, (3, 3), (3, 4))
    assert result.kind is InteractionKind.CROSS_BLAST
    # Rows 2-4 and columns 3-5 centred on the area token.
    assert len(result.seeds) == 3 * 8 + 3 * 8 - 9
    assert (0, 3) in result.seeds and (7, 5) in result.seeds
    assert (0, 0) not in result.seeds
    plan = propagate(world, result.seeds, spent=result.spent)
    assert len(plan.removed) == 39


def test_interaction_bonus_follows_scoring_rules():
    _, world, _, _ = make_session()
    paint(world, {(3, 3): '2c', (3, 4): '4a'})
    rules = ScoringRules(cross_blast_bonus=11)
    assert resolve_interaction(world, (3, 3), (3, 4), rules).bonus == 11


def test_default_interaction_bonuses_are_ordered():
    rules = ScoringRules()
    assert rules.color_promote_bonus > rules.color_clear_bonus
    assert rules.color_clear_bonus < rules.cross_blast_bonus < rules.color_promote_bonus < rules.board_clear_bonus


def test_token_kind_groups():
    assert [k for k in TokenKind if k.is_special] == [
        TokenKind.LINE_ROW, TokenKind.LINE_COL, TokenKind.AREA, TokenKind.WILDCARD,
    ]
    assert [k for k in TokenKind if k.is_blast] == [TokenKind.LINE_ROW, TokenKind.LINE_COL, TokenKind.AREA]
    assert [k for k in TokenKind if k.is_line] == [TokenKind.LINE_ROW, TokenKind.LINE_COL]


def test_board_clear_thaws_frozen_tokens_instead_of_removing_them():
    _, world, _, _ = make_session()
    paint(world, {(3, 3): '*', (3, 4): '*', (6, 2): '.f'})
    result = resolve_interaction(world, (3, 3), (3, 4))
    plan = propagate(world, result.seeds, spent=result.spent)
    assert len(plan.removed) == 63
    assert plan.thawed == [(6, 2)]
