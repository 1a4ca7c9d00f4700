import pytest

from gemcascade.components.level import ObjectiveType
from gemcascade.components.obstacle import ObstacleKind
from gemcascade.errors import InconsistentBoard
from gemcascade.systems.board_ops import (
    clear_cell,
    ensure_board_consistent,
    occupied_tokens,
    read_cell,
    token_at,
)
from gemcascade.systems.explosion import ExplosionReport
from gemcascade.systems.gravity import compute_gravity_moves, settle_board
from gemcascade.systems.objectives import objective_deltas
from tests.helpers import make_session, paint


def test_gravity_conserves_tokens_and_leaves_gaps_on_top():
    _, world, _, _ = make_session()
    paint(world, {(4, 2): '_', (6, 2): '_', (7, 5): '_'})
    before = {t.token_id for t in occupied_tokens(world).values()}

    report = settle_board(world, refill=False)

    after = {t.token_id for t in occupied_tokens(world).values()}
    assert after == before
    assert read_cell(world, (0, 2)) is None and read_cell(world, (1, 2)) is None
    assert read_cell(world, (0, 5)) is None
    assert all(read_cell(world, (r, 2)) is not None for r in range(2, 8))
    assert report.cascades == 2


def test_gravity_keeps_relative_order_in_a_column():
    _, world, _, _ = make_session()
    paint(world, {(5, 0): '_'})
    ids = [token_at(world, (r, 0)).token_id for r in range(5)]
    settle_board(world, refill=False)
    assert [token_at(world, (r, 0)).token_id for r in range(1, 6)] == ids


def test_refill_leaves_no_empty_cells():
    _, world, _, _ = make_session()
    paint(world, {(0, 0): '_', (3, 3): '_', (7, 7): '_'})
    report = settle_board(world)
    assert len(report.spawned) == 3
    ensure_board_consistent(world)


def test_blocker_splits_column_into_segments():
    _, world, _, _ = make_session()
    paint(world, {(4, 0): '#', (6, 0): '_', (2, 0): '_'})
    above = [token_at(world, (r, 0)).token_id for r in (0, 1)]
    below = token_at(world, (5, 0)).token_id

    settle_board(world, refill=False)

    assert read_cell(world, (4, 0)) is ObstacleKind.BLOCKING
    assert token_at(world, (6, 0)).token_id == below
    assert read_cell(world, (5, 0)) is None
    assert [token_at(world, (r, 0)).token_id for r in (1, 2)] == above
    assert read_cell(world, (0, 0)) is None


def test_collectible_falls_to_bottom_and_is_harvested():
    _, world, _, _ = make_session()
    paint(world, {(5, 0): '$', (6, 0): '_', (7, 0): '_'})

    moves, _ = compute_gravity_moves(world)
    assert any(m.source == (5, 0) and m.target == (7, 0) and m.obstacle is ObstacleKind.COLLECTIBLE for m in moves)

    report = settle_board(world)

    assert report.harvested == [(7, 0)]
    assert all(read_cell(world, (r, 0)) is not ObstacleKind.COLLECTIBLE for r in range(8))
    deltas = objective_deltas(ExplosionReport(), report, objective_color=1)
    assert deltas[ObjectiveType.HARVEST_COLLECTIBLE] == 1
    ensure_board_consistent(world)


def test_stacked_collectibles_are_harvested_in_turn():
    _, world, _, _ = make_session()
    paint(world, {(6, 3): '$', (7, 3): '$'})
    report = settle_board(world)
    assert report.harvested == [(7, 3), (7, 3)]


def test_consistency_check_detects_duplicate_ids():
    _, world, _, _ = make_session()
    paint(world)
    token_at(world, (0, 1)).token_id = token_at(world, (0, 0)).token_id
    with pytest.raises(InconsistentBoard):
        ensure_board_consistent(world)


def test_consistency_check_detects_empty_cells():
    _, world, _, _ = make_session()
    paint(world)
    clear_cell(world, (2, 2))
    with pytest.raises(InconsistentBoard):
        ensure_board_consistent(world)
