from gemcascade.components.obstacle import ObstacleKind
from gemcascade.components.token import TokenKind
from gemcascade.utils.snapshot import render_text, take_snapshot
from tests.helpers import make_session, paint


def test_snapshot_is_a_detached_copy():
    _, world, _, _ = make_session(rows=3, cols=3)
    paint(world, {(0, 0): '2r', (1, 1): '#', (2, 2): '$'})
    snapshot = take_snapshot(world, 'swap', 0)
    paint(world)
    assert snapshot.at(0, 0).kind is TokenKind.LINE_ROW
    assert snapshot.at(1, 1).obstacle is ObstacleKind.BLOCKING
    assert snapshot.at(2, 2).obstacle is ObstacleKind.COLLECTIBLE


def test_render_text_marks():
    _, world, _, _ = make_session(rows=3, cols=3)
    paint(world, {(0, 0): '2r', (0, 1): '2c', (0, 2): '2a', (1, 0): '*', (1, 1): '#', (1, 2): '$', (2, 0): '_', (2, 1): '1'})
    text = render_text(take_snapshot(world, 'explosion', 1))
    assert text.splitlines() == ['rca', '*#$', '.15']
