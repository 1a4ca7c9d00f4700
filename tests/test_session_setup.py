import random

import pytest
from esper import World

from gemcascade.components.level import LevelConfig
from gemcascade.components.palette import TokenPalette
from gemcascade.components.scoring_rules import ScoringRules
from gemcascade.components.session_state import SessionState
from gemcascade.events.bus import EventBus
from gemcascade.systems.board_ops import get_palette
from gemcascade.systems.scoring import iteration_score
from gemcascade.systems.turn_state_utils import get_level, get_scoring_rules, get_session_state
from gemcascade.world import create_world


@pytest.mark.parametrize('kwargs', [
    {'rows': 2},
    {'cols': 1},
    {'color_count': 2},
    {'moves': -1},
    {'rows': 4, 'cols': 4, 'blocking_count': 5, 'collectible_count': 4},
])
def test_level_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        LevelConfig(**kwargs)


def test_world_carries_session_resources():
    bus = EventBus()
    level = LevelConfig(moves=12, target_score=700)
    rules = ScoringRules(token_score=7)
    world = create_world(bus, level, scoring=rules, rng=random.Random(3))
    assert get_level(world) is level
    assert get_scoring_rules(world) is rules
    session = get_session_state(world)
    assert (session.moves_left, session.target_score, session.score) == (12, 700, 0)
    assert isinstance(world.random, random.Random)


def test_palette_matches_color_count():
    bus = EventBus()
    world = create_world(bus, LevelConfig(color_count=4))
    palette = get_palette(world)
    assert palette.spawnable_colors() == [1, 2, 3, 4]
    assert palette.name_for(1) == 'eth'


def test_objective_color_outside_palette_is_rejected():
    with pytest.raises(ValueError):
        create_world(EventBus(), LevelConfig(color_count=3, objective_color=5))


def test_palette_spawnable_filters_unknown_colors():
    palette = TokenPalette(colors={1: 'a', 2: 'b', 3: 'c'}, objective_color=1, spawnable=[3, 9, 3, 1])
    assert palette.spawnable_colors() == [3, 1]
    palette.set_spawnable([8])
    assert palette.spawnable_colors() == [1, 2, 3]


def test_iteration_score_grows_with_cascade_depth():
    rules = ScoringRules()
    assert iteration_score(3, 1, rules) == 3 * rules.token_score
    assert iteration_score(3, 2, rules) == 3 * (rules.token_score + rules.combo_step)
    assert iteration_score(3, 1, rules, specials_created=1) == 3 * rules.token_score + rules.special_created_bonus
    assert iteration_score(0, 4, rules) == 0


def test_session_over_flag():
    session = SessionState(moves_left=3, target_score=100)
    assert not session.is_over
    assert all(count == 0 for count in session.objective_counts.values())


def test_missing_scoring_rules_raise():
    with pytest.raises(RuntimeError):
        get_scoring_rules(World())
