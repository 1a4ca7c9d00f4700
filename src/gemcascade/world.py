import random

from esper import World

from gemcascade.components.level import LevelConfig
from gemcascade.components.palette import TokenPalette
from gemcascade.components.scoring_rules import ScoringRules
from gemcascade.components.session_state import SessionState
from gemcascade.components.turn_state import TurnState
from gemcascade.constants import COLOR_NAMES
from gemcascade.events.bus import EventBus


def create_world(
    event_bus: EventBus,
    level: LevelConfig | None = None,
    *,
    scoring: ScoringRules | None = None,
    rng: random.Random | None = None,
) -> World:
    """Create the ECS world holding level, session, turn and palette resources.

    The board itself is added by BoardSystem so callers can adjust the palette
    or session before the first layout is generated.
    """
    level = level or LevelConfig()
    world = World()
    setattr(world, "random", rng or random.Random(level.seed))

    # Session resources live together on one entity.
    world.create_entity(
        level,
        scoring or ScoringRules(),
        SessionState(moves_left=level.moves, target_score=level.target_score),
        TurnState(),
    )

    colors = {color: COLOR_NAMES.get(color, f"color_{color}") for color in range(1, level.color_count + 1)}
    if level.objective_color not in colors:
        raise ValueError(f"Objective color {level.objective_color} is outside the {level.color_count}-color palette")
    world.create_entity(TokenPalette(colors=colors, objective_color=level.objective_color))
    return world
