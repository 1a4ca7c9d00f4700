from esper import World

from gemcascade.components.level import LevelConfig
from gemcascade.components.scoring_rules import ScoringRules
from gemcascade.components.session_state import SessionState
from gemcascade.components.turn_state import TurnState


def get_or_create_turn_state(world: World) -> TurnState:
    """Return the shared TurnState component, creating it if absent."""
    existing = list(world.get_component(TurnState))
    if existing:
        return existing[0][1]
    world.create_entity(TurnState())
    return list(world.get_component(TurnState))[0][1]


def get_session_state(world: World) -> SessionState:
    for _, state in world.get_component(SessionState):
        return state
    raise RuntimeError("SessionState not found")


def get_level(world: World) -> LevelConfig:
    for _, level in world.get_component(LevelConfig):
        return level
    raise RuntimeError("LevelConfig not found")


def get_scoring_rules(world: World) -> ScoringRules:
    for _, rules in world.get_component(ScoringRules):
        return rules
    raise RuntimeError("ScoringRules not found")
