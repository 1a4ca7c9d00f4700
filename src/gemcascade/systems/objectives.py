from __future__ import annotations

from typing import Dict, Iterable

from gemcascade.components.level import LevelConfig, ObjectiveType
from gemcascade.components.session_state import SessionState
from gemcascade.components.token import TokenKind
from gemcascade.systems.explosion import ExplosionReport
from gemcascade.systems.gravity import GravityReport


def empty_counts() -> Dict[ObjectiveType, int]:
    return {objective: 0 for objective in ObjectiveType}


def objective_deltas(
    explosion: ExplosionReport,
    gravity: GravityReport | None,
    objective_color: int,
) -> Dict[ObjectiveType, int]:
    deltas = empty_counts()
    deltas[ObjectiveType.COLLECT_COLOR] = sum(
        1 for view in explosion.removed
        if view.color == objective_color and view.kind is not TokenKind.WILDCARD
    )
    deltas[ObjectiveType.CLEAR_BLOCKING] = len(explosion.destroyed_blockers)
    deltas[ObjectiveType.CLEAR_FROZEN] = len(explosion.thawed)
    if gravity is not None:
        deltas[ObjectiveType.HARVEST_COLLECTIBLE] = len(gravity.harvested)
    return deltas


def merge_counts(total: Dict[ObjectiveType, int], deltas: Dict[ObjectiveType, int]) -> None:
    for objective, amount in deltas.items():
        total[objective] = total.get(objective, 0) + amount


def objectives_met(session: SessionState, level: LevelConfig) -> bool:
    return all(
        session.objective_counts.get(req.type, 0) >= req.count
        for req in level.objectives
    )


def remaining(session: SessionState, requirements: Iterable) -> Dict[ObjectiveType, int]:
    """Units still needed per objective type (zero when satisfied)."""
    left: Dict[ObjectiveType, int] = {}
    for req in requirements:
        left[req.type] = max(req.count - session.objective_counts.get(req.type, 0), 0)
    return left
