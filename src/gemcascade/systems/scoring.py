from __future__ import annotations

from gemcascade.components.scoring_rules import ScoringRules


def iteration_score(removed: int, depth: int, rules: ScoringRules, *, specials_created: int = 0) -> int:
    """Score for one cascade iteration.

    Every removed token is worth ``token_score`` plus ``combo_step`` for each
    cascade level past the first; each special produced adds a flat bonus.
    """
    if removed <= 0 and specials_created <= 0:
        return 0
    per_token = rules.token_score + rules.combo_step * max(depth - 1, 0)
    return removed * per_token + specials_created * rules.special_created_bonus
