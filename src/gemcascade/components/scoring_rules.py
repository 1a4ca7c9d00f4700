from dataclasses import dataclass

from gemcascade import constants


@dataclass(slots=True)
class ScoringRules:
    """Score weights for one session."""
    token_score: int = constants.TOKEN_SCORE
    combo_step: int = constants.COMBO_STEP
    special_created_bonus: int = constants.SPECIAL_CREATED_BONUS
    color_clear_bonus: int = constants.BONUS_COLOR_CLEAR
    cross_blast_bonus: int = constants.BONUS_CROSS_BLAST
    color_promote_bonus: int = constants.BONUS_COLOR_PROMOTE
    board_clear_bonus: int = constants.BONUS_BOARD_CLEAR
