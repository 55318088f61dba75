"""
Difficulty model: cumulative score to a monotonic difficulty level
"""

from .configs.game_config import DIFFICULTY_CONFIG


def difficulty_for_score(score: int) -> int:
    return score // DIFFICULTY_CONFIG["score_threshold"] + 1


def update_difficulty(state) -> int:
    """Ratchet ``state.difficulty_level`` up to what the score earns; never down"""
    new_level = difficulty_for_score(state.score)
    if new_level > state.difficulty_level:
        state.difficulty_level = new_level
    return state.difficulty_level
