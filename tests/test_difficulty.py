from skyfighter.difficulty import difficulty_for_score, update_difficulty
from skyfighter.state import GameState


def test_difficulty_for_score():
    assert difficulty_for_score(0) == 1
    assert difficulty_for_score(149) == 1
    assert difficulty_for_score(150) == 2
    assert difficulty_for_score(450) == 4


def test_difficulty_only_ratchets_up():
    state = GameState(score=450)
    assert update_difficulty(state) == 4

    state.score = 0
    assert update_difficulty(state) == 4


def test_transition_bump_is_kept():
    state = GameState(score=10, difficulty_level=3)
    assert update_difficulty(state) == 3
