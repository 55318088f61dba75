"""
Level-transition state machine driven by the black hole

Idle (direction 0) -> FadingOut (+1) -> FadingIn (-1) -> Idle, with a
continuous overlay alpha in [0, 1].
"""

from enum import Enum

from .configs.game_config import TRANSITION_CONFIG


class TransitionPhase(int, Enum):
    IDLE = 0
    FADING_OUT = 1
    FADING_IN = -1


class TransitionEvent(str, Enum):
    NONE = "none"
    SCREEN_DARK = "screen_dark"  # fade-out finished; the level change happens now
    FINISHED = "finished"


class LevelTransition:
    """Fade overlay plus the ``in_transition`` lock it holds on the game state"""

    def __init__(self, fade_step: float = TRANSITION_CONFIG["fade_step"]):
        self.fade_step = fade_step
        self.direction = TransitionPhase.IDLE
        self.alpha = 0.0

    @property
    def active(self) -> bool:
        return self.direction != TransitionPhase.IDLE

    def begin(self, state) -> bool:
        """Start fading out. Ignored while a transition is already running."""
        if state.in_transition:
            return False
        state.in_transition = True
        self.direction = TransitionPhase.FADING_OUT
        return True

    def update(self, state) -> TransitionEvent:
        if self.direction == TransitionPhase.FADING_OUT:
            self.alpha += self.fade_step
            if self.alpha >= 1.0:
                self.alpha = 1.0
                self.direction = TransitionPhase.FADING_IN
                return TransitionEvent.SCREEN_DARK

        elif self.direction == TransitionPhase.FADING_IN:
            self.alpha -= self.fade_step
            if self.alpha <= 0.0:
                self.alpha = 0.0
                self.direction = TransitionPhase.IDLE
                state.in_transition = False
                return TransitionEvent.FINISHED

        return TransitionEvent.NONE

    def reset(self):
        self.direction = TransitionPhase.IDLE
        self.alpha = 0.0
