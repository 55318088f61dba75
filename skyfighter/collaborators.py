"""
Audio and persistence collaborators

Both are best effort: failures are logged here and never reach the simulation.
"""

import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class AudioEvent:
    SHOT_FIRED = "shot_fired"
    ENEMY_SHOT = "enemy_shot"
    ENEMY_HIT = "enemy_hit"
    ENEMY_DESTROYED = "enemy_destroyed"
    PLAYER_DAMAGED = "player_damaged"
    POWERUP_COLLECTED = "powerup_collected"
    SHIELD_UP = "shield_up"
    SHIELD_DOWN = "shield_down"
    EXTRA_LIFE = "extra_life"
    BOMB_USED = "bomb_used"
    RUN_ENDED = "run_ended"
    PORTAL_SPAWNED = "portal_spawned"
    BLACK_HOLE_ENTERED = "black_hole_entered"
    WHITE_HOLE_ENTERED = "white_hole_entered"
    CLICK = "click"


class AudioSink:
    """Fire-and-forget sound player. The base class is silent."""

    def play(self, event: str, detail: Optional[str] = None):
        pass


class NullAudio(AudioSink):
    pass


class ArcadeAudio(AudioSink):
    """Plays arcade's bundled sound resources for each event"""

    SOUNDS: Dict[str, str] = {
        AudioEvent.SHOT_FIRED: ":resources:sounds/laser1.wav",
        AudioEvent.ENEMY_SHOT: ":resources:sounds/laser2.wav",
        AudioEvent.ENEMY_HIT: ":resources:sounds/hit1.wav",
        AudioEvent.ENEMY_DESTROYED: ":resources:sounds/explosion1.wav",
        AudioEvent.PLAYER_DAMAGED: ":resources:sounds/hurt1.wav",
        AudioEvent.POWERUP_COLLECTED: ":resources:sounds/upgrade1.wav",
        AudioEvent.SHIELD_UP: ":resources:sounds/upgrade2.wav",
        AudioEvent.SHIELD_DOWN: ":resources:sounds/fall1.wav",
        AudioEvent.EXTRA_LIFE: ":resources:sounds/coin1.wav",
        AudioEvent.BOMB_USED: ":resources:sounds/explosion2.wav",
        AudioEvent.RUN_ENDED: ":resources:sounds/gameover1.wav",
        AudioEvent.PORTAL_SPAWNED: ":resources:sounds/phaseJump1.wav",
        AudioEvent.BLACK_HOLE_ENTERED: ":resources:sounds/upgrade4.wav",
        AudioEvent.WHITE_HOLE_ENTERED: ":resources:sounds/secret2.wav",
        AudioEvent.CLICK: ":resources:sounds/coin2.wav",
    }

    def __init__(self, volume: float = 0.3):
        self.volume = volume
        self.muted = False
        self._cache = {}

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        return self.muted

    def play(self, event: str, detail: Optional[str] = None):
        if self.muted:
            return
        path = self.SOUNDS.get(event)
        if path is None:
            return
        import arcade

        sound = self._cache.get(path)
        if sound is None:
            sound = arcade.load_sound(path)
            self._cache[path] = sound
        arcade.play_sound(sound, volume=self.volume)


class HighScoreStore:
    """High score persisted as a small JSON document"""

    def __init__(self, path: str = "~/.skyfighter_highscore.json"):
        self.path = os.path.expanduser(path)

    def load(self) -> int:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return int(json.load(f).get("high_score", 0))
        except FileNotFoundError:
            return 0
        except Exception:
            logger.warning("Could not read high score from %s", self.path, exc_info=True)
            return 0

    def save(self, score: int):
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({"high_score": int(score)}, f)
        except Exception:
            logger.warning("Could not save high score to %s", self.path, exc_info=True)
