"""
Simulation - the per-frame orchestrator for Sky Fighter
-------------------------------------------------------
- Owns every entity collection and the run-level GameState
- ``tick(delta_ms)`` advances all subsystems once, in a fixed order
- Audio and high-score persistence are injected collaborators
- ``snapshot()`` exposes a read-only view for whatever draws the frame

All timers are absolute millisecond timestamps compared against a single
``now`` sampled at the start of each tick.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional

from .collaborators import AudioEvent, AudioSink, HighScoreStore, NullAudio
from .collisions import resolve_collisions, resolve_portals
from .configs.game_config import (
    BULLET_CONFIG,
    ENEMY_CONFIG,
    PARTICLE_CONFIG,
    POWERUP_CONFIG,
    TRANSITION_CONFIG,
    WORLD_CONFIG,
)
from .difficulty import update_difficulty
from .entities import (
    BlackHole,
    Bullet,
    Cloud,
    DURATION_POWERUPS,
    Enemy,
    EntityKind,
    InputState,
    Particle,
    Player,
    PowerUp,
    PowerupType,
    WhiteHole,
)
from .spawner import (
    initial_clouds,
    maybe_spawn_cloud,
    place_portals,
    portals_due,
    roll_powerup_drop,
    spawn_enemy,
    spawn_interval,
)
from .state import EntityView, FrameSnapshot, GameState, RunSummary
from .transition import LevelTransition, TransitionEvent
from .utils import Color, clamp, seed_everything, sky_theme, wall_clock_ms

logger = logging.getLogger(__name__)

PLAYER_COLOR: Color = (68, 136, 255)


class Simulation:
    """Game world for one player; call start_run() then tick() once per frame"""

    def __init__(
        self,
        width: float = WORLD_CONFIG["width"],
        height: float = WORLD_CONFIG["height"],
        audio: Optional[AudioSink] = None,
        store: Optional[HighScoreStore] = None,
        clock: Optional[Callable[[], float]] = None,
        seed: Optional[int] = None,
    ):
        self.width = width
        self.height = height
        self.audio = audio if audio is not None else NullAudio()
        self.store = store
        self.clock = clock if clock is not None else wall_clock_ms
        self.seed = seed
        seed_everything(seed)

        high_score = self.store.load() if self.store is not None else 0
        self.state = GameState(high_score=high_score)
        self.input = InputState()
        self.transition = LevelTransition()

        # World state
        self.player: Optional[Player] = None
        self.bullets: List[Bullet] = []
        self.enemy_bullets: List[Bullet] = []
        self.enemies: List[Enemy] = []
        self.powerups: List[PowerUp] = []
        self.particles: List[Particle] = []
        self.clouds: List[Cloud] = initial_clouds(width, height)
        self.black_hole: Optional[BlackHole] = None
        self.white_hole: Optional[WhiteHole] = None
        self.theme = sky_theme(1)

        self.last_enemy_spawn = 0.0
        self.now = 0.0
        self.summary: Optional[RunSummary] = None

        # Per-tick event counters (consumed by the RL environment)
        self.events: Dict[str, float] = {}
        self._reset_events()

    # ----------------------------
    # Run lifecycle
    # ----------------------------

    def start_run(self, now: Optional[float] = None):
        """Reset the world and begin a fresh run; the high score carries over"""
        now = self.clock() if now is None else now
        self.now = now
        self.emit(AudioEvent.CLICK)

        self.state = GameState(
            is_running=True,
            high_score=self.state.high_score,
            start_time=now,
        )
        self.input = InputState()
        self.transition.reset()

        self.player = Player(x=self.width / 2, y=self.height - 100)
        self.bullets = []
        self.enemy_bullets = []
        self.enemies = []
        self.powerups = []
        self.particles = []
        self.black_hole = None
        self.white_hole = None

        self.clouds = initial_clouds(self.width, self.height)
        self.theme = sky_theme(self.state.current_level)

        self.last_enemy_spawn = now
        self.summary = None
        self._reset_events()
        logger.info("Run started (high score %d)", self.state.high_score)

    def end_run(self, now: Optional[float] = None) -> RunSummary:
        now = self.now if now is None else now
        state = self.state
        state.is_running = False

        self.emit(AudioEvent.RUN_ENDED)
        self.explode(self.player.x, self.player.y, PLAYER_COLOR, is_big=True)

        new_high = state.score > state.high_score
        if new_high:
            state.high_score = state.score
            if self.store is not None:
                self.store.save(state.high_score)

        self.summary = RunSummary(
            final_score=state.score,
            high_score=state.high_score,
            new_high_score=new_high,
            enemies_defeated=state.enemies_defeated,
            time_survived_ms=now - state.start_time,
            level=state.current_level,
        )
        logger.info(
            "Run ended: score %d, level %d, %d enemies defeated, survived %s",
            state.score, state.current_level, state.enemies_defeated,
            self.summary.time_survived,
        )
        return self.summary

    def drain(self) -> bool:
        """After the run ends, keep only the particles moving. True while any remain."""
        for p in self.particles:
            p.update()
        self.particles = [p for p in self.particles if not p.is_dead()]
        return len(self.particles) > 0

    def toggle_pause(self) -> bool:
        if self.state.is_running:
            self.state.is_paused = not self.state.is_paused
        return self.state.is_paused

    def set_input(self, **intents):
        for name, value in intents.items():
            if not hasattr(self.input, name):
                raise AttributeError(f"Unknown input intent: {name}")
            setattr(self.input, name, bool(value))

    # ----------------------------
    # Tick
    # ----------------------------

    def tick(self, delta_ms: float, now: Optional[float] = None):
        """Advance the world by one frame"""
        state = self.state
        if not state.is_running or state.is_paused:
            return
        now = self.clock() if now is None else now
        self.now = now
        self._reset_events()

        self.update_background()

        if not state.in_transition:
            for ptype in self.player.update(self.input, delta_ms, now, self.width, self.height):
                if ptype == PowerupType.SHIELD:
                    self.emit(AudioEvent.SHIELD_DOWN)
            if self.input.firing and self.player.can_shoot(now):
                self.shoot(now)

        self.spawn_enemies(now)
        self.spawn_portals(now)

        if self.black_hole is not None:
            self.black_hole.update()
        if self.white_hole is not None:
            self.white_hole.update()

        self.bullets = self._advance_bullets(self.bullets, now)
        self.enemy_bullets = self._advance_bullets(self.enemy_bullets, now)

        shoot_min_y, shoot_max_frac = ENEMY_CONFIG["shoot_band"]
        for enemy in self.enemies:
            if not enemy.active:
                continue
            enemy.update(self.width)
            if enemy.can_shoot(now) and shoot_min_y < enemy.y < self.height * shoot_max_frac:
                self.enemy_shoot(enemy, now)
        self.enemies = [e for e in self.enemies if e.active and not e.is_out_of_bounds(self.height)]

        for powerup in self.powerups:
            powerup.update(now)
        self.powerups = [
            p for p in self.powerups if p.active and not p.is_out_of_bounds(self.height)
        ]

        for particle in self.particles:
            particle.update()
        self.particles = [p for p in self.particles if not p.is_dead()]

        resolve_collisions(self, now)
        # Drop everything the passes consumed or destroyed
        self.bullets = [b for b in self.bullets if b.active]
        self.enemy_bullets = [b for b in self.enemy_bullets if b.active]
        self.enemies = [e for e in self.enemies if e.active]
        self.powerups = [p for p in self.powerups if p.active]

        if not state.in_transition:
            resolve_portals(self)

        if self.transition.update(state) is TransitionEvent.SCREEN_DARK:
            self.complete_transition(now)

        if state.game_message and now > state.game_message_end_time:
            state.game_message = None

        update_difficulty(state)

        if not self.player.active:
            self.end_run(now)

    def update_background(self):
        self.clouds = [c for c in self.clouds if c.update(self.height)]
        maybe_spawn_cloud(self.clouds, self.width, self.height)

    def _advance_bullets(self, bullets: List[Bullet], now: float) -> List[Bullet]:
        for bullet in bullets:
            bullet.update(now)
        return [b for b in bullets if b.active and not b.is_out_of_bounds(self.width, self.height)]

    # ----------------------------
    # Shooting and spawning
    # ----------------------------

    def shoot(self, now: float):
        damage = BULLET_CONFIG["damage"]
        if self.player.has_powerup(PowerupType.DAMAGE):
            damage *= POWERUP_CONFIG["types"]["damage"]["multiplier"]
        self.bullets.append(
            Bullet.player_shot(self.player.x, self.player.y - self.player.size, damage, now)
        )
        self.emit(AudioEvent.SHOT_FIRED)
        self.events["shot"] += 1

    def enemy_shoot(self, enemy: Enemy, now: float):
        angle = enemy.angle_to(self.player.x, self.player.y)
        self.enemy_bullets.append(Bullet.enemy_shot(enemy.x, enemy.y + enemy.size, angle, now))
        self.emit(AudioEvent.ENEMY_SHOT)

    def spawn_enemies(self, now: float):
        if now - self.last_enemy_spawn >= spawn_interval(self.state.difficulty_level):
            self.last_enemy_spawn = now
            self.enemies.append(spawn_enemy(self.width, self.state.difficulty_level, now))

    def spawn_portals(self, now: float):
        if not portals_due(self.state):
            return
        self.state.portals_spawned = True
        self.black_hole, self.white_hole = place_portals(self.width, self.height, now)
        self.emit(AudioEvent.PORTAL_SPAWNED)
        logger.info("Portals opened in area %d at score %d", self.state.current_level, self.state.score)

    # ----------------------------
    # Effects applied by the collision resolver
    # ----------------------------

    def defeat_enemy(self, enemy: Enemy, now: float):
        self.state.score += enemy.score
        self.state.enemies_defeated += 1
        self.events["kill"] += 1
        self.emit(AudioEvent.ENEMY_DESTROYED)
        self.explode(enemy.x, enemy.y, enemy.color)

        powerup = roll_powerup_drop(enemy.x, enemy.y, now)
        if powerup is not None:
            self.powerups.append(powerup)

    def damage_player(self, amount: float, now: float) -> bool:
        before = self.player.health
        if not self.player.take_damage(amount, now):
            return False
        self.events["damage"] += before - self.player.health
        self.emit(AudioEvent.PLAYER_DAMAGED)
        return True

    def collect_powerup(self, powerup: PowerUp, now: float):
        if not powerup.active:
            return
        powerup.active = False
        if not self.player.activate_powerup(powerup.ptype, now, self.state):
            return
        self.events["powerup"] += 1

        if powerup.ptype == PowerupType.SHIELD:
            self.emit(AudioEvent.SHIELD_UP)
        elif powerup.ptype == PowerupType.LIFE:
            self.emit(AudioEvent.EXTRA_LIFE)
        else:
            self.emit(AudioEvent.POWERUP_COLLECTED, powerup.ptype.value)

    def explode(self, x: float, y: float, color: Color, is_big: bool = False):
        count = PARTICLE_CONFIG["explosion_count"] * (2 if is_big else 1)
        for i in range(count):
            self.particles.append(Particle.create(x, y, color, is_big))
            if i % 3 == 0:
                self.particles.append(Particle.create(x, y, PARTICLE_CONFIG["fire_color"], is_big))

    def use_bomb(self) -> bool:
        """Destroy every enemy and enemy bullet, crediting each kill"""
        state = self.state
        if not state.is_running or state.bombs <= 0:
            return False

        state.bombs -= 1
        self.emit(AudioEvent.BOMB_USED)

        for enemy in self.enemies:
            if not enemy.active:
                continue
            enemy.active = False
            state.score += enemy.score
            state.enemies_defeated += 1
            self.events["kill"] += 1
            self.explode(enemy.x, enemy.y, enemy.color, is_big=True)
        logger.debug("Bomb used, %d bombs left", state.bombs)

        self.enemies = []
        self.enemy_bullets = []
        return True

    # ----------------------------
    # Portals and level changes
    # ----------------------------

    def enter_black_hole(self):
        if not self.transition.begin(self.state):
            return
        self.emit(AudioEvent.BLACK_HOLE_ENTERED)
        self.black_hole = None
        self.white_hole = None
        logger.info("Black hole entered from area %d", self.state.current_level)

    def enter_white_hole(self):
        self.state.score = 0
        self.emit(AudioEvent.WHITE_HOLE_ENTERED)
        self.show_message("SCORE RESET", TRANSITION_CONFIG["reset_message_duration"])
        self.white_hole = None
        logger.info("White hole entered, score reset")

    def complete_transition(self, now: float):
        state = self.state
        state.current_level += 1
        state.portals_spawned = False
        state.difficulty_level = max(state.difficulty_level, state.current_level)

        self.enemies = []
        self.enemy_bullets = []
        self.powerups = []
        self.black_hole = None
        self.white_hole = None

        self.theme = sky_theme(state.current_level)
        self.show_message(f"ENTERING AREA {state.current_level}",
                          TRANSITION_CONFIG["level_message_duration"], now)

        # Grace period before the next wave
        self.last_enemy_spawn = now + TRANSITION_CONFIG["spawn_grace"]
        self.events["level"] += 1
        logger.info("Entered area %d (difficulty %d)", state.current_level, state.difficulty_level)

    def show_message(self, text: str, duration: float = 2000, now: Optional[float] = None):
        now = self.now if now is None else now
        self.state.game_message = text
        self.state.game_message_end_time = now + duration
        self.state.game_message_duration = duration

    def message_alpha(self, now: float) -> float:
        """Opacity of the transient message: fade in, hold, fade out"""
        if not self.state.game_message:
            return 0.0
        fade = TRANSITION_CONFIG["message_fade"]
        time_left = self.state.game_message_end_time - now
        elapsed = self.state.game_message_duration - time_left
        return clamp(min(elapsed, time_left) / fade, 0.0, 1.0)

    # ----------------------------
    # Collaborators
    # ----------------------------

    def emit(self, event: str, detail: Optional[str] = None):
        """Fire an audio event; a failing sink never disturbs the simulation"""
        try:
            self.audio.play(event, detail)
        except Exception:
            logger.warning("Audio event %s failed", event, exc_info=True)

    def _reset_events(self):
        self.events = {"hit": 0.0, "kill": 0.0, "powerup": 0.0, "damage": 0.0,
                       "shot": 0.0, "level": 0.0}

    # ----------------------------
    # Snapshot for rendering
    # ----------------------------

    def snapshot(self, now: Optional[float] = None) -> FrameSnapshot:
        now = self.now if now is None else now
        state = self.state
        views: List[EntityView] = []

        for c in self.clouds:
            views.append(EntityView(EntityKind.CLOUD, c.x, c.y, c.size, alpha=c.opacity))
        for portal in (self.black_hole, self.white_hole):
            if portal is not None:
                views.append(EntityView(portal.kind, portal.x, portal.y, portal.size,
                                        angle=portal.rotation, orbit=portal.orbit_points()))
        for p in self.powerups:
            if not p.active:
                continue
            alpha = 1.0
            left = p.time_left(now)
            if left < 3000:
                alpha = 0.3 + (left / 3000) * 0.7
            views.append(EntityView(EntityKind.POWERUP, p.x, p.y, p.size,
                                    color=POWERUP_CONFIG["types"][p.ptype.value]["color"],
                                    variant=p.ptype.value, alpha=alpha))
        for b in self.enemy_bullets + self.bullets:
            if not b.active:
                continue
            views.append(EntityView(EntityKind.BULLET, b.x, b.y, b.size, angle=b.angle,
                                    flags=("enemy",) if b.is_enemy else (),
                                    trail=tuple(b.trail)))
        for e in self.enemies:
            if not e.active:
                continue
            views.append(EntityView(EntityKind.ENEMY, e.x, e.y, e.size, color=e.color,
                                    variant=e.etype,
                                    health_ratio=max(0.0, e.health / e.max_health),
                                    pulse=0.5 + 0.5 * math.sin(e.pulse_phase)))
        for p in self.particles:
            views.append(EntityView(EntityKind.PARTICLE, p.x, p.y, p.size * p.life,
                                    color=p.color, alpha=max(0.0, p.life)))

        player = self.player
        if player is not None and player.active:
            flags = []
            if player.flash_state:
                flags.append("flash")
            if player.has_powerup(PowerupType.SHIELD):
                flags.append("shield")
            if player.is_invincible:
                flags.append("invincible")
            views.append(EntityView(EntityKind.PLAYER, player.x, player.y, player.size,
                                    color=PLAYER_COLOR, angle=player.bank_angle,
                                    health_ratio=player.health / player.max_health,
                                    pulse=player.engine_flicker,
                                    flags=tuple(flags)))

        powerup_seconds = {}
        if player is not None:
            for ptype in DURATION_POWERUPS:
                remaining = player.powerup_time_remaining(ptype, now)
                if remaining > 0:
                    powerup_seconds[ptype.value] = math.ceil(remaining / 1000)

        return FrameSnapshot(
            width=self.width,
            height=self.height,
            entities=views,
            health=player.health if player is not None else 0.0,
            max_health=player.max_health if player is not None else 100,
            score=state.score,
            high_score=state.high_score,
            bombs=state.bombs,
            level=state.current_level,
            difficulty_level=state.difficulty_level,
            is_running=state.is_running,
            is_paused=state.is_paused,
            message=state.game_message,
            message_alpha=self.message_alpha(now),
            transition_alpha=self.transition.alpha,
            theme=list(self.theme),
            powerup_seconds=powerup_seconds,
        )
