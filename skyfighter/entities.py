"""
Game entity dataclasses

Every entity is a plain dataclass carrying x, y, size (collision radius) and an
``active`` flag. ``kind`` tags the variant so per-tick loops and the renderer
can switch on it without isinstance checks.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Tuple

from .configs.game_config import (
    BULLET_CONFIG,
    CLOUD_CONFIG,
    ENEMY_BULLET_CONFIG,
    ENEMY_CONFIG,
    PARTICLE_CONFIG,
    PLAYER_CONFIG,
    PORTAL_CONFIG,
    POWERUP_CONFIG,
    WORLD_CONFIG,
)
from .utils import Color, clamp, normalize


class EntityKind(str, Enum):
    PLAYER = "player"
    BULLET = "bullet"
    ENEMY = "enemy"
    POWERUP = "powerup"
    BLACK_HOLE = "black_hole"
    WHITE_HOLE = "white_hole"
    PARTICLE = "particle"
    CLOUD = "cloud"


class PowerupType(str, Enum):
    RAPID = "rapid"
    SHIELD = "shield"
    DAMAGE = "damage"
    BOMB = "bomb"
    LIFE = "life"


# Power-ups that run on a timer; bomb and life apply instantly
DURATION_POWERUPS = (PowerupType.RAPID, PowerupType.SHIELD, PowerupType.DAMAGE)


@dataclass
class InputState:
    """Held intents for one tick, produced by the input collaborator"""
    move_up: bool = False
    move_down: bool = False
    move_left: bool = False
    move_right: bool = False
    firing: bool = False


@dataclass
class PowerupTimer:
    """Expiry state for one duration power-up"""
    active: bool = False
    end_time: float = 0.0


# ----------------------------
# Player
# ----------------------------

@dataclass
class Player:
    """Player craft"""
    x: float
    y: float
    size: float = PLAYER_CONFIG["size"]
    max_health: float = PLAYER_CONFIG["max_health"]
    health: float = PLAYER_CONFIG["max_health"]
    vx: float = 0.0
    vy: float = 0.0
    last_shot: float = 0.0
    is_invincible: bool = False
    invincible_until: float = 0.0
    flash_state: bool = False
    bank_angle: float = 0.0
    engine_flicker: float = 0.0
    powerups: Dict[PowerupType, PowerupTimer] = field(
        default_factory=lambda: {p: PowerupTimer() for p in DURATION_POWERUPS}
    )
    active: bool = True

    kind: ClassVar[EntityKind] = EntityKind.PLAYER

    def update(self, inp: InputState, delta_ms: float, now: float,
               width: float, height: float) -> List[PowerupType]:
        """Advance one tick. Returns the power-ups that expired this tick."""
        vx, vy = 0.0, 0.0
        if inp.move_left:
            vx -= 1.0
        if inp.move_right:
            vx += 1.0
        if inp.move_up:
            vy -= 1.0
        if inp.move_down:
            vy += 1.0

        # Diagonal moves are as fast as axial ones
        vx, vy = normalize(vx, vy)
        self.vx, self.vy = vx, vy

        step = PLAYER_CONFIG["speed"] * (delta_ms / WORLD_CONFIG["frame_ms"])
        self.x += vx * step
        self.y += vy * step

        self.x = clamp(self.x, self.size, width - self.size)
        self.y = clamp(self.y, self.size + WORLD_CONFIG["ui_strip"], height - self.size)

        target_bank = vx * PLAYER_CONFIG["bank_factor"]
        self.bank_angle += (target_bank - self.bank_angle) * PLAYER_CONFIG["bank_smoothing"]
        self.engine_flicker = random.random()

        if self.is_invincible and now >= self.invincible_until:
            self.is_invincible = False

        shield = self.powerups[PowerupType.SHIELD]
        if self.is_invincible and not shield.active:
            self.flash_state = int(now // PLAYER_CONFIG["flash_interval"]) % 2 == 0
        else:
            self.flash_state = False

        expired = self.update_powerups(now)

        if shield.active:
            self.is_invincible = True

        return expired

    def update_powerups(self, now: float) -> List[PowerupType]:
        expired = []
        for ptype, timer in self.powerups.items():
            if timer.active and now >= timer.end_time:
                timer.active = False
                expired.append(ptype)
        return expired

    def has_powerup(self, ptype: PowerupType) -> bool:
        timer = self.powerups.get(ptype)
        return timer is not None and timer.active

    def can_shoot(self, now: float) -> bool:
        """Consume the shot cooldown if it has elapsed"""
        cooldown = PLAYER_CONFIG["shoot_cooldown"]
        if self.has_powerup(PowerupType.RAPID):
            cooldown /= POWERUP_CONFIG["types"]["rapid"]["multiplier"]

        if now - self.last_shot >= cooldown:
            self.last_shot = now
            return True
        return False

    def take_damage(self, amount: float, now: float) -> bool:
        """Apply damage unless invincible or shielded. Returns True if applied."""
        if self.is_invincible or self.has_powerup(PowerupType.SHIELD):
            return False

        self.health = max(0.0, self.health - amount)
        self.is_invincible = True
        self.invincible_until = now + PLAYER_CONFIG["invincibility_duration"]

        if self.health <= 0:
            self.health = 0.0
            self.active = False
        return True

    def heal(self, amount: float):
        self.health = min(self.max_health, self.health + amount)

    def activate_powerup(self, ptype, now: float, state=None) -> bool:
        """
        Apply a collected power-up.

        Instant types act immediately (bomb increments ``state.bombs``, life
        heals); duration types (re)start their timer without stacking.
        Unknown types are ignored. Returns True if an effect was applied.
        """
        try:
            ptype = PowerupType(ptype)
        except ValueError:
            return False
        cfg = POWERUP_CONFIG["types"][ptype.value]

        if ptype is PowerupType.BOMB:
            if state is not None:
                state.bombs += 1
            return True

        if ptype is PowerupType.LIFE:
            self.heal(cfg["heal"])
            return True

        timer = self.powerups[ptype]
        timer.active = True
        timer.end_time = now + cfg["duration"]
        return True

    def powerup_time_remaining(self, ptype, now: float) -> float:
        timer = self.powerups.get(ptype)
        if timer is None or not timer.active:
            return 0.0
        return max(0.0, timer.end_time - now)


# ----------------------------
# Projectiles
# ----------------------------

@dataclass
class Bullet:
    """Bullet fired by the player or an enemy"""
    x: float
    y: float
    angle: float
    speed: float
    damage: float
    is_enemy: bool = False
    created_at: float = 0.0
    lifetime: float = BULLET_CONFIG["lifetime"]
    size: float = BULLET_CONFIG["size"]
    trail: List[Tuple[float, float]] = field(default_factory=list)
    active: bool = True

    kind: ClassVar[EntityKind] = EntityKind.BULLET

    @classmethod
    def player_shot(cls, x: float, y: float, damage: float, now: float) -> "Bullet":
        # Straight up
        return cls(x=x, y=y, angle=-math.pi / 2, speed=BULLET_CONFIG["speed"],
                   damage=damage, created_at=now)

    @classmethod
    def enemy_shot(cls, x: float, y: float, angle: float, now: float) -> "Bullet":
        return cls(x=x, y=y, angle=angle, speed=ENEMY_BULLET_CONFIG["speed"],
                   damage=ENEMY_BULLET_CONFIG["damage"], is_enemy=True,
                   created_at=now, size=ENEMY_BULLET_CONFIG["size"])

    def update(self, now: float):
        self.trail.append((self.x, self.y))
        if len(self.trail) > 4:
            self.trail.pop(0)

        self.x += math.cos(self.angle) * self.speed
        self.y += math.sin(self.angle) * self.speed

        if now - self.created_at > self.lifetime:
            self.active = False

    def is_out_of_bounds(self, width: float, height: float) -> bool:
        return (self.x < -self.size or self.x > width + self.size
                or self.y < -self.size or self.y > height + self.size)


# ----------------------------
# Enemies
# ----------------------------

@dataclass
class Enemy:
    """Enemy plane drifting down the screen"""
    x: float
    y: float
    etype: str
    size: float
    speed: float
    max_health: float
    health: float
    color: Color
    score: int
    shoot_chance: float
    damage: float = ENEMY_CONFIG["collision_damage"]
    last_shot: float = 0.0
    wobble_phase: float = 0.0
    wobble_speed: float = 0.04
    wobble_amount: float = 1.5
    pulse_phase: float = 0.0
    active: bool = True

    kind: ClassVar[EntityKind] = EntityKind.ENEMY

    @classmethod
    def spawn(cls, x: float, y: float, etype: str, now: float) -> "Enemy":
        """Build an enemy of the given type with randomized movement"""
        cfg = ENEMY_CONFIG["types"][etype]
        return cls(
            x=x,
            y=y,
            etype=etype,
            size=cfg["size"],
            speed=cfg["speed"],
            max_health=cfg["health"],
            health=cfg["health"],
            color=cfg["color"],
            score=cfg["score"],
            shoot_chance=cfg["shoot_chance"],
            # Stagger first shots
            last_shot=now - random.random() * ENEMY_CONFIG["shoot_cooldown"],
            wobble_phase=random.random() * math.pi * 2,
            wobble_speed=0.03 + random.random() * 0.02,
            wobble_amount=1 + random.random() * 1.5,
            pulse_phase=random.random() * math.pi * 2,
        )

    def update(self, width: float):
        self.wobble_phase += self.wobble_speed
        self.x += math.sin(self.wobble_phase) * self.wobble_amount
        self.y += self.speed
        self.x = clamp(self.x, self.size, width - self.size)
        self.pulse_phase += 0.08

    def can_shoot(self, now: float) -> bool:
        # The cooldown restarts on every elapse, even when the roll fails
        if now - self.last_shot >= ENEMY_CONFIG["shoot_cooldown"]:
            self.last_shot = now
            return random.random() < self.shoot_chance
        return False

    def angle_to(self, x: float, y: float) -> float:
        return math.atan2(y - self.y, x - self.x)

    def take_damage(self, amount: float) -> bool:
        """Apply damage. Returns True only on the hit that destroys the enemy."""
        if not self.active:
            return False
        self.health -= amount
        if self.health <= 0:
            self.active = False
            return True
        return False

    def is_out_of_bounds(self, height: float) -> bool:
        return self.y > height + self.size * 2


# ----------------------------
# Pickups
# ----------------------------

@dataclass
class PowerUp:
    """Collectible that falls slowly and expires after its lifetime"""
    x: float
    y: float
    ptype: PowerupType
    created_at: float = 0.0
    size: float = POWERUP_CONFIG["size"]
    lifetime: float = POWERUP_CONFIG["lifetime"]
    float_phase: float = field(default_factory=lambda: random.random() * math.pi * 2)
    active: bool = True

    kind: ClassVar[EntityKind] = EntityKind.POWERUP

    def __post_init__(self):
        self.ptype = PowerupType(self.ptype)

    def update(self, now: float):
        self.y += POWERUP_CONFIG["fall_speed"]
        self.float_phase += POWERUP_CONFIG["drift_speed"]
        self.x += math.sin(self.float_phase) * POWERUP_CONFIG["drift_amount"]

        if now - self.created_at > self.lifetime:
            self.active = False

    def is_out_of_bounds(self, height: float) -> bool:
        return self.y > height + self.size

    def time_left(self, now: float) -> float:
        return max(0.0, self.lifetime - (now - self.created_at))


# ----------------------------
# Portals
# ----------------------------

@dataclass
class OrbitParticle:
    """Decorative particle circling a portal"""
    angle: float
    distance: float
    speed: float
    size: float
    phase: float = 0.0


@dataclass
class Portal:
    x: float
    y: float
    created_at: float = 0.0
    size: float = PORTAL_CONFIG["size"]
    phase: float = 0.0
    rotation: float = 0.0
    orbit: List[OrbitParticle] = field(default_factory=list)
    active: bool = True

    def orbit_alpha(self, p: OrbitParticle) -> float:
        return 1.0

    def orbit_points(self) -> Tuple[Tuple[float, float, float, float], ...]:
        """World-space (x, y, size, alpha) of every orbiting particle"""
        return tuple(
            (self.x + math.cos(p.angle) * p.distance,
             self.y + math.sin(p.angle) * p.distance,
             p.size,
             self.orbit_alpha(p))
            for p in self.orbit
        )


@dataclass
class BlackHole(Portal):
    """Portal that moves the player to the next level"""

    kind: ClassVar[EntityKind] = EntityKind.BLACK_HOLE

    def __post_init__(self):
        if not self.orbit:
            self.orbit = [
                OrbitParticle(
                    angle=random.random() * math.pi * 2,
                    distance=25 + random.random() * 25,
                    speed=0.02 + random.random() * 0.03,
                    size=2 + random.random() * 3,
                )
                for _ in range(20)
            ]

    def update(self):
        self.rotation += 0.03
        self.phase += 0.08
        for p in self.orbit:
            p.angle += p.speed
            # Spiral inward, then respawn on the outer ring
            p.distance -= 0.05
            if p.distance < 15:
                p.distance = 25 + random.random() * 25


@dataclass
class WhiteHole(Portal):
    """Portal that resets the score"""

    kind: ClassVar[EntityKind] = EntityKind.WHITE_HOLE

    def __post_init__(self):
        if not self.orbit:
            self.orbit = [
                OrbitParticle(
                    angle=random.random() * math.pi * 2,
                    distance=30 + random.random() * 30,
                    speed=0.01 + random.random() * 0.02,
                    size=1 + random.random() * 3,
                    phase=random.random() * math.pi * 2,
                )
                for _ in range(15)
            ]

    def update(self):
        self.phase += 0.06
        self.rotation += 0.015
        for s in self.orbit:
            s.phase += 0.1
            s.angle += s.speed

    def orbit_alpha(self, p: OrbitParticle) -> float:
        # Sparkles twinkle
        return 0.5 + 0.5 * math.sin(p.phase)


# ----------------------------
# Effects
# ----------------------------

@dataclass
class Particle:
    """Explosion debris"""
    x: float
    y: float
    vx: float
    vy: float
    color: Color
    size: float
    decay: float
    life: float = 1.0
    active: bool = True

    kind: ClassVar[EntityKind] = EntityKind.PARTICLE

    @classmethod
    def create(cls, x: float, y: float, color: Color, is_big: bool = False) -> "Particle":
        angle = random.random() * math.pi * 2
        if is_big:
            size = random.random() * 8 + 4
            speed = random.random() * 8 + 4
            decay = 0.015
        else:
            size = random.random() * 5 + 2
            speed = random.random() * 6 + 2
            decay = 0.02 + random.random() * 0.02
        return cls(x=x, y=y, vx=math.cos(angle) * speed, vy=math.sin(angle) * speed,
                   color=color, size=size, decay=decay)

    def update(self):
        self.x += self.vx
        self.y += self.vy
        self.vy += PARTICLE_CONFIG["gravity"]
        self.vx *= PARTICLE_CONFIG["drag"]
        self.life -= self.decay
        if self.life <= 0:
            self.active = False

    def is_dead(self) -> bool:
        return self.life <= 0


@dataclass
class Cloud:
    """Background cloud scrolling down the sky"""
    x: float
    y: float
    width: float
    height: float
    speed: float
    opacity: float
    size: float = 0.0
    active: bool = True

    kind: ClassVar[EntityKind] = EntityKind.CLOUD

    @classmethod
    def create(cls, canvas_width: float, canvas_height: float,
               start_at_top: bool = False) -> "Cloud":
        lo, hi = CLOUD_CONFIG["min_speed"], CLOUD_CONFIG["max_speed"]
        width = 60 + random.random() * 100
        return cls(
            x=random.random() * canvas_width,
            y=-50.0 if start_at_top else random.random() * canvas_height,
            width=width,
            height=30 + random.random() * 40,
            speed=lo + random.random() * (hi - lo),
            opacity=0.1 + random.random() * 0.15,
            size=width * 0.5,
        )

    def update(self, canvas_height: float) -> bool:
        """Scroll down. Returns False once the cloud has left the screen."""
        self.y += self.speed
        if self.y > canvas_height + self.height:
            self.active = False
        return self.active

