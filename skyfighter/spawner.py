"""
Spawn scheduling: enemies, power-up drops, portals and background clouds
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Tuple

from .configs.game_config import (
    CLOUD_CONFIG,
    DIFFICULTY_CONFIG,
    ENEMY_CONFIG,
    PORTAL_CONFIG,
    POWERUP_CONFIG,
)
from .entities import BlackHole, Cloud, Enemy, PowerUp, PowerupType, WhiteHole


def spawn_interval(difficulty_level: int) -> float:
    """Milliseconds between enemy spawns, shrinking with difficulty down to a floor"""
    return max(
        ENEMY_CONFIG["min_spawn_rate"],
        ENEMY_CONFIG["spawn_rate"] - (difficulty_level - 1) * DIFFICULTY_CONFIG["spawn_rate_reduction"],
    )


def choose_enemy_type(difficulty_level: int, rand: Optional[float] = None) -> str:
    """Tiered weighted draw; higher difficulty mixes in more aces and bombers"""
    if rand is None:
        rand = random.random()
    for below, table in ENEMY_CONFIG["type_tiers"]:
        if below is None or difficulty_level < below:
            for threshold, etype in table:
                if rand < threshold:
                    return etype
            return table[-1][1]
    return "fighter"


def spawn_enemy(width: float, difficulty_level: int, now: float) -> Enemy:
    """New enemy just above the top edge at a random x inside the bounds"""
    etype = choose_enemy_type(difficulty_level)
    size = ENEMY_CONFIG["types"][etype]["size"]
    x = size + random.random() * (width - size * 2)
    return Enemy.spawn(x, -size, etype, now)


def roll_powerup_drop(x: float, y: float, now: float) -> Optional[PowerUp]:
    """Independent drop roll made on every kill"""
    if random.random() < POWERUP_CONFIG["drop_chance"]:
        ptype = random.choice(list(PowerupType))
        return PowerUp(x=x, y=y, ptype=ptype, created_at=now)
    return None


# ----------------------------
# Portals
# ----------------------------

def portal_threshold(level: int) -> int:
    return PORTAL_CONFIG["base_threshold"] + (level - 1) * PORTAL_CONFIG["threshold_per_level"]


def portals_due(state) -> bool:
    """At most once per level, and never during a transition"""
    return (
        state.score >= portal_threshold(state.current_level)
        and not state.portals_spawned
        and not state.in_transition
    )


def _portal_position(width: float, height: float) -> Tuple[float, float]:
    margin = PORTAL_CONFIG["margin"]
    x = margin + random.random() * (width - margin * 2)
    y = PORTAL_CONFIG["top"] + random.random() * (height * PORTAL_CONFIG["band"])
    return x, y


def place_portals(width: float, height: float, now: float) -> Tuple[BlackHole, WhiteHole]:
    """Random pair in the upper band, the white hole kept apart from the black hole when possible"""
    bx, by = _portal_position(width, height)

    attempts = 0
    while True:
        wx, wy = _portal_position(width, height)
        attempts += 1
        if math.hypot(wx - bx, wy - by) >= PORTAL_CONFIG["min_distance"]:
            break
        if attempts >= PORTAL_CONFIG["max_attempts"]:
            break

    return BlackHole(x=bx, y=by, created_at=now), WhiteHole(x=wx, y=wy, created_at=now)


# ----------------------------
# Clouds
# ----------------------------

def initial_clouds(width: float, height: float) -> List[Cloud]:
    return [Cloud.create(width, height) for _ in range(CLOUD_CONFIG["count"])]


def maybe_spawn_cloud(clouds: List[Cloud], width: float, height: float) -> Optional[Cloud]:
    if random.random() < CLOUD_CONFIG["spawn_chance"] and len(clouds) < CLOUD_CONFIG["count"] * 1.5:
        cloud = Cloud.create(width, height, start_at_top=True)
        clouds.append(cloud)
        return cloud
    return None
