"""
Utility functions for game mechanics
"""

from __future__ import annotations
import math
import random
import time
from typing import List, Optional, Tuple
import numpy as np

Color = Tuple[int, int, int]


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def normalize(x: float, y: float, eps: float = 1e-8) -> Tuple[float, float]:
    """Normalize a vector to unit length"""
    l = math.hypot(x, y)
    if l < eps:
        return 0.0, 0.0
    return x / l, y / l


def circle_collide(x1, y1, r1, x2, y2, r2) -> bool:
    """Check if two circles overlap (touching edges do not count)"""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    return (dx * dx + dy * dy) < (rr * rr)


def collides_with(a, b) -> bool:
    """Circle overlap test between two entities with x, y and size"""
    return circle_collide(a.x, a.y, a.size, b.x, b.y, b.size)


def wall_clock_ms() -> float:
    """Current wall-clock time in milliseconds"""
    return time.time() * 1000.0


def seed_everything(py_seed: Optional[int]):
    """Seed all random number generators"""
    if py_seed is None:
        return
    random.seed(py_seed)
    np.random.seed(py_seed)


def sky_theme(level: int) -> List[Tuple[float, Color]]:
    """Gradient colour stops (offset, rgb) for the sky of a given level"""
    if level <= 1:
        return [(0.0, (26, 26, 58)), (0.5, (42, 42, 90)), (1.0, (74, 42, 106))]
    if level == 2:
        return [(0.0, (26, 10, 42)), (0.3, (74, 26, 58)), (0.6, (138, 48, 48)), (1.0, (204, 85, 34))]
    if level == 3:
        return [(0.0, (0, 0, 16)), (0.5, (10, 16, 48)), (1.0, (16, 32, 80))]
    if level == 4:
        return [(0.0, (10, 26, 10)), (0.4, (26, 58, 42)), (0.7, (42, 74, 58)), (1.0, (26, 90, 74))]

    # Warzone red, intensifying with level
    intensity = min((level - 4) * 0.1, 0.5)
    return [
        (0.0, (int(30 + intensity * 50), 10, 20)),
        (0.5, (int(50 + intensity * 80), 20, 40)),
        (1.0, (int(80 + intensity * 100), 30, 50)),
    ]
