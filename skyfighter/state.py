"""
Run-level game state and read-only frame snapshots
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .configs.game_config import PLAYER_CONFIG
from .entities import EntityKind
from .utils import Color


@dataclass
class GameState:
    """Scalars for one run; rebuilt by Simulation.start_run"""
    is_running: bool = False
    is_paused: bool = False
    score: int = 0
    high_score: int = 0
    enemies_defeated: int = 0
    start_time: float = 0.0
    difficulty_level: int = 1
    bombs: int = PLAYER_CONFIG["start_bombs"]
    current_level: int = 1
    portals_spawned: bool = False
    in_transition: bool = False
    game_message: Optional[str] = None
    game_message_end_time: float = 0.0
    game_message_duration: float = 0.0


@dataclass
class RunSummary:
    """Game-over figures handed to the UI when a run ends"""
    final_score: int
    high_score: int
    new_high_score: bool
    enemies_defeated: int
    time_survived_ms: float
    level: int

    @property
    def time_survived(self) -> str:
        """Survival time formatted as m:ss"""
        total_s = int(self.time_survived_ms // 1000)
        return f"{total_s // 60}:{total_s % 60:02d}"


@dataclass(frozen=True)
class EntityView:
    """What the renderer needs to paint one entity"""
    kind: EntityKind
    x: float
    y: float
    size: float
    color: Optional[Color] = None
    variant: Optional[str] = None  # enemy or power-up type
    angle: float = 0.0
    alpha: float = 1.0
    health_ratio: float = 1.0
    flags: Tuple[str, ...] = ()
    pulse: float = 0.0  # enemy glow or player engine flicker, 0..1
    trail: Tuple[Tuple[float, float], ...] = ()  # recent bullet positions, oldest first
    orbit: Tuple[Tuple[float, float, float, float], ...] = ()  # portal particles (x, y, size, alpha)


@dataclass
class FrameSnapshot:
    """Read-only picture of one tick for the rendering collaborator"""
    width: float
    height: float
    entities: List[EntityView] = field(default_factory=list)
    health: float = 0.0
    max_health: float = PLAYER_CONFIG["max_health"]
    score: int = 0
    high_score: int = 0
    bombs: int = 0
    level: int = 1
    difficulty_level: int = 1
    is_running: bool = False
    is_paused: bool = False
    message: Optional[str] = None
    message_alpha: float = 0.0
    transition_alpha: float = 0.0
    theme: List[Tuple[float, Color]] = field(default_factory=list)
    powerup_seconds: Dict[str, int] = field(default_factory=dict)

    @property
    def health_low(self) -> bool:
        return self.health / self.max_health <= 0.25

    def of_kind(self, kind: EntityKind) -> List[EntityView]:
        return [e for e in self.entities if e.kind == kind]
