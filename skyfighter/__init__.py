"""Sky Fighter - vertically scrolling arcade shooter simulation"""

from .simulation import Simulation
from .state import GameState, FrameSnapshot, RunSummary
from .entities import InputState, PowerupType, EntityKind
from .env import SkyFighterEnv, run_random_episode

__all__ = [
    'Simulation',
    'GameState',
    'FrameSnapshot',
    'RunSummary',
    'InputState',
    'PowerupType',
    'EntityKind',
    'SkyFighterEnv',
    'run_random_episode',
]
