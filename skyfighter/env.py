"""
SkyFighterEnv - Gymnasium wrapper around the Sky Fighter simulation
-------------------------------------------------------------------
- Gymnasium API over ``Simulation`` driven by a synthetic clock
- 1 RL agent that moves, fires and drops bombs
- Vector observation: player state + top-K nearest enemies + top-M nearest
  power-ups + nearest enemy bullets + portal offsets
- MultiDiscrete action space: [move(5), fire(2), bomb(2)]

Install:
    pip install gymnasium arcade numpy

Quick test:
    python -m skyfighter.env
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .configs.game_config import ENV_CONFIG, REWARD_CONFIG
from .entities import PowerupType
from .simulation import Simulation
from .utils import clamp, seed_everything

# move: 0 stay, 1 up, 2 down, 3 left, 4 right
_MOVES = {
    0: {},
    1: {"move_up": True},
    2: {"move_down": True},
    3: {"move_left": True},
    4: {"move_right": True},
}


class SkyFighterEnv(gym.Env):
    """Sky Fighter as a single-agent RL environment"""

    metadata = {"render_modes": ["human"], "render_fps": 30}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        width: int = ENV_CONFIG["width"],
        height: int = ENV_CONFIG["height"],
        dt_ms: float = ENV_CONFIG["dt_ms"],
        max_steps: int = ENV_CONFIG["max_steps"],
        k_enemies: int = ENV_CONFIG["k_enemies"],
        m_powerups: int = ENV_CONFIG["m_powerups"],
        n_bullets: int = ENV_CONFIG["n_bullets"],
        reward_config: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode

        self.width = width
        self.height = height
        self.dt_ms = dt_ms
        self.max_steps = max_steps
        self.k_enemies = k_enemies
        self.m_powerups = m_powerups
        self.n_bullets = n_bullets
        self.reward_config = dict(REWARD_CONFIG, **(reward_config or {}))

        self.action_space = spaces.MultiDiscrete([5, 2, 2])

        # Player: pos(2) vel(2) health(1) bombs(1) timed power-ups(3) transition(1)
        # Each enemy: rel pos(2) health(1) speed(1)
        # Each power-up: rel pos(2)
        # Each enemy bullet: rel pos(2)
        # Portals: black rel pos(2) white rel pos(2)
        obs_dim = 10 + self.k_enemies * 4 + self.m_powerups * 2 + self.n_bullets * 2 + 4
        self.observation_space = spaces.Box(low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32)

        self._now = 0.0
        self.sim = Simulation(width=width, height=height, clock=lambda: self._now)
        self._window = None
        self._step_count = 0

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        self._step_count = 0
        self._now = 0.0
        self.sim.start_run(now=self._now)

        return self._get_obs(), self._get_info()

    def step(self, action):
        move, fire, bomb = int(action[0]), int(action[1]), int(action[2])

        intents = {"move_up": False, "move_down": False, "move_left": False, "move_right": False}
        intents.update(_MOVES.get(move, {}))
        intents["firing"] = fire == 1
        self.sim.set_input(**intents)

        self._now += self.dt_ms
        self.sim.tick(self.dt_ms, now=self._now)

        # After the tick so its kills land in this step's events
        if bomb == 1:
            self.sim.use_bomb()

        reward = self._compute_reward()

        terminated = not self.sim.state.is_running
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _rel(self, x: float, y: float) -> List[float]:
        p = self.sim.player
        return [clamp((x - p.x) / self.width, -1, 1), clamp((y - p.y) / self.height, -1, 1)]

    def _nearest(self, entities, n: int):
        p = self.sim.player
        return sorted(entities, key=lambda e: (e.x - p.x) ** 2 + (e.y - p.y) ** 2)[:n]

    def _get_obs(self) -> np.ndarray:
        sim = self.sim
        p = sim.player

        obs_parts = [
            (p.x / self.width) * 2 - 1,
            (p.y / self.height) * 2 - 1,
            p.vx,
            p.vy,
            (p.health / p.max_health) * 2 - 1,
            clamp(sim.state.bombs / 5.0, 0, 1),
        ]
        for ptype in (PowerupType.RAPID, PowerupType.SHIELD, PowerupType.DAMAGE):
            obs_parts.append(1.0 if p.has_powerup(ptype) else 0.0)
        obs_parts.append(1.0 if sim.state.in_transition else 0.0)

        enemies = self._nearest(sim.enemies, self.k_enemies)
        for i in range(self.k_enemies):
            if i < len(enemies):
                e = enemies[i]
                obs_parts += self._rel(e.x, e.y)
                obs_parts += [e.health / e.max_health, clamp(e.speed / 4.0, 0, 1)]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        powerups = self._nearest(sim.powerups, self.m_powerups)
        for i in range(self.m_powerups):
            obs_parts += self._rel(powerups[i].x, powerups[i].y) if i < len(powerups) else [0.0, 0.0]

        bullets = self._nearest(sim.enemy_bullets, self.n_bullets)
        for i in range(self.n_bullets):
            obs_parts += self._rel(bullets[i].x, bullets[i].y) if i < len(bullets) else [0.0, 0.0]

        for portal in (sim.black_hole, sim.white_hole):
            obs_parts += self._rel(portal.x, portal.y) if portal is not None else [0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _compute_reward(self) -> float:
        rc = self.reward_config
        events = self.sim.events

        reward = 0.0
        reward += rc["R_KILL"] * events.get("kill", 0.0)
        reward += rc["R_HIT"] * events.get("hit", 0.0)
        reward += rc["R_POWERUP"] * events.get("powerup", 0.0)
        reward += rc["R_LEVEL"] * events.get("level", 0.0)
        reward -= rc["R_DAMAGE"] * events.get("damage", 0.0)
        reward -= rc["R_TIME"]

        if not self.sim.player.active:
            reward -= rc["R_DEATH"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        state = self.sim.state
        return {
            "health": self.sim.player.health,
            "score": state.score,
            "level": state.current_level,
            "difficulty": state.difficulty_level,
            "bombs": state.bombs,
            "enemies_defeated": state.enemies_defeated,
            "num_enemies": len(self.sim.enemies),
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering
    # ----------------------------

    def render(self):
        if self.render_mode != "human":
            return None

        if self._window is None:
            from .window import SkyFighterWindow

            self._window = SkyFighterWindow(self.sim, title="SkyFighterEnv - Arcade")

        self._window.dispatch_events()
        self._window.on_draw()
        self._window.flip()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


def run_random_episode(render: bool = False, seed: Optional[int] = 42) -> float:
    """Run one episode with random actions and return its total reward"""
    env = SkyFighterEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = truncated = False
    total = 0.0
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

    print(f"Random episode return: {total:.2f} "
          f"(score {info['score']}, level {info['level']}, step {info['step']})")
    env.close()
    return total


if __name__ == "__main__":
    run_random_episode(render=False)
