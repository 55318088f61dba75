"""
Gameplay configuration for Sky Fighter
Timings are in milliseconds, speeds in pixels per frame unless noted.
"""

# World / playfield
WORLD_CONFIG = {
    "width": 800,
    "height": 600,
    "ui_strip": 60,  # reserved HUD band at the top of the screen
    "frame_ms": 1000 / 60,  # reference frame for player delta scaling
}

# Player settings
PLAYER_CONFIG = {
    "speed": 6,
    "size": 25,
    "max_health": 100,
    "shoot_cooldown": 200,  # ms between shots
    "invincibility_duration": 1500,  # ms after taking damage
    "start_bombs": 1,
    "bank_factor": 0.3,
    "bank_smoothing": 0.15,
    "flash_interval": 80,  # ms per on/off slot while invincible
}

# Player bullets
BULLET_CONFIG = {
    "speed": 14,
    "size": 5,
    "damage": 30,
    "lifetime": 2000,  # ms
}

# Enemy bullets (lifetime shared with BULLET_CONFIG)
ENEMY_BULLET_CONFIG = {
    "speed": 6,
    "size": 4,
    "damage": 15,
}

# Enemies
ENEMY_CONFIG = {
    "spawn_rate": 1800,  # ms between spawns
    "min_spawn_rate": 600,
    "shoot_cooldown": 2000,
    "collision_damage": 25,
    "shoot_band": (50, 0.7),  # min y in px, max y as fraction of height
    "types": {
        "fighter": {"speed": 2.5, "health": 60, "size": 20, "color": (255, 68, 68), "score": 15, "shoot_chance": 0.4},
        "bomber": {"speed": 1.5, "health": 120, "size": 28, "color": (136, 68, 255), "score": 25, "shoot_chance": 0.6},
        "ace": {"speed": 4, "health": 40, "size": 16, "color": (255, 136, 0), "score": 20, "shoot_chance": 0.3},
    },
    # (difficulty below which the table applies, [(cumulative threshold, type), ...])
    "type_tiers": [
        (3, [(0.7, "fighter"), (0.9, "ace"), (1.0, "bomber")]),
        (None, [(0.5, "fighter"), (0.75, "ace"), (1.0, "bomber")]),
    ],
}

# Power-ups
POWERUP_CONFIG = {
    "drop_chance": 0.18,
    "size": 16,
    "lifetime": 12000,  # ms to collect before it vanishes
    "fall_speed": 0.8,
    "drift_speed": 0.06,
    "drift_amount": 0.5,
    "types": {
        "rapid": {"duration": 6000, "color": (255, 107, 0), "multiplier": 3},
        "shield": {"duration": 5000, "color": (0, 229, 255)},
        "damage": {"duration": 8000, "color": (255, 51, 51), "multiplier": 2},
        "bomb": {"duration": 0, "color": (255, 0, 255)},
        "life": {"duration": 0, "color": (0, 255, 136), "heal": 40},
    },
}

# Explosion particles
PARTICLE_CONFIG = {
    "explosion_count": 18,
    "fire_color": (255, 102, 0),
    "gravity": 0.1,
    "drag": 0.98,
}

# Difficulty scaling
DIFFICULTY_CONFIG = {
    "score_threshold": 150,  # score per difficulty level
    "spawn_rate_reduction": 120,  # ms per difficulty level
}

# Portals
PORTAL_CONFIG = {
    "size": 40,
    "base_threshold": 50,
    "threshold_per_level": 100,
    "margin": 100,
    "top": 120,
    "band": 0.3,  # fraction of height below `top`
    "min_distance": 150,
    "max_attempts": 20,
}

# Level transition
TRANSITION_CONFIG = {
    "fade_step": 0.02,
    "spawn_grace": 2000,  # ms before enemies resume after a level change
    "level_message_duration": 2500,
    "reset_message_duration": 2000,
    "message_fade": 500,
}

# Background clouds
CLOUD_CONFIG = {
    "count": 8,
    "min_speed": 0.5,
    "max_speed": 2.0,
    "spawn_chance": 0.02,
}

# Gymnasium environment parameters
ENV_CONFIG = {
    "width": 800,
    "height": 600,
    "dt_ms": 1000 / 30,
    "max_steps": 1800,  # 60 seconds at 30 FPS
    "k_enemies": 5,
    "m_powerups": 2,
    "n_bullets": 3,
}

# Reward shaping for the environment
REWARD_CONFIG = {
    "R_KILL": 1.0,
    "R_HIT": 0.2,
    "R_POWERUP": 0.5,
    "R_DAMAGE": 0.05,  # per point of health lost
    "R_LEVEL": 3.0,
    "R_TIME": 0.001,
    "R_DEATH": 5.0,
}
