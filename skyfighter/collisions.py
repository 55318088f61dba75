"""
Collision resolver

Runs once per tick after every position update. The pass order below is part
of the game's behaviour: player bullets, sweep, enemy bullets, enemy bodies,
power-ups. Portals are resolved separately by ``resolve_portals``.
"""

from typing import Optional

from .collaborators import AudioEvent
from .entities import EntityKind
from .utils import collides_with


def resolve_collisions(sim, now: float):
    player = sim.player

    # Player bullets vs enemies: a bullet damages at most one enemy
    for bullet in sim.bullets:
        if not bullet.active:
            continue
        for enemy in sim.enemies:
            if not enemy.active:
                continue
            if collides_with(bullet, enemy):
                bullet.active = False
                sim.emit(AudioEvent.ENEMY_HIT)
                sim.events["hit"] += 1
                if enemy.take_damage(bullet.damage):
                    sim.defeat_enemy(enemy, now)
                break

    sim.enemies = [e for e in sim.enemies if e.active]

    # Enemy bullets vs player
    for bullet in sim.enemy_bullets:
        if not bullet.active:
            continue
        if collides_with(bullet, player):
            bullet.active = False
            sim.damage_player(bullet.damage, now)

    # Enemy bodies vs player: both take the hit
    for enemy in sim.enemies:
        if not enemy.active:
            continue
        if collides_with(enemy, player):
            sim.damage_player(enemy.damage, now)
            enemy.active = False
            sim.explode(enemy.x, enemy.y, enemy.color)
            sim.emit(AudioEvent.ENEMY_DESTROYED)

    # Power-ups vs player
    for powerup in sim.powerups:
        if not powerup.active:
            continue
        if collides_with(powerup, player):
            sim.collect_powerup(powerup, now)


def resolve_portals(sim) -> Optional[EntityKind]:
    """Black hole first; the first portal touched wins. Returns its kind."""
    player = sim.player
    if player is None or not player.active:
        return None

    if sim.black_hole is not None and collides_with(player, sim.black_hole):
        sim.enter_black_hole()
        return EntityKind.BLACK_HOLE

    if sim.white_hole is not None and collides_with(player, sim.white_hole):
        sim.enter_white_hole()
        return EntityKind.WHITE_HOLE

    return None
