import random

import pytest

from conftest import FRAME_MS, FakeStore, run_ticks
from skyfighter.collaborators import AudioEvent, AudioSink
from skyfighter.entities import BlackHole, Bullet, Enemy, PowerUp, PowerupType, WhiteHole
from skyfighter.simulation import Simulation
from skyfighter.transition import TransitionPhase


def test_start_run_resets_state(sim, audio):
    assert sim.state.is_running
    assert sim.state.bombs == 1
    assert sim.state.current_level == 1
    assert (sim.player.x, sim.player.y) == (400, 500)
    assert len(sim.clouds) == 8
    assert audio.names()[0] == AudioEvent.CLICK


def test_high_score_loaded_from_store():
    s = Simulation(store=FakeStore(high_score=321), clock=lambda: 0.0)
    s.start_run(now=0)
    assert s.state.high_score == 321


def test_firing_spawns_bullets_on_cooldown(sim, audio):
    sim.set_input(firing=True)
    run_ticks(sim, 1, start=1000)
    assert len(sim.bullets) == 1
    assert sim.bullets[0].damage == 30

    run_ticks(sim, 5, start=1016)  # 80 ms later, still cooling down
    assert len(sim.bullets) == 1
    assert audio.names().count(AudioEvent.SHOT_FIRED) == 1


def test_damage_powerup_doubles_bullet_damage(sim):
    sim.player.activate_powerup(PowerupType.DAMAGE, now=0)
    sim.set_input(firing=True)
    run_ticks(sim, 1, start=1000)
    assert sim.bullets[0].damage == 60


def test_unknown_input_intent_rejected(sim):
    with pytest.raises(AttributeError):
        sim.set_input(jump=True)


def test_enemies_spawn_on_interval(sim):
    run_ticks(sim, 1, start=1700)
    assert sim.enemies == []
    sim.tick(FRAME_MS, now=1800)
    assert len(sim.enemies) == 1
    assert sim.last_enemy_spawn == 1800


def test_enemy_below_screen_removed_without_credit(sim):
    enemy = Enemy.spawn(100, 700, "fighter", now=0)
    sim.enemies.append(enemy)
    run_ticks(sim, 1, start=0)
    assert sim.enemies == []
    assert sim.state.score == 0


def test_enemies_only_fire_inside_band(sim, monkeypatch):
    monkeypatch.setattr(random, "random", lambda: 0.0)
    high = Enemy.spawn(100, 20, "fighter", now=0)
    low = Enemy.spawn(700, 300, "fighter", now=0)
    high.last_shot = low.last_shot = -5000
    sim.enemies += [high, low]

    run_ticks(sim, 1, start=0)

    assert len(sim.enemy_bullets) == 1
    assert sim.enemy_bullets[0].x == low.x
    # The cooldown restarted for both
    assert high.last_shot == low.last_shot == FRAME_MS


def test_health_stays_in_range(sim):
    sim.player.health = 10
    for _ in range(3):
        sim.player.invincible_until = 0
        sim.player.is_invincible = False
        sim.damage_player(50, now=0)
    assert sim.player.health == 0
    sim.player.heal(500)
    assert sim.player.health == 100


def test_scenario_portals_and_level_transition(sim, audio):
    sim.state.score = 50
    now = run_ticks(sim, 1, start=0)
    bh, wh = sim.black_hole, sim.white_hole
    assert bh is not None and wh is not None
    assert sim.state.portals_spawned

    now = run_ticks(sim, 3, start=now)
    assert sim.black_hole is bh and sim.white_hole is wh
    assert audio.names().count(AudioEvent.PORTAL_SPAWNED) == 1

    sim.player.x, sim.player.y = bh.x, bh.y
    now = run_ticks(sim, 1, start=now)
    assert sim.state.in_transition
    assert sim.black_hole is None and sim.white_hole is None
    assert 0 < sim.transition.alpha < 1

    # Things that must not survive the level change
    sim.enemies.append(Enemy.spawn(sim.player.x, -300, "bomber", now=now))
    sim.powerups.append(PowerUp(x=sim.player.x, y=-300, ptype="rapid", created_at=now))
    stray = Bullet.enemy_shot(10, 590, angle=0, now=now)
    stray.speed = 0
    sim.enemy_bullets.append(stray)

    alphas = [sim.transition.alpha]
    while sim.transition.direction == TransitionPhase.FADING_OUT:
        now = run_ticks(sim, 1, start=now)
        alphas.append(sim.transition.alpha)
    assert alphas == sorted(alphas)
    assert sim.transition.alpha == 1.0

    state = sim.state
    assert state.current_level == 2
    assert state.difficulty_level >= 2
    assert not state.portals_spawned
    assert state.game_message == "ENTERING AREA 2"
    assert sim.enemies == [] and sim.powerups == [] and sim.enemy_bullets == []
    assert sim.last_enemy_spawn == now + 2000
    assert sim.theme[0][1] == (26, 10, 42)
    assert state.in_transition

    while state.in_transition:
        now = run_ticks(sim, 1, start=now)
    assert sim.transition.alpha == 0.0
    assert sim.transition.direction == TransitionPhase.IDLE
    # Score 50 is below the area 2 threshold
    assert sim.black_hole is None


def test_player_frozen_during_transition(sim):
    sim.transition.begin(sim.state)
    sim.set_input(move_left=True, firing=True)
    x = sim.player.x
    run_ticks(sim, 3, start=0)
    assert sim.player.x == x
    assert sim.bullets == []


def test_scenario_white_hole_resets_score_only(sim, audio):
    sim.state.score = 120
    sim.state.portals_spawned = True
    sim.black_hole = BlackHole(x=100, y=150)
    sim.white_hole = WhiteHole(x=400, y=500)
    difficulty = sim.state.difficulty_level

    run_ticks(sim, 1, start=0)

    assert sim.state.score == 0
    assert sim.state.difficulty_level == difficulty
    assert sim.white_hole is None
    assert sim.black_hole is not None
    assert not sim.state.in_transition
    assert sim.state.game_message == "SCORE RESET"
    assert AudioEvent.WHITE_HOLE_ENTERED in audio.names()


def test_white_hole_never_lowers_difficulty(sim):
    sim.state.score = 450
    now = run_ticks(sim, 1, start=0)
    assert sim.state.difficulty_level == 4

    sim.state.portals_spawned = True
    sim.black_hole = None
    sim.white_hole = WhiteHole(x=sim.player.x, y=sim.player.y)
    run_ticks(sim, 1, start=now)
    assert sim.state.score == 0
    assert sim.state.difficulty_level == 4


def test_portals_do_not_respawn_after_reset(sim):
    sim.state.score = 60
    now = run_ticks(sim, 1, start=0)
    sim.white_hole.x, sim.white_hole.y = sim.player.x, sim.player.y
    sim.black_hole.x, sim.black_hole.y = 100, 150
    now = run_ticks(sim, 1, start=now)
    assert sim.state.score == 0

    sim.black_hole = None
    sim.state.score = 80
    run_ticks(sim, 1, start=now)
    assert sim.black_hole is None and sim.white_hole is None


def test_scenario_bomb(sim, audio):
    types = ["fighter", "bomber", "ace", "fighter", "ace"]
    sim.enemies = [Enemy.spawn(100 + 100 * i, 100, t, now=0) for i, t in enumerate(types)]
    sim.enemy_bullets.append(Bullet.enemy_shot(50, 50, angle=0, now=0))

    assert sim.use_bomb()
    assert sim.enemies == [] and sim.enemy_bullets == []
    assert sim.state.enemies_defeated == 5
    assert sim.state.score == 15 + 25 + 20 + 15 + 20
    assert sim.state.bombs == 0
    assert AudioEvent.BOMB_USED in audio.names()

    assert not sim.use_bomb()
    assert sim.state.score == 95
    assert sim.state.enemies_defeated == 5


def test_powerup_audio_events(sim, audio):
    for ptype in ("shield", "life", "rapid"):
        sim.collect_powerup(PowerUp(x=0, y=0, ptype=ptype), now=0)
    names = audio.names()
    assert AudioEvent.SHIELD_UP in names
    assert AudioEvent.EXTRA_LIFE in names
    assert (AudioEvent.POWERUP_COLLECTED, "rapid") in audio.events


def test_shield_expiry_emits_event(sim, audio):
    sim.player.activate_powerup(PowerupType.SHIELD, now=0)
    run_ticks(sim, 1, start=5000)
    assert AudioEvent.SHIELD_DOWN in audio.names()


def test_message_expires(sim):
    sim.show_message("HELLO", 2000, now=0)
    assert sim.message_alpha(1000) == 1.0
    assert sim.message_alpha(1900) == pytest.approx(0.2)
    run_ticks(sim, 1, start=1900)
    assert sim.state.game_message == "HELLO"
    run_ticks(sim, 1, start=1990)
    assert sim.state.game_message is None
    assert sim.message_alpha(2010) == 0.0


def test_pause_freezes_tick(sim):
    assert sim.toggle_pause()
    sim.set_input(move_left=True)
    x = sim.player.x
    run_ticks(sim, 5, start=0)
    assert sim.player.x == x
    assert not sim.toggle_pause()
    run_ticks(sim, 1, start=100)
    assert sim.player.x < x


def test_death_ends_run_and_saves_high_score(sim, store, audio):
    sim.state.score = 100
    sim.player.health = 10
    sim.enemy_bullets.append(Bullet.enemy_shot(sim.player.x, sim.player.y, angle=0, now=65_000))

    run_ticks(sim, 1, start=65_000)

    assert not sim.state.is_running
    assert not sim.player.active
    assert store.saved == [100]
    summary = sim.summary
    assert summary.final_score == 100
    assert summary.new_high_score
    assert summary.time_survived == "1:05"
    assert AudioEvent.RUN_ENDED in audio.names()

    # Ticks stop; only particles drain
    enemies_before = list(sim.enemies)
    run_ticks(sim, 1, start=66_000)
    assert sim.enemies == enemies_before
    for _ in range(200):
        if not sim.drain():
            break
    assert sim.particles == []


def test_lower_score_does_not_overwrite_high_score():
    store = FakeStore(high_score=500)
    s = Simulation(store=store, clock=lambda: 0.0)
    s.start_run(now=0)
    s.state.score = 10
    summary = s.end_run(now=1000)
    assert not summary.new_high_score
    assert summary.high_score == 500
    assert store.saved == []


def test_restart_keeps_high_score(sim):
    sim.state.score = 70
    sim.end_run(now=10)
    sim.start_run(now=20)
    assert sim.state.high_score == 70
    assert sim.state.score == 0
    assert sim.player.active


class BrokenAudio(AudioSink):
    def play(self, event, detail=None):
        raise RuntimeError("no audio device")


def test_audio_failure_does_not_affect_state():
    s = Simulation(audio=BrokenAudio(), clock=lambda: 0.0)
    s.start_run(now=0)
    s.set_input(firing=True)
    run_ticks(s, 1, start=1000)
    assert len(s.bullets) == 1
    assert s.state.is_running


def test_snapshot_contents(sim):
    sim.player.activate_powerup(PowerupType.RAPID, now=0)
    sim.enemies.append(Enemy.spawn(100, 100, "bomber", now=0))
    sim.enemies[0].health = 60
    snap = sim.snapshot(now=1500)

    player_view = snap.of_kind("player")[0]
    assert (player_view.x, player_view.y) == (400, 500)
    enemy_view = snap.of_kind("enemy")[0]
    assert enemy_view.variant == "bomber"
    assert enemy_view.health_ratio == 0.5
    assert snap.powerup_seconds == {"rapid": 5}
    assert snap.bombs == 1
    assert snap.transition_alpha == 0.0
    assert not snap.health_low


def test_consumed_bullet_leaves_world_and_snapshot(sim):
    bomber = Enemy.spawn(200, 200, "bomber", now=0)
    bomber.last_shot = 0
    sim.enemies.append(bomber)
    bullet = Bullet.player_shot(200, 205, damage=30, now=0)
    sim.bullets.append(bullet)

    run_ticks(sim, 1, start=0)

    assert not bullet.active
    assert sim.bullets == []
    assert sim.enemies == [bomber]
    assert bomber.health == 90
    assert sim.snapshot().of_kind("bullet") == []


def test_rammed_enemy_is_gone_before_next_tick(sim, monkeypatch):
    sim.player.y = 300
    fighter = Enemy.spawn(sim.player.x, 300, "fighter", now=0)
    fighter.last_shot = 10_000
    sim.last_enemy_spawn = 10_000
    sim.enemies.append(fighter)

    now = run_ticks(sim, 1, start=10_000)
    assert not fighter.active
    assert sim.player.health == 75
    assert sim.enemies == []
    assert sim.snapshot().of_kind("enemy") == []

    monkeypatch.setattr(random, "random", lambda: 0.0)
    fighter.last_shot = -10_000
    run_ticks(sim, 1, start=now)
    assert sim.enemy_bullets == []


def test_message_fades_over_its_own_duration(sim):
    sim.show_message("ENTERING AREA 2", 2500, now=0)
    assert sim.state.game_message_duration == 2500
    assert sim.message_alpha(100) == pytest.approx(0.2)
    assert sim.message_alpha(1250) == 1.0
    assert sim.message_alpha(2400) == pytest.approx(0.2)


def test_snapshot_exposes_effect_state(sim):
    sim.set_input(firing=True)
    sim.state.score = 50
    ace = Enemy.spawn(100, 100, "ace", now=0)
    ace.last_shot = 1000
    sim.enemies.append(ace)
    now = run_ticks(sim, 1, start=1000)
    now = run_ticks(sim, 3, start=now)

    snap = sim.snapshot(now)
    bullet = snap.of_kind("bullet")[0]
    assert len(bullet.trail) == 4
    assert all(ty > bullet.y for _, ty in bullet.trail)

    black = snap.of_kind("black_hole")[0]
    assert len(black.orbit) == 20
    for ox, oy, size, alpha in black.orbit:
        assert 15 <= ((ox - black.x) ** 2 + (oy - black.y) ** 2) ** 0.5 <= 50
    assert len(snap.of_kind("white_hole")[0].orbit) == 15

    assert 0.0 <= snap.of_kind("enemy")[0].pulse <= 1.0
    assert 0.0 <= snap.of_kind("player")[0].pulse <= 1.0
