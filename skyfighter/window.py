"""
Arcade front end for Sky Fighter

Maps keyboard/mouse to input intents, paints FrameSnapshots and plays audio
events. Run with:
    python -m skyfighter.window
"""

import logging
from typing import Optional

import arcade

from .collaborators import ArcadeAudio, HighScoreStore
from .configs.game_config import WORLD_CONFIG
from .entities import EntityKind
from .simulation import Simulation
from .state import FrameSnapshot

logger = logging.getLogger(__name__)

_MOVE_KEYS = {
    arcade.key.W: "move_up",
    arcade.key.UP: "move_up",
    arcade.key.S: "move_down",
    arcade.key.DOWN: "move_down",
    arcade.key.A: "move_left",
    arcade.key.LEFT: "move_left",
    arcade.key.D: "move_right",
    arcade.key.RIGHT: "move_right",
    arcade.key.SPACE: "firing",
}


def _lerp_color(a, b, t):
    return tuple(int(a[i] + (b[i] - a[i]) * t) for i in range(3))


class SkyFighterWindow(arcade.Window):
    """Arcade window that draws the simulation snapshot"""

    def __init__(self, sim: Simulation, title: str = "Sky Fighter"):
        super().__init__(int(sim.width), int(sim.height), title)
        self.sim = sim

        # Colors
        self.HUD_C = (220, 220, 220)
        self.BULLET_C = (255, 221, 0)
        self.ENEMY_BULLET_C = (255, 68, 68)
        self.BLACK_HOLE_C = (40, 0, 60)
        self.WHITE_HOLE_C = (240, 240, 255)
        self.SHIELD_C = (0, 229, 255, 180)

    # ----------------------------
    # Input
    # ----------------------------

    def on_key_press(self, symbol: int, modifiers: int):
        sim = self.sim
        if symbol in _MOVE_KEYS and sim.state.is_running:
            sim.set_input(**{_MOVE_KEYS[symbol]: True})
        elif symbol == arcade.key.B:
            sim.use_bomb()
        elif symbol == arcade.key.P:
            sim.toggle_pause()
        elif symbol == arcade.key.M and isinstance(sim.audio, ArcadeAudio):
            sim.audio.toggle_mute()
        elif symbol in (arcade.key.ENTER, arcade.key.R) and not sim.state.is_running:
            sim.start_run()
        elif symbol == arcade.key.ESCAPE:
            self.close()

    def on_key_release(self, symbol: int, modifiers: int):
        if symbol in _MOVE_KEYS:
            self.sim.set_input(**{_MOVE_KEYS[symbol]: False})

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int):
        if button == arcade.MOUSE_BUTTON_LEFT and self.sim.state.is_running:
            self.sim.set_input(firing=True)

    def on_mouse_release(self, x: int, y: int, button: int, modifiers: int):
        if button == arcade.MOUSE_BUTTON_LEFT:
            self.sim.set_input(firing=False)

    # ----------------------------
    # Frame loop
    # ----------------------------

    def on_update(self, delta_time: float):
        sim = self.sim
        if sim.state.is_running:
            sim.tick(delta_time * 1000.0)
        elif sim.player is not None:
            sim.drain()
        else:
            sim.update_background()

    def on_draw(self):
        self.clear()
        self.draw_snapshot(self.sim.snapshot(self.sim.clock()))

    # ----------------------------
    # Painting
    # ----------------------------

    def _sy(self, y: float) -> float:
        # Simulation y grows downward, arcade y grows upward
        return self.height - y

    def _draw_sky(self, snap: FrameSnapshot):
        stops = snap.theme
        bands = 24
        band_h = self.height / bands
        for i in range(bands):
            t = (i + 0.5) / bands
            color = stops[-1][1]
            for (o1, c1), (o2, c2) in zip(stops, stops[1:]):
                if o1 <= t <= o2:
                    color = _lerp_color(c1, c2, (t - o1) / max(1e-6, o2 - o1))
                    break
            top = self.height - i * band_h
            arcade.draw_lrbt_rectangle_filled(0, self.width, top - band_h, top, color)

    def _draw_orbit(self, e, color):
        for ox, oy, size, alpha in e.orbit:
            arcade.draw_circle_filled(ox, self._sy(oy), size, color + (int(255 * alpha),))

    def draw_snapshot(self, snap: FrameSnapshot):
        self._draw_sky(snap)

        for e in snap.entities:
            x, y = e.x, self._sy(e.y)
            alpha = int(255 * max(0.0, min(1.0, e.alpha)))

            if e.kind == EntityKind.CLOUD:
                arcade.draw_ellipse_filled(x, y, e.size * 2, e.size, (255, 255, 255, alpha))
            elif e.kind == EntityKind.BLACK_HOLE:
                arcade.draw_circle_filled(x, y, e.size, self.BLACK_HOLE_C)
                arcade.draw_circle_outline(x, y, e.size, (255, 136, 0), 3)
                self._draw_orbit(e, (255, 170, 60))
            elif e.kind == EntityKind.WHITE_HOLE:
                arcade.draw_circle_filled(x, y, e.size, self.WHITE_HOLE_C)
                self._draw_orbit(e, (255, 255, 255))
            elif e.kind == EntityKind.POWERUP:
                arcade.draw_circle_filled(x, y, e.size, e.color + (alpha,))
                arcade.draw_text(e.variant[0].upper(), x, y, (0, 0, 0, alpha), 12,
                                 anchor_x="center", anchor_y="center", bold=True)
            elif e.kind == EntityKind.BULLET:
                color = self.ENEMY_BULLET_C if "enemy" in e.flags else self.BULLET_C
                for i, (tx, ty) in enumerate(e.trail):
                    fade = int(255 * (i + 1) / (len(e.trail) + 1) * 0.5)
                    arcade.draw_circle_filled(tx, self._sy(ty), e.size * 0.6, color + (fade,))
                arcade.draw_circle_filled(x, y, e.size, color)
            elif e.kind == EntityKind.ENEMY:
                arcade.draw_circle_filled(x, y, e.size * (1.15 + 0.15 * e.pulse), e.color + (60,))
                arcade.draw_circle_filled(x, y, e.size, e.color)
                if e.health_ratio < 1.0:
                    left = x - e.size
                    top = y + e.size + 8
                    arcade.draw_lrbt_rectangle_filled(left, x + e.size, top - 4, top, (60, 60, 60))
                    fill = (0, 255, 0) if e.health_ratio > 0.3 else (255, 0, 0)
                    arcade.draw_lrbt_rectangle_filled(
                        left, left + 2 * e.size * e.health_ratio, top - 4, top, fill
                    )
            elif e.kind == EntityKind.PARTICLE:
                if e.size > 0:
                    arcade.draw_circle_filled(x, y, e.size, e.color + (alpha,))
            elif e.kind == EntityKind.PLAYER:
                if "flash" in e.flags:
                    continue
                if "shield" in e.flags:
                    arcade.draw_circle_outline(x, y, e.size + 12, self.SHIELD_C, 3)
                flame = e.size * (0.5 + 0.4 * e.pulse)
                arcade.draw_triangle_filled(x - e.size * 0.3, y - e.size * 0.6, x + e.size * 0.3,
                                            y - e.size * 0.6, x, y - e.size * 0.6 - flame,
                                            (255, 150, 0))
                arcade.draw_triangle_filled(x, y + e.size, x - e.size, y - e.size * 0.6,
                                            x + e.size, y - e.size * 0.6, e.color)

        self._draw_hud(snap)

        if snap.message:
            arcade.draw_text(snap.message, self.width / 2, self.height / 2,
                             (255, 255, 255, int(255 * snap.message_alpha)), 30,
                             anchor_x="center", anchor_y="center", bold=True)

        if snap.transition_alpha > 0:
            arcade.draw_lrbt_rectangle_filled(0, self.width, 0, self.height,
                                              (0, 0, 0, int(255 * snap.transition_alpha)))

        if not snap.is_running:
            self._draw_menu(snap)

    def _draw_hud(self, snap: FrameSnapshot):
        bar_w, bar_h = 180, 10
        x0, y0 = 12, self.height - 22
        arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w, y0, y0 + bar_h, (60, 60, 60))
        fill = bar_w * max(0.0, snap.health / snap.max_health)
        if fill > 0:
            color = (255, 60, 60) if snap.health_low else (80, 200, 120)
            arcade.draw_lrbt_rectangle_filled(x0, x0 + fill, y0, y0 + bar_h, color)

        timers = "  ".join(f"{k.upper()} {v}s" for k, v in snap.powerup_seconds.items())
        txt = (f"HP: {int(snap.health)}  Score: {snap.score}  High: {snap.high_score}  "
               f"Area: {snap.level}  Bombs: x{snap.bombs}  {timers}")
        arcade.draw_text(txt, 12, self.height - 44, self.HUD_C, 14)

        if snap.is_paused:
            arcade.draw_text("PAUSED", self.width / 2, self.height / 2 + 60, self.HUD_C, 28,
                             anchor_x="center")

    def _draw_menu(self, snap: FrameSnapshot):
        summary = self.sim.summary
        lines = ["SKY FIGHTER", "ENTER to start"]
        if summary is not None:
            lines = [
                "GAME OVER",
                f"Score {summary.final_score}   High {summary.high_score}",
                f"Enemies {summary.enemies_defeated}   Time {summary.time_survived}",
                "ENTER to play again",
            ]
        for i, line in enumerate(lines):
            arcade.draw_text(line, self.width / 2, self.height * 0.6 - i * 36, self.HUD_C,
                             28 if i == 0 else 16, anchor_x="center")


def main(width: Optional[int] = None, height: Optional[int] = None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    sim = Simulation(
        width=width or WORLD_CONFIG["width"],
        height=height or WORLD_CONFIG["height"],
        audio=ArcadeAudio(),
        store=HighScoreStore(),
    )
    SkyFighterWindow(sim)
    arcade.run()


if __name__ == "__main__":
    main()
