"""fruitstar/main.py — Pyxel app and entry point.

Loads a level image (or a built-in level), then drives game_step() once per
frame. Controls: P pause, R reload, O passability overlay, D path overlay,
left click place a harvester, Q quit.
"""

from __future__ import annotations

import argparse

import pyxel

from fruitstar import renderer
from fruitstar.config import GameConfig, load_config
from fruitstar.constants import FPS, SCREEN_HEIGHT, SCREEN_WIDTH
from fruitstar.debug import DEBUG, configure_logging
from fruitstar.errors import LevelLoadError
from fruitstar.grid import ImageSource
from fruitstar.grids import GRID_BUILDERS, builtin_level
from fruitstar.simulation import (
    GameState,
    create_game,
    game_step,
    place_harvester,
    reload_level,
)


class App:
    def __init__(self, source: ImageSource, config: GameConfig | None = None):
        pyxel.init(SCREEN_WIDTH, SCREEN_HEIGHT, title="Fruitstar", fps=FPS)
        pyxel.mouse(True)
        renderer.init_palette()

        self.source = source
        self.game: GameState = create_game(source, config)
        self.overlay = renderer.OverlayMode.NORMAL
        self.show_path = DEBUG
        self.error: str | None = None

        pyxel.run(self.update, self.draw)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self):
        if pyxel.btnp(pyxel.KEY_Q):
            pyxel.quit()

        if pyxel.btnp(pyxel.KEY_R):
            self.error = None
            reload_level(self.game, self.source)
        if pyxel.btnp(pyxel.KEY_P):
            if self.game.scheduler.paused:
                self.game.scheduler.resume()
            else:
                self.game.scheduler.pause()
        if pyxel.btnp(pyxel.KEY_O):
            self.overlay = (
                renderer.OverlayMode.NORMAL
                if self.overlay == renderer.OverlayMode.PASSABILITY
                else renderer.OverlayMode.PASSABILITY
            )
        if pyxel.btnp(pyxel.KEY_D):
            self.show_path = not self.show_path
        if pyxel.btnp(pyxel.MOUSE_BUTTON_LEFT) and self.game.level is not None:
            pos = renderer.screen_to_world(self.game.level, pyxel.mouse_x, pyxel.mouse_y)
            place_harvester(self.game, pos)

        if self.error is not None:
            return

        try:
            game_step(self.game, 1.0 / FPS)
        except LevelLoadError as exc:
            self.error = str(exc)

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    def draw(self):
        pyxel.cls(0)

        level = self.game.level
        if level is not None:
            pyxel.camera(*renderer.camera_offset(level))
            renderer.draw_tiles(level, self.overlay)
            if self.show_path:
                renderer.draw_path(level)
            renderer.draw_units(self.game.buildings)
            renderer.draw_units(self.game.scheduler.active)

        pyxel.camera()
        renderer.draw_hud(self.game.scheduler, self.game.score)
        if self.error is not None:
            renderer.draw_message(self.error)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Fruitstar")
    parser.add_argument(
        "level", nargs="?", default="serpentine",
        help=f"Level image path or built-in name ({', '.join(sorted(GRID_BUILDERS))})",
    )
    parser.add_argument("--config", "-c", help="Game config YAML file")
    args = parser.parse_args(argv)

    configure_logging()
    config = load_config(args.config) if args.config else GameConfig()
    source = builtin_level(args.level) if args.level in GRID_BUILDERS else args.level
    App(source, config)


if __name__ == "__main__":
    main()
