from __future__ import annotations

import logging
from typing import Dict

import pygame

from puyo_chain.game import Action, GameConfig, Phase, PuyoGame
from .renderer import Renderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_DOWN: Action.DOWN,
    pygame.K_UP: Action.HARD_DROP,
    pygame.K_x: Action.ROTATE_CW,
    pygame.K_z: Action.ROTATE_CCW,
    pygame.K_p: Action.PAUSE,
    pygame.K_r: Action.RESET,
}


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    pygame.init()
    try:
        clock = pygame.time.Clock()
        # Settling is paced here, one step per delay
        config = GameConfig(auto_settle=False)
        game = PuyoGame(config)
        renderer = Renderer(cell_size=36, hidden_rows=config.hidden_rows)
        screen = pygame.display.set_mode(renderer.window_size(config.width, config.height))
        pygame.display.set_caption("Puyo Chain")

        last_fall = pygame.time.get_ticks()
        next_settle_at = 0

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif game.game_over:
                        if event.key in (pygame.K_RETURN, pygame.K_SPACE, pygame.K_r):
                            game.reset()
                    else:
                        if event.key == pygame.K_DOWN:
                            game.set_soft_drop(True)
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None:
                            game.step(action)
                elif event.type == pygame.KEYUP and event.key == pygame.K_DOWN:
                    game.set_soft_drop(False)

            now = pygame.time.get_ticks()
            if game.phase == Phase.FALLING:
                if now - last_fall >= game.drop_interval_ms:
                    game.step(Action.DOWN)
                    last_fall = now
                    next_settle_at = now
            elif game.phase == Phase.SETTLING and now >= next_settle_at:
                step = game.advance_settling()
                if step is not None:
                    next_settle_at = now + config.settle_delays_ms.get(step.kind, 0)
                last_fall = now
            else:
                last_fall = now

            renderer.draw(screen, game.get_state(), game.snapshot())
            clock.tick(60)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
