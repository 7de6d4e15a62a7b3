from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from puyo_chain.game import Color, GameSnapshot, Phase


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        0: (20, 20, 26),
        int(Color.RED): (255, 68, 68),
        int(Color.GREEN): (68, 255, 68),
        int(Color.BLUE): (68, 68, 255),
        int(Color.YELLOW): (255, 255, 68),
        int(Color.PURPLE): (255, 68, 255),
    }
    return palette.get(abs(v), (200, 200, 200))


class Renderer:
    def __init__(self, cell_size: int = 36, margin: int = 20, hidden_rows: int = 1) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.hidden_rows = hidden_rows
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        visible = height - self.hidden_rows
        side_panel = 4 * self.cell_size
        return (
            self.margin * 3 + width * self.cell_size + side_panel,
            self.margin * 2 + visible * self.cell_size,
        )

    def _font_obj(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 28)
        return self._font

    def _draw_puyo(self, surf: pygame.Surface, px: int, py: int, value: int, highlight: bool = False) -> None:
        rect = pygame.Rect(px, py, self.cell_size - 1, self.cell_size - 1)
        if value == 0:
            pygame.draw.rect(surf, _color_for_value(0), rect)
            return
        pygame.draw.ellipse(surf, _color_for_value(value), rect)
        if highlight:
            pygame.draw.ellipse(surf, (255, 255, 255), rect, 3)

    def _grid_surface(self, state: np.ndarray, marked: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        visible = h - self.hidden_rows
        surf = pygame.Surface((w * self.cell_size, visible * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(self.hidden_rows, h):
            for x in range(w):
                self._draw_puyo(
                    surf,
                    x * self.cell_size,
                    (y - self.hidden_rows) * self.cell_size,
                    int(state[y, x]),
                    highlight=bool(marked[y, x]),
                )
        return surf

    def draw(self, screen: pygame.Surface, state: np.ndarray, snapshot: GameSnapshot) -> None:
        grid_surf = self._grid_surface(state, snapshot.marked)
        screen.fill((10, 10, 14))
        screen.blit(grid_surf, (self.margin, self.margin))

        font = self._font_obj()
        x0 = self.margin * 2 + state.shape[1] * self.cell_size
        y0 = self.margin
        screen.blit(font.render("NEXT", True, (230, 230, 230)), (x0, y0))
        preview = snapshot.next_preview
        self._draw_puyo(screen, x0, y0 + 30, int(preview.sub))
        self._draw_puyo(screen, x0, y0 + 30 + self.cell_size, int(preview.main))

        lines = [f"Score: {snapshot.score}", f"Chain: {snapshot.chain}"]
        for i, txt in enumerate(lines):
            screen.blit(font.render(txt, True, (230, 230, 230)), (x0, y0 + 40 + 2 * self.cell_size + i * 26))

        if snapshot.phase == Phase.PAUSED:
            self._overlay(screen, "PAUSED - press P")
        elif snapshot.phase == Phase.GAME_OVER:
            self._overlay(screen, "GAME OVER - press Enter")
        pygame.display.flip()

    def _overlay(self, screen: pygame.Surface, message: str) -> None:
        shade = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 160))
        screen.blit(shade, (0, 0))
        text = self._font_obj().render(message, True, (255, 255, 255))
        screen.blit(text, text.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2)))
