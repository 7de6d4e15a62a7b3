from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from .grid import PUYO_COLORS, Color, Coordinate, GameGrid


SPAWN_X = 2
SPAWN_Y = 0


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    DOWN = "down"


class Spin(Enum):
    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"


# Rotation state -> sub offset from main: up, right, down, left
SUB_OFFSETS: Dict[int, Coordinate] = {
    0: (0, -1),
    1: (1, 0),
    2: (0, 1),
    3: (-1, 0),
}

# Tried in order after the plain rotation fails
WALL_KICKS: Tuple[Coordinate, ...] = ((1, 0), (-1, 0), (0, -1))

_MOVE_DELTAS: Dict[Direction, Coordinate] = {
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
}


@dataclass(frozen=True)
class NextPreview:
    main: Color
    sub: Color


@dataclass(frozen=True)
class PuyoPair:
    """Falling two-cell piece. ``main`` is the pivot, ``sub`` orbits it."""

    main_color: Color
    sub_color: Color
    x: int = SPAWN_X
    y: int = SPAWN_Y
    rotation: int = 0  # 0..3

    def __post_init__(self) -> None:
        if self.rotation not in SUB_OFFSETS:
            raise ValueError(f"rotation must be in 0..3, got {self.rotation}")

    @property
    def main_pos(self) -> Coordinate:
        return (self.x, self.y)

    @property
    def sub_pos(self) -> Coordinate:
        dx, dy = SUB_OFFSETS[self.rotation]
        return (self.x + dx, self.y + dy)

    def cells(self) -> List[Coordinate]:
        return [self.main_pos, self.sub_pos]

    def colored_cells(self) -> List[Tuple[int, int, Color]]:
        (mx, my), (sx, sy) = self.main_pos, self.sub_pos
        return [(mx, my, self.main_color), (sx, sy, self.sub_color)]

    def shifted(self, dx: int, dy: int) -> "PuyoPair":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self, delta: int) -> "PuyoPair":
        return replace(self, rotation=(self.rotation + delta) % 4)


@dataclass(frozen=True)
class MoveResult:
    pair: PuyoPair
    landed: bool


def random_color(rng: random.Random, colors: Sequence[Color] = PUYO_COLORS) -> Color:
    return rng.choice(list(colors))


def random_preview(rng: random.Random, colors: Sequence[Color] = PUYO_COLORS) -> NextPreview:
    return NextPreview(main=random_color(rng, colors), sub=random_color(rng, colors))


def spawn_pair(preview: NextPreview, spawn_x: int = SPAWN_X) -> PuyoPair:
    return PuyoPair(main_color=preview.main, sub_color=preview.sub, x=spawn_x, y=SPAWN_Y, rotation=0)


def rotate_pair(grid: GameGrid, pair: PuyoPair, spin: Spin) -> PuyoPair:
    """Rotate ``pair`` around its main cell, trying wall kicks if blocked.

    Returns the pair unchanged when no candidate position fits.
    """
    delta = 1 if spin == Spin.CLOCKWISE else -1
    rotated = pair.rotated(delta)
    own = pair.cells()
    if grid.can_place(rotated.cells(), ignoring=own):
        return rotated
    for dx, dy in WALL_KICKS:
        kicked = rotated.shifted(dx, dy)
        if grid.can_place(kicked.cells(), ignoring=own):
            return kicked
    return pair


def move_pair(grid: GameGrid, pair: PuyoPair, direction: Direction) -> MoveResult:
    dx, dy = _MOVE_DELTAS[direction]
    moved = pair.shifted(dx, dy)
    if grid.can_place(moved.cells(), ignoring=pair.cells()):
        return MoveResult(moved, landed=False)
    # Blocked: resting on something only when moving down
    return MoveResult(pair, landed=direction == Direction.DOWN)
