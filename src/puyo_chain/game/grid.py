from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Collection, Iterable, Sequence, Set, Tuple

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .connectivity import ConnectedGroup


logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

BOARD_WIDTH = 6
BOARD_HEIGHT = 13
VISIBLE_HEIGHT = 12


class Color(IntEnum):
    EMPTY = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    PURPLE = 5


PUYO_COLORS: Tuple[Color, ...] = (Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW, Color.PURPLE)

# One-letter codes used by GameGrid.from_rows
_CHAR_TO_COLOR = {
    ".": Color.EMPTY,
    "R": Color.RED,
    "G": Color.GREEN,
    "B": Color.BLUE,
    "Y": Color.YELLOW,
    "P": Color.PURPLE,
}


class OutOfBoundsError(IndexError):
    """Raised when a coordinate lies outside the grid."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"({x}, {y}) is outside the {width}x{height} grid")
        self.x = x
        self.y = y


class GameGrid:
    """Grid of puyo colors addressed as (x, y).

    Row 0 is the top (hidden) row. Cells hold 0 for empty and a ``Color``
    value otherwise. A parallel boolean mask records cells marked for removal
    while a chain is being resolved.
    """

    def __init__(self, width: int = BOARD_WIDTH, height: int = BOARD_HEIGHT) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)
        self.marked = np.zeros((self.height, self.width), dtype=np.bool_)

    @classmethod
    def from_rows(cls, rows: Sequence[str], width: int = BOARD_WIDTH, height: int = BOARD_HEIGHT) -> "GameGrid":
        """Build a grid from strings such as ``"RR.G.."``, bottom-aligned.

        Fewer rows than ``height`` are padded with empty rows on top.
        """
        if len(rows) > height:
            raise ValueError(f"got {len(rows)} rows for a grid of height {height}")
        grid = cls(width, height)
        top = height - len(rows)
        for dy, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"row {row!r} does not have width {width}")
            for x, ch in enumerate(row):
                try:
                    grid.grid[top + dy, x] = _CHAR_TO_COLOR[ch.upper()]
                except KeyError:
                    raise ValueError(f"unknown color code {ch!r}") from None
        return grid

    def reset(self) -> None:
        self.grid.fill(0)
        self.marked.fill(False)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Color:
        if not self.is_inside(x, y):
            raise OutOfBoundsError(x, y, self.width, self.height)
        return Color(int(self.grid[y, x]))

    def is_empty(self) -> bool:
        return not self.grid.any()

    def is_occupiable(self, x: int, y: int, ignoring: Collection[Coordinate] = ()) -> bool:
        # Above the grid is the spawn buffer, but the column must still exist
        if x < 0 or x >= self.width or y >= self.height:
            return False
        if y < 0:
            return True
        return self.grid[y, x] == 0 or (x, y) in ignoring

    def can_place(self, cells: Iterable[Coordinate], ignoring: Collection[Coordinate] = ()) -> bool:
        return all(self.is_occupiable(x, y, ignoring) for x, y in cells)

    def place(self, cells: Iterable[Tuple[int, int, Color]]) -> int:
        """Write colored cells into the grid and return how many were written.

        Cells still above row 0 are dropped.
        """
        written = 0
        for x, y, color in cells:
            if y < 0:
                logger.debug("dropping %s cell above the grid at (%d, %d)", Color(color).name, x, y)
                continue
            if not self.is_inside(x, y):
                raise OutOfBoundsError(x, y, self.width, self.height)
            self.grid[y, x] = int(color)
            written += 1
        return written

    def apply_gravity(self) -> None:
        """Compact each column downward, keeping the stacking order."""
        for x in range(self.width):
            column = self.grid[:, x]
            filled = column[column != 0]
            compacted = np.zeros(self.height, dtype=self.grid.dtype)
            if filled.size:
                compacted[self.height - filled.size :] = filled
            self.grid[:, x] = compacted

    def mark_groups(self, groups: Iterable["ConnectedGroup"]) -> None:
        self.marked.fill(False)
        for group in groups:
            for x, y in group.cells:
                self.marked[y, x] = True

    def clear_groups(self, groups: Iterable["ConnectedGroup"]) -> Tuple[int, Set[Color]]:
        """Empty every cell of ``groups``; return (cells cleared, colors cleared)."""
        cleared = 0
        colors: Set[Color] = set()
        for group in groups:
            for x, y in group.cells:
                value = int(self.grid[y, x])
                if value == 0:
                    continue
                colors.add(Color(value))
                self.grid[y, x] = 0
                self.marked[y, x] = False
                cleared += 1
        return cleared, colors

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
