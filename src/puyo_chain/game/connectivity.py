from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List

import numpy as np

from .grid import Color, Coordinate, GameGrid


MIN_CONNECT = 4

_NEIGHBOURS = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass(frozen=True)
class ConnectedGroup:
    color: Color
    cells: FrozenSet[Coordinate]

    @property
    def size(self) -> int:
        return len(self.cells)


def find_groups(grid: GameGrid, min_size: int = MIN_CONNECT) -> List[ConnectedGroup]:
    """Return same-color 4-connected groups of at least ``min_size`` cells.

    Cells are visited in row-major order, so groups come back ordered by
    their top-left-most cell.
    """
    if min_size < 1:
        raise ValueError(f"min_size must be positive, got {min_size}")
    cells = grid.grid
    visited = np.zeros(cells.shape, dtype=np.bool_)
    groups: List[ConnectedGroup] = []
    for y in range(grid.height):
        for x in range(grid.width):
            color = int(cells[y, x])
            if color == 0 or visited[y, x]:
                continue
            visited[y, x] = True
            stack = [(x, y)]
            members = []
            while stack:
                cx, cy = stack.pop()
                members.append((cx, cy))
                for dx, dy in _NEIGHBOURS:
                    nx, ny = cx + dx, cy + dy
                    if not grid.is_inside(nx, ny) or visited[ny, nx]:
                        continue
                    if cells[ny, nx] != color:
                        continue
                    visited[ny, nx] = True
                    stack.append((nx, ny))
            if len(members) >= min_size:
                groups.append(ConnectedGroup(Color(color), frozenset(members)))
    return groups


def has_any_group(grid: GameGrid, min_size: int = MIN_CONNECT) -> bool:
    return len(find_groups(grid, min_size)) > 0
