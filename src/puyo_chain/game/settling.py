"""Chain resolution as a generator of observable steps.

Each removal round yields three snapshots: the groups about to pop are
marked, then cleared and scored, then the board is compacted. The caller
decides how long to show each one; the generator never sleeps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Generator, Tuple

import numpy as np

from .connectivity import MIN_CONNECT, find_groups
from .grid import Color, GameGrid
from .rules import DEFAULT_RULES, ScoringRules


logger = logging.getLogger(__name__)

MARK = "mark"
CLEAR = "clear"
GRAVITY = "gravity"


@dataclass(frozen=True)
class SettleStep:
    kind: str
    grid: np.ndarray = field(repr=False)
    marked: np.ndarray = field(repr=False)
    chain: int
    score: int
    cells_cleared: int = 0
    colors: FrozenSet[Color] = frozenset()
    group_sizes: Tuple[int, ...] = ()
    points: int = 0


@dataclass(frozen=True)
class SettleResult:
    chain: int  # removal rounds performed
    score: int
    cells_cleared: int


def _snapshot(grid: GameGrid, kind: str, chain: int, score: int, **extra) -> SettleStep:
    return SettleStep(kind, grid.clone_state(), grid.marked.copy(), chain, score, **extra)


def settle(
    grid: GameGrid,
    rules: ScoringRules = DEFAULT_RULES,
    chain: int = 1,
    score: int = 0,
    min_connect: int = MIN_CONNECT,
) -> Generator[SettleStep, None, SettleResult]:
    """Resolve every chain on ``grid`` in place.

    ``grid`` is expected to already have gravity applied. ``chain`` is the
    index given to the first removal round. The generator's return value is
    a ``SettleResult`` with the number of rounds and the accumulated score.
    """
    rounds = 0
    total_cleared = 0
    groups = find_groups(grid, min_connect)
    while groups:
        grid.mark_groups(groups)
        yield _snapshot(grid, MARK, chain, score)

        groups = find_groups(grid, min_connect)
        sizes = tuple(group.size for group in groups)
        cleared, colors = grid.clear_groups(groups)
        points = rules.score_for_round(cleared, chain, len(colors), sizes)
        score += points
        total_cleared += cleared
        rounds += 1
        logger.debug(
            "chain %d: cleared %d cells in %d groups (%d colors) for %d points",
            chain, cleared, len(sizes), len(colors), points,
        )
        yield _snapshot(
            grid, CLEAR, chain, score,
            cells_cleared=cleared, colors=frozenset(colors), group_sizes=sizes, points=points,
        )

        chain += 1
        grid.apply_gravity()
        yield _snapshot(grid, GRAVITY, chain - 1, score)

        groups = find_groups(grid, min_connect)
    return SettleResult(chain=rounds, score=score, cells_cleared=total_cleared)


def settle_all(
    grid: GameGrid,
    rules: ScoringRules = DEFAULT_RULES,
    chain: int = 1,
    score: int = 0,
    min_connect: int = MIN_CONNECT,
) -> SettleResult:
    """Run ``settle`` to completion and return its result."""
    steps = settle(grid, rules, chain, score, min_connect)
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            return stop.value
